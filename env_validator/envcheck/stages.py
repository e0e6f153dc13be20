"""Ordered stage descriptors and the driver loop that evaluates them."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Awaitable, Callable

from envcheck.validator.aggregator import create_error, create_failure_result
from envcheck.validator.models import ValidationResult, ValidationSeverity

logger = logging.getLogger(__name__)

StagePredicate = Callable[[dict[str, ValidationResult]], bool]


class Criticality(str, Enum):
    critical = "critical"
    standard = "standard"


def always(prior: dict[str, ValidationResult]) -> bool:
    return True


def requires(*names: str) -> StagePredicate:
    """Predicate: every named stage ran and succeeded."""

    def _predicate(prior: dict[str, ValidationResult]) -> bool:
        return all(name in prior and prior[name].success for name in names)

    return _predicate


@dataclass
class StageDescriptor:
    """One pipeline stage.

    ``should_run`` sees the results of every stage executed so far, keyed by
    stage name. A stage whose predicate is false is left out of the report.
    """

    name: str
    title: str
    run: Callable[[], Awaitable[ValidationResult]]
    criticality: Criticality = Criticality.standard
    should_run: StagePredicate = always
    failure_recommendation: str | None = None


@dataclass
class StageRun:
    results: list[ValidationResult] = field(default_factory=list)
    recommendations: list[str] = field(default_factory=list)
    executed: dict[str, ValidationResult] = field(default_factory=dict)
    aborted: bool = False


async def execute_stage(stage: StageDescriptor) -> ValidationResult:
    """Run one stage, converting any exception into a single critical error."""
    try:
        result = await stage.run()
    except Exception as e:
        logger.exception("Stage '%s' raised", stage.name)
        result = create_failure_result(
            f"{stage.title} failed",
            [
                create_error(
                    f"{stage.name.upper()}_EXCEPTION",
                    str(e) or e.__class__.__name__,
                    ValidationSeverity.critical,
                )
            ],
        )
    result.metadata.setdefault("stage", stage.name)
    result.metadata.setdefault("criticality", stage.criticality.value)
    return result


async def run_stages(stages: list[StageDescriptor]) -> StageRun:
    """Evaluate stages strictly in order."""
    run = StageRun()

    for stage in stages:
        if not stage.should_run(run.executed):
            logger.info("Stage '%s' gated off by earlier results", stage.name)
            continue

        logger.info("Running stage '%s'", stage.name)
        result = await execute_stage(stage)
        run.executed[stage.name] = result
        run.results.append(result)

        if not result.success:
            logger.info(
                "Stage '%s' failed with %d error(s)", stage.name, len(result.errors),
            )
            if stage.failure_recommendation:
                run.recommendations.append(stage.failure_recommendation)
            if stage.criticality is Criticality.critical:
                run.aborted = True

    return run
