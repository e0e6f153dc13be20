"""Tests for the stage driver."""

from __future__ import annotations

import pytest

from envcheck.stages import (
    Criticality,
    StageDescriptor,
    execute_stage,
    requires,
    run_stages,
)
from envcheck.validator.aggregator import (
    create_error,
    create_failure_result,
    create_success_result,
)


def _passing(message: str = "ok"):
    async def _run():
        return create_success_result(message)

    return _run


def _failing(code: str = "BROKEN"):
    async def _run():
        return create_failure_result("failed", [create_error(code, "nope")])

    return _run


async def _explode():
    raise RuntimeError("runner crashed")


class TestExecuteStage:
    @pytest.mark.asyncio
    async def test_exception_becomes_single_critical_error(self) -> None:
        stage = StageDescriptor(name="build", title="Container build", run=_explode)
        result = await execute_stage(stage)

        assert result.success is False
        assert len(result.errors) == 1
        assert result.errors[0].code == "BUILD_EXCEPTION"
        assert result.errors[0].severity.value == "critical"
        assert result.errors[0].message == "runner crashed"

    @pytest.mark.asyncio
    async def test_metadata_records_stage(self) -> None:
        stage = StageDescriptor(
            name="config", title="Config", run=_passing(), criticality=Criticality.critical,
        )
        result = await execute_stage(stage)
        assert result.metadata["stage"] == "config"
        assert result.metadata["criticality"] == "critical"


class TestRunStages:
    @pytest.mark.asyncio
    async def test_gated_stages_are_omitted(self) -> None:
        stages = [
            StageDescriptor(name="a", title="A", run=_failing(), failure_recommendation="Fix A"),
            StageDescriptor(name="b", title="B", run=_passing(), should_run=requires("a")),
            StageDescriptor(name="c", title="C", run=_passing()),
        ]
        run = await run_stages(stages)

        assert [r.metadata["stage"] for r in run.results] == ["a", "c"]
        assert run.recommendations == ["Fix A"]
        assert "b" not in run.executed
        assert run.aborted is False

    @pytest.mark.asyncio
    async def test_failed_critical_stage_marks_run_aborted(self) -> None:
        stages = [
            StageDescriptor(name="a", title="A", run=_failing(), criticality=Criticality.critical),
            StageDescriptor(name="b", title="B", run=_passing(), should_run=requires("a")),
        ]
        run = await run_stages(stages)
        assert run.aborted is True
        assert len(run.results) == 1

    @pytest.mark.asyncio
    async def test_order_is_declaration_order(self) -> None:
        stages = [
            StageDescriptor(name=name, title=name, run=_passing(name))
            for name in ("one", "two", "three")
        ]
        run = await run_stages(stages)
        assert [r.message for r in run.results] == ["one", "two", "three"]

    @pytest.mark.asyncio
    async def test_exception_does_not_stop_independent_stages(self) -> None:
        stages = [
            StageDescriptor(name="boom", title="Boom", run=_explode),
            StageDescriptor(name="after", title="After", run=_passing()),
        ]
        run = await run_stages(stages)
        assert [r.success for r in run.results] == [False, True]

    def test_requires_needs_every_name(self) -> None:
        predicate = requires("a", "b")
        ok = create_success_result("ok")
        assert predicate({"a": ok, "b": ok}) is True
        assert predicate({"a": ok}) is False
        assert predicate({"a": ok, "b": create_failure_result("x", [create_error("E", "e")])}) is False
