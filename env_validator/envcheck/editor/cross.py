"""Checks whose inputs span more than one editor document."""

from __future__ import annotations

from typing import Any

from envcheck.editor.tasks import task_labels
from envcheck.validator.aggregator import create_error, create_result, create_warning
from envcheck.validator.models import ValidationError, ValidationResult, ValidationWarning

FORMATTER_SETTINGS = ("editor.defaultFormatter", "eslint.format.enable", "prettier.enable")


def check_prelaunch_tasks(
    launch_doc: Any, tasks_doc: Any, file: str | None = None,
) -> list[ValidationError]:
    """Every preLaunchTask must name a label declared in the task document."""
    if not isinstance(launch_doc, dict):
        return []
    configurations = launch_doc.get("configurations")
    if not isinstance(configurations, list):
        return []

    labels = task_labels(tasks_doc)
    errors: list[ValidationError] = []
    for config in configurations:
        if not isinstance(config, dict):
            continue
        task = config.get("preLaunchTask")
        # ${defaultBuildTask} and friends are resolved by the editor.
        if not isinstance(task, str) or not task or task.startswith("${"):
            continue
        if task not in labels:
            name = config.get("name", "")
            errors.append(
                create_error(
                    "MISSING_PRELAUNCH_TASK",
                    f'Launch configuration "{name}" references non-existent task "{task}"',
                    file=file,
                    configuration=name,
                    task=task,
                )
            )
    return errors


def check_formatter_conflicts(settings_doc: Any) -> list[ValidationWarning]:
    if not isinstance(settings_doc, dict):
        return []
    active = [key for key in FORMATTER_SETTINGS if settings_doc.get(key)]
    if len(active) > 1:
        return [
            create_warning(
                "MULTIPLE_FORMATTERS",
                f"Multiple formatters may be configured: {', '.join(active)}",
                "Consider using only one formatter to avoid conflicts",
            )
        ]
    return []


def check_cross_references(
    launch_doc: Any,
    tasks_doc: Any,
    settings_doc: Any,
    launch_file: str | None = None,
) -> ValidationResult:
    errors = check_prelaunch_tasks(launch_doc, tasks_doc, launch_file)
    warnings = check_formatter_conflicts(settings_doc)
    return create_result(
        "Cross-validation passed", "Cross-validation found issues", errors, warnings,
    )
