"""Checks for the task document (.vscode/tasks.json)."""

from __future__ import annotations

from typing import Any

from envcheck.editor.launch import find_duplicates, one_of
from envcheck.validator.aggregator import (
    create_error,
    create_failure_result,
    create_result,
    create_warning,
)
from envcheck.validator.models import ValidationError, ValidationResult, ValidationWarning

EXPECTED_VERSION = "2.0.0"
VALID_GROUPS = {"build", "test", "none"}
COMMAND_TASK_TYPES = {"shell", "process"}

# presentation field -> allowed values
PRESENTATION_ENUMS: dict[str, tuple[str, set[str]]] = {
    "reveal": ("INVALID_PRESENTATION_REVEAL", {"always", "never", "silent"}),
    "panel": ("INVALID_PRESENTATION_PANEL", {"shared", "dedicated", "new"}),
    "revealProblems": ("INVALID_PRESENTATION_REVEAL_PROBLEMS", {"always", "onProblem", "never"}),
}


def _label(task: dict, index: int) -> str:
    return str(task.get("label") or index + 1)


def depends_on(task: dict) -> list[str]:
    deps = task.get("dependsOn")
    if deps is None:
        return []
    if isinstance(deps, list):
        return [d for d in deps if isinstance(d, str)]
    return [deps] if isinstance(deps, str) else []


def task_labels(doc: Any) -> set[str]:
    """Labels declared in a parsed task document; empty if malformed."""
    if not isinstance(doc, dict) or not isinstance(doc.get("tasks"), list):
        return set()
    return {
        t["label"] for t in doc["tasks"]
        if isinstance(t, dict) and isinstance(t.get("label"), str) and t["label"]
    }


def check_task(task: Any, index: int, file: str | None = None) -> list[ValidationError]:
    """Validate one entry of the ``tasks`` array."""
    if not isinstance(task, dict):
        return [create_error("INVALID_TASK", f"Task {index + 1} must be an object", file=file)]

    errors: list[ValidationError] = []
    label = _label(task, index)
    task_type = task.get("type")

    if not task.get("label"):
        errors.append(create_error("MISSING_LABEL", f"Task {index + 1} must have a label", file=file))
    if not task_type:
        errors.append(create_error("MISSING_TYPE", f'Task "{label}" must specify a type', file=file))
    elif not isinstance(task_type, str):
        errors.append(create_error("INVALID_TYPE", f'Task "{label}" type must be a string', file=file))

    if one_of(task_type, COMMAND_TASK_TYPES) and not task.get("command"):
        errors.append(
            create_error("MISSING_COMMAND", f'Task "{label}" must specify a command', file=file)
        )
    elif task_type == "npm" and not (task.get("script") or task.get("path")):
        errors.append(
            create_error("MISSING_NPM_SCRIPT", f'NPM task "{label}" must specify a script', file=file)
        )

    group = task.get("group")
    if isinstance(group, str):
        if group not in VALID_GROUPS:
            errors.append(
                create_error("INVALID_GROUP", f'Task "{label}" has invalid group: {group}', file=file)
            )
    elif isinstance(group, dict):
        if not one_of(group.get("kind"), VALID_GROUPS):
            errors.append(
                create_error("INVALID_GROUP_KIND", f'Task "{label}" has invalid group kind', file=file)
            )
    elif group is not None:
        errors.append(
            create_error("INVALID_GROUP", f'Task "{label}" has invalid group: {group}', file=file)
        )

    presentation = task.get("presentation")
    if isinstance(presentation, dict):
        for field, (code, allowed) in PRESENTATION_ENUMS.items():
            value = presentation.get(field)
            if value is not None and not one_of(value, allowed):
                errors.append(
                    create_error(
                        code,
                        f'Task "{label}" has invalid presentation.{field} value: {value}',
                        file=file,
                    )
                )

    return errors


def check_tasks_document(doc: Any, file: str | None = None) -> ValidationResult:
    """Validate a parsed task document, including dependsOn references."""
    errors: list[ValidationError] = []
    warnings: list[ValidationWarning] = []

    if not isinstance(doc, dict):
        return create_failure_result(
            "Tasks configuration has errors",
            [create_error("INVALID_TASKS_FORMAT", "tasks.json must be a JSON object", file=file)],
        )

    version = doc.get("version")
    if not version:
        errors.append(create_error("MISSING_VERSION", "tasks.json must specify a version", file=file))
    elif version != EXPECTED_VERSION:
        warnings.append(
            create_warning(
                "OUTDATED_VERSION",
                f"tasks.json version {version} may be outdated",
                f'Use version "{EXPECTED_VERSION}" for the latest features',
                file=file,
            )
        )

    tasks = doc.get("tasks")
    if not isinstance(tasks, list):
        errors.append(create_error("MISSING_TASKS", "tasks.json must contain a tasks array", file=file))
        tasks = []

    for index, task in enumerate(tasks):
        errors.extend(check_task(task, index, file))

    labels = [
        t["label"] for t in tasks
        if isinstance(t, dict) and isinstance(t.get("label"), str) and t["label"]
    ]
    for duplicate in find_duplicates(labels):
        errors.append(
            create_error("DUPLICATE_TASK_LABEL", f"Duplicate task label: {duplicate}", file=file)
        )

    known = set(labels)
    for task in tasks:
        if not isinstance(task, dict):
            continue
        for dep in depends_on(task):
            if dep not in known:
                errors.append(
                    create_error(
                        "INVALID_DEPENDENCY",
                        f'Task "{task.get("label")}" depends on non-existent task "{dep}"',
                        file=file,
                        task=task.get("label"),
                        dependency=dep,
                    )
                )

    return create_result(
        "Tasks configuration is valid",
        "Tasks configuration has errors",
        errors,
        warnings,
        metadata={"tasks_count": len(tasks)},
    )
