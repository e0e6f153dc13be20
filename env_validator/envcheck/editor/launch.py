"""Checks for the debug launch document (.vscode/launch.json)."""

from __future__ import annotations

from typing import Any

from envcheck.validator.aggregator import (
    create_error,
    create_failure_result,
    create_result,
    create_warning,
    validate_env_var_name,
)
from envcheck.validator.models import ValidationError, ValidationResult, ValidationWarning

EXPECTED_VERSION = "0.2.0"
VALID_REQUESTS = {"launch", "attach"}

NODE_TYPES = {"node", "node2", "pwa-node"}
BROWSER_TYPES = {"chrome", "pwa-chrome", "edge", "pwa-msedge"}
PYTHON_TYPES = {"python", "debugpy"}


def one_of(value: Any, allowed: set[str]) -> bool:
    """Membership test that tolerates unhashable JSON values."""
    return isinstance(value, str) and value in allowed


def _label(entry: dict, index: int) -> str:
    return str(entry.get("name") or f"#{index + 1}")


def check_configuration(
    entry: Any, index: int, file: str | None = None,
) -> list[ValidationError]:
    """Validate one entry of the ``configurations`` array."""
    if not isinstance(entry, dict):
        return [
            create_error(
                "INVALID_CONFIGURATION",
                f"Configuration {index + 1} must be an object",
                file=file,
                index=index,
            )
        ]

    errors: list[ValidationError] = []
    config_type = entry.get("type")
    request = entry.get("request")
    name = _label(entry, index)

    if not config_type:
        errors.append(
            create_error("MISSING_TYPE", f"Configuration {index + 1} must specify a type", file=file)
        )
    elif not isinstance(config_type, str):
        errors.append(
            create_error("INVALID_TYPE", f"Configuration {index + 1} type must be a string", file=file)
        )

    if not request:
        errors.append(
            create_error(
                "MISSING_REQUEST",
                f"Configuration {index + 1} must specify a request (launch or attach)",
                file=file,
            )
        )
    elif not one_of(request, VALID_REQUESTS):
        errors.append(
            create_error(
                "INVALID_REQUEST",
                f"Configuration {index + 1} has invalid request type: {request}",
                file=file,
            )
        )

    if not entry.get("name"):
        errors.append(
            create_error("MISSING_NAME", f"Configuration {index + 1} must have a name", file=file)
        )

    if request == "launch":
        if one_of(config_type, NODE_TYPES) and not entry.get("program"):
            errors.append(
                create_error(
                    "MISSING_PROGRAM",
                    f'Node.js launch configuration "{name}" must specify a program',
                    file=file,
                )
            )
        elif one_of(config_type, BROWSER_TYPES) and not (entry.get("url") or entry.get("file")):
            errors.append(
                create_error(
                    "MISSING_URL_OR_FILE",
                    f'Browser launch configuration "{name}" must specify a URL or file',
                    file=file,
                )
            )
        elif one_of(config_type, PYTHON_TYPES) and not (entry.get("program") or entry.get("module")):
            errors.append(
                create_error(
                    "MISSING_PROGRAM_OR_MODULE",
                    f'Python launch configuration "{name}" must specify a program or module',
                    file=file,
                )
            )

    env = entry.get("env")
    if isinstance(env, dict):
        for key in env:
            env_error = validate_env_var_name(key, file=file)
            if env_error:
                errors.append(env_error)

    return errors


def find_duplicates(values: list[Any]) -> list[Any]:
    seen: set = set()
    duplicates: list[Any] = []
    for value in values:
        if value in seen and value not in duplicates:
            duplicates.append(value)
        seen.add(value)
    return duplicates


def check_launch_document(doc: Any, file: str | None = None) -> ValidationResult:
    """Validate a parsed launch document."""
    errors: list[ValidationError] = []
    warnings: list[ValidationWarning] = []

    if not isinstance(doc, dict):
        errors.append(
            create_error("INVALID_LAUNCH_FORMAT", "launch.json must be a JSON object", file=file)
        )
        return create_failure_result("Launch configuration has errors", errors)

    version = doc.get("version")
    if not version:
        errors.append(
            create_error("MISSING_VERSION", "launch.json must specify a version", file=file)
        )
    elif version != EXPECTED_VERSION:
        warnings.append(
            create_warning(
                "OUTDATED_VERSION",
                f"launch.json version {version} may be outdated",
                f'Use version "{EXPECTED_VERSION}" for the latest features',
                file=file,
            )
        )

    configurations = doc.get("configurations")
    if not isinstance(configurations, list):
        errors.append(
            create_error(
                "MISSING_CONFIGURATIONS",
                "launch.json must contain a configurations array",
                file=file,
            )
        )
        configurations = []

    for index, entry in enumerate(configurations):
        errors.extend(check_configuration(entry, index, file))

    names = [
        c["name"] for c in configurations
        if isinstance(c, dict) and isinstance(c.get("name"), str) and c["name"]
    ]
    duplicates = find_duplicates(names)
    if duplicates:
        errors.append(
            create_error(
                "DUPLICATE_CONFIG_NAMES",
                f"Duplicate configuration names found: {', '.join(map(str, duplicates))}",
                file=file,
                duplicates=duplicates,
            )
        )

    return create_result(
        "Launch configuration is valid",
        "Launch configuration has errors",
        errors,
        warnings,
        metadata={"configurations_count": len(configurations)},
    )
