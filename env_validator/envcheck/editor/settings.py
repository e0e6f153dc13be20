"""Checks for the workspace settings document (.vscode/settings.json)."""

from __future__ import annotations

import json
import re
from pathlib import Path
from typing import Any

from envcheck.files import ConfigReadError
from envcheck.validator.aggregator import (
    create_error,
    create_failure_result,
    create_result,
    create_warning,
)
from envcheck.validator.models import (
    ValidationError,
    ValidationResult,
    ValidationSeverity,
    ValidationWarning,
)

# Deprecated key -> migration suggestion
DEPRECATED_SETTINGS: dict[str, str] = {
    "terminal.integrated.shell.windows": 'Use "terminal.integrated.defaultProfile.windows" instead',
    "terminal.integrated.shell.linux": 'Use "terminal.integrated.defaultProfile.linux" instead',
    "terminal.integrated.shell.osx": 'Use "terminal.integrated.defaultProfile.osx" instead',
    "python.pythonPath": 'Use "python.defaultInterpreterPath" instead',
    "python.linting.enabled": "Install a dedicated linter extension (e.g. ms-python.pylint) instead",
    "python.formatting.provider": 'Set "editor.defaultFormatter" for [python] instead',
}

POSITIVE_NUMBER_SETTINGS = {"editor.fontSize", "editor.tabSize", "editor.lineHeight"}
BOOLEAN_SETTINGS = {
    "editor.minimap.enabled",
    "editor.formatOnSave",
    "editor.formatOnPaste",
    "editor.formatOnType",
}
EXCLUDE_SETTINGS = {"files.exclude", "search.exclude", "files.watcherExclude"}

# "//" that is not part of a URL scheme such as https:// or file:///
COMMENT_RE = re.compile(r"(?<![:/])//")


def _is_positive_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool) and value > 0


def _is_comment_line(line: str) -> bool:
    return line.lstrip().startswith("//")


def strip_line_comments(text: str) -> str:
    """Blank out whole-line ``//`` comments, keeping line numbers intact."""
    return "\n".join("" if _is_comment_line(line) else line for line in text.splitlines())


def parse_settings_text(text: str, path: Path) -> Any:
    """Parse settings JSON, tolerating whole-line comments."""
    try:
        return json.loads(text)
    except json.JSONDecodeError:
        pass
    try:
        return json.loads(strip_line_comments(text))
    except json.JSONDecodeError as e:
        raise ConfigReadError(path, f"line {e.lineno} column {e.colno}: {e.msg}") from e


def looks_commented(settings: dict[str, Any], raw_text: str | None = None) -> bool:
    if raw_text is not None and any(_is_comment_line(line) for line in raw_text.splitlines()):
        return True
    return bool(COMMENT_RE.search(json.dumps(settings)))


def check_editor_setting(key: str, value: Any, file: str | None = None) -> list[ValidationError]:
    errors: list[ValidationError] = []

    if key == "editor.rulers":
        if not isinstance(value, list):
            errors.append(
                create_error("INVALID_RULERS", "editor.rulers must be an array of numbers", file=file)
            )
        else:
            for index, ruler in enumerate(value):
                # Rulers may also be {"column": n, "color": ...} objects.
                column = ruler.get("column") if isinstance(ruler, dict) else ruler
                if not _is_positive_number(column):
                    errors.append(
                        create_error(
                            "INVALID_RULER_VALUE",
                            f"editor.rulers[{index}] must be a positive number",
                            file=file,
                        )
                    )
    elif key in POSITIVE_NUMBER_SETTINGS and not _is_positive_number(value):
        errors.append(
            create_error("INVALID_NUMERIC_SETTING", f"{key} must be a positive number", file=file)
        )

    if key in BOOLEAN_SETTINGS and not isinstance(value, bool):
        errors.append(create_error("INVALID_BOOLEAN_SETTING", f"{key} must be a boolean", file=file))

    return errors


def check_settings_document(
    settings: Any, raw_text: str | None = None, file: str | None = None,
) -> ValidationResult:
    """Validate a parsed settings document.

    ``raw_text`` is the file content before parsing, when available; it lets
    the comment check see lines the parser would otherwise have rejected.
    """
    if not isinstance(settings, dict):
        return create_failure_result(
            "Invalid settings format",
            [
                create_error(
                    "INVALID_SETTINGS_FORMAT",
                    "settings.json must be a JSON object",
                    ValidationSeverity.critical,
                    file=file,
                )
            ],
        )

    errors: list[ValidationError] = []
    warnings: list[ValidationWarning] = []

    if looks_commented(settings, raw_text):
        warnings.append(
            create_warning(
                "POSSIBLE_COMMENTS",
                "settings.json may contain comments which are not valid JSON",
                "Remove the comments or move notes into a README",
                file=file,
            )
        )

    for key, value in settings.items():
        if key in DEPRECATED_SETTINGS:
            warnings.append(
                create_warning(
                    "DEPRECATED_SETTING",
                    f'Setting "{key}" is deprecated',
                    DEPRECATED_SETTINGS[key],
                    file=file,
                )
            )

        if key == "files.associations" and isinstance(value, dict):
            for pattern, language in value.items():
                if not isinstance(language, str):
                    errors.append(
                        create_error(
                            "INVALID_FILE_ASSOCIATION",
                            f'File association for "{pattern}" must be a string',
                            file=file,
                        )
                    )

        if key in EXCLUDE_SETTINGS and isinstance(value, dict):
            for pattern, flag in value.items():
                if not isinstance(flag, bool) and not (isinstance(flag, dict) and "when" in flag):
                    errors.append(
                        create_error(
                            "INVALID_EXCLUDE_PATTERN",
                            f'Exclude pattern "{pattern}" must have a boolean value',
                            file=file,
                        )
                    )

        if key.startswith("editor."):
            errors.extend(check_editor_setting(key, value, file))

    return create_result(
        "Settings configuration is valid",
        "Settings configuration has errors",
        errors,
        warnings,
        metadata={"settings_count": len(settings)},
    )
