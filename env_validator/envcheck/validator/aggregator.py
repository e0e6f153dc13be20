"""Result builders and report aggregation.

Everything here is a pure function: stages build their results with these
helpers and the pipelines fold them into a ``ValidationReport``.
"""

from __future__ import annotations

import re
import time
from typing import Any, Iterable

from envcheck.validator.models import (
    Location,
    ReportSummary,
    ValidationError,
    ValidationReport,
    ValidationResult,
    ValidationSeverity,
    ValidationWarning,
)

ENV_VAR_NAME_RE = re.compile(r"^[A-Z_][A-Z0-9_]*$")

MIN_PORT = 1
MAX_PORT = 65535
PRIVILEGED_PORT_LIMIT = 1024


def _location(
    file: str | None, line: int | None, column: int | None,
) -> Location | None:
    if file is None and line is None and column is None:
        return None
    return Location(file=file, line=line, column=column)


def create_success_result(
    message: str,
    metadata: dict[str, Any] | None = None,
    warnings: list[ValidationWarning] | None = None,
) -> ValidationResult:
    return ValidationResult(
        message=message,
        warnings=list(warnings or []),
        metadata=dict(metadata or {}),
    )


def create_failure_result(
    message: str,
    errors: list[ValidationError],
    warnings: list[ValidationWarning] | None = None,
    metadata: dict[str, Any] | None = None,
) -> ValidationResult:
    return ValidationResult(
        message=message,
        errors=list(errors),
        warnings=list(warnings or []),
        metadata=dict(metadata or {}),
    )


def create_result(
    success_message: str,
    failure_message: str,
    errors: list[ValidationError],
    warnings: list[ValidationWarning] | None = None,
    metadata: dict[str, Any] | None = None,
) -> ValidationResult:
    """Pick the success or failure message depending on whether errors exist."""
    if errors:
        return create_failure_result(failure_message, errors, warnings, metadata)
    return create_success_result(success_message, metadata, warnings)


def create_error(
    code: str,
    message: str,
    severity: ValidationSeverity | str = ValidationSeverity.error,
    file: str | None = None,
    line: int | None = None,
    column: int | None = None,
    **context: Any,
) -> ValidationError:
    return ValidationError(
        code=code,
        message=message,
        severity=ValidationSeverity(severity),
        location=_location(file, line, column),
        context=context,
    )


def create_warning(
    code: str,
    message: str,
    suggestion: str | None = None,
    file: str | None = None,
    line: int | None = None,
    column: int | None = None,
) -> ValidationWarning:
    return ValidationWarning(
        code=code,
        message=message,
        suggestion=suggestion,
        location=_location(file, line, column),
    )


def validate_port(port: Any, file: str | None = None) -> ValidationError | None:
    """Check a forwarded port number.

    Out-of-range values and non-integers give ``INVALID_PORT``; ports below
    1024 give ``PRIVILEGED_PORT`` because binding them needs elevated
    privileges inside the container.
    """
    if isinstance(port, bool) or not isinstance(port, int) or not (
        MIN_PORT <= port <= MAX_PORT
    ):
        return create_error(
            "INVALID_PORT",
            f"Invalid port number: {port}. Port must be between {MIN_PORT} and {MAX_PORT}",
            file=file,
            port=port,
        )

    if port < PRIVILEGED_PORT_LIMIT:
        return create_error(
            "PRIVILEGED_PORT",
            f"Port {port} requires elevated privileges (ports below {PRIVILEGED_PORT_LIMIT})",
            file=file,
            port=port,
        )

    return None


def validate_env_var_name(name: str, file: str | None = None) -> ValidationError | None:
    if not isinstance(name, str) or not ENV_VAR_NAME_RE.match(name):
        return create_error(
            "INVALID_ENV_VAR_NAME",
            f"Invalid environment variable name: '{name}'. Must start with a letter "
            "or underscore and contain only uppercase letters, numbers, and underscores",
            file=file,
            name=name,
        )
    return None


def has_nested_field(data: Any, path: str) -> bool:
    current = data
    for part in path.split("."):
        if not isinstance(current, dict) or part not in current:
            return False
        current = current[part]
    return True


def validate_required_fields(
    data: Any, fields: Iterable[str], file: str | None = None,
) -> list[ValidationError]:
    """Return a ``MISSING_FIELD`` error for each dotted path absent from data."""
    return [
        create_error(
            "MISSING_FIELD",
            f"Required field '{field}' is missing",
            file=file,
            field=field,
        )
        for field in fields
        if not has_nested_field(data, field)
    ]


def merge_results(results: list[ValidationResult]) -> ValidationResult:
    """Collapse several results into one carrying every error and warning."""
    errors: list[ValidationError] = []
    warnings: list[ValidationWarning] = []
    for result in results:
        errors.extend(result.errors)
        warnings.extend(result.warnings)
    return ValidationResult(
        message="; ".join(r.message for r in results),
        errors=errors,
        warnings=warnings,
    )


def calculate_summary(results: list[ValidationResult]) -> ReportSummary:
    passed = sum(1 for r in results if r.success)
    return ReportSummary(
        total_checks=len(results),
        passed=passed,
        failed=len(results) - passed,
        warnings=sum(len(r.warnings) for r in results),
    )


def count_errors(results: list[ValidationResult]) -> int:
    return sum(len(r.errors) for r in results)


def build_report(
    pipeline_name: str,
    results: list[ValidationResult],
    started_at: float,
    recommendations: list[str] | None = None,
    warning_subject: str = "the setup",
) -> ValidationReport:
    """Fold stage results into a report.

    ``started_at`` is a ``time.monotonic()`` reading taken when the pipeline
    began. The warning-count recommendation is appended after any
    stage-specific ones.
    """
    summary = calculate_summary(results)
    recs = list(recommendations or [])
    if summary.warnings > 0:
        recs.append(
            f"Review {summary.warnings} warning(s) to improve {warning_subject}"
        )

    return ValidationReport(
        pipeline_name=pipeline_name,
        duration=round(time.monotonic() - started_at, 3),
        results=list(results),
        summary=summary,
        recommendations=recs,
    )


def _format_location(location: Location | None) -> str | None:
    if location is None or location.file is None:
        return None
    text = location.file
    if location.line is not None:
        text += f":{location.line}"
        if location.column is not None:
            text += f":{location.column}"
    return text


def format_result(result: ValidationResult, verbose: bool = True) -> str:
    """Render a result for terminal display."""
    lines = [f"{'✅' if result.success else '❌'} {result.message}"]
    if not verbose:
        return "\n".join(lines)

    if result.errors:
        lines.append("  Errors:")
        for i, error in enumerate(result.errors, start=1):
            lines.append(f"    {i}. [{error.code}] {error.message}")
            where = _format_location(error.location)
            if where:
                lines.append(f"       File: {where}")

    if result.warnings:
        lines.append("  Warnings:")
        for i, warning in enumerate(result.warnings, start=1):
            lines.append(f"    {i}. [{warning.code}] {warning.message}")
            where = _format_location(warning.location)
            if where:
                lines.append(f"       File: {where}")
            if warning.suggestion:
                lines.append(f"       Suggestion: {warning.suggestion}")

    return "\n".join(lines)


def format_report(report: ValidationReport, verbose: bool = True) -> str:
    lines = [f"{report.pipeline_name} ({report.duration:.2f}s)"]
    lines.extend(format_result(r, verbose) for r in report.results)

    s = report.summary
    lines.append(
        f"Summary: {s.passed}/{s.total_checks} passed, {s.failed} failed, "
        f"{s.warnings} warning(s)"
    )
    if report.recommendations:
        lines.append("Recommendations:")
        lines.extend(f"  - {rec}" for rec in report.recommendations)
    return "\n".join(lines)
