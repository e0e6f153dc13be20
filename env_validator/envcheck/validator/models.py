"""Validation data models."""

from __future__ import annotations

from datetime import datetime, timezone
from enum import Enum
from typing import Any

from pydantic import BaseModel, Field, model_validator


def _now() -> datetime:
    return datetime.now(timezone.utc)


class ValidationSeverity(str, Enum):
    """Severity level for validation errors."""

    error = "error"
    critical = "critical"


class Location(BaseModel):
    """Where a finding points to, when known."""

    file: str | None = None
    line: int | None = None
    column: int | None = None


class ValidationError(BaseModel):
    """A concrete defect found by a check."""

    code: str
    message: str
    severity: ValidationSeverity = ValidationSeverity.error
    location: Location | None = None
    context: dict[str, Any] = Field(default_factory=dict)


class ValidationWarning(BaseModel):
    """An advisory finding. Never affects success."""

    code: str
    message: str
    suggestion: str | None = None
    location: Location | None = None


class ValidationResult(BaseModel):
    """Outcome of a single stage."""

    success: bool = True
    message: str
    errors: list[ValidationError] = Field(default_factory=list)
    warnings: list[ValidationWarning] = Field(default_factory=list)
    metadata: dict[str, Any] = Field(default_factory=dict)
    timestamp: datetime = Field(default_factory=_now)

    @model_validator(mode="after")
    def _success_follows_errors(self) -> ValidationResult:
        # A result fails iff it carries errors.
        self.success = not self.errors
        return self

    @property
    def has_critical(self) -> bool:
        return any(e.severity == ValidationSeverity.critical for e in self.errors)


class ReportSummary(BaseModel):
    total_checks: int = 0
    passed: int = 0
    failed: int = 0
    warnings: int = 0


class ValidationReport(BaseModel):
    """Aggregated outcome of one pipeline run."""

    pipeline_name: str
    timestamp: datetime = Field(default_factory=_now)
    duration: float = 0.0
    results: list[ValidationResult] = Field(default_factory=list)
    summary: ReportSummary = Field(default_factory=ReportSummary)
    recommendations: list[str] = Field(default_factory=list)

    @property
    def success(self) -> bool:
        return all(r.success for r in self.results)


class TestCounts(BaseModel):
    """Test totals recovered from captured runner output."""

    __test__ = False

    total: int = 0
    passed: int = 0
    failed: int = 0
    skipped: int = 0
    matched: bool = False
