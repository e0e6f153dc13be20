"""Result models and report aggregation."""

from envcheck.validator.aggregator import (
    build_report,
    calculate_summary,
    create_error,
    create_failure_result,
    create_success_result,
    create_warning,
    format_report,
    format_result,
    validate_env_var_name,
    validate_port,
)
from envcheck.validator.models import (
    ValidationError,
    ValidationReport,
    ValidationResult,
    ValidationSeverity,
    ValidationWarning,
)

__all__ = [
    "ValidationError",
    "ValidationReport",
    "ValidationResult",
    "ValidationSeverity",
    "ValidationWarning",
    "build_report",
    "calculate_summary",
    "create_error",
    "create_failure_result",
    "create_success_result",
    "create_warning",
    "format_report",
    "format_result",
    "validate_env_var_name",
    "validate_port",
]
