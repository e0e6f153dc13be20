"""Tests for result builders and report aggregation."""

from __future__ import annotations

import time

import pytest

from envcheck.validator.aggregator import (
    build_report,
    calculate_summary,
    create_error,
    create_failure_result,
    create_success_result,
    create_warning,
    format_report,
    format_result,
    merge_results,
    validate_env_var_name,
    validate_port,
    validate_required_fields,
)
from envcheck.validator.models import ValidationResult, ValidationSeverity


class TestValidatePort:
    def test_privileged_port(self) -> None:
        error = validate_port(80)
        assert error is not None
        assert error.code == "PRIVILEGED_PORT"

    def test_regular_port(self) -> None:
        assert validate_port(8080) is None

    def test_upper_bound_is_valid(self) -> None:
        assert validate_port(65535) is None

    def test_out_of_range(self) -> None:
        error = validate_port(70000)
        assert error is not None
        assert error.code == "INVALID_PORT"

    def test_zero_is_out_of_range(self) -> None:
        error = validate_port(0)
        assert error is not None
        assert error.code == "INVALID_PORT"

    def test_non_integer(self) -> None:
        assert validate_port("3000").code == "INVALID_PORT"
        assert validate_port(3000.5).code == "INVALID_PORT"

    def test_bool_is_not_a_port(self) -> None:
        assert validate_port(True).code == "INVALID_PORT"

    def test_file_location(self) -> None:
        error = validate_port(22, file="devcontainer.json")
        assert error.location is not None
        assert error.location.file == "devcontainer.json"
        assert error.context["port"] == 22


class TestValidateEnvVarName:
    def test_uppercase_passes(self) -> None:
        assert validate_env_var_name("NODE_ENV") is None

    def test_leading_underscore_passes(self) -> None:
        assert validate_env_var_name("_PRIVATE1") is None

    def test_lowercase_fails(self) -> None:
        error = validate_env_var_name("node_env")
        assert error is not None
        assert error.code == "INVALID_ENV_VAR_NAME"

    def test_leading_digit_fails(self) -> None:
        assert validate_env_var_name("2FAST") is not None


class TestResultInvariant:
    def test_success_without_errors(self) -> None:
        result = create_success_result("ok", warnings=[create_warning("W", "advisory")])
        assert result.success is True
        assert len(result.warnings) == 1

    def test_failure_with_errors(self) -> None:
        result = create_failure_result("bad", [create_error("E", "boom")])
        assert result.success is False

    def test_success_flag_cannot_contradict_errors(self) -> None:
        result = ValidationResult(success=True, message="x", errors=[create_error("E", "boom")])
        assert result.success is False

        result = ValidationResult(success=False, message="x")
        assert result.success is True

    def test_critical_flag(self) -> None:
        result = create_failure_result(
            "bad", [create_error("E", "boom", ValidationSeverity.critical)]
        )
        assert result.has_critical is True

    def test_error_location_only_when_given(self) -> None:
        assert create_error("E", "m").location is None
        assert create_error("E", "m", line=3).location.line == 3


class TestSummary:
    def _results(self) -> list[ValidationResult]:
        return [
            create_success_result("a", warnings=[create_warning("W1", "w")]),
            create_failure_result(
                "b",
                [create_error("E1", "e")],
                [create_warning("W2", "w"), create_warning("W3", "w")],
            ),
            create_success_result("c"),
        ]

    def test_summary_folds_results(self) -> None:
        summary = calculate_summary(self._results())
        assert summary.total_checks == 3
        assert summary.passed == 2
        assert summary.failed == 1
        assert summary.passed + summary.failed == summary.total_checks
        assert summary.warnings == 3

    def test_build_report_appends_warning_recommendation(self) -> None:
        report = build_report(
            "Example", self._results(), time.monotonic(), ["Fix b"], "the example",
        )
        assert report.pipeline_name == "Example"
        assert report.recommendations == ["Fix b", "Review 3 warning(s) to improve the example"]
        assert report.success is False
        assert report.duration >= 0

    def test_build_report_no_recommendations(self) -> None:
        report = build_report("Example", [create_success_result("ok")], time.monotonic())
        assert report.recommendations == []
        assert report.success is True

    def test_merge_results(self) -> None:
        merged = merge_results(self._results())
        assert merged.success is False
        assert len(merged.errors) == 1
        assert len(merged.warnings) == 3
        assert merged.message == "a; b; c"


class TestRequiredFields:
    def test_nested_paths(self) -> None:
        data = {"build": {"dockerfile": "Dockerfile"}}
        errors = validate_required_fields(data, ["build.dockerfile", "build.context", "image"])
        assert [e.context["field"] for e in errors] == ["build.context", "image"]
        assert all(e.code == "MISSING_FIELD" for e in errors)


class TestFormatting:
    def test_format_failure_lists_codes_and_locations(self) -> None:
        result = create_failure_result(
            "Launch configuration has errors",
            [create_error("MISSING_NAME", "needs a name", file="launch.json", line=4)],
            [create_warning("OUTDATED_VERSION", "old", "Use 0.2.0")],
        )
        text = format_result(result)
        assert text.startswith("❌ Launch configuration has errors")
        assert "[MISSING_NAME] needs a name" in text
        assert "File: launch.json:4" in text
        assert "Suggestion: Use 0.2.0" in text

    def test_format_success_terse(self) -> None:
        assert format_result(create_success_result("fine"), verbose=False) == "✅ fine"

    def test_format_report(self) -> None:
        report = build_report(
            "Example",
            [create_success_result("ok"), create_failure_result("bad", [create_error("E", "e")])],
            time.monotonic(),
            ["Do the thing"],
        )
        text = format_report(report)
        assert "Summary: 1/2 passed, 1 failed, 0 warning(s)" in text
        assert "  - Do the thing" in text


@pytest.mark.parametrize("severity", ["error", "critical"])
def test_create_error_accepts_string_severity(severity: str) -> None:
    assert create_error("E", "m", severity).severity.value == severity
