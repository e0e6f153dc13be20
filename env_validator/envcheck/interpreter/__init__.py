"""Heuristic interpretation of test runner output."""

from envcheck.interpreter.test_output import parse_test_output

__all__ = ["parse_test_output"]
