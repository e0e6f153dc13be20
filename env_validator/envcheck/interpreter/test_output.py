"""Recover pass/fail/skip counts from captured test runner output.

Probes run in a fixed order and the first one that recognises the text
decides the counts:

1. Jest summary line  ``Tests: 2 failed, 8 passed, 10 total``
2. Mocha summary      ``15 passing (3s)`` / ``2 failing``
3. Pytest summary     ``8 passed, 2 failed`` (either order)
4. PASS / FAIL token stream (go test and similar), used only as a fallback

Per-file ``PASS``/``FAIL`` lines printed by Jest are ignored whenever a
summary line is present.
"""

from __future__ import annotations

import re
from typing import Callable

from envcheck.validator.models import TestCounts

JEST_RE = re.compile(
    r"Tests:\s+"
    r"(?:(?P<failed>\d+)\s+failed,\s+)?"
    r"(?:(?P<skipped>\d+)\s+skipped,\s+)?"
    r"(?:\d+\s+todo,\s+)?"
    r"(?:(?P<passed>\d+)\s+passed,\s+)?"
    r"(?P<total>\d+)\s+total"
)
MOCHA_PASSING_RE = re.compile(r"(\d+)\s+passing\b")
MOCHA_FAILING_RE = re.compile(r"(\d+)\s+failing\b")
MOCHA_PENDING_RE = re.compile(r"(\d+)\s+pending\b")
PYTEST_PASSED_RE = re.compile(r"(\d+)\s+passed\b")
PYTEST_FAILED_RE = re.compile(r"(\d+)\s+failed\b")
PYTEST_SKIPPED_RE = re.compile(r"(\d+)\s+skipped\b")
TOKEN_RE = re.compile(r"\b(PASS|FAIL)\b")


def _int(match: re.Match | None, group: int | str = 1) -> int:
    if match is None or match.group(group) is None:
        return 0
    return int(match.group(group))


def _probe_jest(text: str) -> TestCounts | None:
    match = JEST_RE.search(text)
    if match is None:
        return None
    return TestCounts(
        total=_int(match, "total"),
        passed=_int(match, "passed"),
        failed=_int(match, "failed"),
        skipped=_int(match, "skipped"),
        matched=True,
    )


def _probe_mocha(text: str) -> TestCounts | None:
    passing = MOCHA_PASSING_RE.search(text)
    if passing is None:
        return None
    rest = text[passing.end():]
    passed = _int(passing)
    failed = _int(MOCHA_FAILING_RE.search(rest))
    skipped = _int(MOCHA_PENDING_RE.search(rest))
    return TestCounts(
        total=passed + failed + skipped,
        passed=passed,
        failed=failed,
        skipped=skipped,
        matched=True,
    )


def _probe_pytest(text: str) -> TestCounts | None:
    passed_match = PYTEST_PASSED_RE.search(text)
    failed_match = PYTEST_FAILED_RE.search(text)
    if passed_match is None and failed_match is None:
        return None
    passed = _int(passed_match)
    failed = _int(failed_match)
    skipped = _int(PYTEST_SKIPPED_RE.search(text))
    return TestCounts(
        total=passed + failed + skipped,
        passed=passed,
        failed=failed,
        skipped=skipped,
        matched=True,
    )


def _probe_tokens(text: str) -> TestCounts | None:
    tokens = TOKEN_RE.findall(text)
    if not tokens:
        return None
    passed = tokens.count("PASS")
    return TestCounts(
        total=len(tokens),
        passed=passed,
        failed=len(tokens) - passed,
        matched=True,
    )


PROBES: list[Callable[[str], TestCounts | None]] = [
    _probe_jest,
    _probe_mocha,
    _probe_pytest,
    _probe_tokens,
]


def parse_test_output(text: str) -> TestCounts:
    """Return the counts from the first matching probe, or all zeros."""
    if not text:
        return TestCounts()
    for probe in PROBES:
        counts = probe(text)
        if counts is not None:
            return counts
    return TestCounts()
