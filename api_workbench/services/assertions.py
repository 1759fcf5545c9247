"""
Assertion engine.

Evaluates a request's assertions against a successful response. Every
assertion produces exactly one TestResult, in order; an assertion that
crashes is reported as failed and never stops the others.
"""

import json
import logging
import re
from typing import Any

from ..schemas.request import Assertion
from ..schemas.response import ResponseSuccess, TestResult


logger = logging.getLogger(__name__)

INTEGER_PREFIX = re.compile(r'^\s*([+-]?\d+)')

# Marks a json_value path that left the document
_UNDEFINED = object()


def parse_int(text: str) -> int | None:
    """Parse the leading integer of ``text``; None when there is none."""
    match = INTEGER_PREFIX.match(text or "")
    return int(match.group(1)) if match else None


def stringify_value(value: Any) -> str:
    """
    Render a response value as text.

    Strings pass through; containers become compact JSON; booleans and
    null use their JSON spelling; whole floats drop the fraction.
    """
    if isinstance(value, str):
        return value
    if isinstance(value, bool) or value is None:
        return json.dumps(value)
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    if isinstance(value, (int, float)):
        return str(value)
    return json.dumps(value, separators=(",", ":"), ensure_ascii=False)


def lookup_path(data: Any, path: str) -> Any:
    """Walk ``data`` along a dot path; returns _UNDEFINED when it leaves the document."""
    current = data
    for key in [segment for segment in path.split(".") if segment]:
        if isinstance(current, dict):
            if key not in current:
                return _UNDEFINED
            current = current[key]
        elif isinstance(current, list) and key.isdigit() and int(key) < len(current):
            current = current[int(key)]
        else:
            return _UNDEFINED
    return current


def _check_status_code(assertion: Assertion, response: ResponseSuccess) -> TestResult:
    expected = parse_int(assertion.expected)
    passed = expected is not None and response.status == expected
    return TestResult(
        assertion_id=assertion.id,
        name=f"Status code is {assertion.expected}",
        passed=passed,
        message="Passed" if passed else f"Expected status {assertion.expected}, got {response.status}",
    )


def _check_response_time(assertion: Assertion, response: ResponseSuccess) -> TestResult:
    limit = parse_int(assertion.expected)
    passed = limit is not None and response.time < limit
    return TestResult(
        assertion_id=assertion.id,
        name=f"Response time < {assertion.expected}ms",
        passed=passed,
        message="Passed" if passed else f"Response took {response.time}ms, limit {assertion.expected}ms",
    )


def _check_body_contains(assertion: Assertion, response: ResponseSuccess) -> TestResult:
    body = stringify_value(response.data)
    passed = assertion.expected in body
    return TestResult(
        assertion_id=assertion.id,
        name=f'Body contains "{assertion.expected}"',
        passed=passed,
        message="Passed" if passed else f'Body does not contain "{assertion.expected}"',
    )


def _check_json_value(assertion: Assertion, response: ResponseSuccess) -> TestResult:
    prop = assertion.property or ""
    value = lookup_path(response.data, prop)
    actual = "" if value is _UNDEFINED else stringify_value(value)
    passed = actual == assertion.expected
    return TestResult(
        assertion_id=assertion.id,
        name=f'{prop} equals "{assertion.expected}"',
        passed=passed,
        message="Passed" if passed else f'Expected {prop} to be "{assertion.expected}", got "{actual}"',
    )


CHECKS = {
    "status_code": _check_status_code,
    "response_time": _check_response_time,
    "body_contains": _check_body_contains,
    "json_value": _check_json_value,
}


def evaluate(response: ResponseSuccess, assertions: list[Assertion]) -> list[TestResult]:
    """
    Evaluate all assertions against a response.

    Args:
        response: The successful response to check
        assertions: Assertions in display order

    Returns:
        One TestResult per assertion, in the same order
    """
    results: list[TestResult] = []
    for assertion in assertions:
        try:
            results.append(CHECKS[assertion.type](assertion, response))
        except Exception:
            logger.warning("Error evaluating assertion %s", assertion.id, exc_info=True)
            results.append(TestResult(
                assertion_id=assertion.id,
                name=assertion.type,
                passed=False,
                message="Error evaluating assertion",
            ))
    return results
