"""Assertion helpers for use inside test bodies."""

from typing import Any, NoReturn

from unit_core.errors import AssertionFailure


def assert_equals(expected: Any, actual: Any) -> None:
    """Raise AssertionFailure unless both values are equal.

    ``None`` compares equal only to ``None``.
    """
    if expected is None or actual is None:
        if expected is not actual:
            raise AssertionFailure.not_equal(expected, actual)
        return
    if expected != actual:
        raise AssertionFailure.not_equal(expected, actual)


def fail(message: str | None = None) -> NoReturn:
    """Unconditionally fail the running test."""
    raise AssertionFailure(message)
