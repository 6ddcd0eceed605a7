"""Exceptions raised by the test engine."""

from typing import Any


def type_name(cls: type[Any]) -> str:
    """Return the qualified name used to identify a type in results."""
    if cls.__module__ == "builtins":
        return cls.__qualname__
    return f"{cls.__module__}.{cls.__qualname__}"


def exception_message(exc: BaseException) -> str:
    """Return the message of an exception, or "" if it cannot be rendered."""
    try:
        return str(exc)
    except Exception:
        return ""


class UnitCoreError(Exception):
    """Base class for engine errors."""


class ConfigurationError(UnitCoreError):
    """Raised when a test class cannot be run as given."""


class TestClassNotFoundError(ConfigurationError):
    """Raised when a 'module:Class' reference cannot be resolved."""

    __test__ = False


class AssertionFailure(UnitCoreError, AssertionError):
    """Raised by assertions inside a test body.

    Tests failing through this exception, or through a plain ``assert``
    statement, are reported as failures rather than errors.
    """

    def __init__(self, message: str | None = None) -> None:
        self.message = message
        super().__init__(*(() if message is None else (message,)))

    @classmethod
    def not_equal(cls, expected: Any, actual: Any) -> "AssertionFailure":
        """Build the failure raised when two values differ."""
        return cls(f"expected: <{expected!r}> but was: <{actual!r}>")


class ExceptionMismatchError(UnitCoreError):
    """Describes an exception that did not match the expected one."""

    def __init__(
        self, expected: type[BaseException], actual: type[BaseException]
    ) -> None:
        self.expected = expected
        self.actual = actual
        super().__init__(
            f"Expected exception: {type_name(expected)}, "
            f"but got exception: {type_name(actual)}"
        )
