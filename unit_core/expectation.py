"""Expected exception matcher owned by a test instance."""

from typing import Any, Self

from unit_core.errors import exception_message


class ExpectedException:
    """Declares the exception a test body is expected to raise.

    A test configures the expectation with :meth:`expect` and
    :meth:`expect_message`; the runner later judges the raised exception
    with :meth:`assert_expected`.
    """

    def __init__(self) -> None:
        self._expected: type[Exception] | None = None
        self._messages: list[str | None] = []

    @classmethod
    def none(cls) -> Self:
        """Create an expectation that expects nothing."""
        return cls()

    @property
    def expected_exception(self) -> type[Exception] | None:
        """The recorded exception type, if any."""
        return self._expected

    @property
    def messages(self) -> tuple[str | None, ...]:
        """Substrings the exception message must contain."""
        return tuple(self._messages)

    def expect(self, expected: type[Exception]) -> Self:
        """Record the expected exception type, replacing any previous one.

        Raises:
            TypeError: If ``expected`` is not an exception class

        """
        if not (isinstance(expected, type) and issubclass(expected, Exception)):
            raise TypeError(f"Expected an exception class, got {expected!r}")
        self._expected = expected
        return self

    def expect_message(self, message: str | None) -> Self:
        """Require the exception message to contain ``message``.

        ``None`` is recorded but never matches.
        """
        if message is not None and not isinstance(message, str):
            raise TypeError(f"Expected a message string, got {message!r}")
        self._messages.append(message)
        return self

    def assert_expected(self, exc: BaseException | None) -> bool:
        """Check a raised exception against the expectation.

        Returns True only when a type was recorded, ``exc`` is an instance of
        it and every recorded substring occurs in its message. An exception
        raised without arguments, or whose message cannot be rendered, has an
        empty message.
        """
        if self._expected is None or not isinstance(exc, self._expected):
            return False

        text = exception_message(exc)
        return all(
            message is not None and message in text for message in self._messages
        )

    def __repr__(self) -> str:
        expected = self._expected.__name__ if self._expected else None
        return f"ExpectedException(expected={expected}, messages={self._messages!r})"


class ExceptionRule:
    """Class attribute holding each test instance's ExpectedException.

    The first access on an instance stores a fresh expectation in the
    instance dict, so the value takes part in snapshots like any other
    attribute and may be reassigned by hooks.
    """

    def __init__(self) -> None:
        self.name: str | None = None

    def __set_name__(self, owner: type[Any], name: str) -> None:
        self.name = name

    def __get__(self, instance: Any, owner: type[Any] | None = None) -> Any:
        if instance is None:
            return self
        if self.name is None:
            raise TypeError("ExceptionRule must be assigned as a class attribute")
        expectation = ExpectedException.none()
        instance.__dict__[self.name] = expectation
        return expectation


def exception_rule() -> Any:
    """Declare the attribute a test class keeps its expected exception in."""
    return ExceptionRule()
