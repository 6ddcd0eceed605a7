"""Models for test execution results."""

from dataclasses import dataclass
from enum import Enum


class ResultKind(Enum):
    """Closed set of outcomes a single test can have."""

    SUCCESS = "success"
    FAILURE = "failure"
    EXPECTED_EXCEPTION_MISMATCH = "mismatch"
    ERROR = "error"


@dataclass(frozen=True, kw_only=True)
class TestResult:
    """Result of a single test execution.

    Equality is structural over kind and message, so two results with the
    same kind and no message compare equal.
    """

    __test__ = False

    kind: ResultKind
    message: str | None = None
