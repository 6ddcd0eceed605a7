"""Aggregated results of a test class run."""

from collections.abc import Iterator, Mapping
from dataclasses import dataclass
from types import MappingProxyType

from unit_core.models.result import ResultKind, TestResult


@dataclass(frozen=True)
class TestSummary:
    """Ordered mapping of test name to result, in execution order.

    The mapping is wrapped in a read-only proxy on creation; callers may
    inspect it but never mutate it.
    """

    __test__ = False

    results: Mapping[str, TestResult]

    def __post_init__(self) -> None:
        """Freeze the result mapping."""
        object.__setattr__(self, "results", MappingProxyType(dict(self.results)))

    def count(self, kind: ResultKind) -> int:
        """Return the number of results of the given kind."""
        return sum(1 for result in self.results.values() if result.kind is kind)

    @property
    def num_successes(self) -> int:
        return self.count(ResultKind.SUCCESS)

    @property
    def num_failures(self) -> int:
        return self.count(ResultKind.FAILURE)

    @property
    def num_exception_mismatches(self) -> int:
        return self.count(ResultKind.EXPECTED_EXCEPTION_MISMATCH)

    @property
    def num_errors(self) -> int:
        return self.count(ResultKind.ERROR)

    def __len__(self) -> int:
        return len(self.results)

    def __getitem__(self, test_name: str) -> TestResult:
        return self.results[test_name]

    def __iter__(self) -> Iterator[str]:
        return iter(self.results)

    def items(self) -> Iterator[tuple[str, TestResult]]:
        """Iterate over (test name, result) pairs in execution order."""
        return iter(self.results.items())
