"""Test runner executing the lifecycle of a single test class."""

import logging
from dataclasses import dataclass, field
from typing import Any

from unit_core.classifier import describe, select_tests
from unit_core.errors import (
    ConfigurationError,
    ExceptionMismatchError,
    exception_message,
    type_name,
)
from unit_core.expectation import ExpectedException
from unit_core.models.descriptor import TestClassDescriptor, TestDescriptor
from unit_core.models.result import ResultKind, TestResult
from unit_core.models.summary import TestSummary
from unit_core.snapshot import Snapshotter

log = logging.getLogger(__name__)

SUCCESS = TestResult(kind=ResultKind.SUCCESS)


def _error(exc: BaseException) -> TestResult:
    return TestResult(kind=ResultKind.ERROR, message=type_name(type(exc)))


@dataclass(frozen=True, kw_only=True)
class TestRunner:
    """Runs the tests of a marked class and collects their results.

    For every selected test the instance state is snapshotted, the before
    hooks run (rolling the state back if one of them raises), then the test
    body and finally the after hooks. Failures inside that lifecycle are
    turned into results; only configuration errors escape :meth:`run`.
    """

    __test__ = False

    snapshotter: Snapshotter = field(default_factory=Snapshotter)

    def run(self, test_class: Any, tag: str = "") -> TestSummary:
        """Run the tests of ``test_class`` selected by ``tag``.

        Args:
            test_class: Class marked with ``test_class``
            tag: Only run tests with this tag (empty runs all tests)

        Returns:
            Summary with one result per test, in execution order

        Raises:
            ConfigurationError: If the class is not a test class or cannot
                be instantiated

        """
        descriptor = describe(test_class)
        instance = self._instantiate(descriptor)
        tests = select_tests(descriptor, tag)
        log.info(
            "Running %d test(s) of %s (tag=%r)",
            len(tests),
            test_class.__qualname__,
            tag,
        )

        self._run_setups(instance, descriptor)

        results: dict[str, TestResult] = {}
        for test in tests:
            result = self._run_test(instance, descriptor, test)
            log.info(
                "Test completed: class=%s test=%s status=%s",
                test_class.__qualname__,
                test.name,
                result.kind.value,
            )
            results[test.name] = result

        return TestSummary(results)

    def _instantiate(self, descriptor: TestClassDescriptor) -> Any:
        try:
            return descriptor.test_class()
        except Exception as exc:
            raise ConfigurationError(
                f"Cannot instantiate {descriptor.test_class.__qualname__}: {exc}"
            ) from exc

    def _run_setups(self, instance: Any, descriptor: TestClassDescriptor) -> None:
        """Invoke setup hooks; a failing hook does not stop the run."""
        for hook in descriptor.setups:
            try:
                getattr(instance, hook.name)()
            except Exception:
                log.warning(
                    "Setup hook %s.%s failed, continuing",
                    hook.owner.__qualname__,
                    hook.name,
                    exc_info=True,
                )

    def _run_test(
        self, instance: Any, descriptor: TestClassDescriptor, test: TestDescriptor
    ) -> TestResult:
        result = self._run_befores(instance, descriptor, test)
        if result is None:
            result = self._run_body(instance, descriptor, test)

        for hook in descriptor.afters_for(test.name):
            try:
                getattr(instance, hook.name)()
            except Exception as exc:
                log.debug("After hook %s failed for %s", hook.name, test.name)
                result = _error(exc)
        return result

    def _run_befores(
        self, instance: Any, descriptor: TestClassDescriptor, test: TestDescriptor
    ) -> TestResult | None:
        """Run before hooks, returning an error result if one of them fails."""
        try:
            backup = self.snapshotter.snapshot(instance)
        except ConfigurationError:
            raise
        except Exception as exc:
            log.debug("Snapshot failed before %s", test.name)
            return _error(exc)

        for hook in descriptor.befores_for(test.name):
            try:
                getattr(instance, hook.name)()
            except Exception as exc:
                log.debug("Before hook %s failed for %s", hook.name, test.name)
                self.snapshotter.restore(instance, backup)
                return _error(exc)
        return None

    def _run_body(
        self, instance: Any, descriptor: TestClassDescriptor, test: TestDescriptor
    ) -> TestResult:
        try:
            getattr(instance, test.name)()
        except Exception as exc:
            raised: Exception | None = exc
        else:
            raised = None

        try:
            return self._classify(raised, self._expectation(instance, descriptor))
        except Exception as exc:
            log.debug("Classifying the outcome of %s failed", test.name)
            return _error(exc)

    def _classify(
        self, exc: Exception | None, expectation: ExpectedException | None
    ) -> TestResult:
        if exc is None:
            if expectation is not None:
                return TestResult(
                    kind=ResultKind.ERROR,
                    message=type_name(expectation.expected_exception),
                )
            return SUCCESS
        if expectation is not None:
            if expectation.assert_expected(exc):
                return SUCCESS
            mismatch = ExceptionMismatchError(expectation.expected_exception, type(exc))
            return TestResult(
                kind=ResultKind.EXPECTED_EXCEPTION_MISMATCH, message=str(mismatch)
            )
        if isinstance(exc, AssertionError):
            return TestResult(
                kind=ResultKind.FAILURE,
                message=exception_message(exc) if exc.args else None,
            )
        return _error(exc)

    def _expectation(
        self, instance: Any, descriptor: TestClassDescriptor
    ) -> ExpectedException | None:
        """Return the instance's expectation when an exception type is set."""
        if descriptor.exception_rule is None:
            return None
        expectation = getattr(instance, descriptor.exception_rule, None)
        if (
            isinstance(expectation, ExpectedException)
            and expectation.expected_exception is not None
        ):
            return expectation
        return None


def run_class(test_class: Any, tag: str = "") -> TestSummary:
    """Run a test class with a default runner."""
    return TestRunner().run(test_class, tag)
