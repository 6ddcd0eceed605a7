"""Tests for the test runner lifecycle and result classification."""

import logging
from unittest.mock import Mock

import pytest

from unit_core import markers
from unit_core.assertions import assert_equals, fail
from unit_core.errors import ConfigurationError
from unit_core.expectation import ExpectedException
from unit_core.models.descriptor import TestClassKind
from unit_core.models.result import ResultKind, TestResult
from unit_core.runner import TestRunner, run_class
from unit_core.snapshot import Snapshotter


class CustomError(Exception):
    """Exception defined outside builtins."""


@pytest.fixture
def runner() -> TestRunner:
    """Create runner with the default snapshotter."""
    return TestRunner()


@markers.test_class
class DivisionSuite:
    expected = markers.exception_rule()

    @markers.test
    def adds(self) -> None:
        assert_equals(2, 1 + 1)

    @markers.test
    def divides_by_zero(self) -> None:
        self.expected.expect(ArithmeticError).expect_message("by zero")
        _ = 1 / 0


def test_success_and_matched_expectation(runner: TestRunner) -> None:
    """Plain success and matched expected exception both succeed."""
    summary = runner.run(DivisionSuite)

    assert summary.num_successes == 2
    assert summary.num_failures == 0
    assert summary["adds"] == TestResult(kind=ResultKind.SUCCESS)
    assert summary["divides_by_zero"] == TestResult(kind=ResultKind.SUCCESS)


@markers.test_class
class ExpectationSuite:
    expected = markers.exception_rule()

    @markers.before("unrelated", "never_raised", "wrong_message", "custom")
    def reset(self) -> None:
        self.expected = ExpectedException.none()

    @markers.test
    def unrelated(self) -> None:
        self.expected.expect(LookupError)
        raise RuntimeError("boom")

    @markers.test
    def never_raised(self) -> None:
        self.expected.expect(ValueError)

    @markers.test
    def wrong_message(self) -> None:
        self.expected.expect(ValueError).expect_message("expected text")
        raise ValueError("other text")

    @markers.test
    def custom(self) -> None:
        self.expected.expect(CustomError)
        raise KeyError("k")


def test_expectation_outcomes(runner: TestRunner) -> None:
    """Mismatched or missing exceptions are reported."""
    summary = runner.run(ExpectationSuite)

    assert summary["unrelated"] == TestResult(
        kind=ResultKind.EXPECTED_EXCEPTION_MISMATCH,
        message="Expected exception: LookupError, but got exception: RuntimeError",
    )
    assert summary["never_raised"] == TestResult(
        kind=ResultKind.ERROR, message="ValueError"
    )
    assert summary["wrong_message"].kind is ResultKind.EXPECTED_EXCEPTION_MISMATCH
    assert summary["custom"] == TestResult(
        kind=ResultKind.EXPECTED_EXCEPTION_MISMATCH,
        message=(
            f"Expected exception: {__name__}.CustomError, "
            "but got exception: KeyError"
        ),
    )
    assert summary.num_exception_mismatches == 3
    assert summary.num_errors == 1


@markers.test_class
class FailureSuite:
    expected = markers.exception_rule()

    @markers.test
    def not_equal(self) -> None:
        assert_equals(1, 2)

    @markers.test
    def fails(self) -> None:
        fail()

    @markers.test
    def plain_assert(self) -> None:
        raise AssertionError("numbers differ")

    @markers.test
    def raises(self) -> None:
        raise CustomError("oops")


def test_failures_and_errors(runner: TestRunner) -> None:
    """Assertion failures are failures, other exceptions are errors."""
    summary = runner.run(FailureSuite)

    assert summary["not_equal"] == TestResult(
        kind=ResultKind.FAILURE, message="expected: <1> but was: <2>"
    )
    assert summary["fails"] == TestResult(kind=ResultKind.FAILURE)
    assert summary["plain_assert"] == TestResult(
        kind=ResultKind.FAILURE, message="numbers differ"
    )
    assert summary["raises"] == TestResult(
        kind=ResultKind.ERROR, message=f"{__name__}.CustomError"
    )


@markers.test_class
class HookSuite:
    """Records the lifecycle of each test in ``calls``."""

    def __init__(self) -> None:
        self.calls: list[str] = []
        self.data: list[int] = [1]
        self.label = "clean"

    @markers.before("t1")
    def dirty_then_fail(self) -> None:
        self.calls.append("before t1")
        self.data.append(99)
        self.label = "dirty"
        self.added = True
        raise CustomError("before failed")

    @markers.test
    def t1(self) -> None:
        self.calls.append("t1")

    @markers.after("t1", "t2", "t3")
    def record_after(self) -> None:
        self.calls.append("after")

    @markers.test
    def t2(self) -> None:
        self.calls.append("t2")

    @markers.after("t2")
    def fail_after(self) -> None:
        raise RuntimeError("after failed")

    @markers.test
    def t3(self) -> None:
        self.calls.append("t3")
        fail("body failed")

    @markers.after("t3")
    def fail_after_failure(self) -> None:
        raise KeyError("after failed")


def test_before_failure_is_an_error(runner: TestRunner) -> None:
    """A failing before hook turns the test into an error."""
    summary = runner.run(HookSuite)

    assert summary["t1"] == TestResult(
        kind=ResultKind.ERROR, message=f"{__name__}.CustomError"
    )


def test_before_failure_state_is_rolled_back() -> None:
    """Instance attributes equal their values before the hook ran."""
    instances: list[HookSuite] = []

    class Recording(Snapshotter):
        def snapshot(self, instance: HookSuite) -> HookSuite:
            instances.append(instance)
            return super().snapshot(instance)

    TestRunner(snapshotter=Recording()).run(HookSuite)

    instance = instances[0]
    assert instance.data == [1]
    assert instance.label == "clean"
    assert not hasattr(instance, "added")
    assert instance.calls == ["after", "t2", "after", "t3", "after"]


def test_after_failure_overrides_result(runner: TestRunner) -> None:
    """After hook failures win over success and failure."""
    summary = runner.run(HookSuite)

    assert summary["t2"] == TestResult(kind=ResultKind.ERROR, message="RuntimeError")
    assert summary["t3"] == TestResult(kind=ResultKind.ERROR, message="KeyError")
    assert summary.num_errors == 3


@markers.test_class
class SetupSuite:
    def __init__(self) -> None:
        self.ready: list[str] = []

    @markers.setup
    def broken(self) -> None:
        raise RuntimeError("setup failed")

    @markers.setup
    def works(self) -> None:
        self.ready.append("works")

    @markers.test
    def checks_setup(self) -> None:
        assert_equals(["works"], self.ready)


def test_setup_failure_is_swallowed(
    runner: TestRunner, caplog: pytest.LogCaptureFixture
) -> None:
    """A failing setup hook neither aborts the run nor shows in results."""
    with caplog.at_level(logging.WARNING):
        summary = runner.run(SetupSuite)

    assert list(summary) == ["checks_setup"]
    assert summary.num_successes == 1
    assert "Setup hook SetupSuite.broken failed" in caplog.text


class BaseSuite:
    def __init__(self) -> None:
        self.log: list[str] = []

    @markers.setup
    def base_setup(self) -> None:
        self.log.append("base setup")

    @markers.before("child_test")
    def base_before(self) -> None:
        self.log.append("base before")

    @markers.after("child_test")
    def base_after(self) -> None:
        self.log.append("base after")
        assert_equals(
            ["base setup", "child setup", "base before", "child before", "body"],
            self.log[:5],
        )


@markers.test_class
class ChildSuite(BaseSuite):
    @markers.setup
    def child_setup(self) -> None:
        self.log.append("child setup")

    @markers.before("child_test")
    def child_before(self) -> None:
        self.log.append("child before")

    @markers.test
    def child_test(self) -> None:
        self.log.append("body")

    @markers.after("child_test")
    def child_after(self) -> None:
        self.log.append("child after")
        assert_equals("child after", self.log[5])


def test_hooks_run_across_ancestors(runner: TestRunner) -> None:
    """Inherited hooks run in ancestor order around the body."""
    summary = runner.run(ChildSuite)

    assert summary["child_test"] == TestResult(kind=ResultKind.SUCCESS)


@markers.test_class(TestClassKind.ORDERED)
class OrderedSuite:
    def __init__(self) -> None:
        self.seen: list[str] = []

    @markers.test(order=2, tag="b")
    def second(self) -> None:
        self.seen.append("second")
        assert_equals(["first", "second"], self.seen)

    @markers.test(order=1, tag="a")
    def first(self) -> None:
        self.seen.append("first")

    @markers.test(order=2, tag="b")
    def tied(self) -> None:
        self.seen.append("tied")


def test_ordered_execution(runner: TestRunner) -> None:
    """Ordered classes execute by ascending order, ties do not crash."""
    summary = runner.run(OrderedSuite)

    assert list(summary) == ["first", "second", "tied"]
    assert summary.num_successes == 3


def test_tag_filter_is_subset(runner: TestRunner) -> None:
    """A tagged run only contains tests carrying that tag."""
    everything = runner.run(OrderedSuite)
    tagged = runner.run(OrderedSuite, "b")

    assert list(tagged) == ["second", "tied"]
    assert set(tagged) <= set(everything)
    assert tagged["tied"] == everything["tied"]


def test_runs_are_repeatable(runner: TestRunner) -> None:
    """Two runs yield identical results in identical order."""
    first = runner.run(FailureSuite)
    second = runner.run(FailureSuite)

    assert list(first.items()) == list(second.items())


def test_rejects_unmarked_class(runner: TestRunner) -> None:
    """Classes without the marker are configuration errors."""

    class Plain:
        pass

    with pytest.raises(ConfigurationError):
        runner.run(Plain)

    with pytest.raises(ConfigurationError):
        runner.run(None)


def test_rejects_class_needing_arguments(runner: TestRunner) -> None:
    """Classes without a zero-argument constructor cannot run."""

    @markers.test_class
    class NeedsArgs:
        def __init__(self, value: int) -> None:
            self.value = value

    with pytest.raises(ConfigurationError, match="Cannot instantiate"):
        runner.run(NeedsArgs)


def test_snapshot_failure_is_an_error() -> None:
    """A value failing to clone turns the test into an error."""

    class Broken:
        def clone(self) -> "Broken":
            raise CustomError("cannot clone")

    @markers.test_class
    class CloneSuite:
        def __init__(self) -> None:
            self.value = Broken()

        @markers.test
        def body(self) -> None: ...

    summary = TestRunner().run(CloneSuite)

    assert summary["body"] == TestResult(
        kind=ResultKind.ERROR, message=f"{__name__}.CustomError"
    )


def test_uses_given_snapshotter() -> None:
    """The runner snapshots through its snapshotter before each test."""
    snapshotter = Mock(spec=Snapshotter)

    TestRunner(snapshotter=snapshotter).run(DivisionSuite)

    assert snapshotter.snapshot.call_count == 2
    snapshotter.restore.assert_not_called()


def test_run_class_uses_default_runner() -> None:
    """Module level helper runs with a default runner."""
    summary = run_class(DivisionSuite, "")

    assert summary.num_successes == 2


class UnprintableError(Exception):
    """Exception whose message cannot be rendered."""

    def __str__(self) -> str:
        raise RuntimeError("no message")


class UnprintableFailure(AssertionError):
    """Assertion failure whose message cannot be rendered."""

    def __str__(self) -> str:
        raise RuntimeError("no message")


class BrokenExpectation(ExpectedException):
    """Expectation whose matching itself raises."""

    def assert_expected(self, exc: BaseException | None) -> bool:
        raise RuntimeError("cannot judge")


@markers.test_class
class MisconfiguredSuite:
    expected = markers.exception_rule()

    @markers.before(
        "type_as_string",
        "message_as_int",
        "unprintable",
        "unprintable_failure",
        "broken",
        "still_runs",
    )
    def reset(self) -> None:
        self.expected = ExpectedException.none()

    @markers.test
    def type_as_string(self) -> None:
        self.expected.expect("ValueError")  # type: ignore[arg-type]
        raise ValueError("x")

    @markers.test
    def message_as_int(self) -> None:
        self.expected.expect(ValueError).expect_message(5)  # type: ignore[arg-type]
        raise ValueError("5")

    @markers.test
    def unprintable(self) -> None:
        self.expected.expect(UnprintableError).expect_message("x")
        raise UnprintableError()

    @markers.test
    def unprintable_failure(self) -> None:
        raise UnprintableFailure("hidden")

    @markers.test
    def broken(self) -> None:
        self.expected = BrokenExpectation().expect(ValueError)
        raise ValueError("x")

    @markers.test
    def still_runs(self) -> None:
        assert_equals(1, 1)


def test_misconfigured_expectations_stay_inside_the_run(runner: TestRunner) -> None:
    """Errors while judging an outcome become results for that test only."""
    summary = runner.run(MisconfiguredSuite)

    assert summary["type_as_string"] == TestResult(
        kind=ResultKind.ERROR, message="TypeError"
    )
    assert summary["message_as_int"] == TestResult(
        kind=ResultKind.EXPECTED_EXCEPTION_MISMATCH,
        message="Expected exception: ValueError, but got exception: TypeError",
    )
    assert summary["unprintable"] == TestResult(
        kind=ResultKind.EXPECTED_EXCEPTION_MISMATCH,
        message=(
            f"Expected exception: {__name__}.UnprintableError, "
            f"but got exception: {__name__}.UnprintableError"
        ),
    )
    assert summary["unprintable_failure"] == TestResult(
        kind=ResultKind.FAILURE, message=""
    )
    assert summary["broken"] == TestResult(kind=ResultKind.ERROR, message="RuntimeError")
    assert summary["still_runs"] == TestResult(kind=ResultKind.SUCCESS)
    assert len(summary) == 6
