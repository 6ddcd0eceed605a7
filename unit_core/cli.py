"""CLI entry point for running test classes."""

import argparse
import json
import logging
import sys
from collections.abc import Sequence
from dataclasses import dataclass
from typing import Any

from pydantic import ValidationError

from unit_core.errors import ConfigurationError
from unit_core.loading import load_test_class
from unit_core.models.config import RunConfig
from unit_core.models.result import ResultKind
from unit_core.models.summary import TestSummary
from unit_core.runner import TestRunner

STATUS_SYMBOLS = {
    ResultKind.SUCCESS: "✓",
    ResultKind.FAILURE: "✗",
    ResultKind.EXPECTED_EXCEPTION_MISMATCH: "≠",
    ResultKind.ERROR: "!",
}


@dataclass(frozen=True, kw_only=True)
class ClassResult:
    """Summary of one test class, keyed by the reference it was loaded from."""

    target: str
    summary: TestSummary


def log_results_summary(
    log: logging.Logger, class_results: Sequence[ClassResult]
) -> None:
    """Log a formatted summary of test results."""
    log.info("=" * 80)
    log.info("Test Results Summary:")
    log.info("=" * 80)

    for class_result in class_results:
        for test_name, result in class_result.summary.items():
            symbol = STATUS_SYMBOLS.get(result.kind, "?")
            log.info(
                "%s %s.%s: %s",
                symbol,
                class_result.target,
                test_name,
                result.kind.value,
            )
            if result.message:
                log.info("  Message: %s", result.message)


def format_output(class_results: Sequence[ClassResult]) -> dict[str, Any]:
    """Format class results for JSON output."""
    all_results: list[dict[str, Any]] = [
        {
            "class": class_result.target,
            "test": test_name,
            "status": result.kind.value,
            "message": result.message,
        }
        for class_result in class_results
        for test_name, result in class_result.summary.items()
    ]

    def total(kind: ResultKind) -> int:
        return sum(r.summary.count(kind) for r in class_results)

    return {
        "total": len(all_results),
        "passed": total(ResultKind.SUCCESS),
        "failed": total(ResultKind.FAILURE),
        "mismatches": total(ResultKind.EXPECTED_EXCEPTION_MISMATCH),
        "errors": total(ResultKind.ERROR),
        "results": all_results,
    }


def run(config: RunConfig) -> int:
    """Run the configured test classes and return exit code."""
    log = logging.getLogger("unit_core")
    runner = TestRunner()

    class_results: list[ClassResult] = []
    for target in config.targets:
        log.info("Loading test class: %s", target)
        try:
            test_class = load_test_class(target)
            summary = runner.run(test_class, config.tag)
        except ConfigurationError as exc:
            log.error("Cannot run %s: %s", target, exc)
            if class_results:
                log_results_summary(log, class_results)
            return 2
        class_results.append(ClassResult(target=target, summary=summary))

    log_results_summary(log, class_results)

    output = format_output(class_results)
    print(json.dumps(output, indent=2))

    all_passed = output["passed"] == output["total"]
    return 0 if all_passed else 1


def parse_config(argv: Sequence[str] | None = None) -> RunConfig:
    """Parse command line arguments into a run configuration."""
    parser = argparse.ArgumentParser(description="Run unit-core test classes")
    parser.add_argument(
        "targets",
        nargs="+",
        metavar="TARGET",
        help="Test class to run, as 'package.module:ClassName'",
    )
    parser.add_argument(
        "--tag",
        default="",
        help="Only run tests carrying this tag (default: all tests)",
    )

    args = parser.parse_args(argv)
    return RunConfig(targets=args.targets, tag=args.tag)


def main() -> None:
    """CLI entry point."""
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        stream=sys.stderr,
    )

    try:
        config = parse_config()
    except ValidationError as exc:
        logging.getLogger("unit_core").error("Invalid arguments: %s", exc)
        sys.exit(2)

    sys.exit(run(config))


if __name__ == "__main__":  # pragma: no cover
    main()
