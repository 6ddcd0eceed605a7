"""Discovery of setup, hook and test members on test classes."""

import logging
from collections.abc import Iterator, Sequence
from typing import Any

from unit_core.errors import ConfigurationError
from unit_core.expectation import ExceptionRule
from unit_core.markers import CLASS_MARKER, Role, get_role
from unit_core.models.descriptor import (
    HookDescriptor,
    TestClassDescriptor,
    TestClassKind,
    TestDescriptor,
)

log = logging.getLogger(__name__)

_registry: dict[type[Any], TestClassDescriptor] = {}


def describe(test_class: Any) -> TestClassDescriptor:
    """Return the classified members of a test class.

    Descriptors are built on first use and kept in a registry, so the
    class is only inspected once.

    Raises:
        ConfigurationError: If ``test_class`` is not a class marked with
            ``test_class``.

    """
    if test_class is None or not isinstance(test_class, type):
        raise ConfigurationError(f"Not a test class: {test_class!r}")

    if (descriptor := _registry.get(test_class)) is None:
        descriptor = _classify(test_class)
        _registry[test_class] = descriptor
    return descriptor


def clear_registry() -> None:
    """Forget every descriptor built so far."""
    _registry.clear()


def select_tests(
    descriptor: TestClassDescriptor, tag: str = ""
) -> Sequence[TestDescriptor]:
    """Return the tests to run for a tag, in execution order.

    An empty tag selects every test. Ordered classes run by ascending
    ``order``; ties keep discovery order.
    """
    tests = [test for test in descriptor.tests if not tag or test.tag == tag]
    if descriptor.kind is TestClassKind.ORDERED:
        tests.sort(key=lambda test: test.order)
    return tests


def _classify(test_class: type[Any]) -> TestClassDescriptor:
    kind = vars(test_class).get(CLASS_MARKER)
    if not isinstance(kind, TestClassKind):
        raise ConfigurationError(
            f"{test_class.__qualname__} is not marked as a test class"
        )

    setups: list[HookDescriptor] = []
    befores: list[HookDescriptor] = []
    tests: list[TestDescriptor] = []
    for owner, name, role in _roles(test_class, reversed(test_class.__mro__)):
        match role.kind:
            case "setup":
                setups.append(HookDescriptor(name=name, owner=owner))
            case "before":
                befores.append(HookDescriptor(name=name, owner=owner, tests=role.tests))
            case "test":
                tests.append(
                    TestDescriptor(name=name, owner=owner, tag=role.tag, order=role.order)
                )

    afters = [
        HookDescriptor(name=name, owner=owner, tests=role.tests)
        for owner, name, role in _roles(test_class, iter(test_class.__mro__))
        if role.kind == "after"
    ]

    descriptor = TestClassDescriptor(
        test_class=test_class,
        kind=kind,
        setups=tuple(setups),
        befores=tuple(befores),
        afters=tuple(afters),
        tests=tuple(tests),
        exception_rule=_find_exception_rule(test_class),
    )
    log.debug(
        "Classified %s: %d test(s), %d setup, %d before, %d after",
        test_class.__qualname__,
        len(tests),
        len(setups),
        len(befores),
        len(afters),
    )
    return descriptor


def _roles(
    test_class: type[Any], classes: Iterator[type[Any]]
) -> Iterator[tuple[type[Any], str, Role]]:
    """Yield tagged members in class order, skipping overridden ones.

    A name is reported once, at the most-derived class that defines it, and
    only when that definition carries a role.
    """
    for owner in classes:
        for name in vars(owner):
            if _defining_class(test_class, name) is not owner:
                continue
            if (role := get_role(getattr(test_class, name, None))) is not None:
                yield owner, name, role


def _defining_class(test_class: type[Any], name: str) -> type[Any] | None:
    return next((cls for cls in test_class.__mro__ if name in vars(cls)), None)


def _find_exception_rule(test_class: type[Any]) -> str | None:
    for cls in test_class.__mro__:
        for name, value in vars(cls).items():
            if isinstance(value, ExceptionRule) and _defining_class(
                test_class, name
            ) is cls:
                return name
    return None
