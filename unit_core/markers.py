"""Decorators that tag test classes and their members with roles."""

from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Any, Literal, TypeAlias, TypeVar, overload

from unit_core.expectation import exception_rule
from unit_core.models.descriptor import TestClassKind

CLASS_MARKER = "__unit_core_test_class__"
ROLE_MARKER = "__unit_core_role__"

RoleKind: TypeAlias = Literal["setup", "before", "after", "test"]

F = TypeVar("F", bound=Callable[..., Any])
C = TypeVar("C", bound=type)


@dataclass(frozen=True, kw_only=True)
class Role:
    """Role attached to a method by one of the member decorators."""

    kind: RoleKind
    tests: frozenset[str] = field(default_factory=frozenset)
    tag: str = ""
    order: int = 0


def get_role(member: Any) -> Role | None:
    """Return the role a member was tagged with, if any."""
    role = getattr(member, ROLE_MARKER, None)
    return role if isinstance(role, Role) else None


def _tag(func: F, role: Role) -> F:
    if get_role(func) is not None:
        raise TypeError(f"{func.__qualname__} already has a test role")
    setattr(func, ROLE_MARKER, role)
    return func


@overload
def test_class(kind: C, /) -> C: ...


@overload
def test_class(
    kind: TestClassKind = TestClassKind.UNORDERED, /
) -> Callable[[C], C]: ...


def test_class(kind: Any = TestClassKind.UNORDERED, /) -> Any:
    """Mark a class as runnable by the engine.

    Usable bare (unordered) or with a :class:`TestClassKind`. The marker is
    not inherited: every runnable subclass needs its own.
    """
    if isinstance(kind, type):
        setattr(kind, CLASS_MARKER, TestClassKind.UNORDERED)
        return kind

    def decorate(cls: C) -> C:
        setattr(cls, CLASS_MARKER, TestClassKind(kind))
        return cls

    return decorate


test_class.__test__ = False  # type: ignore[attr-defined]


def setup(func: F) -> F:
    """Run once per class run, before any test."""
    return _tag(func, Role(kind="setup"))


def before(*tests: str) -> Callable[[Callable[..., Any]], Callable[..., Any]]:
    """Run before each of the named tests."""
    return lambda func: _tag(func, Role(kind="before", tests=frozenset(tests)))


def after(*tests: str) -> Callable[[Callable[..., Any]], Callable[..., Any]]:
    """Run after each of the named tests, whatever their outcome."""
    return lambda func: _tag(func, Role(kind="after", tests=frozenset(tests)))


@overload
def test(func: F, /) -> F: ...


@overload
def test(
    *, tag: str = "", order: int = 0
) -> Callable[[F], F]: ...


def test(func: Any = None, /, *, tag: str = "", order: int = 0) -> Any:
    """Mark a method as a test, optionally with a tag and an order."""
    if func is not None:
        if not callable(func):
            raise TypeError(
                f"@test expects a function, got {func!r}; "
                "pass the tag as @test(tag=...)"
            )
        return _tag(func, Role(kind="test"))
    return lambda f: _tag(f, Role(kind="test", tag=tag, order=order))


test.__test__ = False  # type: ignore[attr-defined]

__all__ = [
    "Role",
    "TestClassKind",
    "after",
    "before",
    "exception_rule",
    "get_role",
    "setup",
    "test",
    "test_class",
]
