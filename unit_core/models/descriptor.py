"""Models describing the classified members of a test class."""

from collections.abc import Sequence
from enum import Enum
from typing import Any

from pydantic import Field

from unit_core.models.base import Model


class TestClassKind(Enum):
    """Whether the tests of a class run in declared order."""

    __test__ = False

    ORDERED = "ordered"
    UNORDERED = "unordered"


class HookDescriptor(Model):
    """A setup, before or after member of a test class."""

    name: str = Field(..., description="Attribute name of the hook method")
    owner: type[Any] = Field(..., description="Class that declares the hook")
    tests: frozenset[str] = Field(
        default_factory=frozenset,
        description="Test names the hook applies to (empty for setup hooks)",
    )

    def applies_to(self, test_name: str) -> bool:
        """Check whether the hook is bound to the given test."""
        return test_name in self.tests


class TestDescriptor(Model):
    """A single test member of a test class."""

    __test__ = False

    name: str = Field(..., description="Attribute name, unique within a run")
    owner: type[Any] = Field(..., description="Class that declares the test")
    tag: str = Field(default="", description="Selection tag (empty is untagged)")
    order: int = Field(default=0, description="Position within an ordered class")


class TestClassDescriptor(Model):
    """Complete classification of a test class and its ancestors."""

    __test__ = False

    test_class: type[Any] = Field(..., description="The described class")
    kind: TestClassKind = Field(..., description="Ordered or unordered execution")
    setups: Sequence[HookDescriptor] = Field(default_factory=tuple)
    befores: Sequence[HookDescriptor] = Field(default_factory=tuple)
    afters: Sequence[HookDescriptor] = Field(default_factory=tuple)
    tests: Sequence[TestDescriptor] = Field(default_factory=tuple)
    exception_rule: str | None = Field(
        default=None, description="Attribute holding the expected exception"
    )

    def befores_for(self, test_name: str) -> Sequence[HookDescriptor]:
        """Return the before hooks bound to a test, root ancestor first."""
        return [hook for hook in self.befores if hook.applies_to(test_name)]

    def afters_for(self, test_name: str) -> Sequence[HookDescriptor]:
        """Return the after hooks bound to a test, most-derived class first."""
        return [hook for hook in self.afters if hook.applies_to(test_name)]
