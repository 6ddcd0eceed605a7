"""Snapshot and restore of test instance state.

Attribute values are copied with a three-tier policy:

1. values implementing :class:`Cloneable` are duplicated with ``clone()``;
2. values of a copy-constructible type are rebuilt with ``type(value)(value)``;
3. everything else is stored as is, so mutable values reachable from an
   aliased attribute are shared between the instance and its snapshot.
"""

import inspect
import logging
from collections import Counter, OrderedDict, deque
from dataclasses import dataclass
from functools import cache
from typing import Any, Protocol, Self, get_type_hints, runtime_checkable

from unit_core.errors import ConfigurationError

log = logging.getLogger(__name__)

BUILTIN_COPY_CONSTRUCTIBLE: frozenset[type[Any]] = frozenset(
    {list, dict, set, bytearray, deque, OrderedDict, Counter}
)


@runtime_checkable
class Cloneable(Protocol):
    """Value that knows how to duplicate itself."""

    def clone(self) -> Self:
        """Return an independent copy of this value."""
        ...


@cache
def is_copy_constructible(cls: type[Any]) -> bool:
    """Check whether ``cls(value)`` builds a copy of a ``cls`` instance.

    Builtin containers qualify, as do classes whose ``__init__`` takes a
    single required positional argument annotated with the class itself.
    """
    if cls in BUILTIN_COPY_CONSTRUCTIBLE:
        return True

    init = getattr(cls, "__init__", None)
    if init is None or init is object.__init__ or not inspect.isfunction(init):
        return False

    params = list(inspect.signature(init).parameters.values())[1:]
    required = [
        p
        for p in params
        if p.default is inspect.Parameter.empty
        and p.kind in (p.POSITIONAL_ONLY, p.POSITIONAL_OR_KEYWORD)
    ]
    if len(required) != 1 or any(
        p.default is inspect.Parameter.empty and p.kind is p.KEYWORD_ONLY
        for p in params
    ):
        return False

    param = required[0]
    try:
        annotation = get_type_hints(init).get(param.name, param.annotation)
    except (NameError, TypeError):
        annotation = param.annotation
    return annotation is cls or annotation is Self or annotation in {
        cls.__name__,
        cls.__qualname__,
        "Self",
    }


def copy_value(value: Any) -> Any:
    """Copy a single attribute value according to the copy policy."""
    if value is None:
        return None
    if isinstance(value, Cloneable):
        return value.clone()
    if is_copy_constructible(type(value)):
        return type(value)(value)
    return value


def instance_fields(instance: Any) -> dict[str, Any]:
    """Return every attribute stored on an instance.

    Covers the instance dict and the slots declared anywhere in the MRO.
    """
    fields: dict[str, Any] = {}
    for cls in reversed(type(instance).__mro__):
        for name in _slot_names(cls):
            try:
                fields[name] = object.__getattribute__(instance, name)
            except AttributeError:
                continue
    if hasattr(instance, "__dict__"):
        fields.update(vars(instance))
    return fields


def _slot_names(cls: type[Any]) -> list[str]:
    slots = vars(cls).get("__slots__", ())
    if isinstance(slots, str):
        slots = (slots,)
    names = []
    for slot in slots:
        if slot in ("__dict__", "__weakref__"):
            continue
        if slot.startswith("__") and not slot.endswith("__"):
            slot = f"_{cls.__name__.lstrip('_')}{slot}"
        names.append(slot)
    return names


def _assign(target: Any, fields: dict[str, Any]) -> None:
    """Make ``fields`` the exact attribute state of ``target``.

    Writes bypass ``__setattr__`` so frozen or guarded classes can still be
    rolled back.
    """
    slot_names = {
        name for cls in type(target).__mro__ for name in _slot_names(cls)
    }
    for name in instance_fields(target).keys() - fields.keys():
        if name in slot_names:
            object.__delattr__(target, name)
        else:
            del vars(target)[name]

    for name, value in fields.items():
        if name in slot_names:
            object.__setattr__(target, name, value)
        else:
            vars(target)[name] = value


@dataclass(frozen=True)
class Snapshotter:
    """Captures and rolls back the attribute state of test instances."""

    def snapshot(self, instance: Any) -> Any:
        """Return a new instance holding copies of ``instance``'s attributes.

        Raises:
            ConfigurationError: If the class cannot be built without
                arguments.

        """
        cls = type(instance)
        try:
            backup = cls()
        except Exception as exc:
            raise ConfigurationError(
                f"{cls.__qualname__} cannot be built without arguments"
            ) from exc

        _assign(
            backup,
            {name: copy_value(value) for name, value in instance_fields(instance).items()},
        )
        log.debug("Snapshot taken of %s", cls.__qualname__)
        return backup

    def restore(self, instance: Any, backup: Any) -> None:
        """Overwrite ``instance``'s attributes with those of ``backup``."""
        _assign(instance, instance_fields(backup))
        log.debug("State of %s restored from snapshot", type(instance).__qualname__)
