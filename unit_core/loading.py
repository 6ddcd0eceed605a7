"""Loading of test classes from 'module:Class' references."""

import importlib
from typing import Any

from unit_core.errors import TestClassNotFoundError


def load_test_class(ref: str) -> type[Any]:
    """Import the class named by a reference.

    Args:
        ref: Reference in 'package.module:ClassName' form; nested classes
             are reached with dots ('module:Outer.Inner')

    Returns:
        The referenced class

    Raises:
        TestClassNotFoundError: If the module or class cannot be found

    """
    module_name, _, qualname = ref.partition(":")
    if not module_name or not qualname:
        raise TestClassNotFoundError(
            f"Invalid test class reference '{ref}', expected 'module:Class'"
        )

    try:
        target: Any = importlib.import_module(module_name)
    except ImportError as exc:
        raise TestClassNotFoundError(
            f"Cannot import module '{module_name}': {exc}"
        ) from exc

    for part in qualname.split("."):
        try:
            target = getattr(target, part)
        except AttributeError as exc:
            raise TestClassNotFoundError(
                f"'{qualname}' not found in module '{module_name}'"
            ) from exc

    if not isinstance(target, type):
        raise TestClassNotFoundError(f"'{ref}' does not refer to a class")
    return target
