"""Configuration for a command line run."""

from collections.abc import Sequence
from typing import Annotated

from pydantic import Field, StringConstraints

from unit_core.models.base import Model

TargetRef = Annotated[
    str,
    StringConstraints(
        strip_whitespace=True,
        pattern=r"^[A-Za-z_][\w.]*:[A-Za-z_][\w.]*$",
    ),
]


class RunConfig(Model):
    """Test classes to run and the tag to select tests with."""

    targets: Sequence[TargetRef] = Field(
        ..., min_length=1, description="Test classes as 'package.module:ClassName'"
    )
    tag: str = Field(default="", description="Only run tests with this tag")
