"""Declarative request descriptions.

A request description is an ordered, immutable list of named parameters.
Each endpoint builds one and hands it to the encoder, which turns it into
query or form parameters.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Union

# Parameters named with this marker exist in the description but are never sent.
SKIP = "-"

ParamValue = Union[str, int, float, "RequestDescription"]


@dataclass(frozen=True)
class Param:
    """A single named parameter.

    Attributes:
        name: Query key to emit. SKIP drops the field; an empty name is
            validated but never emitted.
        value: A str, int, float, or a nested RequestDescription.
        required: Whether an empty formatted value is an error.
    """

    name: str
    value: ParamValue
    required: bool = False

    @property
    def skipped(self) -> bool:
        return self.name == SKIP


@dataclass(frozen=True)
class RequestDescription:
    """Named, ordered collection of parameters for one request shape."""

    name: str
    params: tuple[Param, ...] = field(default_factory=tuple)

    def __post_init__(self) -> None:
        # Accept any iterable but always store a tuple
        object.__setattr__(self, "params", tuple(self.params))

    @classmethod
    def of(cls, name: str, *params: Param) -> RequestDescription:
        return cls(name=name, params=params)
