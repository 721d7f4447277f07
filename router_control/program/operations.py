"""Program IR -- the vocabulary between toolpath geometry and G-code.

An :class:`Operation` is one of exactly two immutable variants:

``Instruction``
    A single machine instruction: a mnemonic (``"g0"``, ``"m400"``) and
    ordered arguments.
``Program``
    An ordered group of operations, nested arbitrarily.  Grouping has no
    effect on output beyond flattening order.

Arguments
---------
Each instruction argument is one of:

* :class:`Token` -- a bare keyword rendered as its uppercase name
  (the ``Z`` in ``G28 Z``);
* ``str`` -- literal text passed through verbatim (operator prompts);
* a mapping of axis/parameter name to a number or
  :class:`~router_control.units.quantity.Quantity`
  (rendered ``X10 Y0 F300``).

Coordinates are whatever unit is ambient when the program is compiled;
quantities are converted at that point.
"""

from __future__ import annotations

from abc import ABC
from collections.abc import Iterator, Mapping
from dataclasses import dataclass, field
from typing import Union

from router_control.units.quantity import Measure

# ---------------------------------------------------------------------------
# Arguments
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class Token:
    """Bare keyword argument (axis letter, flag)."""

    name: str

    def __post_init__(self) -> None:
        if not self.name:
            raise ValueError("Token name must be non-empty")


Axes = Mapping[str, Measure]
"""Axis / parameter words, rendered in insertion order."""

Arg = Union[Token, str, Axes]


# ---------------------------------------------------------------------------
# Operations
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class Operation(ABC):
    """Base class for program operations."""

    pass


@dataclass(frozen=True, slots=True)
class Instruction(Operation):
    """One machine instruction.

    Parameters
    ----------
    mnemonic : str
        Instruction name, any case (``"g1"`` renders ``G1``).
    args : tuple[Arg, ...]
        Ordered arguments.
    """

    mnemonic: str
    args: tuple[Arg, ...] = ()

    def __post_init__(self) -> None:
        if not self.mnemonic:
            raise ValueError("Instruction mnemonic must be non-empty")


@dataclass(frozen=True, slots=True)
class Program(Operation):
    """Ordered, possibly nested, group of operations."""

    operations: tuple[Operation, ...] = field(default_factory=tuple)

    def __iter__(self) -> Iterator[Operation]:
        return iter(self.operations)

    def __len__(self) -> int:
        return len(self.operations)

    def flatten(self) -> Iterator[Operation]:
        """Yield leaf operations depth-first in emission order."""
        for op in self.operations:
            if isinstance(op, Program):
                yield from op.flatten()
            else:
                yield op


def program(*operations: Operation) -> Program:
    """Group *operations* into a :class:`Program`."""
    return Program(tuple(operations))


# ---------------------------------------------------------------------------
# Instruction constructors
# ---------------------------------------------------------------------------


def prompt(message: str) -> Instruction:
    """Pause and show *message* to the operator (``M0``)."""
    return Instruction("m0", (message,))


def probe(axis: str) -> Instruction:
    """Probe *axis* against the touch plate (``G28 <axis>``)."""
    return Instruction("g28", (Token(axis),))


def reset_coords(**coords: Measure) -> Instruction:
    """Set the current position to *coords* (``G92``)."""
    return Instruction("g92", (dict(coords),))


def rapid(**axes: Measure) -> Instruction:
    """Rapid (non-cutting) move (``G0``)."""
    return Instruction("g0", (dict(axes),))


def move(**axes: Measure) -> Instruction:
    """Linear cutting move (``G1``)."""
    return Instruction("g1", (dict(axes),))


def await_moves_complete() -> Instruction:
    """Block until queued motion has finished (``M400``)."""
    return Instruction("m400")
