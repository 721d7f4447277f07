"""Unit and positioning scopes that emit their own mode changes.

``with_unit_scope`` and ``with_positioning_scope`` wrap a body in the
instruction that switches the machine into a mode and the instruction
that switches it back, while the body itself is evaluated with the
matching ambient value::

    with_unit_scope(Unit.INCH, lambda: [rapid(x=inch(1))])
    # Program(G20, Program(G0 X1), G28)

Mode mnemonics:
    millimetre -> ``G28``, inch -> ``G20``,
    absolute -> ``G90``, relative -> ``G91``.

Millimetre mode is entered with ``G28``, not ``G21``.
"""

from __future__ import annotations

from collections.abc import Callable, Sequence
from typing import Union

from router_control.program.operations import Instruction, Operation, Program
from router_control.units.quantity import (
    Positioning,
    Unit,
    current_positioning,
    current_unit,
    positioning_scope,
    unit_scope,
)

UNIT_MNEMONICS: dict[Unit, str] = {
    Unit.MILLIMETER: "g28",
    Unit.INCH: "g20",
}

POSITIONING_MNEMONICS: dict[Positioning, str] = {
    Positioning.ABSOLUTE: "g90",
    Positioning.RELATIVE: "g91",
}

Body = Callable[[], Union[Operation, Sequence[Operation]]]


def units_mode(unit: Unit | str) -> Instruction:
    """Instruction switching the machine to *unit*."""
    return Instruction(UNIT_MNEMONICS[Unit(unit)])


def positioning_mode(mode: Positioning | str) -> Instruction:
    """Instruction switching the machine to positioning *mode*."""
    return Instruction(POSITIONING_MNEMONICS[Positioning(mode)])


def _as_operation(result: Operation | Sequence[Operation]) -> Operation:
    if isinstance(result, Operation):
        return result
    return Program(tuple(result))


def with_unit_scope(unit: Unit | str, body: Body) -> Program:
    """Evaluate *body* in *unit*, bracketed by unit-mode instructions.

    Returns
    -------
    Program
        ``(enter, body result, restore previous unit)``.
    """
    unit = Unit(unit)
    previous = current_unit()
    with unit_scope(unit):
        inner = _as_operation(body())
    return Program((units_mode(unit), inner, units_mode(previous)))


def with_positioning_scope(mode: Positioning | str, body: Body) -> Program:
    """Evaluate *body* in positioning *mode*, bracketed by mode changes."""
    mode = Positioning(mode)
    previous = current_positioning()
    with positioning_scope(mode):
        inner = _as_operation(body())
    return Program((positioning_mode(mode), inner, positioning_mode(previous)))
