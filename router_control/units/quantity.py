"""Measured quantities and the ambient unit / positioning context.

A :class:`Quantity` pairs an amount with an explicit :class:`Unit`.
Geometry is described with quantities and converted to plain numbers in
the *ambient* unit at the point of use.

Ambient context
---------------
The current unit and positioning mode live in ``contextvars`` and are
only ever changed through :func:`unit_scope` / :func:`positioning_scope`.
Leaving a scope resets the variable through its token, so the previous
value comes back on every exit path, exceptions included::

    with unit_scope(Unit.INCH):
        convert(mm(25.4))      # -> 1.0
    convert(mm(25.4))          # -> 25.4
"""

from __future__ import annotations

import contextvars
import logging
import numbers
from collections.abc import Callable, Iterator, Mapping
from contextlib import contextmanager
from dataclasses import dataclass
from enum import Enum
from typing import TypeVar, Union

logger = logging.getLogger(__name__)

MM_PER_INCH = 25.4

T = TypeVar("T")


# ---------------------------------------------------------------------------
# Units and modes
# ---------------------------------------------------------------------------


class Unit(str, Enum):
    """Length units understood by the converter."""

    MILLIMETER = "mm"
    INCH = "in"


class Positioning(str, Enum):
    """Motion coordinate interpretation."""

    ABSOLUTE = "absolute"
    RELATIVE = "relative"


# ---------------------------------------------------------------------------
# Exceptions
# ---------------------------------------------------------------------------


class UnrecognizedConversion(ValueError):
    """Raised when no conversion exists between two units.

    Attributes
    ----------
    unit : object
        Unit carried by the source quantity.
    amount : float
        Amount carried by the source quantity.
    target : object
        Requested target unit.
    """

    def __init__(self, unit: object, amount: float, target: object) -> None:
        self.unit = unit
        self.amount = amount
        self.target = target
        super().__init__(
            f"Unrecognized conversion: {amount!r} {unit!r} -> {target!r}"
        )


# ---------------------------------------------------------------------------
# Quantity
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class Quantity:
    """An amount with an explicit unit.

    The unit is not validated here; :func:`convert` rejects units it
    does not know.
    """

    unit: Unit
    amount: float

    def __str__(self) -> str:
        unit = self.unit.value if isinstance(self.unit, Unit) else self.unit
        return f"{self.amount} {unit}"


Measure = Union[Quantity, int, float]
"""A quantity, or a bare number already in the ambient unit."""


def mm(amount: float) -> Quantity:
    """Quantity in millimetres."""
    return Quantity(Unit.MILLIMETER, amount)


def inch(amount: float) -> Quantity:
    """Quantity in inches."""
    return Quantity(Unit.INCH, amount)


# ---------------------------------------------------------------------------
# Ambient context
# ---------------------------------------------------------------------------

_current_unit: contextvars.ContextVar[Unit] = contextvars.ContextVar(
    "current_unit", default=Unit.MILLIMETER
)
_current_positioning: contextvars.ContextVar[Positioning] = (
    contextvars.ContextVar("current_positioning", default=Positioning.ABSOLUTE)
)


def current_unit() -> Unit:
    """Return the ambient unit (millimetres unless a scope says otherwise)."""
    return _current_unit.get()


def current_positioning() -> Positioning:
    """Return the ambient positioning mode."""
    return _current_positioning.get()


@contextmanager
def unit_scope(unit: Unit | str) -> Iterator[Unit]:
    """Set the ambient unit for the duration of a ``with`` block."""
    unit = Unit(unit)
    token = _current_unit.set(unit)
    try:
        yield unit
    finally:
        _current_unit.reset(token)


@contextmanager
def positioning_scope(mode: Positioning | str) -> Iterator[Positioning]:
    """Set the ambient positioning mode for the duration of a block."""
    mode = Positioning(mode)
    token = _current_positioning.set(mode)
    try:
        yield mode
    finally:
        _current_positioning.reset(token)


# ---------------------------------------------------------------------------
# Conversion
# ---------------------------------------------------------------------------


def _as_unit(value: object) -> Unit | None:
    try:
        return Unit(value)
    except ValueError:
        return None


def convert(quantity: Measure, to: Unit | str | None = None) -> float:
    """Convert *quantity* to a plain number in unit *to*.

    Parameters
    ----------
    quantity : Quantity | numbers.Real
        Value to convert.  Bare numbers are taken to be in the target
        unit already and are returned unchanged.
    to : Unit | str | None
        Target unit.  ``None`` uses the ambient unit.

    Returns
    -------
    float
        Converted amount.  Same-unit conversions return ``amount`` as is.

    Raises
    ------
    UnrecognizedConversion
        If either unit is not millimetres or inches.
    """
    if to is None:
        to = current_unit()

    if isinstance(quantity, numbers.Real) and not isinstance(quantity, bool):
        return quantity

    unit = quantity.unit
    amount = quantity.amount
    if unit == to:
        return amount

    src = _as_unit(unit)
    dst = _as_unit(to)
    if src is Unit.INCH and dst is Unit.MILLIMETER:
        return amount * MM_PER_INCH
    if src is Unit.MILLIMETER and dst is Unit.INCH:
        return amount / MM_PER_INCH

    raise UnrecognizedConversion(unit, amount, to)


def with_conversions(
    quantities: Mapping[str, Measure],
    body: Callable[..., T],
) -> T:
    """Call ``body`` with every named quantity converted to the ambient unit.

    Each name is bound to a plain number (not a :class:`Quantity`)::

        with_conversions({"width": inch(1)}, lambda width: width * 2)
    """
    converted = {name: convert(q) for name, q in quantities.items()}
    logger.debug(
        "Converted %d quantities to %s", len(converted), current_unit().value
    )
    return body(**converted)
