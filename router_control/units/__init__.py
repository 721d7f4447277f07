"""Quantities, unit conversion, and the ambient unit/positioning context.

Scope helpers that emit mode-change instructions live in
:mod:`router_control.units.scopes` (they depend on the program IR).
"""

from router_control.units.quantity import (
    MM_PER_INCH,
    Measure,
    Positioning,
    Quantity,
    Unit,
    UnrecognizedConversion,
    convert,
    current_positioning,
    current_unit,
    inch,
    mm,
    positioning_scope,
    unit_scope,
    with_conversions,
)

__all__ = [
    "MM_PER_INCH",
    "Measure",
    "Positioning",
    "Quantity",
    "Unit",
    "UnrecognizedConversion",
    "convert",
    "current_positioning",
    "current_unit",
    "inch",
    "mm",
    "positioning_scope",
    "unit_scope",
    "with_conversions",
]
