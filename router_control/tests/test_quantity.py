"""Tests for quantities, unit conversion, and the ambient context.

Validates conversion arithmetic, bare-number passthrough, structured
conversion errors, and that scopes restore the previous ambient value on
every exit path.
"""

from __future__ import annotations

from fractions import Fraction

import pytest

from router_control.units.quantity import (
    MM_PER_INCH,
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


# ---------------------------------------------------------------------------
# Quantity construction
# ---------------------------------------------------------------------------


class TestQuantity:
    def test_constructors(self) -> None:
        assert mm(4.2) == Quantity(Unit.MILLIMETER, 4.2)
        assert inch(0.5) == Quantity(Unit.INCH, 0.5)

    def test_frozen(self) -> None:
        q = mm(1.0)
        with pytest.raises(AttributeError):
            q.amount = 2.0  # type: ignore[misc]

    def test_unit_values_are_short_names(self) -> None:
        assert Unit.MILLIMETER == "mm"
        assert Unit.INCH == "in"

    def test_str(self) -> None:
        assert str(inch(0.5)) == "0.5 in"


# ---------------------------------------------------------------------------
# Conversion
# ---------------------------------------------------------------------------


class TestConvert:
    def test_inch_to_mm(self) -> None:
        assert convert(inch(1), Unit.MILLIMETER) == pytest.approx(25.4)

    def test_mm_to_inch(self) -> None:
        assert convert(mm(50.8), Unit.INCH) == pytest.approx(2.0)

    def test_identity_returns_amount_exactly(self) -> None:
        assert convert(mm(4.2), Unit.MILLIMETER) == 4.2
        assert convert(inch(0.125), Unit.INCH) == 0.125
        # Integers stay integers
        assert isinstance(convert(mm(5), Unit.MILLIMETER), int)

    def test_target_may_be_plain_string(self) -> None:
        assert convert(inch(2), "mm") == pytest.approx(50.8)

    @pytest.mark.parametrize("amount", [0.0, 1.0, 3.175, -12.5, 1e6])
    def test_mm_inch_mm_roundtrip(self, amount: float) -> None:
        there = convert(mm(amount), Unit.INCH)
        assert there == pytest.approx(amount / MM_PER_INCH)
        assert convert(inch(there), Unit.MILLIMETER) == pytest.approx(
            amount, rel=1e-9
        )

    def test_inch_mm_inch_roundtrip(self) -> None:
        there = convert(inch(0.3), Unit.MILLIMETER)
        assert convert(mm(there), Unit.INCH) == pytest.approx(0.3, rel=1e-9)

    @pytest.mark.parametrize("target", [Unit.MILLIMETER, Unit.INCH, "furlong"])
    def test_bare_number_passthrough(self, target: object) -> None:
        assert convert(5, target) == 5
        assert convert(2.5, target) == 2.5

    def test_bare_fraction_passthrough(self) -> None:
        half = Fraction(1, 2)
        assert convert(half, Unit.INCH) is half

    def test_default_target_is_ambient_unit(self) -> None:
        assert convert(inch(1)) == pytest.approx(25.4)
        with unit_scope(Unit.INCH):
            assert convert(mm(25.4)) == pytest.approx(1.0)


class TestUnrecognizedConversion:
    def test_unknown_source_unit(self) -> None:
        with pytest.raises(UnrecognizedConversion) as info:
            convert(Quantity("furlong", 1), Unit.MILLIMETER)
        err = info.value
        assert err.unit == "furlong"
        assert err.amount == 1
        assert err.target == Unit.MILLIMETER

    def test_unknown_target_unit(self) -> None:
        with pytest.raises(UnrecognizedConversion) as info:
            convert(mm(3), "cubit")
        assert info.value.target == "cubit"

    def test_is_value_error(self) -> None:
        with pytest.raises(ValueError, match="Unrecognized conversion"):
            convert(Quantity("furlong", 1), Unit.INCH)


# ---------------------------------------------------------------------------
# Ambient context
# ---------------------------------------------------------------------------


class TestAmbientContext:
    def test_defaults(self) -> None:
        assert current_unit() is Unit.MILLIMETER
        assert current_positioning() is Positioning.ABSOLUTE

    def test_unit_scope_nests_and_restores(self) -> None:
        with unit_scope(Unit.INCH):
            assert current_unit() is Unit.INCH
            with unit_scope("mm"):
                assert current_unit() is Unit.MILLIMETER
            assert current_unit() is Unit.INCH
        assert current_unit() is Unit.MILLIMETER

    def test_unit_scope_restores_after_exception(self) -> None:
        with pytest.raises(RuntimeError):
            with unit_scope(Unit.INCH):
                raise RuntimeError("boom")
        assert current_unit() is Unit.MILLIMETER

    def test_positioning_scope_restores_after_exception(self) -> None:
        with pytest.raises(RuntimeError):
            with positioning_scope(Positioning.RELATIVE):
                assert current_positioning() is Positioning.RELATIVE
                raise RuntimeError("boom")
        assert current_positioning() is Positioning.ABSOLUTE

    def test_unknown_unit_rejected_before_entering(self) -> None:
        with pytest.raises(ValueError):
            with unit_scope("furlong"):
                pass
        assert current_unit() is Unit.MILLIMETER


# ---------------------------------------------------------------------------
# with_conversions
# ---------------------------------------------------------------------------


class TestWithConversions:
    def test_binds_plain_numbers_in_ambient_unit(self) -> None:
        seen = {}

        def body(width: float, depth: float) -> str:
            seen.update(width=width, depth=depth)
            return "done"

        result = with_conversions({"width": inch(1), "depth": mm(3)}, body)
        assert result == "done"
        assert seen["width"] == pytest.approx(25.4)
        assert seen["depth"] == 3
        assert not any(isinstance(v, Quantity) for v in seen.values())

    def test_follows_unit_scope(self) -> None:
        with unit_scope(Unit.INCH):
            width = with_conversions({"w": mm(12.7)}, lambda w: w)
        assert width == pytest.approx(0.5)

    def test_propagates_conversion_error(self) -> None:
        with pytest.raises(UnrecognizedConversion):
            with_conversions({"w": Quantity("furlong", 1)}, lambda w: w)
