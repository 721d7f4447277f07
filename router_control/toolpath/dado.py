"""Dado toolpath -- joint parameters to a nested Program.

The cut sequence is:

1. zero X/Y, probe Z against the touch plate, retract;
2. operator prompts to position the part and start the spindle;
3. repeated rectangular passes, each ``bit_radius`` deeper than the last,
   until the dado depth is reached;
4. operator prompt to stop the spindle.

Geometry (all in the ambient unit after conversion)::

    bit_radius  = cutter_diameter / 2
    dado_width  = stock_thickness / 2        # joinery rule, not tunable
    pass_offset = dado_width - cutter_diameter
    x1          = work_offset_x - bit_radius + stock_thickness
    x2          = x1 - pass_offset

Each pass rapids to ``(x1, 0)``, plunges, then cuts
``(x1, L) -> (x2, L) -> (x2, 0)`` with ``L = pass_length``.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass, fields

from router_control.program.operations import (
    Program,
    await_moves_complete,
    move,
    probe,
    program,
    prompt,
    rapid,
    reset_coords,
)
from router_control.units.quantity import (
    Measure,
    Positioning,
    Unit,
    with_conversions,
)
from router_control.units.scopes import with_positioning_scope, with_unit_scope

logger = logging.getLogger(__name__)

# Upper bound on roughing passes for one dado
MAX_PASSES = 1000


# ---------------------------------------------------------------------------
# Parameters
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class DadoParams:
    """Joint parameters.  Every field is a quantity (or ambient-unit number).

    Parameters
    ----------
    plate_thickness : Measure
        Z-probe touch plate thickness.
    retract_height : Measure
        Z height to retract to after probing.
    stock_thickness : Measure
        Thickness of the mating stock; the dado is half of it.
    cutter_diameter : Measure
        End mill diameter.
    work_offset_x : Measure
        X offset of the work piece from the zeroed origin.
    pass_length : Measure
        Length of the dado along Y.
    """

    plate_thickness: Measure
    retract_height: Measure
    stock_thickness: Measure
    cutter_diameter: Measure
    work_offset_x: Measure
    pass_length: Measure

    def __post_init__(self) -> None:
        d = self.cutter_diameter
        if isinstance(d, (int, float)) and d <= 0:
            raise ValueError(f"cutter_diameter must be positive, got {d}")

    def as_dict(self) -> dict[str, Measure]:
        return {f.name: getattr(self, f.name) for f in fields(self)}


@dataclass(frozen=True)
class MachineSettings:
    """Machine constants used by the dado path.

    Parameters
    ----------
    retract_feed : float
        Feed rate (``F`` word) for the post-probe retract.
    depth_tolerance : float
        Slack when deciding whether a pass depth reaches the dado depth.
    """

    retract_feed: float = 300
    depth_tolerance: float = 0.001

    def __post_init__(self) -> None:
        if self.retract_feed <= 0:
            raise ValueError(
                f"retract_feed must be positive, got {self.retract_feed}"
            )
        if self.depth_tolerance < 0:
            raise ValueError(
                f"depth_tolerance must be >= 0, got {self.depth_tolerance}"
            )


# ---------------------------------------------------------------------------
# Geometry
# ---------------------------------------------------------------------------


def dado_depths(
    bit_radius: float, dado_width: float, tolerance: float = 0.001,
) -> list[float]:
    """Pass depths ``r, 2r, 3r, ...`` through the first one reaching the dado.

    A depth within *tolerance* of ``dado_width`` counts as reaching it.
    Always returns at least one depth and never more than :data:`MAX_PASSES`.

    Parameters
    ----------
    bit_radius : float
        Depth step per pass (positive).
    dado_width : float
        Target depth.
    tolerance : float
        Inclusive-bound slack.

    Returns
    -------
    list[float]
        Positive depths; negate for Z.

    Raises
    ------
    ValueError
        If *bit_radius* is not positive, an input is not finite, or the
        cut would take more than :data:`MAX_PASSES` passes.
    """
    if not (math.isfinite(bit_radius) and math.isfinite(dado_width)):
        raise ValueError(
            f"Depths need finite values, got bit_radius={bit_radius}, "
            f"dado_width={dado_width}"
        )
    if bit_radius <= 0:
        raise ValueError(f"bit_radius must be positive, got {bit_radius}")
    steps = (dado_width - tolerance) / bit_radius
    if steps > MAX_PASSES:
        raise ValueError(
            f"Dado of width {dado_width} with bit radius {bit_radius} needs "
            f"more than {MAX_PASSES} passes"
        )
    count = max(1, math.ceil(steps))
    return [k * bit_radius for k in range(1, count + 1)]


def _dado_pass(
    x1: float, x2: float, depth: float, pass_length: float,
) -> Program:
    return program(
        rapid(x=x1, y=0),
        rapid(z=depth),
        move(x=x1, y=pass_length),
        move(x=x2, y=pass_length),
        move(x=x2, y=0),
    )


def _dado_program(
    settings: MachineSettings,
    *,
    plate_thickness: float,
    retract_height: float,
    stock_thickness: float,
    cutter_diameter: float,
    work_offset_x: float,
    pass_length: float,
) -> Program:
    if cutter_diameter <= 0:
        raise ValueError(
            f"cutter_diameter must be positive, got {cutter_diameter}"
        )

    bit_radius = cutter_diameter / 2
    dado_width = stock_thickness / 2

    pass_offset = dado_width - cutter_diameter
    x1 = work_offset_x - bit_radius + stock_thickness
    x2 = x1 - pass_offset
    depths = dado_depths(bit_radius, dado_width, settings.depth_tolerance)

    logger.debug(
        "Dado: width=%.4f bit_radius=%.4f x1=%.4f x2=%.4f passes=%d",
        dado_width, bit_radius, x1, x2, len(depths),
    )

    def setup_and_cut() -> list:
        return [
            reset_coords(x=0, y=0),
            prompt("Attach ZProbe - Top"),
            probe("z"),
            reset_coords(z=plate_thickness),
            rapid(z=retract_height, f=settings.retract_feed),
            await_moves_complete(),
            prompt("Detach ZProbe"),
            prompt("Position Part for Dado"),
            prompt("Start Spindle"),
            program(*(
                _dado_pass(x1, x2, -depth, pass_length) for depth in depths
            )),
        ]

    return program(
        with_positioning_scope(
            Positioning.ABSOLUTE,
            lambda: with_unit_scope(Unit.MILLIMETER, setup_and_cut),
        ),
        prompt("Stop Spindle"),
    )


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def generate_dado_path(
    params: DadoParams, settings: MachineSettings | None = None,
) -> Program:
    """Build the full dado cut as a nested Program.

    Parameters are converted to the ambient unit (millimetres unless the
    caller has entered another unit scope) before any geometry is
    computed.

    Parameters
    ----------
    params : DadoParams
        Joint parameters.
    settings : MachineSettings | None
        Machine constants.  ``None`` uses the defaults.

    Returns
    -------
    Program
        Positioning scope containing the unit scope (setup, prompts and
        passes), followed by the stop-spindle prompt.

    Raises
    ------
    UnrecognizedConversion
        If a parameter carries a unit other than mm or in.
    ValueError
        If the cutter diameter is not positive.
    """
    if settings is None:
        settings = MachineSettings()

    def build(**converted: float) -> Program:
        return _dado_program(settings, **converted)

    return with_conversions(params.as_dict(), build)
