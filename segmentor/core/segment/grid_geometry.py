# core/segment/grid_geometry.py

import logging
from dataclasses import dataclass
from typing import Optional

from ..errors import ConfigurationError
from ..models import Midpoint, ScaleRange

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ZoneBounds:
    """Inclusive rectangle of grid values."""

    min_sat: float
    max_sat: float
    min_loy: float
    max_loy: float

    def contains(self, sat: float, loy: float) -> bool:
        return self.min_sat <= sat <= self.max_sat and self.min_loy <= loy <= self.max_loy

    def distance_to(self, sat: float, loy: float) -> float:
        """Chebyshev distance in cells from a point to the rectangle (0 inside)."""
        d_sat = max(self.min_sat - sat, 0, sat - self.max_sat)
        d_loy = max(self.min_loy - loy, 0, loy - self.max_loy)
        return max(d_sat, d_loy)


@dataclass(frozen=True)
class GridGeometry:
    """
    Read-only geometry snapshot for one scale/midpoint configuration.

    Cell sizes are percentages of the axis span, not pixels. A new snapshot
    is computed whenever a scale or the midpoint changes.
    """

    satisfaction_scale: ScaleRange
    loyalty_scale: ScaleRange
    midpoint: Midpoint
    cell_width: float
    cell_height: float
    total_cols: int
    total_rows: int
    midpoint_col: float
    midpoint_row: float
    high_zone_size: int
    low_zone_size: int
    has_room_near_high: bool
    has_room_near_low: bool

    @property
    def has_room_for_near_corner(self) -> bool:
        return self.has_room_near_high and self.has_room_near_low

    # ---------------- Corner zones ----------------

    @property
    def high_zone(self) -> ZoneBounds:
        n = self.high_zone_size
        return ZoneBounds(
            self.satisfaction_scale.max - (n - 1), self.satisfaction_scale.max,
            self.loyalty_scale.max - (n - 1), self.loyalty_scale.max,
        )

    @property
    def low_zone(self) -> ZoneBounds:
        n = self.low_zone_size
        return ZoneBounds(
            self.satisfaction_scale.min, self.satisfaction_scale.min + (n - 1),
            self.loyalty_scale.min, self.loyalty_scale.min + (n - 1),
        )

    @property
    def near_high_band(self) -> ZoneBounds:
        """Outer rectangle of the high corner plus its near-corner ring."""
        n = self.high_zone_size
        return ZoneBounds(
            self.satisfaction_scale.max - n, self.satisfaction_scale.max,
            self.loyalty_scale.max - n, self.loyalty_scale.max,
        )

    @property
    def near_low_band(self) -> ZoneBounds:
        n = self.low_zone_size
        return ZoneBounds(
            self.satisfaction_scale.min, self.satisfaction_scale.min + n,
            self.loyalty_scale.min, self.loyalty_scale.min + n,
        )

    def in_high_zone(self, sat: float, loy: float) -> bool:
        return self.high_zone.contains(sat, loy)

    def in_low_zone(self, sat: float, loy: float) -> bool:
        return self.low_zone.contains(sat, loy)

    def in_near_high(self, sat: float, loy: float) -> bool:
        return self.near_high_band.contains(sat, loy) and not self.in_high_zone(sat, loy)

    def in_near_low(self, sat: float, loy: float) -> bool:
        """Near-low cells on the split line belong to the high side."""
        return (
            self.near_low_band.contains(sat, loy)
            and not self.in_low_zone(sat, loy)
            and sat < self.midpoint.sat
            and loy < self.midpoint.loy
        )

    def is_midpoint(self, sat: float, loy: float) -> bool:
        return sat == self.midpoint.sat and loy == self.midpoint.loy


def compute_geometry(
    satisfaction_scale: ScaleRange,
    loyalty_scale: ScaleRange,
    midpoint: Optional[Midpoint] = None,
    high_zone_size: int = 1,
    low_zone_size: int = 1,
) -> GridGeometry:
    """
    Compute the grid geometry for a scale pair and midpoint.

    Parameters
    ----------
    satisfaction_scale, loyalty_scale : ScaleRange
        Axis ranges.
    midpoint : Midpoint, optional
        Quadrant split; defaults to the centre of both scales.
    high_zone_size, low_zone_size : int
        Corner zone side length in cells.

    Returns
    -------
    GridGeometry
        Snapshot with cell sizes, offsets and near-corner room flags.

    Raises
    ------
    ConfigurationError
        When the midpoint is not strictly interior or a corner zone would
        cross the quadrant split.
    """
    if midpoint is None:
        midpoint = Midpoint.default_for(satisfaction_scale, loyalty_scale)
    midpoint.validate_against(satisfaction_scale, loyalty_scale)

    sat, loy = satisfaction_scale, loyalty_scale
    hi, lo = int(high_zone_size), int(low_zone_size)
    if hi < 1 or lo < 1:
        raise ConfigurationError(f"❌ Zone sizes must be >= 1, got high={hi}, low={lo}")

    # Corner zones must stay inside their own quadrant
    if sat.max - (hi - 1) < midpoint.sat or loy.max - (hi - 1) < midpoint.loy:
        raise ConfigurationError(f"❌ High corner zone of size {hi} crosses the midpoint {midpoint}")
    if sat.min + (lo - 1) >= midpoint.sat or loy.min + (lo - 1) >= midpoint.loy:
        raise ConfigurationError(f"❌ Low corner zone of size {lo} crosses the midpoint {midpoint}")

    # Room for a one-cell ring around each zone without crossing the split.
    room_high = (sat.max - midpoint.sat) >= hi + 1 and (loy.max - midpoint.loy) >= hi
    room_low = (midpoint.sat - sat.min) >= lo + 1 and (midpoint.loy - loy.min) >= lo

    geometry = GridGeometry(
        satisfaction_scale=sat,
        loyalty_scale=loy,
        midpoint=midpoint,
        cell_width=100 / sat.span,
        cell_height=100 / loy.span,
        total_cols=sat.span + 1,
        total_rows=loy.span + 1,
        midpoint_col=midpoint.sat - sat.min,
        midpoint_row=midpoint.loy - loy.min,
        high_zone_size=hi,
        low_zone_size=lo,
        has_room_near_high=room_high,
        has_room_near_low=room_low,
    )
    logger.debug(
        f"➡️ Geometry {sat} x {loy} @ ({midpoint.sat}, {midpoint.loy}): "
        f"near-corner room high={room_high}, low={room_low}"
    )
    return geometry


def geometry_from_config(config) -> GridGeometry:
    """Compute the geometry described by a SegmentationConfig."""
    return compute_geometry(
        config.satisfaction_scale,
        config.loyalty_scale,
        config.midpoint,
        config.high_zone_size,
        config.low_zone_size,
    )
