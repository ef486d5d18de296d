# core/segment/quadrant_classifier.py

import logging
from enum import Enum
from typing import Dict, Iterable, List, Optional

import numpy as np  # type: ignore
import pandas as pd  # type: ignore

from ..models import CustomerRecord
from .config import NearCornerMode
from .grid_geometry import GridGeometry

logger = logging.getLogger(__name__)


class Segment(Enum):
    """Segment labels. Quadrants are named by position, not by axis meaning."""

    LOYALISTS = "loyalists"          # high satisfaction, high loyalty
    MERCENARIES = "mercenaries"      # high satisfaction, low loyalty
    HOSTAGES = "hostages"            # low satisfaction, high loyalty
    DEFECTORS = "defectors"          # low satisfaction, low loyalty
    APOSTLES = "apostles"            # high corner
    TERRORISTS = "terrorists"        # low corner
    NEAR_APOSTLES = "near_apostles"
    NEAR_TERRORISTS = "near_terrorists"


QUADRANTS = (Segment.LOYALISTS, Segment.MERCENARIES, Segment.HOSTAGES, Segment.DEFECTORS)
CORNERS = (Segment.APOSTLES, Segment.TERRORISTS)
NEAR_CORNERS = (Segment.NEAR_APOSTLES, Segment.NEAR_TERRORISTS)

_PARENT = {
    Segment.APOSTLES: Segment.LOYALISTS,
    Segment.NEAR_APOSTLES: Segment.LOYALISTS,
    Segment.TERRORISTS: Segment.DEFECTORS,
    Segment.NEAR_TERRORISTS: Segment.DEFECTORS,
}

_DISPLAY_NAMES = {
    Segment.LOYALISTS: ("Loyalists", "Loyalists"),
    Segment.MERCENARIES: ("Mercenaries", "Mercenaries"),
    Segment.HOSTAGES: ("Hostages", "Hostages"),
    Segment.DEFECTORS: ("Defectors", "Defectors"),
    Segment.APOSTLES: ("Apostles", "Advocates"),
    Segment.TERRORISTS: ("Terrorists", "Trolls"),
    Segment.NEAR_APOSTLES: ("Near-Apostles", "Near-Advocates"),
    Segment.NEAR_TERRORISTS: ("Near-Terrorists", "Near-Trolls"),
}


def display_name(segment: Segment, classic: bool = False) -> str:
    """Human-readable label, modern terminology unless ``classic`` is set."""
    classic_name, modern_name = _DISPLAY_NAMES[segment]
    return classic_name if classic else modern_name


def base_quadrant(segment: Segment) -> Segment:
    """Quadrant that contains a corner or near-corner segment."""
    return _PARENT.get(segment, segment)


def quadrant_of(sat: float, loy: float, geometry: GridGeometry) -> Segment:
    """Plain quadrant rule: values on the midpoint count as high."""
    high_sat = sat >= geometry.midpoint.sat
    high_loy = loy >= geometry.midpoint.loy
    if high_sat and high_loy:
        return Segment.LOYALISTS
    if high_sat:
        return Segment.MERCENARIES
    if high_loy:
        return Segment.HOSTAGES
    return Segment.DEFECTORS


def classify(
    sat: float,
    loy: float,
    geometry: GridGeometry,
    show_special_zones: bool = True,
    near_corners: NearCornerMode = NearCornerMode.NONE,
) -> Segment:
    """
    Assign exactly one segment label to a point.

    Corner zones win over the quadrant rule; near-corner cells are only
    assigned when enabled and when the geometry has room for them.
    Values outside the scales are not checked here.
    """
    if show_special_zones:
        if geometry.in_high_zone(sat, loy):
            return Segment.APOSTLES
        if geometry.in_low_zone(sat, loy):
            return Segment.TERRORISTS
        if near_corners.high and geometry.has_room_near_high and geometry.in_near_high(sat, loy):
            return Segment.NEAR_APOSTLES
        if near_corners.low and geometry.has_room_near_low and geometry.in_near_low(sat, loy):
            return Segment.NEAR_TERRORISTS
    return quadrant_of(sat, loy, geometry)


def is_neutral(sat: float, loy: float, geometry: GridGeometry) -> bool:
    """True when a point sits exactly on the midpoint."""
    return geometry.is_midpoint(sat, loy)


class QuadrantClassifier:
    """
    Applies the segment rule to records and DataFrames for one geometry.
    """

    def __init__(
        self,
        geometry: GridGeometry,
        show_special_zones: bool = True,
        near_corners: NearCornerMode = NearCornerMode.NONE,
    ):
        """
        Parameters
        ----------
        geometry : GridGeometry
            Snapshot the labels are computed against
        show_special_zones : bool
            Whether corner zones are split out of their quadrants
        near_corners : NearCornerMode
            Which near-corner rings are enabled
        """
        self.geometry = geometry
        self.show_special_zones = show_special_zones
        self.near_corners = near_corners

    @classmethod
    def from_config(cls, geometry: GridGeometry, config) -> "QuadrantClassifier":
        return cls(geometry, config.show_special_zones, config.near_corners)

    def classify(self, sat: float, loy: float) -> Segment:
        return classify(sat, loy, self.geometry, self.show_special_zones, self.near_corners)

    def classify_record(self, record: CustomerRecord) -> Segment:
        return self.classify(record.satisfaction, record.loyalty)

    def classify_records(self, records: Iterable[CustomerRecord]) -> Dict[str, Segment]:
        """Labels keyed by record id for every non-excluded record."""
        return {r.id: self.classify_record(r) for r in records if not r.excluded}

    def classify_frame(
        self,
        df: pd.DataFrame,
        sat_col: str = "satisfaction",
        loy_col: str = "loyalty",
    ) -> pd.DataFrame:
        """
        Label every row of a DataFrame.

        Returns
        -------
        pd.DataFrame
            Copy of ``df`` with ``segment`` and ``segment_name`` columns
        """
        out = df.copy()
        if out.empty:
            out["segment"] = pd.Series(dtype=object)
            out["segment_name"] = pd.Series(dtype=object)
            return out

        conditions = self._build_conditions(out[sat_col].astype(float), out[loy_col].astype(float))
        labels = [segment.value for segment, _ in conditions]
        out["segment"] = np.select([c for _, c in conditions], labels, default=Segment.DEFECTORS.value)
        out["segment_name"] = out["segment"].map(lambda v: display_name(Segment(v)))
        return out

    def _build_conditions(self, sat: pd.Series, loy: pd.Series) -> List[tuple]:
        """Mutually exclusive conditions in the same priority order as ``classify``."""
        g = self.geometry
        conditions = []
        if self.show_special_zones:
            high, low = g.high_zone, g.low_zone
            in_high = sat.between(high.min_sat, high.max_sat) & loy.between(high.min_loy, high.max_loy)
            in_low = sat.between(low.min_sat, low.max_sat) & loy.between(low.min_loy, low.max_loy)
            conditions += [(Segment.APOSTLES, in_high), (Segment.TERRORISTS, in_low)]

            if self.near_corners.high and g.has_room_near_high:
                band = g.near_high_band
                near = sat.between(band.min_sat, band.max_sat) & loy.between(band.min_loy, band.max_loy)
                conditions.append((Segment.NEAR_APOSTLES, near & ~in_high))
            if self.near_corners.low and g.has_room_near_low:
                band = g.near_low_band
                near = sat.between(band.min_sat, band.max_sat) & loy.between(band.min_loy, band.max_loy)
                below_split = (sat < g.midpoint.sat) & (loy < g.midpoint.loy)
                conditions.append((Segment.NEAR_TERRORISTS, near & ~in_low & below_split))

        high_sat = sat >= g.midpoint.sat
        high_loy = loy >= g.midpoint.loy
        conditions += [
            (Segment.LOYALISTS, high_sat & high_loy),
            (Segment.MERCENARIES, high_sat & ~high_loy),
            (Segment.HOSTAGES, ~high_sat & high_loy),
            (Segment.DEFECTORS, ~high_sat & ~high_loy),
        ]
        return conditions


def distribution(
    records: Iterable[CustomerRecord],
    classifier: QuadrantClassifier,
    segments: Optional[Iterable[Segment]] = None,
) -> Dict[Segment, int]:
    """Count of non-excluded records per label, zero-filled."""
    counts = {s: 0 for s in (segments or Segment)}
    for label in classifier.classify_records(records).values():
        counts[label] = counts.get(label, 0) + 1
    return counts
