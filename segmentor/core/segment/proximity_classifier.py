# core/segment/proximity_classifier.py
"""
Boundary-proximity analysis.

Every non-excluded point in one of the four quadrants is either a "solid"
member of its quadrant or sits within ``threshold`` cells of the boundary
shared with an adjacent quadrant. Points near both boundaries are attributed
to exactly one relationship, chosen by the configured axis priority.

Diagonal relationships (e.g. loyalists near defectors) use the Chebyshev
distance to the midpoint and are counted alongside the lateral ones.
Special-zone relationships (e.g. loyalists near apostles, apostles near
loyalists) are computed separately against the corner zones.
"""

import math
import logging
from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Optional, Tuple

import pandas as pd  # type: ignore

from ..errors import ConfigurationError
from ..models import CustomerRecord
from .config import Axis, NearCornerMode
from .grid_geometry import GridGeometry, ZoneBounds
from .quadrant_classifier import QUADRANTS, QuadrantClassifier, Segment

logger = logging.getLogger(__name__)

# Quadrant across the satisfaction split and across the loyalty split
LATERAL_NEIGHBOURS: Dict[Segment, Dict[Axis, Segment]] = {
    Segment.LOYALISTS: {Axis.SATISFACTION: Segment.HOSTAGES, Axis.LOYALTY: Segment.MERCENARIES},
    Segment.MERCENARIES: {Axis.SATISFACTION: Segment.DEFECTORS, Axis.LOYALTY: Segment.LOYALISTS},
    Segment.HOSTAGES: {Axis.SATISFACTION: Segment.LOYALISTS, Axis.LOYALTY: Segment.DEFECTORS},
    Segment.DEFECTORS: {Axis.SATISFACTION: Segment.MERCENARIES, Axis.LOYALTY: Segment.HOSTAGES},
}

# Quadrant across both splits
DIAGONAL_NEIGHBOURS: Dict[Segment, Segment] = {
    Segment.LOYALISTS: Segment.DEFECTORS,
    Segment.MERCENARIES: Segment.HOSTAGES,
    Segment.HOSTAGES: Segment.MERCENARIES,
    Segment.DEFECTORS: Segment.LOYALISTS,
}

_QUADRANT_RANK = {
    Segment.TERRORISTS: -2, Segment.NEAR_TERRORISTS: -1, Segment.DEFECTORS: 0,
    Segment.MERCENARIES: 1, Segment.HOSTAGES: 1,
    Segment.LOYALISTS: 2, Segment.NEAR_APOSTLES: 3, Segment.APOSTLES: 4,
}

MIN_INDICATOR_COUNT = 3


@dataclass(frozen=True)
class ProximityRelationship:
    """A point in ``source`` within ``threshold`` cells of ``target``."""

    source: Segment
    target: Segment
    threshold: int

    @property
    def name(self) -> str:
        return f"{self.source.value}_near_{self.target.value}"

    @property
    def label(self) -> str:
        return f"{self.source.value} near {self.target.value}".replace("_", " ")

    @property
    def is_risk(self) -> bool:
        """Movement towards a worse segment."""
        return _QUADRANT_RANK[self.target] < _QUADRANT_RANK[self.source]

    @property
    def is_opportunity(self) -> bool:
        return _QUADRANT_RANK[self.target] > _QUADRANT_RANK[self.source]


@dataclass
class ProximityCount:
    relationship: ProximityRelationship
    count: int = 0
    percentage: float = 0.0
    customer_ids: List[str] = field(default_factory=list)
    risk_scores: List[int] = field(default_factory=list)

    @property
    def average_risk_score(self) -> float:
        if not self.risk_scores:
            return 0.0
        return round(sum(self.risk_scores) / len(self.risk_scores), 1)

    @property
    def risk_level(self) -> str:
        return risk_level(self.average_risk_score)


@dataclass
class ProximityResult:
    """Aggregated proximity counts for one classification pass."""

    threshold: int
    total_active: int
    relationships: Dict[str, ProximityCount] = field(default_factory=dict)
    diagonals: Dict[str, ProximityCount] = field(default_factory=dict)
    special_zones: Dict[str, ProximityCount] = field(default_factory=dict)
    solid: Dict[Segment, int] = field(default_factory=dict)
    available: bool = True
    reason: Optional[str] = None

    def _groups(self) -> Tuple[Tuple[str, Dict[str, ProximityCount]], ...]:
        return (
            ("lateral", self.relationships),
            ("diagonal", self.diagonals),
            ("special_zone", self.special_zones),
        )

    def count(self, name: str) -> int:
        for _, entries in self._groups():
            if name in entries:
                return entries[name].count
        return 0

    def counts(self) -> Dict[str, int]:
        """Relationship name → count map (lateral, diagonal and special-zone)."""
        return {k: v.count for _, entries in self._groups() for k, v in entries.items()}

    def percentages(self) -> Dict[str, float]:
        return {k: v.percentage for _, entries in self._groups() for k, v in entries.items()}

    def risk_indicators(self, min_count: int = MIN_INDICATOR_COUNT) -> List[ProximityCount]:
        return [
            c for c in self.all_counts()
            if c.relationship.is_risk and c.count >= min_count
        ]

    def opportunity_indicators(self, min_count: int = MIN_INDICATOR_COUNT) -> List[ProximityCount]:
        return [
            c for c in self.all_counts()
            if c.relationship.is_opportunity and c.count >= min_count
        ]

    def all_counts(self) -> List[ProximityCount]:
        return [c for _, entries in self._groups() for c in entries.values()]

    def to_dataframe(self) -> pd.DataFrame:
        rows = []
        for kind, entries in self._groups():
            for name, c in entries.items():
                rows.append({
                    "relationship": name,
                    "kind": kind,
                    "source": c.relationship.source.value,
                    "target": c.relationship.target.value,
                    "count": c.count,
                    "percentage": c.percentage,
                    "average_risk_score": c.average_risk_score,
                    "risk_level": c.risk_level,
                })
        for segment, count in self.solid.items():
            rows.append({
                "relationship": f"solid_{segment.value}",
                "kind": "solid",
                "source": segment.value,
                "target": segment.value,
                "count": count,
                "percentage": _percentage(count, self.total_active),
                "average_risk_score": 0.0,
                "risk_level": "LOW",
            })
        return pd.DataFrame(rows, columns=[
            "relationship", "kind", "source", "target", "count",
            "percentage", "average_risk_score", "risk_level",
        ])


def risk_score(distance: float, threshold: int) -> int:
    """100 on the boundary, falling linearly to 0 one cell beyond the threshold."""
    return int(round(max(0.0, 1 - distance / (threshold + 1)) * 100))


def risk_level(score: float) -> str:
    if score >= 75:
        return "HIGH"
    if score >= 50:
        return "MODERATE"
    return "LOW"


def _percentage(count: int, total: int) -> float:
    return round(count / total * 100, 1) if total else 0.0


# ============================================================
# 📐 DISTANCES
# ============================================================

def _positions_on_side(scale_min: int, scale_max: int, mid: float, high: bool) -> int:
    """Number of whole scale positions on one side of the split."""
    first_high = math.ceil(mid)
    return scale_max - first_high + 1 if high else first_high - scale_min


def _index_from_split(value: float, mid: float, high: bool) -> float:
    """0 for the position closest to the split on its own side."""
    first_high = math.ceil(mid)
    return value - first_high if high else (first_high - 1) - value


def _exit_distance(zone: ZoneBounds, sat: float, loy: float, high: bool) -> float:
    """Cells a point inside a corner rectangle must move to leave it towards the split."""
    if high:
        return min(sat - zone.min_sat, loy - zone.min_loy) + 1
    return min(zone.max_sat - sat, zone.max_loy - loy) + 1


def _near_on_axis(
    value: float,
    mid: float,
    scale_min: int,
    scale_max: int,
    threshold: int,
    space_cap: bool,
) -> Tuple[bool, float]:
    distance = abs(value - mid)
    if distance > threshold:
        return False, distance
    if space_cap:
        high = value >= mid
        cap = 1 if _positions_on_side(scale_min, scale_max, mid, high) <= 3 else 2
        if _index_from_split(value, mid, high) >= cap:
            return False, distance
    return True, distance


# ============================================================
# 🧭 CLASSIFIER
# ============================================================

class ProximityClassifier:
    """
    Buckets classified points into solid members and near-boundary groups.
    """

    def __init__(
        self,
        geometry: GridGeometry,
        threshold: int = 1,
        axis_priority: Axis = Axis.LOYALTY,
        show_special_zones: bool = True,
        near_corners: NearCornerMode = NearCornerMode.NONE,
        space_cap: bool = False,
    ):
        """
        Parameters
        ----------
        geometry : GridGeometry
            Geometry the points are classified against
        threshold : int
            Non-negative distance in cells that still counts as near
        axis_priority : Axis
            Boundary that wins when a point is near both
        show_special_zones : bool
            Whether corner zones are split out and analysed
        near_corners : NearCornerMode
            Which near-corner rings are enabled
        space_cap : bool
            Restrict near bands to the 1-2 positions next to the split
        """
        if int(threshold) < 0:
            raise ConfigurationError(f"❌ Proximity threshold must be >= 0, got {threshold}")
        self.geometry = geometry
        self.threshold = int(threshold)
        self.axis_priority = axis_priority
        self.show_special_zones = show_special_zones
        self.near_corners = near_corners
        self.space_cap = space_cap
        self.classifier = QuadrantClassifier(geometry, show_special_zones, near_corners)

    @classmethod
    def from_config(cls, geometry: GridGeometry, config) -> "ProximityClassifier":
        return cls(
            geometry,
            threshold=config.proximity_threshold,
            axis_priority=config.axis_priority,
            show_special_zones=config.show_special_zones,
            near_corners=config.near_corners,
            space_cap=config.space_cap,
        )

    # ---------------- Relationship catalogue ----------------

    def lateral_relationships(self) -> List[ProximityRelationship]:
        return [
            ProximityRelationship(source, neighbours[axis], self.threshold)
            for source, neighbours in LATERAL_NEIGHBOURS.items()
            for axis in (Axis.SATISFACTION, Axis.LOYALTY)
        ]

    def diagonal_relationships(self) -> List[ProximityRelationship]:
        return [
            ProximityRelationship(source, target, self.threshold)
            for source, target in DIAGONAL_NEIGHBOURS.items()
        ]

    def special_zone_targets(self) -> List[Tuple[Segment, Segment, ZoneBounds]]:
        """(source, target, target rectangle) triples active for this geometry."""
        if not self.show_special_zones:
            return []
        g = self.geometry
        targets = []
        if self.near_corners.high and g.has_room_near_high:
            targets.append((Segment.LOYALISTS, Segment.NEAR_APOSTLES, g.near_high_band))
            targets.append((Segment.NEAR_APOSTLES, Segment.APOSTLES, g.high_zone))
        else:
            targets.append((Segment.LOYALISTS, Segment.APOSTLES, g.high_zone))
        if self.near_corners.low and g.has_room_near_low:
            targets.append((Segment.DEFECTORS, Segment.NEAR_TERRORISTS, g.near_low_band))
            targets.append((Segment.NEAR_TERRORISTS, Segment.TERRORISTS, g.low_zone))
        else:
            targets.append((Segment.DEFECTORS, Segment.TERRORISTS, g.low_zone))
        return targets

    def outward_zone_sources(self) -> List[Tuple[Segment, Segment, ZoneBounds, bool]]:
        """
        (source, target, zone, high) for corner members close to leaving their zone.

        ``zone`` is the rectangle a point has to leave to reach ``target``:
        the corner plus its near ring when that ring is shown.
        """
        if not self.show_special_zones:
            return []
        g = self.geometry
        sources = []
        if self.near_corners.high and g.has_room_near_high:
            sources.append((Segment.APOSTLES, Segment.LOYALISTS, g.near_high_band, True))
            sources.append((Segment.NEAR_APOSTLES, Segment.LOYALISTS, g.near_high_band, True))
        else:
            sources.append((Segment.APOSTLES, Segment.LOYALISTS, g.high_zone, True))
        if self.near_corners.low and g.has_room_near_low:
            sources.append((Segment.TERRORISTS, Segment.DEFECTORS, g.near_low_band, False))
            sources.append((Segment.NEAR_TERRORISTS, Segment.DEFECTORS, g.near_low_band, False))
        else:
            sources.append((Segment.TERRORISTS, Segment.DEFECTORS, g.low_zone, False))
        return sources

    # ---------------- Per point ----------------

    def lateral_relationship_for(
        self, sat: float, loy: float, segment: Segment
    ) -> Tuple[Optional[ProximityRelationship], float]:
        """
        Relationship a quadrant point is attributed to, or None if solid.

        Returns
        -------
        Tuple[Optional[ProximityRelationship], float]
            Relationship and the boundary distance it was decided on
        """
        near = self._axis_proximity(sat, loy)

        order = [self.axis_priority] + [a for a in Axis if a != self.axis_priority]
        for axis in order:
            is_near, distance = near[axis]
            if is_near:
                target = LATERAL_NEIGHBOURS[segment][axis]
                return ProximityRelationship(segment, target, self.threshold), distance
        return None, min(d for _, d in near.values())

    def diagonal_relationship_for(
        self, sat: float, loy: float, segment: Segment
    ) -> Tuple[Optional[ProximityRelationship], float]:
        """Relationship towards the opposite quadrant when near both splits."""
        near = self._axis_proximity(sat, loy)
        distance = max(d for _, d in near.values())
        if all(is_near for is_near, _ in near.values()):
            return ProximityRelationship(segment, DIAGONAL_NEIGHBOURS[segment], self.threshold), distance
        return None, distance

    def _axis_proximity(self, sat: float, loy: float) -> Dict[Axis, Tuple[bool, float]]:
        g = self.geometry
        return {
            Axis.SATISFACTION: _near_on_axis(
                sat, g.midpoint.sat, g.satisfaction_scale.min, g.satisfaction_scale.max,
                self.threshold, self.space_cap,
            ),
            Axis.LOYALTY: _near_on_axis(
                loy, g.midpoint.loy, g.loyalty_scale.min, g.loyalty_scale.max,
                self.threshold, self.space_cap,
            ),
        }

    # ---------------- Aggregation ----------------

    def classify_proximity(self, records: Iterable[CustomerRecord]) -> ProximityResult:
        """
        Aggregate proximity counts over the non-excluded records.

        Percentages are relative to the active (non-excluded) total.
        """
        active = [r for r in records if not r.excluded]
        total = len(active)
        g = self.geometry

        result = ProximityResult(threshold=self.threshold, total_active=total)

        if g.satisfaction_scale.span < 2 or g.loyalty_scale.span < 2:
            result.available = False
            result.reason = "Scale too small for proximity analysis"
            logger.warning(f"⚠️ {result.reason} ({g.satisfaction_scale} x {g.loyalty_scale})")
            return result

        for rel in self.lateral_relationships():
            result.relationships[rel.name] = ProximityCount(rel)
        for rel in self.diagonal_relationships():
            result.diagonals[rel.name] = ProximityCount(rel)
        special_targets = self.special_zone_targets()
        outward_sources = self.outward_zone_sources()
        for source, target in [t[:2] for t in special_targets] + [s[:2] for s in outward_sources]:
            rel = ProximityRelationship(source, target, self.threshold)
            result.special_zones[rel.name] = ProximityCount(rel)
        result.solid = {q: 0 for q in QUADRANTS}

        def add(entries: Dict[str, ProximityCount], rel_name: str, record_id: str, distance: float) -> None:
            entry = entries[rel_name]
            entry.count += 1
            entry.customer_ids.append(record_id)
            entry.risk_scores.append(risk_score(distance, self.threshold))

        for record in active:
            sat, loy = record.satisfaction, record.loyalty
            if g.is_midpoint(sat, loy):
                continue
            segment = self.classifier.classify(sat, loy)

            if segment in QUADRANTS:
                rel, distance = self.lateral_relationship_for(sat, loy, segment)
                if rel is None:
                    result.solid[segment] += 1
                else:
                    add(result.relationships, rel.name, record.id, distance)

                rel, distance = self.diagonal_relationship_for(sat, loy, segment)
                if rel is not None:
                    add(result.diagonals, rel.name, record.id, distance)

            for source, target, bounds in special_targets:
                if segment != source:
                    continue
                distance = bounds.distance_to(sat, loy)
                if 0 < distance <= self.threshold:
                    add(result.special_zones, f"{source.value}_near_{target.value}", record.id, distance)

            for source, target, zone, high in outward_sources:
                if segment != source:
                    continue
                distance = _exit_distance(zone, sat, loy, high)
                if distance <= self.threshold:
                    add(result.special_zones, f"{source.value}_near_{target.value}", record.id, distance)

        for entry in result.all_counts():
            entry.percentage = _percentage(entry.count, total)

        near_total = sum(c.count for c in result.relationships.values())
        logger.info(
            f"✅ Proximity analysis: {near_total:,} near-boundary / "
            f"{sum(result.solid.values()):,} solid of {total:,} active points"
        )
        return result


def classify_proximity(
    records: Iterable[CustomerRecord],
    geometry: GridGeometry,
    threshold: int = 1,
    **options,
) -> ProximityResult:
    """Functional entry point around ProximityClassifier."""
    return ProximityClassifier(geometry, threshold=threshold, **options).classify_proximity(records)
