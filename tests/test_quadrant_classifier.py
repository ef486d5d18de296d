import pytest

from segmentor.core.models import CustomerRecord, Midpoint, ScaleRange
from segmentor.core.segment.config import NearCornerMode
from segmentor.core.segment.grid_geometry import compute_geometry
from segmentor.core.segment.quadrant_classifier import (
    QUADRANTS,
    QuadrantClassifier,
    Segment,
    base_quadrant,
    classify,
    display_name,
    distribution,
    is_neutral,
    quadrant_of,
)
from segmentor.core.models import records_to_dataframe

HALF_STEP_MIDPOINTS = [Midpoint(s / 2, l / 2) for s in range(3, 10) for l in range(3, 10)]


@pytest.fixture
def geometry():
    return compute_geometry(ScaleRange(1, 5), ScaleRange(1, 5), Midpoint(3, 3))


@pytest.mark.parametrize("point, expected", [
    ((5, 5), Segment.APOSTLES),
    ((1, 1), Segment.TERRORISTS),
    ((4, 2), Segment.MERCENARIES),
    ((2, 4), Segment.HOSTAGES),
    ((2, 2), Segment.DEFECTORS),
    ((3, 3), Segment.LOYALISTS),
    ((3, 5), Segment.LOYALISTS),
    ((5, 1), Segment.MERCENARIES),
])
def test_classify_points(geometry, point, expected) -> None:
    assert classify(*point, geometry) == expected


@pytest.mark.parametrize("midpoint", HALF_STEP_MIDPOINTS)
def test_corner_precedence_for_any_midpoint(midpoint) -> None:
    geometry = compute_geometry(ScaleRange(1, 5), ScaleRange(1, 5), midpoint)
    assert classify(5, 5, geometry) == Segment.APOSTLES
    assert classify(1, 1, geometry) == Segment.TERRORISTS


@pytest.mark.parametrize("midpoint", HALF_STEP_MIDPOINTS)
def test_labels_are_total_and_exclusive(midpoint) -> None:
    geometry = compute_geometry(ScaleRange(1, 5), ScaleRange(1, 5), midpoint)
    for sat in range(1, 6):
        for loy in range(1, 6):
            label = classify(sat, loy, geometry)
            assert isinstance(label, Segment)
            if (sat, loy) not in ((5, 5), (1, 1)):
                assert label in QUADRANTS
                assert label == quadrant_of(sat, loy, geometry)


def test_special_zones_disabled_fall_back_to_quadrants(geometry) -> None:
    assert classify(5, 5, geometry, show_special_zones=False) == Segment.LOYALISTS
    assert classify(1, 1, geometry, show_special_zones=False) == Segment.DEFECTORS


def test_near_corner_cells(geometry) -> None:
    both = NearCornerMode.BOTH
    for point in [(4, 5), (5, 4), (4, 4)]:
        assert classify(*point, geometry, near_corners=both) == Segment.NEAR_APOSTLES
    for point in [(2, 1), (1, 2), (2, 2)]:
        assert classify(*point, geometry, near_corners=both) == Segment.NEAR_TERRORISTS
    assert classify(3, 4, geometry, near_corners=both) == Segment.LOYALISTS
    assert classify(4, 4, geometry, near_corners=NearCornerMode.LOW) == Segment.LOYALISTS


def test_near_corner_cells_need_room() -> None:
    geometry = compute_geometry(ScaleRange(1, 5), ScaleRange(1, 5), Midpoint(4, 3))
    assert classify(4, 5, geometry, near_corners=NearCornerMode.BOTH) == Segment.LOYALISTS
    assert classify(5, 5, geometry, near_corners=NearCornerMode.BOTH) == Segment.APOSTLES


def test_near_low_cells_on_the_split_stay_in_their_quadrant() -> None:
    geometry = compute_geometry(ScaleRange(1, 5), ScaleRange(1, 5), Midpoint(3, 2))
    low = NearCornerMode.LOW
    assert classify(2, 1, geometry, near_corners=low) == Segment.NEAR_TERRORISTS
    assert classify(1, 2, geometry, near_corners=low) == Segment.HOSTAGES
    assert classify(2, 2, geometry, near_corners=low) == Segment.HOSTAGES

    records = [CustomerRecord(id=f"{s}-{l}", satisfaction=s, loyalty=l) for s, l in [(2, 1), (1, 2), (2, 2)]]
    frame = QuadrantClassifier(geometry, near_corners=low).classify_frame(records_to_dataframe(records))
    assert list(frame["segment"]) == ["near_terrorists", "hostages", "hostages"]


def test_frame_classification_matches_point_rule(geometry) -> None:
    records = [
        CustomerRecord(id=f"{s}-{l}", satisfaction=s, loyalty=l)
        for s in range(1, 6) for l in range(1, 6)
    ]
    classifier = QuadrantClassifier(geometry, near_corners=NearCornerMode.BOTH)
    frame = classifier.classify_frame(records_to_dataframe(records))

    for _, row in frame.iterrows():
        assert row["segment"] == classifier.classify(row["satisfaction"], row["loyalty"]).value
    assert frame.loc[frame["id"] == "5-5", "segment_name"].iloc[0] == "Advocates"


def test_classify_empty_frame(geometry) -> None:
    frame = QuadrantClassifier(geometry).classify_frame(records_to_dataframe([]))
    assert "segment" in frame.columns
    assert frame.empty


def test_display_names_and_parents() -> None:
    assert display_name(Segment.APOSTLES) == "Advocates"
    assert display_name(Segment.APOSTLES, classic=True) == "Apostles"
    assert display_name(Segment.NEAR_TERRORISTS) == "Near-Trolls"
    assert base_quadrant(Segment.NEAR_TERRORISTS) == Segment.DEFECTORS
    assert base_quadrant(Segment.APOSTLES) == Segment.LOYALISTS
    assert base_quadrant(Segment.HOSTAGES) == Segment.HOSTAGES


def test_neutral_point(geometry) -> None:
    assert is_neutral(3, 3, geometry) is True
    assert is_neutral(3, 4, geometry) is False


def test_distribution_skips_excluded(geometry) -> None:
    records = [
        CustomerRecord(id="a", satisfaction=5, loyalty=5),
        CustomerRecord(id="b", satisfaction=4, loyalty=4),
        CustomerRecord(id="c", satisfaction=4, loyalty=4, excluded=True),
        CustomerRecord(id="d", satisfaction=1, loyalty=5),
    ]
    counts = distribution(records, QuadrantClassifier(geometry))
    assert counts[Segment.APOSTLES] == 1
    assert counts[Segment.LOYALISTS] == 1
    assert counts[Segment.HOSTAGES] == 1
    assert counts[Segment.DEFECTORS] == 0
    assert sum(counts.values()) == 3
