import pytest

from segmentor.core.errors import ConfigurationError
from segmentor.core.models import Midpoint, ScaleRange
from segmentor.core.segment.grid_geometry import ZoneBounds, compute_geometry


def test_geometry_for_five_point_grid() -> None:
    geometry = compute_geometry(ScaleRange(1, 5), ScaleRange(1, 5), Midpoint(3, 3))
    assert geometry.cell_width == 25
    assert geometry.cell_height == 25
    assert geometry.total_cols == 5
    assert geometry.total_rows == 5
    assert geometry.midpoint_col == 2
    assert geometry.midpoint_row == 2
    assert geometry.has_room_for_near_corner is True


def test_default_midpoint_and_zero_based_loyalty() -> None:
    geometry = compute_geometry(ScaleRange(1, 5), ScaleRange(0, 10))
    assert geometry.midpoint == Midpoint(3, 5)
    assert geometry.cell_height == 10
    assert geometry.total_rows == 11
    assert geometry.midpoint_row == 5


def test_near_corner_room_follows_midpoint_moves() -> None:
    sat, loy = ScaleRange(1, 5), ScaleRange(1, 5)
    assert compute_geometry(sat, loy, Midpoint(3, 3)).has_room_for_near_corner is True

    moved = compute_geometry(sat, loy, Midpoint(4, 3))
    assert moved.has_room_near_high is False
    assert moved.has_room_for_near_corner is False

    assert compute_geometry(sat, loy, Midpoint(3, 4.5)).has_room_near_high is False
    assert compute_geometry(sat, loy, Midpoint(3, 3)).has_room_for_near_corner is True


def test_low_corner_room_is_checked_too() -> None:
    geometry = compute_geometry(ScaleRange(1, 5), ScaleRange(1, 5), Midpoint(2, 3))
    assert geometry.has_room_near_high is True
    assert geometry.has_room_near_low is False
    assert geometry.has_room_for_near_corner is False


def test_low_corner_room_matches_high_corner_rule() -> None:
    geometry = compute_geometry(ScaleRange(1, 5), ScaleRange(1, 5), Midpoint(3, 2))
    assert geometry.has_room_near_low is True
    assert geometry.in_near_low(2, 1) is True
    assert geometry.in_near_low(1, 2) is False

    mirrored = compute_geometry(ScaleRange(1, 5), ScaleRange(1, 5), Midpoint(3, 4))
    assert mirrored.has_room_near_high is True


@pytest.mark.parametrize("midpoint", [Midpoint(5, 3), Midpoint(1, 3), Midpoint(3, 0), Midpoint(3, 6)])
def test_midpoint_must_be_strictly_interior(midpoint) -> None:
    with pytest.raises(ConfigurationError):
        compute_geometry(ScaleRange(1, 5), ScaleRange(1, 5), midpoint)


@pytest.mark.parametrize("bounds", [(5, 5), (3, 1), (-1, 5)])
def test_invalid_scale_is_rejected(bounds) -> None:
    with pytest.raises(ConfigurationError):
        ScaleRange(*bounds)


def test_scale_parse() -> None:
    assert ScaleRange.parse("0-10") == ScaleRange(0, 10)
    assert str(ScaleRange.parse(" 1-7 ")) == "1-7"
    with pytest.raises(ConfigurationError):
        ScaleRange.parse("five")


def test_larger_corner_zones() -> None:
    geometry = compute_geometry(ScaleRange(1, 7), ScaleRange(1, 7), Midpoint(4, 4), high_zone_size=2)
    assert geometry.high_zone == ZoneBounds(6, 7, 6, 7)
    assert geometry.near_high_band == ZoneBounds(5, 7, 5, 7)
    assert geometry.has_room_near_high is True


def test_corner_zone_may_not_cross_midpoint() -> None:
    with pytest.raises(ConfigurationError):
        compute_geometry(ScaleRange(1, 5), ScaleRange(1, 5), Midpoint(3, 3), high_zone_size=4)
    with pytest.raises(ConfigurationError):
        compute_geometry(ScaleRange(1, 5), ScaleRange(1, 5), Midpoint(3, 3), low_zone_size=3)


def test_zone_distance_is_chebyshev() -> None:
    zone = ZoneBounds(5, 5, 5, 5)
    assert zone.distance_to(5, 5) == 0
    assert zone.distance_to(4, 4) == 1
    assert zone.distance_to(3, 5) == 2
