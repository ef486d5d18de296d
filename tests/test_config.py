import os

import pytest

from segmentor.core.errors import ConfigurationError
from segmentor.core.models import Midpoint, ScaleRange
from segmentor.core.segment.config import (
    Axis,
    NearCornerMode,
    SegmentationConfig,
    load_segmentation_config,
)
from segmentor.utils import config_path


def test_defaults() -> None:
    config = SegmentationConfig()
    assert config.satisfaction_scale == ScaleRange(1, 5)
    assert config.midpoint == Midpoint(3, 3)
    assert config.show_special_zones is True
    assert config.near_corners is NearCornerMode.NONE
    assert config.axis_priority is Axis.LOYALTY
    assert config.id_prefix == "CUST-"


def test_midpoint_defaults_to_scale_centres() -> None:
    config = SegmentationConfig(satisfaction_scale=ScaleRange(1, 7), loyalty_scale=ScaleRange(0, 10))
    assert config.midpoint == Midpoint(4, 5)


def test_from_tokens() -> None:
    config = SegmentationConfig.from_tokens([
        "SHOW_NEAR_APOSTLES",
        "SHOW_NEAR_TERRORISTS",
        "APOSTLES_ZONE_SIZE:2",
        "PROXIMITY_THRESHOLD:2",
        "LOY_SCALE:0-10",
        "MIDPOINT:3,5.5",
        "AXIS_PRIORITY:satisfaction",
        "SPACE_CAP",
        "SOMETHING_ELSE",
    ])
    assert config.near_corners is NearCornerMode.BOTH
    assert config.high_zone_size == 2
    assert config.low_zone_size == 1
    assert config.proximity_threshold == 2
    assert config.loyalty_scale == ScaleRange(0, 10)
    assert config.midpoint == Midpoint(3, 5.5)
    assert config.axis_priority is Axis.SATISFACTION
    assert config.space_cap is True


def test_from_tokens_hides_zones_and_accepts_overrides() -> None:
    config = SegmentationConfig.from_tokens(["HIDE_SPECIAL_ZONES", "SHOW_NEAR_TERRORISTS"], id_prefix="R")
    assert config.show_special_zones is False
    assert config.near_corners is NearCornerMode.LOW
    assert config.id_prefix == "R"


@pytest.mark.parametrize("tokens", [
    ["APOSTLES_ZONE_SIZE:two"],
    ["APOSTLES_ZONE_SIZE:0"],
    ["PROXIMITY_THRESHOLD:-1"],
    ["AXIS_PRIORITY:diagonal"],
    ["MIDPOINT:5,3"],
    ["MIDPOINT:3.25,3"],
    ["SAT_SCALE:5-1"],
])
def test_invalid_tokens(tokens) -> None:
    with pytest.raises(ConfigurationError):
        SegmentationConfig.from_tokens(tokens)


def test_from_dict_reads_nested_sections() -> None:
    config = SegmentationConfig.from_dict({
        "segmentation": {
            "satisfaction_scale": "1-7",
            "loyalty_scale": "0-10",
            "midpoint": {"sat": 4, "loy": 5},
            "special_zones": {"enabled": False, "high_zone_size": 2, "near_corners": "high"},
            "proximity": {"threshold": 2, "axis_priority": "satisfaction", "space_cap": True},
            "import": {"date_format": "yyyy-MM-dd", "id_prefix": "C"},
        }
    })
    assert config.satisfaction_scale == ScaleRange(1, 7)
    assert config.midpoint == Midpoint(4, 5)
    assert config.show_special_zones is False
    assert config.high_zone_size == 2
    assert config.near_corners is NearCornerMode.HIGH
    assert config.proximity_threshold == 2
    assert config.axis_priority is Axis.SATISFACTION
    assert config.space_cap is True
    assert config.date_format == "yyyy-MM-dd"
    assert config.id_prefix == "C"


def test_load_from_yaml_file(tmp_path) -> None:
    path = tmp_path / "segmentation.yaml"
    path.write_text(
        "segmentation:\n"
        "  loyalty_scale: \"1-10\"\n"
        "  midpoint: \"3,5.5\"\n"
        "  proximity:\n"
        "    threshold: 2\n"
    )
    config = load_segmentation_config(str(path))
    assert config.loyalty_scale == ScaleRange(1, 10)
    assert config.midpoint == Midpoint(3, 5.5)
    assert config.proximity_threshold == 2


def test_environment_variable_selects_file(tmp_path, monkeypatch) -> None:
    path = tmp_path / "custom.yaml"
    path.write_text("segmentation:\n  satisfaction_scale: \"1-7\"\n")
    monkeypatch.setenv("SEGMENTOR_CONFIG", str(path))
    assert load_segmentation_config().satisfaction_scale == ScaleRange(1, 7)


def test_missing_or_empty_file_falls_back_to_defaults(tmp_path) -> None:
    assert load_segmentation_config(str(tmp_path / "missing.yaml")) == SegmentationConfig()

    empty = tmp_path / "empty.yaml"
    empty.write_text("")
    assert load_segmentation_config(str(empty)) == SegmentationConfig()


def test_invalid_values_in_file_raise(tmp_path) -> None:
    path = tmp_path / "bad.yaml"
    path.write_text("segmentation:\n  proximity:\n    axis_priority: diagonal\n")
    with pytest.raises(ConfigurationError):
        load_segmentation_config(str(path))


def test_shipped_configuration_matches_defaults(monkeypatch) -> None:
    monkeypatch.delenv("SEGMENTOR_CONFIG", raising=False)
    config = load_segmentation_config(os.path.join(config_path, "segmentation.yaml"))
    assert config == SegmentationConfig()
