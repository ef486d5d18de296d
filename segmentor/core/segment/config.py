# core/segment/config.py

import os
import logging
from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Any, Dict, Iterable, Optional

from segmentor.utils import config_path, load_yaml, load_environment
from ..errors import ConfigurationError
from ..models import Midpoint, ScaleRange

logger = logging.getLogger(__name__)


class NearCornerMode(Enum):
    """Which corners get their adjacent near-corner cells."""

    NONE = "none"
    HIGH = "high"
    LOW = "low"
    BOTH = "both"

    @property
    def high(self) -> bool:
        return self in (NearCornerMode.HIGH, NearCornerMode.BOTH)

    @property
    def low(self) -> bool:
        return self in (NearCornerMode.LOW, NearCornerMode.BOTH)

    @classmethod
    def from_flags(cls, high: bool, low: bool) -> "NearCornerMode":
        if high and low:
            return cls.BOTH
        if high:
            return cls.HIGH
        if low:
            return cls.LOW
        return cls.NONE


class Axis(Enum):
    """Axis whose boundary wins when a point is near both quadrant splits."""

    LOYALTY = "loyalty"
    SATISFACTION = "satisfaction"


@dataclass
class SegmentationConfig:
    """
    Typed engine configuration.

    Parameters
    ----------
    satisfaction_scale, loyalty_scale : ScaleRange
        Valid value ranges for both axes.
    midpoint : Midpoint, optional
        Quadrant split; defaults to the centre of both scales.
    show_special_zones : bool
        When False, the corner cells fall back into their quadrants.
    near_corners : NearCornerMode
        Enables the near-corner cells next to the high and/or low corner.
    high_zone_size, low_zone_size : int
        Side length (in cells) of the corner zones.
    proximity_threshold : int
        Distance in cells that still counts as "near" a boundary.
    axis_priority : Axis
        Tie-break when a point is near both boundaries.
    space_cap : bool
        Limit near bands to the positions closest to the split.
    date_format : str, optional
        Locks the date pattern instead of inferring it from the header.
    id_prefix : str
        Prefix for generated customer identifiers.
    """

    satisfaction_scale: ScaleRange = field(default_factory=lambda: ScaleRange(1, 5))
    loyalty_scale: ScaleRange = field(default_factory=lambda: ScaleRange(1, 5))
    midpoint: Optional[Midpoint] = None
    show_special_zones: bool = True
    near_corners: NearCornerMode = NearCornerMode.NONE
    high_zone_size: int = 1
    low_zone_size: int = 1
    proximity_threshold: int = 1
    axis_priority: Axis = Axis.LOYALTY
    space_cap: bool = False
    date_format: Optional[str] = None
    id_prefix: str = "CUST-"

    def __post_init__(self) -> None:
        if self.midpoint is None:
            self.midpoint = Midpoint.default_for(self.satisfaction_scale, self.loyalty_scale)
        self.midpoint.validate_against(self.satisfaction_scale, self.loyalty_scale)
        for name in ("high_zone_size", "low_zone_size"):
            if int(getattr(self, name)) < 1:
                raise ConfigurationError(f"❌ {name} must be >= 1, got {getattr(self, name)}")
        if int(self.proximity_threshold) < 0:
            raise ConfigurationError(
                f"❌ proximity_threshold must be >= 0, got {self.proximity_threshold}"
            )

    def with_midpoint(self, midpoint: Midpoint) -> "SegmentationConfig":
        return replace(self, midpoint=midpoint)

    # ---------------- Parsing ----------------

    @classmethod
    def from_tokens(cls, tokens: Iterable[str], **overrides: Any) -> "SegmentationConfig":
        """
        Parse a legacy feature-token set once into a typed configuration.

        Plain tokens toggle features (``SHOW_NEAR_APOSTLES``); prefixed tokens
        carry a parameter after a colon (``APOSTLES_ZONE_SIZE:2``).
        """
        values: Dict[str, Any] = {}
        near_high = near_low = False

        for raw in tokens:
            token = str(raw).strip()
            if not token:
                continue
            key, _, param = token.partition(":")
            key = key.strip().upper()
            param = param.strip()

            if key == "SHOW_SPECIAL_ZONES":
                values["show_special_zones"] = True
            elif key == "HIDE_SPECIAL_ZONES":
                values["show_special_zones"] = False
            elif key == "SHOW_NEAR_APOSTLES":
                near_high = True
            elif key == "SHOW_NEAR_TERRORISTS":
                near_low = True
            elif key == "SPACE_CAP":
                values["space_cap"] = True
            elif key == "APOSTLES_ZONE_SIZE":
                values["high_zone_size"] = _int_param(key, param)
            elif key == "TERRORISTS_ZONE_SIZE":
                values["low_zone_size"] = _int_param(key, param)
            elif key == "PROXIMITY_THRESHOLD":
                values["proximity_threshold"] = _int_param(key, param)
            elif key == "MIDPOINT":
                values["midpoint"] = Midpoint.parse(param)
            elif key == "AXIS_PRIORITY":
                values["axis_priority"] = _enum_param(Axis, key, param)
            elif key == "DATE_FORMAT":
                values["date_format"] = param
            elif key == "SAT_SCALE":
                values["satisfaction_scale"] = ScaleRange.parse(param)
            elif key == "LOY_SCALE":
                values["loyalty_scale"] = ScaleRange.parse(param)
            else:
                logger.warning(f"⚠️ Ignoring unknown feature token '{token}'")

        if near_high or near_low:
            values["near_corners"] = NearCornerMode.from_flags(near_high, near_low)
        values.update(overrides)
        return cls(**values)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "SegmentationConfig":
        """Build a configuration from a plain mapping such as a parsed YAML file."""
        if "segmentation" in data:
            data = data["segmentation"]

        values: Dict[str, Any] = {}
        if "satisfaction_scale" in data:
            values["satisfaction_scale"] = ScaleRange.parse(data["satisfaction_scale"])
        if "loyalty_scale" in data:
            values["loyalty_scale"] = ScaleRange.parse(data["loyalty_scale"])
        if data.get("midpoint") is not None:
            mid = data["midpoint"]
            values["midpoint"] = (
                Midpoint(float(mid["sat"]), float(mid["loy"]))
                if isinstance(mid, dict) else Midpoint.parse(mid)
            )

        zones = data.get("special_zones") or {}
        if "enabled" in zones:
            values["show_special_zones"] = bool(zones["enabled"])
        if "high_zone_size" in zones:
            values["high_zone_size"] = int(zones["high_zone_size"])
        if "low_zone_size" in zones:
            values["low_zone_size"] = int(zones["low_zone_size"])
        if "near_corners" in zones:
            values["near_corners"] = _enum_param(NearCornerMode, "near_corners", zones["near_corners"])

        proximity = data.get("proximity") or {}
        if "threshold" in proximity:
            values["proximity_threshold"] = int(proximity["threshold"])
        if "axis_priority" in proximity:
            values["axis_priority"] = _enum_param(Axis, "axis_priority", proximity["axis_priority"])
        if "space_cap" in proximity:
            values["space_cap"] = bool(proximity["space_cap"])

        imports = data.get("import") or {}
        if imports.get("date_format"):
            values["date_format"] = str(imports["date_format"])
        if imports.get("id_prefix") is not None:
            values["id_prefix"] = str(imports["id_prefix"])

        return cls(**values)


def _int_param(key: str, param: str) -> int:
    try:
        return int(param)
    except ValueError:
        raise ConfigurationError(f"❌ Token {key} expects an integer parameter, got '{param}'")


def _enum_param(enum_cls, key: str, param: Any):
    try:
        return enum_cls(str(param).strip().lower())
    except ValueError:
        allowed = ", ".join(m.value for m in enum_cls)
        raise ConfigurationError(f"❌ Invalid value '{param}' for {key}. Allowed values: {allowed}")


def load_segmentation_config(path: Optional[str] = None) -> SegmentationConfig:
    """
    Load the engine configuration from YAML.

    The file is resolved from ``path``, then the ``SEGMENTOR_CONFIG``
    environment variable, then ``config/segmentation.yaml``. A missing or
    unreadable file falls back to the built-in defaults.
    """
    load_environment()
    final_path = path or os.getenv("SEGMENTOR_CONFIG") or os.path.join(config_path, "segmentation.yaml")

    try:
        data = load_yaml(final_path)
    except (FileNotFoundError, ValueError) as e:
        logger.warning(f"⚠️ {e}")
        logger.warning("⚠️ Using default segmentation configuration...")
        return SegmentationConfig()

    config = SegmentationConfig.from_dict(data)
    logger.info(f"✅ Segmentation configuration loaded from {final_path}")
    return config
