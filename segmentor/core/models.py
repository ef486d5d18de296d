# core/models.py

from dataclasses import dataclass, field, asdict, replace
from typing import Any, Dict, List, Optional, Tuple

import pandas as pd  # type: ignore

from .errors import ConfigurationError


# ============================================================
# 📏 SCALE MODEL
# ============================================================

@dataclass(frozen=True)
class ScaleRange:
    """
    Closed integer interval for one axis (satisfaction or loyalty).

    Parameters
    ----------
    min : int
        Lowest valid value. Zero-based scales (e.g. 0-10) are allowed.
    max : int
        Highest valid value, strictly greater than ``min``.
    """

    min: int
    max: int

    def __post_init__(self) -> None:
        if int(self.min) != self.min or int(self.max) != self.max:
            raise ConfigurationError(f"❌ Scale bounds must be integers, got {self.min}-{self.max}")
        if self.min < 0:
            raise ConfigurationError(f"❌ Scale minimum must be >= 0, got {self.min}")
        if self.min >= self.max:
            raise ConfigurationError(
                f"❌ Scale minimum must be lower than maximum, got {self.min}-{self.max}"
            )

    @classmethod
    def parse(cls, text: str) -> "ScaleRange":
        """Build a scale from its textual ``"min-max"`` form."""
        parts = str(text).strip().split("-")
        if len(parts) != 2 or not all(p.strip().isdigit() for p in parts):
            raise ConfigurationError(f"❌ Invalid scale format: '{text}' (expected e.g. '1-5')")
        return cls(int(parts[0]), int(parts[1]))

    @property
    def span(self) -> int:
        return self.max - self.min

    def contains(self, value: float) -> bool:
        return self.min <= value <= self.max

    def default_threshold(self) -> float:
        return (self.min + self.max) / 2

    def __str__(self) -> str:
        return f"{self.min}-{self.max}"


@dataclass(frozen=True)
class Midpoint:
    """Satisfaction/loyalty threshold pair that splits the grid into quadrants."""

    sat: float
    loy: float

    @classmethod
    def default_for(cls, sat_scale: ScaleRange, loy_scale: ScaleRange) -> "Midpoint":
        return cls(sat_scale.default_threshold(), loy_scale.default_threshold())

    @classmethod
    def parse(cls, text: str) -> "Midpoint":
        parts = str(text).replace(";", ",").split(",")
        if len(parts) != 2:
            raise ConfigurationError(f"❌ Invalid midpoint '{text}' (expected 'sat,loy')")
        try:
            return cls(float(parts[0]), float(parts[1]))
        except ValueError:
            raise ConfigurationError(f"❌ Invalid midpoint '{text}' (not numeric)")

    def validate_against(self, sat_scale: ScaleRange, loy_scale: ScaleRange) -> None:
        """Raise ConfigurationError unless the midpoint is strictly inside both scales."""
        if not sat_scale.min < self.sat < sat_scale.max:
            raise ConfigurationError(
                f"❌ Satisfaction midpoint {self.sat} must lie strictly inside {sat_scale}"
            )
        if not loy_scale.min < self.loy < loy_scale.max:
            raise ConfigurationError(
                f"❌ Loyalty midpoint {self.loy} must lie strictly inside {loy_scale}"
            )
        if (self.sat * 2) % 1 or (self.loy * 2) % 1:
            raise ConfigurationError(
                f"❌ Midpoint ({self.sat}, {self.loy}) must sit on a whole or half step"
            )


# ============================================================
# 👤 CUSTOMER RECORDS
# ============================================================

@dataclass
class CustomerRecord:
    """
    Canonical unit of the dataset.

    ``excluded`` soft-deletes the record from classification and statistics
    while keeping it in storage. Extra import columns land in ``attributes``.
    """

    id: str
    satisfaction: float
    loyalty: float
    name: str = ""
    email: str = ""
    date: str = ""
    date_format: Optional[str] = None
    attributes: Dict[str, Any] = field(default_factory=dict)
    excluded: bool = False

    def to_dict(self) -> Dict[str, Any]:
        row = asdict(self)
        attributes = row.pop("attributes")
        for key, value in attributes.items():
            row.setdefault(key, value)
        return row

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "CustomerRecord":
        known = {"id", "satisfaction", "loyalty", "name", "email", "date", "date_format", "excluded"}
        attributes = dict(data.get("attributes") or {})
        attributes.update({k: v for k, v in data.items() if k not in known and k != "attributes"})
        return cls(
            id=str(data["id"]),
            satisfaction=data["satisfaction"],
            loyalty=data["loyalty"],
            name=data.get("name") or "",
            email=data.get("email") or "",
            date=data.get("date") or "",
            date_format=data.get("date_format"),
            attributes=attributes,
            excluded=bool(data.get("excluded", False)),
        )

    def with_changes(self, **changes: Any) -> "CustomerRecord":
        return replace(self, **changes)


def records_to_dataframe(records: List[CustomerRecord]) -> pd.DataFrame:
    """Flatten records (attributes included) into a DataFrame."""
    columns = ["id", "name", "email", "satisfaction", "loyalty", "date", "date_format", "excluded"]
    if not records:
        return pd.DataFrame(columns=columns)
    return pd.DataFrame([r.to_dict() for r in records])


# ============================================================
# 📝 VALIDATION REPORTS
# ============================================================

@dataclass(frozen=True)
class ReportItem:
    row: int
    id: str
    reason: str
    value: str


@dataclass(frozen=True)
class ValidationReport:
    """Immutable rejected/warning lists produced once per import."""

    rejected: Tuple[ReportItem, ...] = ()
    warnings: Tuple[ReportItem, ...] = ()

    @property
    def rejected_count(self) -> int:
        return len(self.rejected)

    @property
    def warning_count(self) -> int:
        return len(self.warnings)

    @property
    def has_issues(self) -> bool:
        return bool(self.rejected or self.warnings)

    def to_dataframe(self, kind: str = "rejected") -> pd.DataFrame:
        if kind not in ("rejected", "warnings"):
            raise ValueError(f"❌ Unknown report kind '{kind}'. Allowed values: rejected, warnings")
        items = self.rejected if kind == "rejected" else self.warnings
        return pd.DataFrame([asdict(i) for i in items], columns=["row", "id", "reason", "value"])


@dataclass(frozen=True)
class DuplicateCheckResult:
    is_duplicate: bool
    matched_record: Optional[CustomerRecord] = None
    reason: Optional[str] = None
