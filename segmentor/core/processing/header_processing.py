# core/processing/header_processing.py
"""
Header-matching strategy for imported tables.

Optional columns (id, name, email, date) are located with an ordered list of
named predicates over normalized header names: the first predicate that
matches any header wins, so an exact "date" column is preferred over a
column that merely contains "date". The required satisfaction and loyalty
columns are resolved by ``process_headers``, which also reads the scale
encoded in the header (``Satisfaction:1-5``, ``Loy0-10``).
"""

import re
import logging
from dataclasses import dataclass, field
from typing import Callable, Dict, List, Optional, Sequence, Tuple

from ..errors import ConfigurationError, MissingHeaderError
from ..models import ScaleRange

logger = logging.getLogger(__name__)

SATISFACTION_SCALES = ("1-3", "1-5", "1-7", "0-5", "0-7")
LOYALTY_SCALES = ("1-5", "1-7", "1-10", "0-10")


def normalize_header(header: str) -> str:
    """Lower-case and strip everything but letters and digits."""
    return re.sub(r"[^a-z0-9]", "", str(header).lower().strip())


@dataclass(frozen=True)
class HeaderPredicate:
    name: str
    test: Callable[[str], bool]

    def __call__(self, header: str) -> bool:
        return self.test(header)


HEADER_PREDICATES: Dict[str, Tuple[HeaderPredicate, ...]] = {
    "id": (
        HeaderPredicate("exact id", lambda h: h.strip().lower() == "id"),
        HeaderPredicate("customer id", lambda h: normalize_header(h) in ("customerid", "custid")),
    ),
    "date": (
        HeaderPredicate("exact date", lambda h: h.strip().lower() == "date"),
        HeaderPredicate("contains date", lambda h: "date" in h.lower()),
    ),
    "email": (
        HeaderPredicate("exact email", lambda h: h.strip().lower() == "email"),
        HeaderPredicate("email variant", lambda h: normalize_header(h) in ("emailaddress", "mail")),
    ),
    "name": (
        HeaderPredicate("exact name", lambda h: h.strip().lower() == "name"),
        HeaderPredicate("name variant", lambda h: normalize_header(h) in ("customername", "fullname")),
    ),
}


def find_header(headers: Sequence[str], predicates: Sequence[HeaderPredicate]) -> Optional[str]:
    """First header matched by the earliest predicate, or None."""
    for predicate in predicates:
        for header in headers:
            if predicate(header):
                return header
    return None


def find_optional_headers(headers: Sequence[str], exclude: Sequence[str] = ()) -> Dict[str, Optional[str]]:
    """Resolve the id/date/email/name columns, skipping ``exclude``."""
    candidates = [h for h in headers if h not in exclude]
    return {fld: find_header(candidates, preds) for fld, preds in HEADER_PREDICATES.items()}


# ============================================================
# 📏 SCALE HEADERS
# ============================================================

def is_satisfaction_header(header: str) -> bool:
    if re.match(r"^(Satisfaction|Sat|CSAT)([:|-]|\d|$)", header.strip(), re.IGNORECASE):
        return True
    # "Saturday" or "sat_date" are not score columns
    return bool(re.match(r"^(?:satisfaction|c?sat(?![a-z_]))", header.strip().lower()))


def is_loyalty_header(header: str) -> bool:
    if re.match(r"^(Loyalty|Loy)([:|-]|\d|$)", header.strip(), re.IGNORECASE):
        return True
    if normalize_header(header) == "nps":
        return True
    return bool(re.match(r"^(?:loyalty|loy(?![a-z_]))", header.strip().lower()))


def extract_scale_from_header(header: str) -> Optional[str]:
    """
    Read a ``min-max`` scale from a header name.

    Returns None when no scale is present or when the header is ambiguous
    (``Loy-10``, ``NPS``) and the data has to decide between 0-10 and 1-10.
    """
    for pattern in (r":(\d+-\d+)", r"-(\d+-\d+)", r"\((\d+-\d+)\)"):
        match = re.search(pattern, header)
        if match:
            return match.group(1)

    match = re.match(r"^(?:Sat|CSAT|Satisfaction|Loy|Loyalty)(\d+-\d+)", header, re.IGNORECASE)
    if match:
        return match.group(1)

    is_loyalty = "loy" in normalize_header(header)
    for pattern in (r":(\d+)$", r"-(\d+)$", r"^(?:Sat|CSAT|Satisfaction|Loy|Loyalty)(\d+)$"):
        match = re.search(pattern, header, re.IGNORECASE)
        if match:
            max_value = int(match.group(1))
            if max_value == 10 and is_loyalty and pattern != r":(\d+)$":
                return None
            return f"1-{max_value}"

    return None


def validate_scale(scale: Optional[str], kind: str) -> bool:
    if not scale:
        return False
    allowed = SATISFACTION_SCALES if kind == "satisfaction" else LOYALTY_SCALES
    return scale in allowed


@dataclass(frozen=True)
class ScaleDetection:
    definitive: Optional[str]
    possible_scales: Tuple[str, ...] = ()
    needs_user_input: bool = False
    data_range: Tuple[float, float] = (0, 0)


def detect_possible_scales(header: str, values: Sequence[float]) -> ScaleDetection:
    """
    Use the observed values to settle an ambiguous loyalty scale.

    A zero in the data means a zero-based scale; values starting at 1 with a
    maximum of 10 are ambiguous and need confirmation.
    """
    numbers = [v for v in values if v == v]
    if not numbers:
        return ScaleDetection(None)

    low, high = min(numbers), max(numbers)
    data_range = (low, high)
    match = re.search(r"-(\d+)$", header)
    max_from_header = int(match.group(1)) if match else None

    if normalize_header(header) == "nps" and max_from_header is None:
        if low == 0:
            return ScaleDetection("0-10", data_range=data_range)
        if low == 1 and high == 10:
            return ScaleDetection(None, ("1-10", "0-10"), True, data_range)
        if low == 1:
            return ScaleDetection(f"1-{int(high)}", data_range=data_range)
        return ScaleDetection(None, data_range=data_range)

    if max_from_header is None:
        return ScaleDetection(None, data_range=data_range)
    if low == 0:
        return ScaleDetection(f"0-{max_from_header}", data_range=data_range)
    if max_from_header == 10:
        return ScaleDetection(None, ("1-10", "0-10"), True, data_range)
    return ScaleDetection(f"1-{max_from_header}", data_range=data_range)


@dataclass
class HeaderResolution:
    satisfaction_header: str
    loyalty_header: str
    satisfaction_scale: Optional[ScaleRange] = None
    loyalty_scale: Optional[ScaleRange] = None
    optional: Dict[str, Optional[str]] = field(default_factory=dict)
    needs_confirmation: bool = False


def process_headers(headers: Sequence[str]) -> HeaderResolution:
    """
    Resolve the required satisfaction/loyalty columns and their scales.

    Raises
    ------
    MissingHeaderError
        When either column is missing or present more than once
    ConfigurationError
        When a header carries a scale that is not supported
    """
    errors: List[str] = []
    sat_headers = [h for h in headers if is_satisfaction_header(h)]
    loy_headers = [h for h in headers if is_loyalty_header(h)]

    if not sat_headers:
        errors.append('Missing satisfaction column (Expected "Satisfaction", "Sat", or "CSAT")')
    elif len(sat_headers) > 1:
        errors.append("Multiple satisfaction columns found. Please include only one.")
    if not loy_headers:
        errors.append('Missing loyalty column (Expected "Loyalty", "Loy", or "NPS")')
    elif len(loy_headers) > 1:
        errors.append("Multiple loyalty columns found. Please include only one.")
    if errors:
        raise MissingHeaderError(errors)

    sat_header, loy_header = sat_headers[0], loy_headers[0]
    resolution = HeaderResolution(sat_header, loy_header)

    sat_scale = extract_scale_from_header(sat_header)
    if sat_scale is not None:
        if not validate_scale(sat_scale, "satisfaction"):
            raise ConfigurationError(
                f"❌ Invalid satisfaction scale: {sat_scale}. Allowed scales are: {', '.join(SATISFACTION_SCALES)}"
            )
        resolution.satisfaction_scale = ScaleRange.parse(sat_scale)

    loy_scale = extract_scale_from_header(loy_header)
    if loy_scale is not None:
        if not validate_scale(loy_scale, "loyalty"):
            raise ConfigurationError(
                f"❌ Invalid loyalty scale: {loy_scale}. Allowed scales are: {', '.join(LOYALTY_SCALES)}"
            )
        resolution.loyalty_scale = ScaleRange.parse(loy_scale)
    else:
        resolution.needs_confirmation = True

    resolution.optional = find_optional_headers(headers, exclude=(sat_header, loy_header))
    logger.info(f"✅ Headers resolved: satisfaction='{sat_header}', loyalty='{loy_header}'")
    return resolution
