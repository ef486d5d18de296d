# core/processing/import_validator.py

import re
import math
import logging
from dataclasses import dataclass, field
from datetime import date
from typing import Any, Dict, List, Mapping, Optional, Sequence, Tuple

import pandas as pd  # type: ignore

from ..errors import MissingHeaderError
from ..models import CustomerRecord, ReportItem, ScaleRange, ValidationReport, records_to_dataframe
from .date_processing import date_format_from_header, format_date, parse_date_string
from .duplicate_checker import DuplicateCheckService
from .header_processing import find_optional_headers, process_headers
from .id_sequence import IdSequence

logger = logging.getLogger(__name__)

EMAIL_PATTERN = re.compile(r"^[a-zA-Z0-9._%+-]+@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,}$")
METADATA_TOKENS = {"OPTIONAL", "REQUIRED"}
HEADER_ROW_OFFSET = 2


def validate_email(email: str) -> bool:
    """Empty emails are allowed; anything else must look like local@domain.tld."""
    return not email or bool(EMAIL_PATTERN.match(email))


def _text(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, float) and math.isnan(value):
        return ""
    return str(value).strip()


def _number(value: float) -> float:
    return int(value) if float(value).is_integer() else value


def _fmt(value: float) -> str:
    return str(_number(value))


def is_blank_row(row: Mapping[str, Any]) -> bool:
    """True for empty rows and template rows made only of OPTIONAL/REQUIRED markers."""
    values = [_text(v).upper() for v in row.values()]
    return all(v == "" or v in METADATA_TOKENS for v in values)


def _parse_score(
    raw: str, label: str, scale: ScaleRange, whole_only: bool
) -> Tuple[Optional[float], Optional[str]]:
    if raw == "":
        return None, f"{label} value is empty"
    try:
        value = float(raw)
    except ValueError:
        return None, f'Invalid {label.lower()} value "{raw}" (not a number)'
    if not math.isfinite(value):
        return None, f'Invalid {label.lower()} value "{raw}" (not a number)'
    if not scale.contains(value):
        return None, (
            f"Invalid {label.lower()} value {_fmt(value)} "
            f"(should be between {scale.min} and {scale.max})"
        )
    if whole_only and not value.is_integer():
        return None, f"Invalid {label.lower()} value {_fmt(value)} (must be a whole number)"
    if not whole_only and round(value, 1) != value:
        return None, f"Invalid {label.lower()} value {_fmt(value)} (at most one decimal place)"
    return _number(value), None


@dataclass
class ImportResult:
    """Clean records plus the rejected/warning report of one import."""

    records: List[CustomerRecord] = field(default_factory=list)
    report: ValidationReport = field(default_factory=ValidationReport)
    headers: Dict[str, Optional[str]] = field(default_factory=dict)

    @property
    def rejected_report(self) -> Tuple[ReportItem, ...]:
        return self.report.rejected

    @property
    def warning_report(self) -> Tuple[ReportItem, ...]:
        return self.report.warnings

    def to_dataframe(self) -> pd.DataFrame:
        return records_to_dataframe(self.records)


class ImportValidationPipeline:
    """
    Validates raw rows into clean, de-duplicated customer records.

    Rows are processed strictly in order: identifier reuse and duplicate
    resolution for a row depend on every row accepted before it.
    """

    def __init__(
        self,
        satisfaction_scale: ScaleRange,
        loyalty_scale: ScaleRange,
        existing_records: Sequence[CustomerRecord] = (),
        id_sequence: Optional[IdSequence] = None,
        date_format: Optional[str] = None,
        today: Optional[date] = None,
    ):
        """
        Parameters
        ----------
        satisfaction_scale, loyalty_scale : ScaleRange
            Closed intervals the scores must fall into
        existing_records : Sequence[CustomerRecord]
            Dataset already loaded before this import
        id_sequence : IdSequence, optional
            Generator for missing ids; seeded from ``existing_records`` if omitted
        date_format : str, optional
            Locks the date pattern instead of inferring it from the header
        today : date, optional
            Reference day for future-date warnings
        """
        self.satisfaction_scale = satisfaction_scale
        self.loyalty_scale = loyalty_scale
        self.existing_records = list(existing_records)
        self.id_sequence = id_sequence or IdSequence.seeded_from(self.existing_records)
        self.date_format = date_format
        self.today = today

    @classmethod
    def from_config(cls, config, existing_records: Sequence[CustomerRecord] = (), **kwargs) -> "ImportValidationPipeline":
        kwargs.setdefault("id_sequence", IdSequence.seeded_from(existing_records, config.id_prefix))
        kwargs.setdefault("date_format", config.date_format)
        return cls(config.satisfaction_scale, config.loyalty_scale, existing_records, **kwargs)

    # ---------------- Pipeline ----------------

    def validate_frame(self, df: pd.DataFrame) -> ImportResult:
        """Resolve the score columns from the header row, then validate."""
        headers = [str(c) for c in df.columns]
        resolution = process_headers(headers)
        rows = df.astype(object).where(df.notna(), "").to_dict("records")
        return self.validate_rows(rows, resolution.satisfaction_header, resolution.loyalty_header, headers)

    def validate_rows(
        self,
        raw_rows: Sequence[Mapping[str, Any]],
        satisfaction_header: str,
        loyalty_header: str,
        headers: Optional[Sequence[str]] = None,
    ) -> ImportResult:
        """
        Validate raw rows in order.

        Returns
        -------
        ImportResult
            Accepted records plus the rejected and warning reports

        Raises
        ------
        MissingHeaderError
            When the satisfaction or loyalty column is absent
        """
        if headers is None:
            headers = list(dict.fromkeys(k for row in raw_rows for k in row.keys()))
        headers = [str(h) for h in headers]

        missing = [
            f"Missing required column '{h}'"
            for h in (satisfaction_header, loyalty_header) if h not in headers
        ]
        if missing:
            raise MissingHeaderError(missing)

        optional = find_optional_headers(headers, exclude=(satisfaction_header, loyalty_header))
        self._satisfaction_header = satisfaction_header
        self._loyalty_header = loyalty_header
        self._optional = optional

        accepted: List[CustomerRecord] = []
        rejected: List[ReportItem] = []
        warnings: List[ReportItem] = []

        logger.info(f"➡️ Validating {len(raw_rows):,} rows (satisfaction='{satisfaction_header}', loyalty='{loyalty_header}')")

        for index, row in enumerate(raw_rows):
            if is_blank_row(row):
                continue
            row_number = index + HEADER_ROW_OFFSET
            try:
                record, errors, warning = self._validate_row(row)
            except Exception as e:  # a single bad row never aborts the batch
                logger.warning(f"⚠️ Row {row_number} failed unexpectedly: {e}")
                rejected.append(ReportItem(row_number, _text(row.get(optional["id"] or "ID")) or "unknown",
                                           str(e), str(dict(row))[:100] + "..."))
                continue

            if errors:
                rejected.append(ReportItem(row_number, record.id or "unknown", "; ".join(errors), self._excerpt(row)))
                continue

            verdict = DuplicateCheckService.check_for_duplicate(record, self.existing_records + accepted)
            if verdict.is_duplicate:
                rejected.append(ReportItem(
                    row_number,
                    record.id,
                    f"Duplicate entry (matched {verdict.matched_record.id} on {verdict.reason})",
                    self._excerpt(row),
                ))
                continue

            if warning:
                warnings.append(ReportItem(row_number, record.id, warning, record.date))
            accepted.append(record)

        report = ValidationReport(tuple(rejected), tuple(warnings))
        self._print_summary(len(accepted), report)
        headers_used = {"satisfaction": satisfaction_header, "loyalty": loyalty_header, **optional}
        return ImportResult(accepted, report, headers_used)

    def _validate_row(self, row: Mapping[str, Any]) -> Tuple[CustomerRecord, List[str], Optional[str]]:
        optional = self._optional
        errors: List[str] = []

        satisfaction, error = _parse_score(
            _text(row.get(self._satisfaction_header)), "Satisfaction", self.satisfaction_scale, False
        )
        if error:
            errors.append(error)
        loyalty, error = _parse_score(
            _text(row.get(self._loyalty_header)), "Loyalty", self.loyalty_scale, True
        )
        if error:
            errors.append(error)

        email = _text(row.get(optional["email"])) if optional["email"] else ""
        name = _text(row.get(optional["name"])) if optional["name"] else ""
        raw_date = _text(row.get(optional["date"])) if optional["date"] else ""

        if email and not validate_email(email):
            errors.append(f'Invalid email format: "{email}"')

        record_id = self._resolve_id(row, email)

        record = CustomerRecord(
            id=record_id,
            satisfaction=satisfaction if satisfaction is not None else 0,
            loyalty=loyalty if loyalty is not None else 0,
            name=name,
            email=email,
        )

        warning = None
        if raw_date:
            date_format = self.date_format or date_format_from_header(optional["date"])
            parsed = parse_date_string(raw_date, date_format, self.today)
            if not parsed.is_valid:
                errors.append(f"Invalid date: {parsed.error}")
            else:
                record.date = format_date(parsed.day, parsed.month, parsed.year, date_format)
                record.date_format = date_format
                warning = parsed.warning

        known = {self._satisfaction_header, self._loyalty_header, *[h for h in optional.values() if h]}
        for key, value in row.items():
            text = _text(value)
            if key not in known and text != "":
                record.attributes[str(key).lower()] = value

        return record, errors, warning

    def _resolve_id(self, row: Mapping[str, Any], email: str) -> str:
        """Explicit id, else the id of a pre-existing record with the same email, else a new one."""
        id_header = self._optional["id"]
        explicit = _text(row.get(id_header)) if id_header else ""
        if explicit:
            self.id_sequence.reserve(explicit)
            return explicit

        if email:
            normalized = email.lower()
            for existing in self.existing_records:
                if existing.email and existing.email.strip().lower() == normalized:
                    logger.debug(f"➡️ Reusing id {existing.id} for {email} (historical tracking)")
                    return existing.id

        return self.id_sequence.next_id()

    def _excerpt(self, row: Mapping[str, Any]) -> str:
        """Short ``key: value`` rendering of the id, score and date fields."""
        keys = [self._optional["id"], self._satisfaction_header, self._loyalty_header, self._optional["date"]]
        parts = []
        for key in keys:
            if key and key in row:
                clean_key = re.sub(r"[:|-]", "", str(key))
                parts.append(f"{clean_key}: {_text(row.get(key))}")
        return ", ".join(parts)

    def _print_summary(self, accepted: int, report: ValidationReport) -> None:
        logger.info(f"✅ Accepted rows: {accepted:,}")
        if report.rejected_count:
            logger.warning(f"⚠️ Rejected rows: {report.rejected_count:,}")
        if report.warning_count:
            logger.warning(f"⚠️ Rows with warnings: {report.warning_count:,}")


def validate_rows(
    raw_rows: Sequence[Mapping[str, Any]],
    satisfaction_header: str,
    loyalty_header: str,
    satisfaction_scale: ScaleRange,
    loyalty_scale: ScaleRange,
    existing_records: Sequence[CustomerRecord] = (),
    id_sequence: Optional[IdSequence] = None,
    date_format: Optional[str] = None,
    today: Optional[date] = None,
) -> ImportResult:
    """Functional entry point around ImportValidationPipeline."""
    pipeline = ImportValidationPipeline(
        satisfaction_scale, loyalty_scale, existing_records, id_sequence, date_format, today
    )
    return pipeline.validate_rows(raw_rows, satisfaction_header, loyalty_header)
