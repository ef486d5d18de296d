# core/processing/duplicate_checker.py
"""
Duplicate detection with historical tracking.

The same customer may legitimately appear several times across data
collection rounds. A candidate is only a duplicate of an existing record
when their identities match AND, if both carry a date, the dates match too.
"""

import logging
from dataclasses import dataclass, field
from typing import Iterable, List, Optional, Sequence, Tuple

import pandas as pd  # type: ignore

from ..models import CustomerRecord, DuplicateCheckResult

logger = logging.getLogger(__name__)


def _normalized(record: CustomerRecord) -> Tuple[str, str, str, str]:
    return (
        str(record.id or "").strip(),
        (record.name or "").strip(),
        (record.email or "").strip().lower(),
        (record.date or "").strip(),
    )


def identity_match(candidate: CustomerRecord, existing: CustomerRecord) -> Optional[str]:
    """
    Key on which two records share an identity, or None.

    Precedence: id, then email (both non-empty), then name, which only
    applies when neither record has an email.
    """
    c_id, c_name, c_email, _ = _normalized(candidate)
    e_id, e_name, e_email, _ = _normalized(existing)

    if c_id and c_id == e_id:
        return "id"
    if c_email and e_email and c_email == e_email:
        return "email"
    if not c_email and not e_email and c_name and c_name == e_name:
        return "name"
    return None


class DuplicateCheckService:
    """
    Decides whether a candidate duplicates a record in an existing set.
    """

    @staticmethod
    def check_for_duplicate(
        candidate: CustomerRecord,
        existing_records: Iterable[CustomerRecord],
        excluded_id: Optional[str] = None,
    ) -> DuplicateCheckResult:
        """
        Scan ``existing_records`` in order; the first match wins.

        Parameters
        ----------
        candidate : CustomerRecord
            Record about to be added or saved
        existing_records : Iterable[CustomerRecord]
            Records already in the dataset
        excluded_id : str, optional
            Identifier skipped during the scan (the record being edited)

        Returns
        -------
        DuplicateCheckResult
            Verdict, the matched record and the matching key(s)
        """
        skip = str(excluded_id).strip() if excluded_id is not None else None
        c_date = _normalized(candidate)[3]

        for existing in existing_records:
            if skip is not None and str(existing.id).strip() == skip:
                continue

            key = identity_match(candidate, existing)
            if key is None:
                continue

            e_date = _normalized(existing)[3]
            if c_date and e_date:
                if c_date == e_date:
                    return DuplicateCheckResult(True, existing, f"{key} and date")
                # Same customer, different collection round
                continue
            return DuplicateCheckResult(True, existing, key)

        return DuplicateCheckResult(False)


def check_for_duplicate(
    candidate: CustomerRecord,
    existing_records: Iterable[CustomerRecord],
    excluded_id: Optional[str] = None,
) -> DuplicateCheckResult:
    return DuplicateCheckService.check_for_duplicate(candidate, existing_records, excluded_id)


# ============================================================
# 📋 BATCH REPORT
# ============================================================

@dataclass
class DuplicateEntry:
    id: str
    name: str
    email: str
    reasons: List[str] = field(default_factory=list)

    @property
    def reason(self) -> str:
        return ", ".join(self.reasons)


@dataclass
class DuplicateReport:
    items: List[DuplicateEntry] = field(default_factory=list)

    @property
    def count(self) -> int:
        return len(self.items)

    def to_dataframe(self) -> pd.DataFrame:
        return pd.DataFrame(
            [{"ID": e.id, "Name": e.name or "Unnamed", "Email": e.email, "Reason": e.reason} for e in self.items],
            columns=["ID", "Name", "Email", "Reason"],
        )


def detect_batch_duplicates(
    rows: Sequence[CustomerRecord],
    existing_records: Sequence[CustomerRecord] = (),
) -> DuplicateReport:
    """
    Report every row of a batch that duplicates the existing dataset or
    another row of the same batch, under the historical-tracking policy.
    """
    entries: List[Optional[DuplicateEntry]] = [None] * len(rows)

    def flag(index: int, reason: str) -> None:
        if entries[index] is None:
            row = rows[index]
            entries[index] = DuplicateEntry(row.id, row.name, row.email)
        if reason not in entries[index].reasons:
            entries[index].reasons.append(reason)

    for i, row in enumerate(rows):
        verdict = DuplicateCheckService.check_for_duplicate(row, existing_records)
        if verdict.is_duplicate:
            flag(i, f"Matches existing record {verdict.matched_record.id} on {verdict.reason}")

        for j in range(i):
            earlier = rows[j]
            verdict = DuplicateCheckService.check_for_duplicate(row, [earlier])
            if verdict.is_duplicate:
                reason = f"Duplicate within imported file on {verdict.reason}"
                flag(j, reason)
                flag(i, reason)

    report = DuplicateReport([e for e in entries if e is not None])
    if report.count:
        logger.warning(f"⚠️ {report.count} duplicate row(s) detected in batch of {len(rows)}")
    return report
