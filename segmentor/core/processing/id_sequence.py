# core/processing/id_sequence.py

import re
from typing import Iterable

from ..models import CustomerRecord

_SUFFIX = re.compile(r"(\d+)$")


class IdSequence:
    """
    Sequential identifier generator handed to the import pipeline.

    Seed it from the existing dataset so new ids never collide with the
    numeric suffixes already in use.
    """

    def __init__(self, prefix: str = "CUST-", start: int = 1, width: int = 4):
        self.prefix = prefix
        self.width = width
        self._next = int(start)

    @classmethod
    def seeded_from(
        cls, records: Iterable[CustomerRecord], prefix: str = "CUST-", width: int = 4
    ) -> "IdSequence":
        """Next number = highest numeric id suffix in ``records`` + 1."""
        highest = 0
        for record in records:
            match = _SUFFIX.search(str(record.id))
            if match:
                highest = max(highest, int(match.group(1)))
        return cls(prefix, highest + 1, width)

    @property
    def peek(self) -> str:
        return self._format(self._next)

    def next_id(self) -> str:
        value = self._format(self._next)
        self._next += 1
        return value

    def reserve(self, record_id: str) -> None:
        """Skip past an explicit id so later generated ids stay unique."""
        match = _SUFFIX.search(str(record_id))
        if match and int(match.group(1)) >= self._next:
            self._next = int(match.group(1)) + 1

    def _format(self, number: int) -> str:
        return f"{self.prefix}{number:0{self.width}d}"
