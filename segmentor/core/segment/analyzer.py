# core/segment/analyzer.py

import logging
from typing import Dict

import pandas as pd  # type: ignore

from .quadrant_classifier import QUADRANTS, Segment, base_quadrant, display_name

logger = logging.getLogger(__name__)


class SegmentationAnalyzer:
    """
    Summaries over a classified customer table.
    """

    def __init__(self, df: pd.DataFrame, classic_names: bool = False):
        """
        Initialize analyzer.

        Parameters
        ----------
        df : pd.DataFrame
            Classified customers with a ``segment`` column and an optional
            ``excluded`` flag
        classic_names : bool
            Use classic instead of modern display names
        """
        self.df = df
        self.classic_names = classic_names

    @property
    def active(self) -> pd.DataFrame:
        if "excluded" in self.df.columns:
            return self.df[~self.df["excluded"].astype(bool)]
        return self.df

    def calculate_distribution(self) -> pd.DataFrame:
        """
        Count and share of active customers per segment label.

        Returns
        -------
        pd.DataFrame
            One row per label (zero-filled) with Count and Percentage
        """
        active = self.active
        total = len(active)

        counts = active.groupby("segment").size() if total else pd.Series(dtype=int)
        distribution = pd.DataFrame({"segment": [s.value for s in Segment]})
        distribution["segment_name"] = [display_name(s, self.classic_names) for s in Segment]
        distribution["Count"] = distribution["segment"].map(counts).fillna(0).astype(int)
        distribution["Percentage"] = (
            (distribution["Count"] / total * 100).round(1) if total else 0.0
        )
        return distribution

    def quadrant_totals(self) -> Dict[Segment, int]:
        """Counts folded back into the four quadrants."""
        totals = {q: 0 for q in QUADRANTS}
        for label, count in self.active["segment"].value_counts().items():
            totals[base_quadrant(Segment(label))] += int(count)
        return totals

    def quadrant_coverage(self) -> int:
        """How many of the four quadrants hold at least one active customer."""
        return sum(1 for count in self.quadrant_totals().values() if count > 0)

    def print_distribution(self, distribution: pd.DataFrame) -> None:
        logger.info("📊 Segment distribution:")
        for _, row in distribution.iterrows():
            logger.info(f"   - {row['segment_name']}: {row['Count']:,} ({row['Percentage']:.1f}%)")
