# core/segment/data_manager.py

import os
import logging
from typing import Dict, Optional

import pandas as pd  # type: ignore

from segmentor.utils import export_frame
from ..models import ValidationReport

logger = logging.getLogger(__name__)


class DataManager:
    """
    Handles all CSV exports for classification results and import reports.
    """

    def __init__(self, output_dir: str):
        """
        Initialize data manager.

        Parameters
        ----------
        output_dir : str
            Directory path for saving output files
        """
        self.output_dir = output_dir
        os.makedirs(output_dir, exist_ok=True)

    def save_all_results(
        self,
        classified: pd.DataFrame,
        distribution: pd.DataFrame,
        proximity: Optional[pd.DataFrame] = None,
    ) -> Dict[str, str]:
        """
        Save the classified table, the distribution and proximity counts.

        Returns
        -------
        Dict[str, str]
            File paths keyed by output name
        """
        logger.info("[STEP 5] Saving segmentation results...")

        paths = {
            "classified": export_frame(classified, self.output_dir, "classified_customers.csv"),
            "distribution": export_frame(distribution, self.output_dir, "segment_distribution.csv"),
        }
        if proximity is not None:
            paths["proximity"] = export_frame(proximity, self.output_dir, "proximity_relationships.csv")

        logger.info(f"💾 ALL FILES SAVED TO: {self.output_dir}")
        return paths

    def save_validation_report(self, report: ValidationReport) -> Dict[str, str]:
        """Save the rejected and warning lists of an import."""
        return {
            "rejected": export_frame(report.to_dataframe("rejected"), self.output_dir, "rejected_rows.csv"),
            "warnings": export_frame(report.to_dataframe("warnings"), self.output_dir, "warning_rows.csv"),
        }

    def save_duplicate_report(self, duplicates: pd.DataFrame) -> str:
        return export_frame(duplicates, self.output_dir, "duplicate_records.csv")
