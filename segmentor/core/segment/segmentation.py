# core/segment/segmentation.py

import logging
from typing import Dict, List, Optional, Tuple

import pandas as pd  # type: ignore

from segmentor.utils import get_path
from ..models import CustomerRecord, Midpoint, records_to_dataframe
from .analyzer import SegmentationAnalyzer
from .config import SegmentationConfig, load_segmentation_config
from .data_manager import DataManager
from .grid_geometry import GridGeometry, geometry_from_config
from .proximity_classifier import ProximityClassifier, ProximityResult
from .quadrant_classifier import QuadrantClassifier

logger = logging.getLogger(__name__)


class QuadrantSegmentation:
    """
    Satisfaction × loyalty segmentation orchestrator.
    Coordinates:
    - Geometry computation
    - Per-customer classification
    - Distribution and proximity analysis
    - Data export
    """

    def __init__(
        self,
        records: List[CustomerRecord],
        config: Optional[SegmentationConfig] = None,
    ) -> None:
        self.records = list(records)
        self.config = config or load_segmentation_config()

        self.output_dir: Optional[str] = None

        self._geometry: Optional[GridGeometry] = None
        self._classified: Optional[pd.DataFrame] = None
        self.distribution: Optional[pd.DataFrame] = None
        self.proximity: Optional[ProximityResult] = None

        self._print_initialization_summary()

    def _print_initialization_summary(self) -> None:
        logger.info("✅ QuadrantSegmentation initialized")
        logger.info(f"   - Total customers: {len(self.records):,}")
        logger.info(f"   - Scales: {self.config.satisfaction_scale} x {self.config.loyalty_scale}")
        logger.info(f"   - Midpoint: ({self.config.midpoint.sat}, {self.config.midpoint.loy})")

    # ---------------- State ----------------

    @property
    def geometry(self) -> GridGeometry:
        if self._geometry is None:
            self._geometry = geometry_from_config(self.config)
        return self._geometry

    def _invalidate(self) -> None:
        self._geometry = None
        self._classified = None
        self.distribution = None
        self.proximity = None

    def set_midpoint(self, midpoint: Midpoint) -> GridGeometry:
        """
        Move the quadrant split. The new geometry is computed in full before
        any cached label is dropped, so an invalid midpoint leaves state untouched.
        """
        new_config = self.config.with_midpoint(midpoint)
        geometry = geometry_from_config(new_config)
        self.config = new_config
        self._invalidate()
        self._geometry = geometry
        logger.info(f"➡️ Midpoint moved to ({midpoint.sat}, {midpoint.loy})")
        return geometry

    def _set_excluded(self, record_id: str, excluded: bool) -> int:
        changed = 0
        for record in self.records:
            if record.id == record_id and record.excluded != excluded:
                record.excluded = excluded
                changed += 1
        if changed:
            self._classified = None
            self.distribution = None
            self.proximity = None
        else:
            logger.warning(f"⚠️ No record changed for id '{record_id}'")
        return changed

    def exclude(self, record_id: str) -> int:
        return self._set_excluded(record_id, True)

    def include(self, record_id: str) -> int:
        return self._set_excluded(record_id, False)

    # ---------------- Pipeline ----------------

    def run(self) -> Tuple[pd.DataFrame, pd.DataFrame, ProximityResult]:
        """Execute complete segmentation pipeline."""
        logger.info("=" * 80)
        logger.info("🚀 SATISFACTION × LOYALTY SEGMENTATION PIPELINE")
        logger.info("=" * 80)

        logger.info("[STEP 1] Computing grid geometry...")
        geometry = self.geometry
        logger.info(
            f"   - Grid: {geometry.total_cols} x {geometry.total_rows}, "
            f"near-corner room: {geometry.has_room_for_near_corner}"
        )

        logger.info("[STEP 2] Classifying customers...")
        classified = self.classify()

        logger.info("[STEP 3] Calculating distribution...")
        distribution = self.calculate_distribution()

        logger.info("[STEP 4] Analysing boundary proximity...")
        proximity = self.analyze_proximity()

        self._print_final_summary(distribution)
        return classified, distribution, proximity

    def _print_final_summary(self, distribution: pd.DataFrame) -> None:
        logger.info("=" * 80)
        logger.info("🎉 PIPELINE COMPLETE!")
        logger.info("=" * 80)
        for _, row in distribution[distribution["Count"] > 0].iterrows():
            logger.info(f"   - {row['segment_name']}: {row['Count']:,} customers ({row['Percentage']:.1f}%)")

    def classify(self) -> pd.DataFrame:
        if self._classified is None:
            classifier = QuadrantClassifier.from_config(self.geometry, self.config)
            self._classified = classifier.classify_frame(records_to_dataframe(self.records))
        return self._classified

    def calculate_distribution(self) -> pd.DataFrame:
        analyzer = SegmentationAnalyzer(self.classify())
        self.distribution = analyzer.calculate_distribution()
        analyzer.print_distribution(self.distribution)
        return self.distribution

    def analyze_proximity(self) -> ProximityResult:
        classifier = ProximityClassifier.from_config(self.geometry, self.config)
        self.proximity = classifier.classify_proximity(self.records)
        return self.proximity

    def save_results(self, output_dir: Optional[str] = None) -> Dict[str, str]:
        if self.distribution is None or self.proximity is None:
            self.run()
        manager = DataManager(output_dir or self.output_dir or get_path("segmentation_processed"))
        return manager.save_all_results(
            self.classify(), self.distribution, self.proximity.to_dataframe()
        )
