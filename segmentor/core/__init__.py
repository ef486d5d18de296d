# segmentor/core/__init__.py
"""
Core module initializer for Segmentor.

Provides the import pipeline, the data model and the segmentation engine.
"""

from .errors import SegmentorError, ConfigurationError, MissingHeaderError
from .models import (
    ScaleRange,
    Midpoint,
    CustomerRecord,
    ReportItem,
    ValidationReport,
    DuplicateCheckResult,
    records_to_dataframe,
)
from .processing import (
    DataLoader,
    IdSequence,
    DuplicateCheckService,
    ImportValidationPipeline,
    ImportResult,
    check_for_duplicate,
    detect_batch_duplicates,
    validate_rows,
)
from .segment import (
    Axis,
    NearCornerMode,
    SegmentationConfig,
    load_segmentation_config,
    GridGeometry,
    compute_geometry,
    Segment,
    QuadrantClassifier,
    classify,
    ProximityClassifier,
    ProximityResult,
    classify_proximity,
    SegmentationAnalyzer,
    DataManager,
    QuadrantSegmentation,
)

__all__ = [
    # Errors
    "SegmentorError",
    "ConfigurationError",
    "MissingHeaderError",

    # Data model
    "ScaleRange",
    "Midpoint",
    "CustomerRecord",
    "ReportItem",
    "ValidationReport",
    "DuplicateCheckResult",
    "records_to_dataframe",

    # Import
    "DataLoader",
    "IdSequence",
    "DuplicateCheckService",
    "ImportValidationPipeline",
    "ImportResult",
    "check_for_duplicate",
    "detect_batch_duplicates",
    "validate_rows",

    # Segmentation
    "Axis",
    "NearCornerMode",
    "SegmentationConfig",
    "load_segmentation_config",
    "GridGeometry",
    "compute_geometry",
    "Segment",
    "QuadrantClassifier",
    "classify",
    "ProximityClassifier",
    "ProximityResult",
    "classify_proximity",
    "SegmentationAnalyzer",
    "DataManager",
    "QuadrantSegmentation",
]
