# core/segment/__init__.py

"""
Satisfaction × Loyalty Segmentation
===================================

Grid geometry, quadrant classification and boundary-proximity analysis.

Usage:
------
    from segmentor.core.segment import QuadrantSegmentation

    segmenter = QuadrantSegmentation(records, config)
    classified_df, distribution, proximity = segmenter.run()

Individual Operations:
----------------------
    geometry = compute_geometry(ScaleRange(1, 5), ScaleRange(1, 5), Midpoint(3, 3))
    label = classify(4, 2, geometry)
    result = classify_proximity(records, geometry, threshold=1)
"""

from .config import Axis, NearCornerMode, SegmentationConfig, load_segmentation_config
from .grid_geometry import GridGeometry, ZoneBounds, compute_geometry, geometry_from_config
from .quadrant_classifier import (
    Segment,
    QuadrantClassifier,
    classify,
    base_quadrant,
    display_name,
    distribution,
    is_neutral,
)
from .proximity_classifier import (
    ProximityClassifier,
    ProximityCount,
    ProximityRelationship,
    ProximityResult,
    classify_proximity,
)
from .analyzer import SegmentationAnalyzer
from .data_manager import DataManager
from .segmentation import QuadrantSegmentation

__all__ = [
    'Axis',
    'NearCornerMode',
    'SegmentationConfig',
    'load_segmentation_config',
    'GridGeometry',
    'ZoneBounds',
    'compute_geometry',
    'geometry_from_config',
    'Segment',
    'QuadrantClassifier',
    'classify',
    'base_quadrant',
    'display_name',
    'distribution',
    'is_neutral',
    'ProximityClassifier',
    'ProximityCount',
    'ProximityRelationship',
    'ProximityResult',
    'classify_proximity',
    'SegmentationAnalyzer',
    'DataManager',
    'QuadrantSegmentation',
]
