"""
Feature extraction for coreference pairs
"""

# Import extractors to trigger registration
from . import extractors  # noqa: F401
from .base import FeatureExtractor, NEType, POSTag
from .distribution import FeatureDistribution
from .filters import FeatureFilter
from .process import FeatureExtractionProcess
from .registry import (
    create_extractors,
    feature_extractor,
    get_extractor_class,
    list_registered_extractors,
)

__all__ = [
    "FeatureDistribution",
    "FeatureExtractionProcess",
    "FeatureExtractor",
    "FeatureFilter",
    "NEType",
    "POSTag",
    "create_extractors",
    "feature_extractor",
    "get_extractor_class",
    "list_registered_extractors",
]
