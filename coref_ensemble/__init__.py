"""Coreference ensemble package."""

__version__ = "0.1.0"
__author__ = "coref-ensemble"

from .annotation import AnnotationStore, Document, load_documents
from .evaluation import Evaluation, Scores, is_correct_pair
from .features import FeatureExtractionProcess, FeatureFilter
from .ml import AblationSearch, CombinationGenerator, EnsembleProcess, InstanceSchema, InstanceTable
from .models import CoreferencePair, Entity, Feature, FeatureType, Mention, Word, decompose_entity
from .utils.config import EnsembleConfig, load_config

__all__ = [
    "AblationSearch",
    "AnnotationStore",
    "CombinationGenerator",
    "CoreferencePair",
    "Document",
    "EnsembleConfig",
    "EnsembleProcess",
    "Entity",
    "Evaluation",
    "Feature",
    "FeatureExtractionProcess",
    "FeatureFilter",
    "FeatureType",
    "InstanceSchema",
    "InstanceTable",
    "Mention",
    "Scores",
    "Word",
    "decompose_entity",
    "is_correct_pair",
    "load_config",
    "load_documents",
]
