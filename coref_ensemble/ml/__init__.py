"""
Instance encoding, classifiers, ensemble training and ablation search
"""

from .ablation import AblationResult, AblationSearch, AblationTrial, CombinationGenerator
from .classifiers import ClassifierBackend, SklearnClassifier, create_classifier
from .ensemble import EnsembleProcess, TrainingResult, balance_negatives, deduplicate
from .instances import (
    NEGATIVE,
    POSITIVE,
    UNKNOWN,
    Column,
    InstanceSchema,
    InstanceTable,
)

__all__ = [
    "AblationResult",
    "AblationSearch",
    "AblationTrial",
    "ClassifierBackend",
    "Column",
    "CombinationGenerator",
    "EnsembleProcess",
    "InstanceSchema",
    "InstanceTable",
    "NEGATIVE",
    "POSITIVE",
    "SklearnClassifier",
    "TrainingResult",
    "UNKNOWN",
    "balance_negatives",
    "create_classifier",
    "deduplicate",
]
