"""
Classifier backends that accept or reject candidate pairs
"""

from __future__ import annotations

import logging
import pickle
from abc import ABC, abstractmethod
from collections import Counter
from pathlib import Path
from typing import Any, Callable, Optional, Sequence

from sklearn.base import ClassifierMixin
from sklearn.dummy import DummyClassifier
from sklearn.ensemble import AdaBoostClassifier, BaggingClassifier, StackingClassifier
from sklearn.naive_bayes import GaussianNB
from sklearn.neighbors import KNeighborsClassifier
from sklearn.tree import DecisionTreeClassifier

from ..errors import ConfigurationError, OutputWriteError, TrainingError
from ..utils.config import ClassifierConfig
from .instances import InstanceTable

logger = logging.getLogger(__name__)

# Base algorithms by their configured name
BASE_ALGORITHMS: dict[str, Callable[..., ClassifierMixin]] = {
    "J48": lambda **options: DecisionTreeClassifier(**{"min_samples_leaf": 2, **options}),
    "BFTREE": lambda **options: DecisionTreeClassifier(**{"max_leaf_nodes": 32, **options}),
    "BAYES": lambda **options: GaussianNB(**options),
    "NEARESTNEIGHBOR": lambda **options: KNeighborsClassifier(**{"n_neighbors": 1, **options}),
    "KSTAR": lambda **options: KNeighborsClassifier(**{"weights": "distance", **options}),
    "ZEROR": lambda **options: DummyClassifier(**{"strategy": "most_frequent", **options}),
}

# Meta algorithms wrap exactly one base estimator
META_ALGORITHMS: dict[str, Callable[..., ClassifierMixin]] = {
    "BAGGING": lambda estimator, **options: BaggingClassifier(estimator=estimator, **options),
    "ADABOOST": lambda estimator, **options: AdaBoostClassifier(estimator=estimator, **options),
}

MAX_STACKING_FOLDS = 5


class ClassifierBackend(ABC):
    """Binary classifier over instance rows; labels are '+' and '-'."""

    @abstractmethod
    def train(self, table: InstanceTable) -> None:
        """Fit on every row of ``table``."""

    @abstractmethod
    def classify(self, row: Sequence[float]) -> str:
        """Label of one encoded row; the row's own label cell is ignored."""


def _base_estimator(name: str, options: Optional[dict[str, Any]] = None) -> ClassifierMixin:
    factory = BASE_ALGORITHMS.get(name.upper())
    if factory is None:
        raise ConfigurationError(
            f"Unknown classifier '{name}', known: {', '.join(list(BASE_ALGORITHMS) + list(META_ALGORITHMS))}"
        )
    return factory(**(options or {}))


class SklearnClassifier(ClassifierBackend):
    """
    scikit-learn backend configured by a ClassifierConfig.

    - a base algorithm name builds that estimator,
    - ``BAGGING``/``ADABOOST`` need exactly one subclassifier,
    - ``stacking: true`` stacks the subclassifiers under ``name``.

    The configuration is validated when the backend is created.
    """

    def __init__(self, config: Optional[ClassifierConfig] = None):
        self.config = config or ClassifierConfig()
        self.model: Optional[ClassifierMixin] = None
        self._validate()

    def _validate(self) -> None:
        # Build once to surface configuration errors before any training
        try:
            self._build(min_class_count=MAX_STACKING_FOLDS, n_samples=MAX_STACKING_FOLDS)
        except TypeError as e:
            raise ConfigurationError(f"Invalid options for classifier '{self.config.name}': {e}") from e

    def _build(self, min_class_count: int, n_samples: int) -> ClassifierMixin:
        config = self.config
        name = config.name.upper()

        if config.stacking:
            if not config.subclassifiers:
                raise ConfigurationError("Stacking needs at least one subclassifier")
            if name in META_ALGORITHMS:
                raise ConfigurationError(f"'{config.name}' can't be the final estimator of a stack")
            estimators = [
                (f"{sub.lower()}_{i}", self._fit_neighbors(_base_estimator(sub), n_samples))
                for i, sub in enumerate(config.subclassifiers)
            ]
            folds = max(2, min(MAX_STACKING_FOLDS, min_class_count))
            return StackingClassifier(
                estimators=estimators,
                final_estimator=self._fit_neighbors(_base_estimator(name), n_samples),
                cv=folds,
                **config.options,
            )

        if name in META_ALGORITHMS:
            if len(config.subclassifiers) != 1:
                raise ConfigurationError(
                    f"'{config.name}' needs exactly one subclassifier, got {len(config.subclassifiers)}"
                )
            sub = self._fit_neighbors(_base_estimator(config.subclassifiers[0]), n_samples)
            return META_ALGORITHMS[name](sub, **config.options)

        if config.subclassifiers:
            raise ConfigurationError(f"'{config.name}' takes no subclassifiers")
        return self._fit_neighbors(_base_estimator(name, config.options), n_samples)

    @staticmethod
    def _fit_neighbors(estimator: ClassifierMixin, n_samples: int) -> ClassifierMixin:
        """Neighbor searches can't ask for more neighbors than there are samples."""
        if isinstance(estimator, KNeighborsClassifier) and estimator.n_neighbors > n_samples:
            estimator.set_params(n_neighbors=max(1, n_samples))
        return estimator

    def train(self, table: InstanceTable) -> None:
        if len(table) == 0:
            raise TrainingError("Can't train a classifier on an empty instance table")

        labels = table.labels()
        class_counts = Counter(labels)
        if self.config.stacking and (len(class_counts) < 2 or min(class_counts.values()) < 2):
            raise TrainingError(f"Stacking needs two instances of each class, got {dict(class_counts)}")

        self.model = self._build(min(class_counts.values()), len(labels))
        try:
            self.model.fit(table.feature_matrix(), labels)
        except ValueError as e:
            raise TrainingError(f"Couldn't train {self.config.name}: {e}") from e

        logger.info(f"Trained {self.describe()} on {len(labels)} instances {dict(class_counts)}")

    def classify(self, row: Sequence[float]) -> str:
        if self.model is None:
            raise TrainingError("Classifier used before training")
        try:
            return str(self.model.predict([list(row[:-1])])[0])
        except ValueError as e:
            raise TrainingError(f"Couldn't classify instance: {e}") from e

    def describe(self) -> str:
        if self.config.stacking:
            return f"STACKING({self.config.name}; {', '.join(self.config.subclassifiers)})"
        if self.config.subclassifiers:
            return f"{self.config.name}({', '.join(self.config.subclassifiers)})"
        return self.config.name

    def save(self, path: Path) -> None:
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            with open(path, "wb") as model_file:
                pickle.dump(self, model_file)
        except OSError as e:
            raise OutputWriteError(f"Couldn't save classifier to {path}: {e}") from e

    @staticmethod
    def load(path: Path) -> "SklearnClassifier":
        try:
            with open(path, "rb") as model_file:
                classifier = pickle.load(model_file)
        except (OSError, EOFError, pickle.UnpicklingError) as e:
            raise ConfigurationError(f"Couldn't load classifier from {path}: {e}") from e
        if not isinstance(classifier, SklearnClassifier):
            raise ConfigurationError(f"{path} does not hold a trained classifier")
        return classifier


def create_classifier(config: Optional[ClassifierConfig] = None) -> ClassifierBackend:
    return SklearnClassifier(config)
