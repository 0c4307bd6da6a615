"""
Base interface for coreference predictors (ACR systems)
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import Optional

from ..annotation.store import AnnotationStore
from ..errors import PredictorFailure
from ..models import Entity

logger = logging.getLogger(__name__)


class Predictor(ABC):
    """
    Adapter around one external coreference predictor.

    Lifecycle per document: ``init(store)``, ``run()``, then
    ``predicted_entities()``. ``run`` raises PredictorFailure on any error.
    """

    def __init__(self, name: str):
        self.name = name
        self.store: Optional[AnnotationStore] = None
        self.logger = logger.getChild(name)
        self._entities: list[Entity] = []

    def init(self, store: AnnotationStore) -> None:
        """Bind the predictor to a document and forget earlier output."""
        self.store = store
        self._entities = []

    @abstractmethod
    def run(self) -> None:
        """Produce predictions for the bound document."""

    def predicted_entities(self) -> list[Entity]:
        return list(self._entities)

    def failure(self, message: str) -> PredictorFailure:
        document_id = self.store.document_id if self.store is not None else None
        return PredictorFailure(self.name, document_id, message)

    def predict(self, store: AnnotationStore) -> list[Entity]:
        """
        Run the full lifecycle on one document.

        Unexpected exceptions from the adapter are wrapped in
        PredictorFailure so callers only have to handle one error type.
        """
        self.init(store)
        try:
            self.run()
        except PredictorFailure:
            raise
        except Exception as e:
            raise self.failure(str(e)) from e
        entities = self.predicted_entities()
        self.logger.info(f"Predicted {len(entities)} entities for {store.document_id}")
        return entities
