"""Exception hierarchy for the ensemble pipeline."""

from __future__ import annotations

from typing import TYPE_CHECKING, Optional

if TYPE_CHECKING:
    from .models import CoreferencePair


class EnsembleError(Exception):
    """Base class for all errors raised by coref_ensemble."""


class ConfigurationError(EnsembleError):
    """Invalid or inconsistent configuration. Aborts the current run."""


class AnnotationError(EnsembleError):
    """A requested annotation level, markable or attribute does not exist."""


class ExtractionFailure(EnsembleError):
    """One feature extractor failed on one pair. Never fatal."""

    def __init__(self, feature: str, pair: "CoreferencePair", cause: Exception):
        self.feature = feature
        self.pair = pair
        self.cause = cause
        super().__init__(f"Couldn't extract feature '{feature}' for {pair.describe()}: {cause}")


class PredictorFailure(EnsembleError):
    """A predictor could not produce output for a document."""

    def __init__(self, predictor: str, document_id: Optional[str], message: str):
        self.predictor = predictor
        self.document_id = document_id
        super().__init__(f"Predictor '{predictor}' failed on '{document_id}': {message}")


class EncodingError(EnsembleError):
    """A pair or row does not fit the instance schema."""


class TrainingError(EnsembleError):
    """The classifier backend could not be trained or queried."""


class OutputWriteError(EnsembleError):
    """The instance table or a report could not be written."""
