"""
Runs the configured feature extractors over coreference pairs
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Iterable, Optional, Sequence

from ..errors import ConfigurationError, ExtractionFailure
from ..models import CoreferencePair
from .base import FeatureExtractor
from .registry import create_extractors

if TYPE_CHECKING:
    from ..annotation.store import AnnotationStore


class FeatureExtractionProcess:
    """
    Annotates pairs with every configured feature, in extractor order.

    A failing extractor never aborts the pass: the failure is logged,
    kept in ``failures`` until the next pass and the pair simply lacks
    that feature.
    """

    def __init__(
        self,
        extractors: Optional[Sequence[FeatureExtractor]] = None,
        logger: Optional[logging.Logger] = None,
    ):
        self.extractors = list(extractors) if extractors is not None else create_extractors()
        self.logger = logger or logging.getLogger(__name__)
        self.failures: list[ExtractionFailure] = []

    @classmethod
    def from_names(
        cls, names: Optional[Sequence[str]] = None, logger: Optional[logging.Logger] = None
    ) -> "FeatureExtractionProcess":
        return cls(create_extractors(names), logger=logger)

    @property
    def names(self) -> list[str]:
        return [extractor.name for extractor in self.extractors]

    def extract(self, pairs: Iterable[CoreferencePair], store: "AnnotationStore") -> None:
        """Clear and rebuild the feature vector of every pair."""
        self.failures = []
        for pair in pairs:
            pair.clear_features()
            for extractor in self.extractors:
                try:
                    extractor.extract(pair, store)
                except Exception as e:
                    failure = ExtractionFailure(extractor.name, pair, e)
                    self.failures.append(failure)
                    self.logger.warning(str(failure))

    def restricted_to(self, names: Sequence[str]) -> "FeatureExtractionProcess":
        """A process over the given subset of this process' extractors."""
        by_name = {extractor.name: extractor for extractor in self.extractors}
        missing = [name for name in names if name not in by_name]
        if missing:
            raise ConfigurationError(f"Feature extractors not configured: {', '.join(missing)}")
        return FeatureExtractionProcess([by_name[name] for name in names], logger=self.logger)
