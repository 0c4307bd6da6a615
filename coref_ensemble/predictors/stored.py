"""
Predictor that replays output stored alongside the annotated document
"""

from __future__ import annotations

from ..errors import AnnotationError
from ..models import Entity, Mention
from .base import Predictor


class StoredPredictor(Predictor):
    """
    Replays precomputed predictions from ``store.stored_prediction(name)``.

    Two output shapes are understood:

    - ``{"chains": [[span, span, ...], ...]}`` for systems that build chains,
    - ``{"pairs": [[antecedent_span, anaphor_span], ...]}`` for systems that
      only link pairs; each pair becomes its own ``null`` entity.

    A span is a list of word ids.
    """

    def run(self) -> None:
        if self.store is None:
            raise self.failure("run() called before init()")

        output = self.store.stored_prediction(self.name)
        if output is None:
            raise self.failure("no stored output for this document")

        if "chains" not in output and "pairs" not in output:
            raise self.failure("stored output has neither 'chains' nor 'pairs'")

        try:
            entities = []
            for i, chain in enumerate(output.get("chains", [])):
                entities.append(Entity(
                    entity_id=f"{self.name}_{i}",
                    mentions=[self._mention(span) for span in chain],
                ))
            for pair in output.get("pairs", []):
                if len(pair) != 2:
                    raise self.failure(f"pair must have two spans, got {len(pair)}")
                entities.append(Entity.wrap_pair(self._mention(pair[0]), self._mention(pair[1])))
        except AnnotationError as e:
            raise self.failure(str(e)) from e

        self._entities = entities

    def _mention(self, span: list[str]) -> Mention:
        if not span:
            raise self.failure("empty mention span")
        return Mention(words=[self.store.word(str(word_id)) for word_id in span])
