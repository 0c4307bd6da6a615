"""Annotation store interface and the JSON-backed document implementation."""

from __future__ import annotations

import json
import logging
import re
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Optional

from ..errors import AnnotationError, ConfigurationError
from ..models import CoreferencePair, Entity, Mention, Word, decompose_entities

logger = logging.getLogger(__name__)

COREF_LEVEL = "coref"
SENTENCE_LEVEL = "sentence"

# Tokens that attach to the previous token when computing offsets
PUNCTUATION = re.compile(r"^[!\"#$%&'()*+,\-./:;<=>?@\[\\\]^_`{|}~]$")
STRIP_CHARS = re.compile(r"[\[\]()\-_\"]")


@dataclass
class Markable:
    """An annotation over a span of words on one annotation level."""

    markable_id: str
    level: str
    span: list[str]
    attributes: dict[str, str] = field(default_factory=dict)

    def get(self, attribute: str, default: Optional[str] = None) -> Optional[str]:
        return self.attributes.get(attribute, default)


class AnnotationStore(ABC):
    """
    Read access to one annotated document.

    Feature extractors query arbitrary annotation levels (pos, enamex,
    sentence, deprel, ...) through ``markables_at`` and
    ``lookup_attribute``; gold coreference chains come from
    ``gold_entities``.
    """

    document_id: str

    @abstractmethod
    def words(self) -> list[Word]:
        """All words in reading order."""

    @abstractmethod
    def word(self, word_id: str) -> Word:
        """Word by annotation id; raises AnnotationError if unknown."""

    @abstractmethod
    def gold_entities(self) -> list[Entity]:
        """Gold coreference chains."""

    @abstractmethod
    def has_level(self, level: str) -> bool:
        ...

    @abstractmethod
    def markables_at(self, level: str, word_id: str) -> list[Markable]:
        """Markables of ``level`` covering ``word_id``; raises AnnotationError for unknown levels."""

    def lookup_attribute(self, level: str, word_id: str, attribute: str) -> str:
        """Attribute of the first markable of ``level`` at ``word_id``."""
        markables = self.markables_at(level, word_id)
        if not markables:
            raise AnnotationError(f"No '{level}' markable at {word_id} in {self.document_id}")
        value = markables[0].get(attribute)
        if value is None:
            raise AnnotationError(
                f"Markable {markables[0].markable_id} on '{level}' has no attribute '{attribute}'"
            )
        return value

    def gold_pairs(self) -> list[CoreferencePair]:
        return decompose_entities(self.gold_entities())

    def stored_prediction(self, predictor: str) -> Optional[dict[str, Any]]:
        """Precomputed output of ``predictor`` kept with the document, if any."""
        return None


class Document(AnnotationStore):
    """In-memory annotation store built from a JSON document."""

    def __init__(
        self,
        document_id: str,
        words: list[Word],
        levels: dict[str, list[Markable]],
        predictions: Optional[dict[str, dict[str, Any]]] = None,
        coref_level: str = COREF_LEVEL,
    ):
        self.document_id = document_id
        self._words = sorted(words)
        self._word_map = {word.word_id: word for word in words}
        self.levels = levels
        self.predictions = predictions or {}
        self.coref_level = coref_level

        # level -> word id -> markables
        self._index: dict[str, dict[str, list[Markable]]] = {}
        for level, markables in levels.items():
            by_word: dict[str, list[Markable]] = {}
            for markable in markables:
                for word_id in markable.span:
                    by_word.setdefault(word_id, []).append(markable)
            self._index[level] = by_word

        self._assign_sentences()

    def _assign_sentences(self) -> None:
        """Set sentence index and position for every word covered by a sentence markable."""
        for sentence_index, markable in enumerate(self.levels.get(SENTENCE_LEVEL, [])):
            for position, word_id in enumerate(markable.span):
                word = self._word_map.get(word_id)
                if word is not None:
                    word.sentence = sentence_index
                    word.position_in_sentence = position

    def words(self) -> list[Word]:
        return list(self._words)

    def word(self, word_id: str) -> Word:
        try:
            return self._word_map[word_id]
        except KeyError:
            raise AnnotationError(f"Unknown word id '{word_id}' in {self.document_id}") from None

    def has_level(self, level: str) -> bool:
        return level in self._index

    def markables_at(self, level: str, word_id: str) -> list[Markable]:
        if level not in self._index:
            raise AnnotationError(f"Document {self.document_id} has no '{level}' level")
        return list(self._index[level].get(word_id, []))

    def mention_for_span(self, span: list[str], mention_type: Optional[str] = None) -> Mention:
        if not span:
            raise AnnotationError(f"Empty mention span in {self.document_id}")
        return Mention(words=[self.word(word_id) for word_id in span], mention_type=mention_type)

    def gold_entities(self) -> list[Entity]:
        """Group the coref level by coref_set, in order of first appearance."""
        entities: dict[str, Entity] = {}
        for markable in self.levels.get(self.coref_level, []):
            coref_set = markable.get("coref_set")
            if coref_set is None:
                logger.debug(f"Skipping markable {markable.markable_id} without coref_set")
                continue
            if coref_set not in entities:
                entities[coref_set] = Entity(entity_id=coref_set)
            entities[coref_set].add_mention(
                self.mention_for_span(markable.span, markable.get("mtype"))
            )
        return list(entities.values())

    def stored_prediction(self, predictor: str) -> Optional[dict[str, Any]]:
        return self.predictions.get(predictor)

    @classmethod
    def from_dict(cls, data: dict[str, Any], document_id: Optional[str] = None) -> "Document":
        """
        Build a document from its JSON representation.

        Expected layout::

            {"id": "...",
             "words": [{"id": "word_1", "token": "John"}, ...],
             "levels": {"coref": [{"span": ["word_1"], "coref_set": "set_1"}], ...},
             "predictions": {"lingpipe": {"chains": [[["word_1"], ["word_4"]]]}}}
        """
        doc_id = document_id or data.get("id")
        if not doc_id:
            raise AnnotationError("Document has no id")

        words = []
        offset = 0
        for raw in data.get("words", []):
            token = STRIP_CHARS.sub("", str(raw["token"])) or str(raw["token"])
            if PUNCTUATION.match(token):
                offset -= 1
            words.append(Word(token=token, word_id=str(raw["id"]), offset=offset))
            offset += len(token) + 1

        levels: dict[str, list[Markable]] = {}
        for level, raw_markables in data.get("levels", {}).items():
            markables = []
            for i, raw in enumerate(raw_markables):
                attributes = {
                    key: str(value) for key, value in raw.items() if key not in ("id", "span")
                }
                markables.append(Markable(
                    markable_id=str(raw.get("id", f"{level}_{i}")),
                    level=level,
                    span=[str(word_id) for word_id in raw.get("span", [])],
                    attributes=attributes,
                ))
            levels[level] = markables

        return cls(
            document_id=doc_id,
            words=words,
            levels=levels,
            predictions=data.get("predictions"),
        )

    @classmethod
    def load(cls, path: Path) -> "Document":
        logger.info(f"Loading annotations from {path}")
        try:
            with open(path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            raise AnnotationError(f"Couldn't read annotation file {path}: {e}") from e
        return cls.from_dict(data, document_id=data.get("id") or path.stem)


def load_documents(directory: Path) -> list[Document]:
    """Load every ``*.json`` document in a corpus directory, sorted by name."""
    if not directory.is_dir():
        raise ConfigurationError(f"Corpus directory not found: {directory}")
    files = sorted(directory.glob("*.json"))
    if not files:
        raise ConfigurationError(f"No annotation files found at the specified directory: {directory}")
    logger.info(f"{len(files)} annotation files will be processed")
    return [Document.load(path) for path in files]
