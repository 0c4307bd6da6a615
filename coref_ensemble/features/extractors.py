"""The registered pair features.

Registration order here is the column order of every instance table.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from ..errors import AnnotationError
from ..models import CoreferencePair, FeatureType, Mention, Word
from .base import FeatureExtractor, NEType, POSTag
from .registry import feature_extractor

if TYPE_CHECKING:
    from ..annotation.store import AnnotationStore

logger = logging.getLogger(__name__)

POS_LEVEL = "pos"
DEPREL_LEVEL = "deprel"
ENAMEX_LEVEL = "enamex"
SENTENCE_LEVEL = "sentence"

SUBJECT_TAG = "sbj"
PRONOUN_TAGS = (POSTag.PRP, POSTag.PRP_POSSESSIVE)


def _pos_tag(store: "AnnotationStore", word: Word) -> POSTag:
    return POSTag.from_tag(store.lookup_attribute(POS_LEVEL, word.word_id, "tag"))


def _word_number(word: Word) -> int:
    """Numeric suffix of an annotation id, e.g. 12 for ``word_12``."""
    _, _, number = word.word_id.rpartition("_")
    try:
        return int(number)
    except ValueError:
        raise AnnotationError(f"Word id '{word.word_id}' carries no word number") from None


def _sentence_index(word: Word) -> int:
    if word.sentence is None:
        raise AnnotationError(f"Word {word.word_id} is not covered by a sentence markable")
    return word.sentence


@feature_extractor(name="anaphorPos", feature_type=FeatureType.POSTAG)
class AnaphorPos(FeatureExtractor):
    """POS tag of the anaphor's first word."""

    def compute(self, pair: CoreferencePair, store: "AnnotationStore") -> POSTag:
        return _pos_tag(store, pair.anaphor.first_word)


@feature_extractor(name="isSubj", feature_type=FeatureType.BOOLEAN)
class IsSubject(FeatureExtractor):
    """True if either mention starts with a subject."""

    def compute(self, pair: CoreferencePair, store: "AnnotationStore") -> bool:
        try:
            anaphor_tag = store.lookup_attribute(DEPREL_LEVEL, pair.anaphor.first_word.word_id, "tag")
            antecedent_tag = store.lookup_attribute(DEPREL_LEVEL, pair.antecedent.first_word.word_id, "tag")
        except AnnotationError as e:
            logger.warning(f"No dependency tag for {pair.describe()}: {e}")
            return False
        return SUBJECT_TAG in (anaphor_tag.lower(), antecedent_tag.lower())


@feature_extractor(name="distance", feature_type=FeatureType.NUMERIC)
class Distance(FeatureExtractor):
    """Number of words between the first words of both mentions."""

    def compute(self, pair: CoreferencePair, store: "AnnotationStore") -> int:
        return abs(_word_number(pair.anaphor.first_word) - _word_number(pair.antecedent.first_word))


@feature_extractor(name="stringMatch", feature_type=FeatureType.BOOLEAN)
class StringMatch(FeatureExtractor):

    def compute(self, pair: CoreferencePair, store: "AnnotationStore") -> bool:
        return pair.anaphor.first_word.token == pair.antecedent.first_word.token


@feature_extractor(name="antecedentPos", feature_type=FeatureType.POSTAG)
class AntecedentPos(FeatureExtractor):
    """POS tag of the antecedent's first word."""

    def compute(self, pair: CoreferencePair, store: "AnnotationStore") -> POSTag:
        return _pos_tag(store, pair.antecedent.first_word)


@feature_extractor(name="sentenceOffset", feature_type=FeatureType.NUMERIC)
class SentenceOffset(FeatureExtractor):
    """Number of sentence boundaries between the two mentions."""

    def compute(self, pair: CoreferencePair, store: "AnnotationStore") -> int:
        return abs(_sentence_index(pair.anaphor.first_word) - _sentence_index(pair.antecedent.first_word))


@feature_extractor(name="pronounCountSentence", feature_type=FeatureType.NUMERIC)
class PronounCountSentence(FeatureExtractor):
    """Personal and possessive pronouns in the anaphor's sentence."""

    def compute(self, pair: CoreferencePair, store: "AnnotationStore") -> int:
        markables = store.markables_at(SENTENCE_LEVEL, pair.anaphor.first_word.word_id)
        if not markables:
            raise AnnotationError(
                f"No sentence markable at {pair.anaphor.first_word.word_id} in {store.document_id}"
            )

        count = 0
        for word_id in markables[0].span:
            pos = store.markables_at(POS_LEVEL, word_id)
            if pos and POSTag.from_tag(pos[0].get("tag", "")) in PRONOUN_TAGS:
                count += 1
        return count


@feature_extractor(name="neType", feature_type=FeatureType.NETYPE)
class NamedEntityType(FeatureExtractor):
    """Named entity class found over the antecedent, else over the anaphor."""

    def compute(self, pair: CoreferencePair, store: "AnnotationStore") -> NEType:
        for mention in (pair.antecedent, pair.anaphor):
            tag = self._enamex_tag(mention, store)
            if tag is not None:
                return NEType.from_tag(tag)
        return NEType.NONE

    @staticmethod
    def _enamex_tag(mention: Mention, store: "AnnotationStore"):
        for word in mention.words:
            for markable in store.markables_at(ENAMEX_LEVEL, word.word_id):
                tag = markable.get("tag")
                if tag:
                    return tag
        return None
