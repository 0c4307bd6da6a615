"""
Data models for coreference pairs and their features
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, ClassVar, Iterable, Optional


class FeatureType(str, Enum):
    """Closed set of feature value types"""
    NUMERIC = "numeric"
    BOOLEAN = "boolean"
    POSTAG = "postag"
    NETYPE = "netype"
    OTHER = "other"

    @property
    def is_enumerated(self) -> bool:
        """Types whose values come from a fixed list of tags."""
        return self in (FeatureType.POSTAG, FeatureType.NETYPE)


@dataclass
class Word:
    """A single token of an annotated document."""

    token: str
    word_id: str
    offset: int = 0
    sentence: Optional[int] = None
    position_in_sentence: Optional[int] = None

    def __lt__(self, other: "Word") -> bool:
        return self.offset < other.offset


@dataclass
class Mention:
    """
    A span of words referring to an entity.

    Word order is reading order. For matching purposes a mention is
    identified by the annotation id of its first word only.
    """

    words: list[Word] = field(default_factory=list)
    mention_type: Optional[str] = None

    def add_word(self, word: Word) -> None:
        self.words.append(word)

    @property
    def first_word(self) -> Word:
        if not self.words:
            raise ValueError("Mention has no words")
        return self.words[0]

    @property
    def key(self) -> str:
        return self.first_word.word_id

    @property
    def text(self) -> str:
        return " ".join(word.token for word in self.words)

    @property
    def word_ids(self) -> list[str]:
        return [word.word_id for word in self.words]


@dataclass
class Entity:
    """
    A coreference chain: mentions of one referent in insertion order.

    Predictors that only emit single links are represented by one
    ``null`` entity per link (see ``wrap_pair``).
    """

    NULL_ID: ClassVar[str] = "null"

    entity_id: str
    mentions: list[Mention] = field(default_factory=list)

    def add_mention(self, mention: Mention) -> None:
        self.mentions.append(mention)

    @property
    def is_null(self) -> bool:
        return self.entity_id == self.NULL_ID

    @classmethod
    def wrap_pair(cls, antecedent: Mention, anaphor: Mention) -> "Entity":
        return cls(entity_id=cls.NULL_ID, mentions=[antecedent, anaphor])

    def decompose(self) -> list["CoreferencePair"]:
        return decompose_entity(self)


@dataclass
class Feature:
    """A typed feature value attached to a pair."""

    name: str
    feature_type: FeatureType
    value: Any
    string_value: str = field(init=False)

    def __post_init__(self) -> None:
        self.string_value = render_value(self.value)


def render_value(value: Any) -> str:
    """String rendering used for filters, encoding and reports."""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, Enum):
        return str(value.value)
    return str(value)


@dataclass(eq=False)
class CoreferencePair:
    """A candidate link between an antecedent and an anaphor."""

    antecedent: Mention
    anaphor: Mention
    direct_neighbor: bool = False
    predictor: Optional[str] = None
    features: dict[str, Feature] = field(default_factory=dict)

    @property
    def key(self) -> tuple[str, str]:
        return (self.antecedent.key, self.anaphor.key)

    def same_pair(self, other: "CoreferencePair") -> bool:
        """True if both pairs link the same first words in the same roles."""
        return self.key == other.key

    def add_feature(self, feature: Feature) -> None:
        self.features[feature.name] = feature

    def clear_features(self) -> None:
        self.features.clear()

    def feature(self, name: str) -> Optional[Feature]:
        return self.features.get(name)

    def describe(self) -> str:
        return (f"{self.antecedent.first_word.token} ({self.antecedent.key}) ... "
                f"{self.anaphor.first_word.token} ({self.anaphor.key})")


def decompose_entity(entity: Entity) -> list[CoreferencePair]:
    """
    Split a chain m0..m(n-1) into all C(n, 2) pairs.

    Pair (m_i, m_j) for every i < j; only consecutive mentions are
    direct neighbors.
    """
    pairs = []
    mentions = entity.mentions
    for i in range(len(mentions) - 1):
        for j in range(i + 1, len(mentions)):
            pairs.append(CoreferencePair(
                antecedent=mentions[i],
                anaphor=mentions[j],
                direct_neighbor=(j == i + 1),
            ))
    return pairs


def decompose_entities(entities: Iterable[Entity]) -> list[CoreferencePair]:
    pairs: list[CoreferencePair] = []
    for entity in entities:
        pairs.extend(decompose_entity(entity))
    return pairs
