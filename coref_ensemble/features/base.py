"""Feature extractor base class and the enumerated tag domains."""

from __future__ import annotations

from abc import ABC, abstractmethod
from enum import Enum
from typing import TYPE_CHECKING, Any, ClassVar

from ..models import CoreferencePair, Feature, FeatureType

if TYPE_CHECKING:
    from ..annotation.store import AnnotationStore


class POSTag(str, Enum):
    """Part-of-speech tags distinguished by the pos features."""

    PRP = "prp"
    PRP_POSSESSIVE = "prp$"
    NNP = "nnp"
    NN = "nn"
    NNS = "nns"
    DT = "dt"
    ELSE = "else"

    @classmethod
    def from_tag(cls, tag: str) -> "POSTag":
        for postag in cls:
            if postag.value == tag.lower():
                return postag
        return cls.ELSE


class NEType(str, Enum):
    """Named entity classes distinguished by the neType feature."""

    ORGANIZATION = "organization"
    LOCATION = "location"
    PERSON = "person"
    NONE = "none"
    OTHER = "other"

    @classmethod
    def from_tag(cls, tag: str) -> "NEType":
        for netype in cls:
            if netype.value == tag.lower():
                return netype
        return cls.OTHER


BOOLEAN_DOMAIN = ("true", "false")


class FeatureExtractor(ABC):
    """
    Computes one typed feature for a coreference pair.

    ``name`` and ``feature_type`` are set by the ``feature_extractor``
    registration decorator. Extractors for ``FeatureType.OTHER`` must
    declare their value domain in ``other_domain``.
    """

    name: ClassVar[str]
    feature_type: ClassVar[FeatureType]
    other_domain: ClassVar[tuple[str, ...]] = ()

    @property
    def is_numeric(self) -> bool:
        return self.feature_type == FeatureType.NUMERIC

    def domain(self) -> tuple[str, ...]:
        """Allowed string values of a categorical feature; empty for numeric ones."""
        if self.feature_type == FeatureType.BOOLEAN:
            return BOOLEAN_DOMAIN
        if self.feature_type == FeatureType.POSTAG:
            return tuple(tag.value for tag in POSTag)
        if self.feature_type == FeatureType.NETYPE:
            return tuple(netype.value for netype in NEType)
        if self.feature_type == FeatureType.OTHER:
            return self.other_domain
        return ()

    @abstractmethod
    def compute(self, pair: CoreferencePair, store: "AnnotationStore") -> Any:
        """Return the typed feature value for ``pair``."""

    def extract(self, pair: CoreferencePair, store: "AnnotationStore") -> Feature:
        feature = Feature(name=self.name, feature_type=self.feature_type,
                          value=self.compute(pair, store))
        pair.add_feature(feature)
        return feature

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(name={self.name!r})"
