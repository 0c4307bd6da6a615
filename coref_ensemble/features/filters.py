"""
Feature filter: restricts evaluation to pairs with selected feature values
"""

from __future__ import annotations

from typing import Iterable, Mapping, Optional, Sequence

from ..errors import ConfigurationError
from ..models import CoreferencePair, Feature, FeatureType
from ..utils.config import EnsembleConfig

RANGE_SEPARATOR = ";"
ALLOW_LIST_SEPARATOR = ";"


def value_matches(feature: Feature, target: str) -> bool:
    """
    Check one feature value against a selector.

    Numeric features take an inclusive ``"min;max"`` range, POS and NE
    features a ``;`` separated allow-list, everything else is compared
    case-insensitively.
    """
    if feature.feature_type == FeatureType.NUMERIC:
        low, high = _parse_range(feature.name, target)
        try:
            value = float(feature.value)
        except (TypeError, ValueError):
            raise ConfigurationError(
                f"Feature '{feature.name}' has non-numeric value '{feature.string_value}'"
            ) from None
        return low <= value <= high

    if feature.feature_type.is_enumerated:
        allowed = {tag.strip().lower() for tag in target.split(ALLOW_LIST_SEPARATOR)}
        return feature.string_value.lower() in allowed

    return feature.string_value.lower() == target.strip().lower()


def _parse_range(name: str, target: str) -> tuple[float, float]:
    parts = target.split(RANGE_SEPARATOR)
    if len(parts) != 2:
        raise ConfigurationError(f"Selector for '{name}' must look like 'min;max', got '{target}'")
    try:
        return float(parts[0]), float(parts[1])
    except ValueError:
        raise ConfigurationError(f"Selector for '{name}' is not numeric: '{target}'") from None


class FeatureFilter:
    """Keeps only pairs whose required features all match their selectors."""

    def __init__(self, required: Optional[Sequence[str]] = None,
                 selectors: Optional[Mapping[str, str]] = None):
        self.required = list(required or [])
        self.selectors = dict(selectors or {})

    @classmethod
    def from_config(cls, config: EnsembleConfig) -> "FeatureFilter":
        return cls(config.feature_filter, config.feature_selectors)

    @property
    def enabled(self) -> bool:
        return bool(self.required)

    def matches(self, pair: CoreferencePair) -> bool:
        for name in self.required:
            target = self.selectors.get(name)
            if target is None:
                raise ConfigurationError(f"No selector value configured for filtered feature '{name}'")
            feature = pair.feature(name)
            if feature is None:
                raise ConfigurationError(
                    f"Filtered feature '{name}' missing on pair {pair.describe()}; "
                    f"is its extractor enabled?"
                )
            if not value_matches(feature, target):
                return False
        return True

    def apply(self, pairs: Iterable[CoreferencePair]) -> list[CoreferencePair]:
        pairs = list(pairs)
        if not self.enabled:
            return pairs
        return [pair for pair in pairs if self.matches(pair)]

    def to_dict(self) -> dict[str, str]:
        return {name: self.selectors.get(name, "") for name in self.required}
