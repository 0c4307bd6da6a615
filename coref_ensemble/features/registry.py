"""Feature extractor registration and lookup."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Optional, Sequence

from ..errors import ConfigurationError
from ..models import FeatureType

if TYPE_CHECKING:
    from .base import FeatureExtractor

# Global registry: feature name -> extractor class, in registration order
_EXTRACTOR_REGISTRY: dict[str, type] = {}


def feature_extractor(name: str, feature_type: FeatureType) -> Any:
    """
    Decorator for extractor registration.

    Usage:
        @feature_extractor(name="distance", feature_type=FeatureType.NUMERIC)
        class Distance(FeatureExtractor):
            def compute(self, pair, store): ...

    Registration order defines the column order of the instance schema.
    """

    def decorator(cls: type) -> type:
        if name in _EXTRACTOR_REGISTRY and _EXTRACTOR_REGISTRY[name] is not cls:
            raise ValueError(f"Feature extractor '{name}' registered twice")
        cls.name = name
        cls.feature_type = feature_type
        _EXTRACTOR_REGISTRY[name] = cls
        return cls

    return decorator


def get_extractor_class(name: str) -> type:
    try:
        return _EXTRACTOR_REGISTRY[name]
    except KeyError:
        raise ConfigurationError(
            f"Unknown feature extractor '{name}', known: {', '.join(_EXTRACTOR_REGISTRY)}"
        ) from None


def create_extractors(names: Optional[Sequence[str]] = None) -> list["FeatureExtractor"]:
    """Instantiate extractors; all registered ones in registry order if names is None."""
    if names is None:
        names = list(_EXTRACTOR_REGISTRY)
    if len(set(names)) != len(names):
        raise ConfigurationError(f"Duplicate feature extractors in {list(names)}")
    return [get_extractor_class(name)() for name in names]


def list_registered_extractors() -> list[str]:
    """List all registered feature names in registry order."""
    return list(_EXTRACTOR_REGISTRY.keys())
