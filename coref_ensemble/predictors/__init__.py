"""
Coreference predictors whose output the ensemble re-ranks
"""

from typing import Callable, Dict, List

from ..errors import ConfigurationError
from .base import Predictor
from .stored import StoredPredictor

# Predictor kinds; configured names without an explicit kind are replayed
PREDICTOR_KINDS: Dict[str, Callable[[str], Predictor]] = {
    "stored": StoredPredictor,
}


def build_predictors(names: List[str], kind: str = "stored") -> List[Predictor]:
    """Instantiate one predictor per configured name."""
    if kind not in PREDICTOR_KINDS:
        raise ConfigurationError(f"Unknown predictor kind '{kind}'")
    if not names:
        raise ConfigurationError("No predictors configured")
    if len(set(names)) != len(names):
        raise ConfigurationError(f"Duplicate predictor names in {names}")
    return [PREDICTOR_KINDS[kind](name) for name in names]


__all__ = [
    "PREDICTOR_KINDS",
    "Predictor",
    "StoredPredictor",
    "build_predictors",
]
