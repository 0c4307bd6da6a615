"""
Configuration management for the ensemble pipeline
"""

import copy
import logging
from enum import Enum
from pathlib import Path
from typing import Dict, Any, List, Optional, Sequence

import yaml
from pydantic import BaseModel, Field, ValidationError

from ..errors import ConfigurationError

logger = logging.getLogger(__name__)


class EvaluationMode(str, Enum):
    """Which pairs take part in the evaluation"""
    FULL = "full"
    DIRECT_NEIGHBOR_ONLY = "direct_neighbor_only"


class MentionMatch(str, Enum):
    """How a gold mention is matched against a predicted one"""
    FIRST_WORD = "first_word"
    OVERLAP = "overlap"


class DedupPolicy(str, Enum):
    """What to do with a pair accepted from more than one predictor"""
    DROP = "drop"
    KEEP_ONE = "keep_one"


class ClassifierConfig(BaseModel):
    """Configuration of the ensemble classifier."""
    name: str = "J48"
    subclassifiers: List[str] = Field(default_factory=list)
    stacking: bool = False
    options: Dict[str, Any] = Field(default_factory=dict)


class EnsembleConfig(BaseModel):
    """Run configuration, created once and handed to every component."""

    # Corpora and outputs
    training_dir: Path = Path("./data/training")
    test_dir: Path = Path("./data/test")
    output_dir: Path = Path("./results")
    log_file: Optional[Path] = None
    instance_table: str = "results.csv"

    # Predictors, in the order they appear in the predictor column
    predictors: List[str] = Field(default_factory=list)

    # Feature extraction; None selects every registered extractor
    feature_extractors: Optional[List[str]] = None
    feature_filter: List[str] = Field(default_factory=list)
    feature_selectors: Dict[str, str] = Field(default_factory=dict)

    # Evaluation
    evaluation_mode: EvaluationMode = EvaluationMode.FULL
    mention_match: MentionMatch = MentionMatch.FIRST_WORD
    dedup_policy: DedupPolicy = DedupPolicy.DROP

    classifier: ClassifierConfig = Field(default_factory=ClassifierConfig)

    # Reports
    print_correct_pairs: bool = True
    print_wrong_pairs: bool = True

    def corpus_dir(self, corpus: str) -> Path:
        """Directory of the 'training' or 'test' corpus."""
        if corpus == "training":
            return self.training_dir
        if corpus == "test":
            return self.test_dir
        raise ConfigurationError(f"Unknown corpus '{corpus}', expected 'training' or 'test'")

    @property
    def instance_table_path(self) -> Path:
        return self.output_dir / self.instance_table


DEFAULT_CONFIG = EnsembleConfig().model_dump(mode="json")


class ConfigManager:
    """
    Raw configuration mapping: ``DEFAULT_CONFIG``, then an optional YAML
    file merged over it, then dotted-path overrides. ``to_model`` validates
    the result into an ``EnsembleConfig``.
    """

    def __init__(self, config_path: Optional[Path] = None):
        self.config = copy.deepcopy(DEFAULT_CONFIG)

        if config_path and config_path.exists():
            self.load_config(config_path)
        elif config_path:
            logger.warning(f"Config file not found: {config_path}, using defaults")

    def load_config(self, config_path: Path) -> None:
        """Merge a YAML file over the defaults."""
        try:
            with open(config_path, 'r') as f:
                file_config = yaml.safe_load(f) or {}
        except (OSError, yaml.YAMLError) as e:
            raise ConfigurationError(f"Failed to load config from {config_path}: {e}") from e

        if not isinstance(file_config, dict):
            raise ConfigurationError(f"Config file {config_path} must contain a mapping")

        self.config = self._merge_configs(DEFAULT_CONFIG, file_config)
        logger.info(f"Loaded configuration from {config_path}")

    def get(self, key_path: str, default: Any = None) -> Any:
        """Value at a dotted path such as ``classifier.name``, or ``default``."""
        value: Any = self.config
        for key in key_path.split('.'):
            if not isinstance(value, dict) or key not in value:
                return default
            value = value[key]
        return value

    def set(self, key_path: str, value: Any) -> None:
        """Store ``value`` at a dotted path, creating missing sections."""
        *sections, last = key_path.split('.')
        target = self.config
        for key in sections:
            if not isinstance(target.get(key), dict):
                target[key] = {}
            target = target[key]
        target[last] = value

    def override(self, assignment: str) -> None:
        """
        Apply a ``key.path=value`` override, e.g. from the command line.

        The value is parsed as YAML, so ``classifier.subclassifiers=[J48, BAYES]``
        sets a list and ``print_wrong_pairs=false`` a boolean.
        """
        key_path, sep, raw = assignment.partition('=')
        key_path = key_path.strip()
        if not sep or not key_path:
            raise ConfigurationError(f"Override '{assignment}' is not of the form key=value")
        try:
            value = yaml.safe_load(raw)
        except yaml.YAMLError as e:
            raise ConfigurationError(f"Cannot parse value of override '{assignment}': {e}") from e
        self.set(key_path, value)
        logger.debug(f"Config override {key_path}={value!r}")

    @classmethod
    def _merge_configs(cls, base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
        # Sections merge key by key, anything else is replaced
        merged = copy.deepcopy(base)
        for key, value in override.items():
            if isinstance(merged.get(key), dict) and isinstance(value, dict):
                merged[key] = cls._merge_configs(merged[key], value)
            else:
                merged[key] = copy.deepcopy(value)
        return merged

    def to_model(self) -> EnsembleConfig:
        """Validate the merged configuration."""
        try:
            return EnsembleConfig(**self.config)
        except ValidationError as e:
            raise ConfigurationError(f"Invalid configuration: {e}") from e


def load_config(config_path: Optional[Path] = None, overrides: Sequence[str] = ()) -> EnsembleConfig:
    manager = ConfigManager(config_path)
    for assignment in overrides:
        manager.override(assignment)
    return manager.to_model()
