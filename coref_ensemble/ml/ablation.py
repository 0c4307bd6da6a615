"""
Ablation search: scores the ensemble for every non-empty feature subset
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import Any, Iterator, Optional, Sequence

from ..annotation.store import AnnotationStore
from ..errors import EnsembleError
from ..reporting import ResultWriter
from ..utils.config import EnsembleConfig
from .classifiers import create_classifier
from .ensemble import EnsembleProcess
from .instances import InstanceTable


class CombinationGenerator:
    """
    Enumerates the size-r combinations of range(n) in lexicographic order.

    >>> list(CombinationGenerator(3, 2))
    [(0, 1), (0, 2), (1, 2)]
    """

    def __init__(self, n: int, r: int):
        if n < 1:
            raise ValueError(f"n must be at least 1, got {n}")
        if r < 1:
            raise ValueError(f"r must be at least 1, got {r}")
        if r > n:
            raise ValueError(f"r ({r}) can't be larger than n ({n})")
        self.n = n
        self.r = r
        self.total = math.comb(n, r)
        self.reset()

    def reset(self) -> None:
        self._current = list(range(self.r))
        self.num_left = self.total

    def has_more(self) -> bool:
        return self.num_left > 0

    def get_next(self) -> tuple[int, ...]:
        if not self.has_more():
            raise ValueError("No combinations left")
        if self.num_left < self.total:
            # Rightmost position that can still move up
            i = self.r - 1
            while self._current[i] == self.n - self.r + i:
                i -= 1
            self._current[i] += 1
            for j in range(i + 1, self.r):
                self._current[j] = self._current[i] + j - i
        self.num_left -= 1
        return tuple(self._current)

    def __iter__(self) -> Iterator[tuple[int, ...]]:
        self.reset()
        while self.has_more():
            yield self.get_next()


@dataclass
class AblationTrial:
    features: list[str]
    precision: float
    recall: float
    f1: float

    def to_dict(self) -> dict[str, Any]:
        return {"features": self.features, "precision": self.precision,
                "recall": self.recall, "f1": self.f1}


@dataclass
class AblationResult:
    trials: list[AblationTrial] = field(default_factory=list)
    best: Optional[AblationTrial] = None
    failed: int = 0

    def to_dict(self) -> dict[str, Any]:
        return {
            "best": self.best.to_dict() if self.best else None,
            "failed_trials": self.failed,
            "trials": [trial.to_dict() for trial in self.trials],
        }


class AblationSearch:
    """
    Tries every non-empty subset of the configured features.

    Predictor output is collected once and reused; each trial trains a
    fresh classifier on the projected training table and scores the
    cached output with extraction restricted to the subset.
    """

    def __init__(self, config: EnsembleConfig, process: EnsembleProcess,
                 training_table: InstanceTable, run_name: str = "ablation"):
        self.config = config
        self.process = process
        self.training_table = training_table
        self.run_name = run_name
        self.logger = process.logger.getChild("ablation")

    @property
    def feature_names(self) -> list[str]:
        return self.training_table.schema.feature_names

    def subsets(self) -> Iterator[list[str]]:
        names = self.feature_names
        for r in range(1, len(names) + 1):
            for combination in CombinationGenerator(len(names), r):
                yield [names[i] for i in combination]

    def run(self, documents: Sequence[AnnotationStore]) -> AblationResult:
        cache = self.process.collect_predictions(documents, skip_failures=True)
        base_extraction = self.process.extraction.restricted_to(self.feature_names)
        result = AblationResult()

        for subset in self.subsets():
            try:
                table = self.training_table.project(subset)
                classifier = create_classifier(self.config.classifier)
                classifier.train(table)
                evaluation = self.process.score_cached(
                    cache, classifier, table.schema,
                    extraction=base_extraction.restricted_to(subset),
                    write_reports=False,
                )
            except EnsembleError as e:
                result.failed += 1
                self.logger.warning(f"Trial {subset} failed: {e}")
                continue

            scores = evaluation.scores()
            trial = AblationTrial(subset, scores.precision, scores.recall, scores.f1)
            result.trials.append(trial)
            self.logger.info(f"{subset}: f1 {scores.f1:.3f}")

            if result.best is None or trial.f1 > result.best.f1:
                result.best = trial

        if result.best is not None:
            self.logger.info(f"Best subset {result.best.features} with f1 {result.best.f1:.3f}")

        writer = ResultWriter(self.config.output_dir, self.run_name, self.config, self.feature_names)
        writer.write_ablation(result)
        return result
