"""
Scores predicted coreference pairs against the gold standard
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Optional, Sequence

from .features.filters import FeatureFilter
from .models import CoreferencePair, Mention
from .utils.config import EvaluationMode, MentionMatch

logger = logging.getLogger(__name__)


def safe_ratio(numerator: float, denominator: float) -> float:
    """Division with 0.0 for an empty denominator."""
    if denominator == 0:
        return 0.0
    return numerator / denominator


def mentions_match(gold: Mention, hypothesis: Mention,
                   strategy: MentionMatch = MentionMatch.FIRST_WORD) -> bool:
    if strategy == MentionMatch.OVERLAP:
        return bool(set(gold.word_ids) & set(hypothesis.word_ids))
    return gold.key == hypothesis.key


def is_correct_pair(gold: CoreferencePair, hypothesis: CoreferencePair,
                    strategy: MentionMatch = MentionMatch.FIRST_WORD) -> bool:
    """A predicted pair is correct if it links the gold mentions, in either direction."""
    if (mentions_match(gold.anaphor, hypothesis.anaphor, strategy)
            and mentions_match(gold.antecedent, hypothesis.antecedent, strategy)):
        return True
    return (mentions_match(gold.antecedent, hypothesis.anaphor, strategy)
            and mentions_match(gold.anaphor, hypothesis.antecedent, strategy))


@dataclass
class Scores:
    precision: float
    recall: float
    f1: float

    @classmethod
    def from_counts(cls, true_positives: int, false_negatives: int, false_positives: int) -> "Scores":
        precision = safe_ratio(true_positives, true_positives + false_positives)
        recall = safe_ratio(true_positives, true_positives + false_negatives)
        f1 = safe_ratio(2 * precision * recall, precision + recall)
        return cls(precision=precision, recall=recall, f1=f1)

    def to_dict(self) -> dict[str, float]:
        return {"precision": self.precision, "recall": self.recall, "f1": self.f1}


@dataclass
class FileEvaluation:
    """Outcome of evaluating one document."""

    document_id: str
    true_positives: list[CoreferencePair] = field(default_factory=list)
    false_negatives: list[CoreferencePair] = field(default_factory=list)
    false_positives: list[CoreferencePair] = field(default_factory=list)

    @property
    def scores(self) -> Scores:
        return Scores.from_counts(
            len(self.true_positives), len(self.false_negatives), len(self.false_positives)
        )


class Evaluation:
    """
    Accumulates true positives, false negatives and false positives over
    any number of documents.

    Matching is first-match-wins: each gold pair is credited to the
    first predicted pair that links the same mentions.
    """

    def __init__(
        self,
        mode: EvaluationMode = EvaluationMode.FULL,
        mention_match: MentionMatch = MentionMatch.FIRST_WORD,
        logger: Optional[logging.Logger] = None,
    ):
        self.mode = mode
        self.mention_match = mention_match
        self.logger = logger or logging.getLogger(__name__)

        self.true_positives = 0
        self.false_negatives = 0
        self.false_positives = 0
        self.files: list[FileEvaluation] = []

    def _counts(self, pair: CoreferencePair) -> bool:
        return self.mode == EvaluationMode.FULL or pair.direct_neighbor

    def evaluate(self, hypothesis: Sequence[CoreferencePair], gold: Sequence[CoreferencePair],
                 document_id: str = "") -> FileEvaluation:
        result = FileEvaluation(document_id=document_id)

        # Recall pass
        for gold_pair in gold:
            if not self._counts(gold_pair):
                continue
            match = next(
                (h for h in hypothesis if is_correct_pair(gold_pair, h, self.mention_match)),
                None,
            )
            if match is not None:
                gold_pair.predictor = match.predictor
                result.true_positives.append(gold_pair)
            else:
                result.false_negatives.append(gold_pair)

        # Precision pass
        for hyp_pair in hypothesis:
            if not self._counts(hyp_pair):
                continue
            if not any(is_correct_pair(g, hyp_pair, self.mention_match) for g in gold):
                result.false_positives.append(hyp_pair)

        self.true_positives += len(result.true_positives)
        self.false_negatives += len(result.false_negatives)
        self.false_positives += len(result.false_positives)
        self.files.append(result)

        self.logger.debug(
            f"{document_id}: {len(result.true_positives)} TP, "
            f"{len(result.false_negatives)} FN, {len(result.false_positives)} FP"
        )
        return result

    def evaluate_filtered(self, hypothesis: Sequence[CoreferencePair], gold: Sequence[CoreferencePair],
                          feature_filter: FeatureFilter, document_id: str = "") -> FileEvaluation:
        """Evaluate only the pairs passing ``feature_filter`` on both sides."""
        return self.evaluate(feature_filter.apply(hypothesis), feature_filter.apply(gold), document_id)

    def scores(self) -> Scores:
        return Scores.from_counts(self.true_positives, self.false_negatives, self.false_positives)

    @property
    def precision(self) -> float:
        return self.scores().precision

    @property
    def recall(self) -> float:
        return self.scores().recall

    @property
    def f1(self) -> float:
        return self.scores().f1

    def summary(self) -> dict[str, float]:
        return {
            "true_positives": self.true_positives,
            "false_negatives": self.false_negatives,
            "false_positives": self.false_positives,
            **self.scores().to_dict(),
        }
