"""
Ensemble training and scoring over several coreference predictors
"""

from __future__ import annotations

import logging
from collections import Counter
from dataclasses import dataclass, field
from typing import Optional, Sequence

from ..annotation.store import AnnotationStore
from ..errors import EncodingError, PredictorFailure
from ..evaluation import Evaluation
from ..features.filters import FeatureFilter
from ..features.process import FeatureExtractionProcess
from ..models import CoreferencePair, Entity, decompose_entities
from ..predictors.base import Predictor
from ..reporting import ResultWriter
from ..utils.config import DedupPolicy, EnsembleConfig
from .classifiers import ClassifierBackend, create_classifier
from .instances import NEGATIVE, POSITIVE, InstanceSchema, InstanceTable

logger = logging.getLogger(__name__)


def balance_negatives(pairs: Sequence[CoreferencePair]) -> list[CoreferencePair]:
    """Every other false positive, leaving out the tail: positions 0, 2, 4, ... below n - 2."""
    return [pairs[i] for i in range(0, len(pairs) - 2, 2)]


def deduplicate(pairs: Sequence[CoreferencePair],
                policy: DedupPolicy = DedupPolicy.DROP) -> list[CoreferencePair]:
    """
    Resolve pairs accepted from more than one predictor.

    ``drop`` removes every pair that occurs twice or more, ``keep_one``
    keeps the first occurrence.
    """
    if policy == DedupPolicy.KEEP_ONE:
        kept: list[CoreferencePair] = []
        for pair in pairs:
            if not any(pair.same_pair(other) for other in kept):
                kept.append(pair)
        return kept

    counts = Counter(pair.key for pair in pairs)
    return [pair for pair in pairs if counts[pair.key] < 2]


@dataclass
class TrainingResult:
    table: InstanceTable
    classifier: ClassifierBackend
    evaluations: dict[str, Evaluation] = field(default_factory=dict)


@dataclass
class CachedDocument:
    """Raw predictor output for one document; decomposed afresh on every use."""

    store: AnnotationStore
    entities: dict[str, list[Entity]] = field(default_factory=dict)


class EnsembleProcess:
    """
    Trains the ensemble classifier on predictor output and uses it to
    pick pairs from new predictions.
    """

    def __init__(
        self,
        config: EnsembleConfig,
        predictors: Sequence[Predictor],
        extraction: Optional[FeatureExtractionProcess] = None,
        feature_filter: Optional[FeatureFilter] = None,
        logger: Optional[logging.Logger] = None,
    ):
        self.config = config
        self.predictors = list(predictors)
        self.extraction = extraction or FeatureExtractionProcess.from_names(config.feature_extractors)
        self.feature_filter = feature_filter or FeatureFilter.from_config(config)
        self.logger = logger or logging.getLogger(__name__)

    @property
    def predictor_names(self) -> list[str]:
        return [predictor.name for predictor in self.predictors]

    def new_evaluation(self) -> Evaluation:
        return Evaluation(self.config.evaluation_mode, self.config.mention_match, logger=self.logger)

    def writer(self, run_name: str, extraction: Optional[FeatureExtractionProcess] = None) -> ResultWriter:
        extraction = extraction or self.extraction
        return ResultWriter(self.config.output_dir, run_name, self.config, extraction.names)

    def build_schema(self) -> InstanceSchema:
        return InstanceSchema.build(self.extraction.extractors, self.predictor_names)

    # Training

    def train(self, documents: Sequence[AnnotationStore]) -> TrainingResult:
        """
        Measure every predictor against gold and learn which pairs to trust.

        Correct pairs become positive instances, every other false
        positive a negative one. A failing predictor aborts training.
        """
        table = InstanceTable(self.build_schema())
        evaluations = {name: self.new_evaluation() for name in self.predictor_names}
        writers = {name: self.writer(f"training_{name}") for name in self.predictor_names}

        for document in documents:
            self.logger.info(f"Processing {document.document_id}")
            gold = document.gold_pairs()
            self.extraction.extract(gold, document)

            for predictor in self.predictors:
                pairs = self._predicted_pairs(predictor.name, predictor.predict(document), document,
                                              self.extraction)
                result = evaluations[predictor.name].evaluate_filtered(
                    pairs, gold, self.feature_filter, document.document_id
                )
                writers[predictor.name].add_file_result(result)

                positives = table.add_pairs(result.true_positives, predictor.name, POSITIVE)
                negatives = table.add_pairs(balance_negatives(result.false_positives),
                                            predictor.name, NEGATIVE)
                self.logger.debug(
                    f"{document.document_id}/{predictor.name}: {positives} positive, {negatives} negative"
                )

        for name, evaluation in evaluations.items():
            scores = evaluation.scores()
            self.logger.info(
                f"{name}: precision {scores.precision:.3f}, recall {scores.recall:.3f}, f1 {scores.f1:.3f}"
            )
            writers[name].write(evaluation)

        table.save(self.config.instance_table_path)

        classifier = create_classifier(self.config.classifier)
        classifier.train(table)
        return TrainingResult(table=table, classifier=classifier, evaluations=evaluations)

    # Scoring

    def collect_predictions(self, documents: Sequence[AnnotationStore],
                            skip_failures: bool = False) -> list[CachedDocument]:
        """Run every predictor once per document and keep the raw entities."""
        cache = []
        for document in documents:
            cached = CachedDocument(store=document)
            for predictor in self.predictors:
                try:
                    cached.entities[predictor.name] = predictor.predict(document)
                except PredictorFailure as e:
                    if not skip_failures:
                        raise
                    self.logger.warning(f"Skipping predictor output: {e}")
            cache.append(cached)
        return cache

    def score(self, documents: Sequence[AnnotationStore], classifier: ClassifierBackend,
              schema: InstanceSchema) -> Evaluation:
        return self.score_cached(self.collect_predictions(documents), classifier, schema)

    def test(self, documents: Sequence[AnnotationStore], table: InstanceTable) -> Evaluation:
        """Train the configured classifier on ``table`` and score ``documents`` with it."""
        classifier = create_classifier(self.config.classifier)
        classifier.train(table)
        return self.score(documents, classifier, table.schema)

    def score_cached(
        self,
        cache: Sequence[CachedDocument],
        classifier: ClassifierBackend,
        schema: InstanceSchema,
        extraction: Optional[FeatureExtractionProcess] = None,
        run_name: str = "test",
        write_reports: bool = True,
    ) -> Evaluation:
        """
        Keep the predicted pairs the classifier accepts and evaluate them.

        Each call builds its own evaluation and pairs, the cache is only read.
        """
        if extraction is None:
            extraction = self.extraction
            if extraction.names != schema.feature_names:
                extraction = extraction.restricted_to(schema.feature_names)

        evaluation = self.new_evaluation()
        writer = self.writer(run_name, extraction) if write_reports else None

        for cached in cache:
            document = cached.store
            gold = document.gold_pairs()
            extraction.extract(gold, document)

            accepted = []
            for name, entities in cached.entities.items():
                for pair in self._predicted_pairs(name, entities, document, extraction):
                    try:
                        row = schema.encode_scoring(pair, name)
                    except EncodingError as e:
                        self.logger.warning(f"Skipping pair for '{name}': {e}")
                        continue
                    if classifier.classify(row) == POSITIVE:
                        accepted.append(pair)

            accepted = deduplicate(accepted, self.config.dedup_policy)
            result = evaluation.evaluate(accepted, gold, document.document_id)
            if writer is not None:
                writer.add_file_result(result)

        if writer is not None:
            writer.write(evaluation)
        return evaluation

    @staticmethod
    def _predicted_pairs(name: str, entities: Sequence[Entity], document: AnnotationStore,
                         extraction: FeatureExtractionProcess) -> list[CoreferencePair]:
        pairs = decompose_entities(entities)
        for pair in pairs:
            pair.predictor = name
        extraction.extract(pairs, document)
        return pairs
