"""Tests for the combination generator and the ablation search."""

import json

import pytest

from coref_ensemble.errors import TrainingError
from coref_ensemble.evaluation import Evaluation
from coref_ensemble.ml.ablation import AblationSearch, CombinationGenerator
from coref_ensemble.ml.ensemble import EnsembleProcess
from coref_ensemble.predictors import build_predictors

FEATURES = ["distance", "stringMatch", "sentenceOffset"]


class TestCombinationGenerator:
    def test_lexicographic_order(self):
        assert list(CombinationGenerator(4, 2)) == [
            (0, 1), (0, 2), (0, 3), (1, 2), (1, 3), (2, 3),
        ]

    def test_all_sizes_of_three(self):
        combinations = [c for r in range(1, 4) for c in CombinationGenerator(3, r)]

        assert len(combinations) == 7
        assert [len(c) for c in combinations] == [1, 1, 1, 2, 2, 2, 3]

    def test_manual_iteration_and_reset(self):
        generator = CombinationGenerator(5, 3)
        assert generator.total == 10

        seen = []
        while generator.has_more():
            seen.append(generator.get_next())
        assert len(seen) == 10
        assert seen[-1] == (2, 3, 4)
        with pytest.raises(ValueError):
            generator.get_next()

        generator.reset()
        assert generator.get_next() == (0, 1, 2)

    def test_full_size(self):
        assert list(CombinationGenerator(3, 3)) == [(0, 1, 2)]

    @pytest.mark.parametrize("n, r", [(2, 3), (0, 1), (3, 0)])
    def test_invalid(self, n, r):
        with pytest.raises(ValueError):
            CombinationGenerator(n, r)


@pytest.fixture
def trained(config, document):
    config.feature_extractors = FEATURES
    process = EnsembleProcess(config, build_predictors(config.predictors))
    return process, process.train([document])


def fixed_scores(scores_by_subset):
    """Stand-in for score_cached returning preset counts per feature subset."""

    def score_cached(cache, classifier, schema, extraction=None, write_reports=True):
        counts = scores_by_subset.get(tuple(schema.feature_names), (1, 1, 1))
        if counts is None:
            raise TrainingError("trial failed")
        evaluation = Evaluation()
        evaluation.true_positives, evaluation.false_negatives, evaluation.false_positives = counts
        return evaluation

    return score_cached


class TestAblationSearch:
    def test_runs_every_subset(self, config, document, trained):
        process, training = trained
        result = AblationSearch(config, process, training.table).run([document])

        assert len(result.trials) + result.failed == 7
        assert result.best is not None
        assert result.best.f1 == max(trial.f1 for trial in result.trials)

    def test_writes_report(self, config, document, trained):
        process, training = trained
        AblationSearch(config, process, training.table, run_name="subsets").run([document])

        reports = list(config.output_dir.glob("subsets_*.json"))
        assert len(reports) == 1
        report = json.loads(reports[0].read_text())
        assert len(report["trials"]) == 7
        assert report["best"]["features"]

    def test_best_is_highest_f1(self, config, document, trained, monkeypatch):
        process, training = trained
        monkeypatch.setattr(process, "score_cached", fixed_scores({
            ("stringMatch", "sentenceOffset"): (5, 0, 0),
        }))

        result = AblationSearch(config, process, training.table).run([document])
        assert result.best.features == ["stringMatch", "sentenceOffset"]
        assert result.best.f1 == pytest.approx(1.0)

    def test_first_subset_wins_ties(self, config, document, trained, monkeypatch):
        process, training = trained
        monkeypatch.setattr(process, "score_cached", fixed_scores({}))

        result = AblationSearch(config, process, training.table).run([document])
        assert result.best.features == ["distance"]

    def test_failed_trials_are_skipped(self, config, document, trained, monkeypatch):
        process, training = trained
        monkeypatch.setattr(process, "score_cached", fixed_scores({("distance",): None}))

        result = AblationSearch(config, process, training.table).run([document])
        assert result.failed == 1
        assert len(result.trials) == 6
        assert ["distance"] not in [trial.features for trial in result.trials]
