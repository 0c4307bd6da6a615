"""Tests for the scikit-learn classifier backend."""

import pytest

from coref_ensemble.errors import ConfigurationError, TrainingError
from coref_ensemble.ml.classifiers import SklearnClassifier, create_classifier
from coref_ensemble.ml.instances import Column, InstanceSchema, InstanceTable
from coref_ensemble.utils.config import ClassifierConfig

SCHEMA = InstanceSchema((
    Column("distance", True),
    Column("stringMatch", False, ("true", "false")),
    Column("predictor", False, ("alpha", "beta")),
    Column("label", False, ("+", "-", "?")),
))

# Close pairs are correct, distant ones wrong
ROWS = [
    (1.0, 0.0, 0.0, 0.0),
    (2.0, 0.0, 1.0, 0.0),
    (1.0, 0.0, 1.0, 0.0),
    (9.0, 1.0, 0.0, 1.0),
    (10.0, 1.0, 1.0, 1.0),
    (8.0, 1.0, 0.0, 1.0),
]

CLOSE = (1.5, 0.0, 0.0, 2.0)
DISTANT = (9.5, 1.0, 1.0, 2.0)


@pytest.fixture
def table():
    return InstanceTable(SCHEMA, ROWS)


@pytest.fixture
def large_table():
    return InstanceTable(SCHEMA, ROWS * 3)


def classifier(name="J48", **kwargs):
    return create_classifier(ClassifierConfig(name=name, **kwargs))


class TestBaseAlgorithms:
    @pytest.mark.parametrize("name", ["J48", "BFTREE", "BAYES", "NEARESTNEIGHBOR", "KSTAR"])
    def test_separable_data(self, table, name):
        backend = classifier(name)
        backend.train(table)

        assert backend.classify(CLOSE) == "+"
        assert backend.classify(DISTANT) == "-"

    def test_zeror_predicts_majority(self):
        table = InstanceTable(SCHEMA, ROWS + [(3.0, 1.0, 0.0, 1.0)])
        backend = classifier("ZEROR")
        backend.train(table)

        assert backend.classify(CLOSE) == "-"

    def test_names_are_case_insensitive(self, table):
        backend = classifier("j48")
        backend.train(table)
        assert backend.classify(CLOSE) == "+"

    def test_single_class_table(self):
        backend = classifier("J48")
        backend.train(InstanceTable(SCHEMA, ROWS[:3]))
        assert backend.classify(DISTANT) == "+"


class TestMetaAlgorithms:
    @pytest.mark.parametrize("name", ["BAGGING", "ADABOOST"])
    def test_wrapped_tree(self, large_table, name):
        backend = classifier(name, subclassifiers=["J48"], options={"random_state": 0})
        backend.train(large_table)
        assert backend.classify(CLOSE) == "+"
        assert backend.classify(DISTANT) == "-"

    def test_stacking(self, large_table):
        backend = classifier("J48", subclassifiers=["BAYES", "NEARESTNEIGHBOR"], stacking=True)
        backend.train(large_table)

        assert backend.describe() == "STACKING(J48; BAYES, NEARESTNEIGHBOR)"
        assert backend.classify(CLOSE) == "+"

    def test_stacking_needs_both_classes(self):
        backend = classifier("J48", subclassifiers=["BAYES"], stacking=True)
        with pytest.raises(TrainingError):
            backend.train(InstanceTable(SCHEMA, ROWS[:3]))


class TestConfigurationErrors:
    def test_unknown_algorithm(self):
        with pytest.raises(ConfigurationError):
            classifier("SVM")

    def test_meta_without_subclassifier(self):
        with pytest.raises(ConfigurationError):
            classifier("BAGGING")

    def test_meta_with_two_subclassifiers(self):
        with pytest.raises(ConfigurationError):
            classifier("ADABOOST", subclassifiers=["J48", "BAYES"])

    def test_base_with_subclassifier(self):
        with pytest.raises(ConfigurationError):
            classifier("J48", subclassifiers=["BAYES"])

    def test_unknown_subclassifier(self):
        with pytest.raises(ConfigurationError):
            classifier("BAGGING", subclassifiers=["SVM"])

    def test_invalid_option(self):
        with pytest.raises(ConfigurationError):
            classifier("J48", options={"no_such_option": 1})

    def test_stacking_without_bases(self):
        with pytest.raises(ConfigurationError):
            classifier("J48", stacking=True)


class TestTrainingErrors:
    def test_empty_table(self):
        with pytest.raises(TrainingError):
            classifier().train(InstanceTable(SCHEMA))

    def test_classify_before_training(self):
        with pytest.raises(TrainingError):
            classifier().classify(CLOSE)


class TestPersistence:
    def test_save_and_load(self, tmp_path, table):
        backend = classifier("J48")
        backend.train(table)
        path = tmp_path / "model" / "classifier.pkl"

        backend.save(path)
        restored = SklearnClassifier.load(path)

        assert restored.config == backend.config
        assert restored.classify(DISTANT) == "-"

    def test_load_garbage(self, tmp_path):
        path = tmp_path / "classifier.pkl"
        path.write_bytes(b"not a pickle")
        with pytest.raises(ConfigurationError):
            SklearnClassifier.load(path)
