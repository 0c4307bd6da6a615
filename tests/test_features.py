"""Tests for the feature extractors and the extraction process."""

import pytest

from coref_ensemble.annotation import Document
from coref_ensemble.errors import ConfigurationError
from coref_ensemble.features import (
    FeatureDistribution,
    FeatureExtractionProcess,
    NEType,
    POSTag,
    create_extractors,
    list_registered_extractors,
)
from coref_ensemble.models import CoreferencePair, FeatureType

EXTRACTOR_ORDER = [
    "anaphorPos",
    "isSubj",
    "distance",
    "stringMatch",
    "antecedentPos",
    "sentenceOffset",
    "pronounCountSentence",
    "neType",
]


def pair_in(document, antecedent, anaphor):
    return CoreferencePair(
        antecedent=document.mention_for_span([antecedent]),
        anaphor=document.mention_for_span([anaphor]),
    )


def values(pair):
    return {name: feature.value for name, feature in pair.features.items()}


class TestRegistry:
    def test_registry_order(self):
        assert list_registered_extractors() == EXTRACTOR_ORDER

    def test_create_subset(self):
        extractors = create_extractors(["distance", "neType"])
        assert [e.name for e in extractors] == ["distance", "neType"]
        assert extractors[1].feature_type == FeatureType.NETYPE

    def test_unknown_extractor(self):
        with pytest.raises(ConfigurationError):
            create_extractors(["nope"])

    def test_duplicate_extractor(self):
        with pytest.raises(ConfigurationError):
            create_extractors(["distance", "distance"])

    def test_domains(self):
        by_name = {e.name: e for e in create_extractors()}
        assert by_name["isSubj"].domain() == ("true", "false")
        assert "prp$" in by_name["anaphorPos"].domain()
        assert by_name["neType"].domain() == tuple(t.value for t in NEType)
        assert by_name["distance"].domain() == ()


class TestExtractors:
    def test_name_and_pronoun(self, document):
        # John ... He
        p = pair_in(document, "word_1", "word_5")
        FeatureExtractionProcess().extract([p], document)

        assert values(p) == {
            "anaphorPos": POSTag.PRP,
            "isSubj": True,
            "distance": 4,
            "stringMatch": False,
            "antecedentPos": POSTag.NNP,
            "sentenceOffset": 1,
            "pronounCountSentence": 2,
            "neType": NEType.PERSON,
        }

    def test_two_pronouns(self, document):
        # her ... She
        p = pair_in(document, "word_7", "word_9")
        FeatureExtractionProcess().extract([p], document)

        assert p.feature("anaphorPos").string_value == "prp"
        assert p.feature("isSubj").value is True
        assert p.feature("distance").value == 2
        assert p.feature("pronounCountSentence").value == 1
        assert p.feature("neType").value == NEType.NONE

    def test_not_subject(self, document):
        # met ... greeted: neither is a subject
        p = pair_in(document, "word_2", "word_6")
        FeatureExtractionProcess.from_names(["isSubj", "stringMatch"]).extract([p], document)

        assert p.feature("isSubj").value is False
        assert p.feature("stringMatch").value is False

    def test_unknown_pos_tag_maps_to_else(self, document):
        p = pair_in(document, "word_1", "word_2")
        FeatureExtractionProcess.from_names(["anaphorPos"]).extract([p], document)
        assert p.feature("anaphorPos").value == POSTag.ELSE

    def test_missing_deprel_is_not_subject(self, document_data):
        del document_data["levels"]["deprel"]
        document = Document.from_dict(document_data)
        p = pair_in(document, "word_1", "word_5")

        FeatureExtractionProcess.from_names(["isSubj"]).extract([p], document)
        assert p.feature("isSubj").value is False

    @pytest.mark.parametrize("antecedent, anaphor", [("word_3", "word_5"), ("word_5", "word_3")])
    def test_one_untagged_mention_is_not_subject_in_either_role(self, document_data, antecedent, anaphor):
        # word_5 ("He") is a subject, word_3 ("Mary") loses its dependency tag
        document_data["levels"]["deprel"] = [
            m for m in document_data["levels"]["deprel"] if m["span"] != ["word_3"]
        ]
        document = Document.from_dict(document_data)
        p = pair_in(document, antecedent, anaphor)

        FeatureExtractionProcess.from_names(["isSubj"]).extract([p], document)
        assert p.feature("isSubj").value is False


class TestExtractionProcess:
    def test_failure_does_not_abort(self, document_data):
        del document_data["levels"]["pos"]
        document = Document.from_dict(document_data)
        p = pair_in(document, "word_1", "word_5")

        process = FeatureExtractionProcess()
        process.extract([p], document)

        assert "anaphorPos" not in p.features
        assert "antecedentPos" not in p.features
        assert p.feature("distance").value == 4
        assert {f.feature for f in process.failures} == {
            "anaphorPos", "antecedentPos", "pronounCountSentence",
        }

    def test_failures_cover_the_last_pass_only(self, document_data, document):
        broken_data = dict(document_data, levels={k: v for k, v in document_data["levels"].items() if k != "pos"})
        broken = Document.from_dict(broken_data)
        process = FeatureExtractionProcess.from_names(["anaphorPos", "distance"])

        process.extract([pair_in(broken, "word_1", "word_5")], broken)
        assert [f.feature for f in process.failures] == ["anaphorPos"]

        process.extract([pair_in(document, "word_1", "word_5")], document)
        assert process.failures == []

    def test_features_rebuilt_on_each_pass(self, document):
        p = pair_in(document, "word_1", "word_5")
        FeatureExtractionProcess().extract([p], document)
        FeatureExtractionProcess.from_names(["distance"]).extract([p], document)

        assert list(p.features) == ["distance"]

    def test_restricted_to(self):
        process = FeatureExtractionProcess()
        assert process.restricted_to(["neType", "distance"]).names == ["neType", "distance"]
        with pytest.raises(ConfigurationError):
            FeatureExtractionProcess.from_names(["distance"]).restricted_to(["neType"])


class TestFeatureDistribution:
    def test_gold_pairs(self, document):
        gold = document.gold_pairs()
        FeatureExtractionProcess.from_names(["distance", "neType"]).extract(gold, document)

        report = FeatureDistribution()
        report.add(gold)
        data = report.to_dict()

        # gold pairs: (1,5), (3,7), (3,9), (7,9)
        assert data["pairs"] == 4
        assert data["features"]["distance"]["counts"] == {"2": 1, "4": 2, "6": 1}
        assert data["features"]["distance"]["average"] == pytest.approx(4.0)
        assert data["features"]["neType"]["counts"] == {"person": 3, "none": 1}
