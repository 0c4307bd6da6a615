"""Tests for the JSON annotation store and stored predictors."""

import json

import pytest

from coref_ensemble.annotation import Document, load_documents
from coref_ensemble.errors import AnnotationError, ConfigurationError, PredictorFailure
from coref_ensemble.predictors import StoredPredictor, build_predictors


class TestDocument:
    def test_words_and_offsets(self, document):
        words = document.words()

        assert [w.token for w in words[:4]] == ["John", "met", "Mary", "."]
        assert [w.offset for w in words[:5]] == [0, 5, 9, 13, 15]

    def test_sentences(self, document):
        assert document.word("word_1").sentence == 0
        assert document.word("word_7").sentence == 1
        assert document.word("word_7").position_in_sentence == 2
        assert document.word("word_11").sentence == 2

    def test_gold_entities(self, document):
        entities = document.gold_entities()

        assert [e.entity_id for e in entities] == ["set_1", "set_2"]
        assert [m.key for m in entities[1].mentions] == ["word_3", "word_7", "word_9"]
        assert entities[0].mentions[1].mention_type == "pronoun"
        assert len(document.gold_pairs()) == 4

    def test_lookup_attribute(self, document):
        assert document.lookup_attribute("pos", "word_5", "tag") == "prp"
        with pytest.raises(AnnotationError):
            document.lookup_attribute("enamex", "word_5", "tag")
        with pytest.raises(AnnotationError):
            document.lookup_attribute("pos", "word_5", "lemma")

    def test_unknown_level(self, document):
        assert not document.has_level("chunk")
        with pytest.raises(AnnotationError):
            document.markables_at("chunk", "word_1")

    def test_unknown_word(self, document):
        with pytest.raises(AnnotationError):
            document.word("word_99")

    def test_document_without_id(self):
        with pytest.raises(AnnotationError):
            Document.from_dict({"words": []})


class TestLoading:
    def test_load_documents_sorted(self, corpus_dirs):
        documents = load_documents(corpus_dirs["training"])
        assert [d.document_id for d in documents] == ["training_0", "training_1"]

    def test_missing_directory(self, tmp_path):
        with pytest.raises(ConfigurationError):
            load_documents(tmp_path / "nowhere")

    def test_empty_directory(self, tmp_path):
        with pytest.raises(ConfigurationError):
            load_documents(tmp_path)

    def test_broken_file(self, tmp_path):
        (tmp_path / "broken.json").write_text("{not json")
        with pytest.raises(AnnotationError):
            load_documents(tmp_path)

    def test_id_falls_back_to_file_name(self, tmp_path, document_data):
        del document_data["id"]
        (tmp_path / "named.json").write_text(json.dumps(document_data))
        assert load_documents(tmp_path)[0].document_id == "named"


class TestStoredPredictor:
    def test_chains(self, document):
        entities = StoredPredictor("alpha").predict(document)

        assert [e.entity_id for e in entities] == ["alpha_0", "alpha_1"]
        assert [m.key for m in entities[0].mentions] == ["word_1", "word_5"]

    def test_pairs_become_null_entities(self, document):
        entities = StoredPredictor("beta").predict(document)

        assert len(entities) == 6
        assert all(e.is_null for e in entities)
        assert [m.key for m in entities[2].mentions] == ["word_3", "word_9"]

    def test_missing_output(self, document):
        with pytest.raises(PredictorFailure) as excinfo:
            StoredPredictor("gamma").predict(document)
        assert excinfo.value.document_id == "doc1"

    def test_unknown_word_in_output(self, document_data):
        document_data["predictions"]["alpha"] = {"chains": [[["word_1"], ["word_99"]]]}
        with pytest.raises(PredictorFailure):
            StoredPredictor("alpha").predict(Document.from_dict(document_data))

    def test_malformed_pair(self, document_data):
        document_data["predictions"]["beta"] = {"pairs": [[["word_1"]]]}
        with pytest.raises(PredictorFailure):
            StoredPredictor("beta").predict(Document.from_dict(document_data))

    def test_run_before_init(self):
        with pytest.raises(PredictorFailure):
            StoredPredictor("alpha").run()


class TestBuildPredictors:
    def test_names(self):
        assert [p.name for p in build_predictors(["alpha", "beta"])] == ["alpha", "beta"]

    @pytest.mark.parametrize("names, kind", [([], "stored"), (["a", "a"], "stored"), (["a"], "remote")])
    def test_invalid(self, names, kind):
        with pytest.raises(ConfigurationError):
            build_predictors(names, kind=kind)
