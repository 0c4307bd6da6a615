"""Shared fixtures: a small annotated document and corpora built from it."""

import json

import pytest

from coref_ensemble.annotation import Document
from coref_ensemble.utils.config import EnsembleConfig

from helpers import make_document_data


@pytest.fixture
def document_data():
    return make_document_data()


@pytest.fixture
def document(document_data):
    return Document.from_dict(document_data)


@pytest.fixture
def corpus_dirs(tmp_path):
    """Training and test corpora with two copies of the sample document each."""
    dirs = {}
    for corpus in ("training", "test"):
        directory = tmp_path / corpus
        directory.mkdir()
        for i in range(2):
            doc_id = f"{corpus}_{i}"
            (directory / f"{doc_id}.json").write_text(json.dumps(make_document_data(doc_id)))
        dirs[corpus] = directory
    return dirs


@pytest.fixture
def config(tmp_path, corpus_dirs):
    return EnsembleConfig(
        training_dir=corpus_dirs["training"],
        test_dir=corpus_dirs["test"],
        output_dir=tmp_path / "results",
        predictors=["alpha", "beta"],
    )
