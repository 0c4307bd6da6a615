"""Builders for annotated documents and pairs used across the tests."""

from coref_ensemble.models import CoreferencePair, Mention, Word

TOKENS = ["John", "met", "Mary", ".", "He", "greeted", "her", ".", "She", "smiled", "."]
POS = ["nnp", "vbd", "nnp", ".", "prp", "vbd", "prp", ".", "prp", "vbd", "."]
DEPREL = ["sbj", "root", "obj", "p", "sbj", "root", "obj", "p", "sbj", "root", "p"]


def wid(number):
    return f"word_{number}"


def make_document_data(doc_id="doc1"):
    """
    "John met Mary. He greeted her. She smiled."

    Gold chains: {John, He} and {Mary, her, She}.
    Predictor "alpha" finds two correct links, "beta" one correct and
    five wrong ones.
    """
    words = [{"id": wid(i + 1), "token": token} for i, token in enumerate(TOKENS)]
    return {
        "id": doc_id,
        "words": words,
        "levels": {
            "coref": [
                {"id": "m1", "span": [wid(1)], "coref_set": "set_1", "mtype": "ne"},
                {"id": "m2", "span": [wid(3)], "coref_set": "set_2", "mtype": "ne"},
                {"id": "m3", "span": [wid(5)], "coref_set": "set_1", "mtype": "pronoun"},
                {"id": "m4", "span": [wid(7)], "coref_set": "set_2", "mtype": "pronoun"},
                {"id": "m5", "span": [wid(9)], "coref_set": "set_2", "mtype": "pronoun"},
            ],
            "sentence": [
                {"span": [wid(i) for i in range(1, 5)]},
                {"span": [wid(i) for i in range(5, 9)]},
                {"span": [wid(i) for i in range(9, 12)]},
            ],
            "pos": [{"span": [wid(i + 1)], "tag": tag} for i, tag in enumerate(POS)],
            "deprel": [{"span": [wid(i + 1)], "tag": tag} for i, tag in enumerate(DEPREL)],
            "enamex": [
                {"span": [wid(1)], "tag": "person"},
                {"span": [wid(3)], "tag": "person"},
            ],
        },
        "predictions": {
            "alpha": {"chains": [
                [[wid(1)], [wid(5)]],
                [[wid(3)], [wid(7)]],
            ]},
            "beta": {"pairs": [
                [[wid(1)], [wid(3)]],
                [[wid(1)], [wid(7)]],
                [[wid(3)], [wid(9)]],
                [[wid(5)], [wid(7)]],
                [[wid(5)], [wid(9)]],
                [[wid(1)], [wid(9)]],
            ]},
        },
    }


def mention(*word_ids):
    """Mention over bare words, for tests that don't need a document."""
    return Mention(words=[Word(token=w, word_id=w) for w in word_ids])


def pair(antecedent, anaphor, **kwargs):
    return CoreferencePair(antecedent=mention(antecedent), anaphor=mention(anaphor), **kwargs)
