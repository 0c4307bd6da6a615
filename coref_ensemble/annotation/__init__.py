"""Annotated documents: gold chains and linguistic annotation levels."""

from .store import (
    COREF_LEVEL,
    SENTENCE_LEVEL,
    AnnotationStore,
    Document,
    Markable,
    load_documents,
)

__all__ = [
    "COREF_LEVEL",
    "SENTENCE_LEVEL",
    "AnnotationStore",
    "Document",
    "Markable",
    "load_documents",
]
