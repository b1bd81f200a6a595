"""
Shared fixtures: a throwaway SQLite record store, an in-memory vector index,
a keyword embedder with predictable geometry and the mock answer generator.
"""

import re

import pytest

from notes_rag.agents.mock_agent import MockAnswerGenerator
from notes_rag.core.config import PipelineConfig
from notes_rag.core.dao import SQLiteRecordStore
from notes_rag.core.services import NoteServices
from notes_rag.vector.embeddings import IEmbeddingProvider
from notes_rag.vector.index import SimpleInMemoryVectorStore


class KeywordEmbedding(IEmbeddingProvider):
    """Counts topic keywords so similarity between test sentences is obvious."""

    TOPICS = [
        {"france", "paris", "capital"},
        {"sky", "blue"},
        {"square", "root", "9"},
    ]

    def __init__(self):
        self.calls = []

    def embed(self, texts):
        self.calls.append(list(texts))
        vectors = []
        for text in texts:
            tokens = re.findall(r"\w+", text.lower())
            vector = [float(sum(1 for t in tokens if t in topic)) for topic in self.TOPICS]
            # Constant component keeps every vector non-zero
            vector.append(0.1)
            vectors.append(vector)
        return vectors

    def get_dimension(self):
        return len(self.TOPICS) + 1


@pytest.fixture
def db_path(tmp_path):
    return str(tmp_path / "notes.db")


@pytest.fixture
def record_store(db_path):
    return SQLiteRecordStore(db_path)


@pytest.fixture
def vector_store():
    return SimpleInMemoryVectorStore()


@pytest.fixture
def embedder():
    return KeywordEmbedding()


@pytest.fixture
def generator():
    return MockAnswerGenerator()


@pytest.fixture
def services(record_store, embedder, vector_store, generator):
    return NoteServices(
        record_store=record_store,
        embedder=embedder,
        vector_store=vector_store,
        generator=generator,
        config=PipelineConfig(),
    )
