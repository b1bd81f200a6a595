"""
Vector index overlay - non-canonical, derived from the notes table.
"""

# FaissVectorStore lives in .faiss_store and is imported on demand
from .index import IVectorStore, SimpleInMemoryVectorStore
from .types import VectorRecord, QueryResult, UpsertAck
from .embeddings import IEmbeddingProvider, HashingEmbedding, SentenceTransformerEmbedding

__all__ = [
    'IVectorStore',
    'SimpleInMemoryVectorStore',
    'VectorRecord',
    'QueryResult',
    'UpsertAck',
    'IEmbeddingProvider',
    'HashingEmbedding',
    'SentenceTransformerEmbedding'
]
