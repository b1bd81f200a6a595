"""
Vector index interface and a simple in-memory cosine implementation.
"""

import threading
from abc import ABC, abstractmethod
from typing import List, Sequence
import numpy as np

from .types import VectorRecord, QueryResult, UpsertAck


class IVectorStore(ABC):
    """Abstract interface for vector storage operations."""

    @abstractmethod
    def upsert(self, records: List[VectorRecord]) -> UpsertAck:
        """Insert or replace vector records by id."""
        pass

    @abstractmethod
    def delete_by_ids(self, record_ids: Sequence[str]) -> None:
        """Delete vector records by id. Unknown ids are ignored."""
        pass

    @abstractmethod
    def query(self, query_vector, top_k: int = 5) -> List[QueryResult]:
        """Return up to top_k records ranked by descending similarity."""
        pass

    @abstractmethod
    def list_ids(self) -> List[str]:
        """List the ids of every stored record."""
        pass

    @abstractmethod
    def clear(self) -> None:
        """Clear all records from the store."""
        pass

    def count(self) -> int:
        return len(self.list_ids())


def normalize(vector, expected_dimension: int = None) -> np.ndarray:
    """Return the unit-length float32 copy of a vector."""
    array = np.asarray(vector, dtype=np.float32).reshape(-1)
    if expected_dimension is not None and array.shape[0] != expected_dimension:
        raise ValueError(f"Vector dimension {array.shape[0]} does not match expected dimension {expected_dimension}")

    norm = np.linalg.norm(array)
    if norm == 0:
        raise ValueError("Cannot index a zero vector")
    return array / norm


class SimpleInMemoryVectorStore(IVectorStore):
    """Simple in-memory implementation of IVectorStore using cosine similarity."""

    def __init__(self):
        self._vectors = {}  # record_id -> VectorRecord
        self._index = {}    # record_id -> normalized_vector
        self._lock = threading.Lock()

    def upsert(self, records: List[VectorRecord]) -> UpsertAck:
        # Normalize everything first so a bad record leaves the store untouched
        prepared = [(record, normalize(record.vector)) for record in records]

        with self._lock:
            for record, normalized in prepared:
                # Replacing keeps the original insertion slot, which is the tie-break order
                self._vectors[record.id] = record
                self._index[record.id] = normalized

        return UpsertAck(count=len(prepared), ids=[record.id for record, _ in prepared])

    def delete_by_ids(self, record_ids: Sequence[str]) -> None:
        with self._lock:
            for record_id in record_ids:
                self._vectors.pop(record_id, None)
                self._index.pop(record_id, None)

    def query(self, query_vector, top_k: int = 5) -> List[QueryResult]:
        """Search for similar vectors and return ranked results."""
        if top_k <= 0:
            return []

        with self._lock:
            items = list(self._index.items())
            records = dict(self._vectors)

        if not items:
            return []

        query_array = np.asarray(query_vector, dtype=np.float32).reshape(-1)
        norm = np.linalg.norm(query_array)
        if norm == 0:
            # Return empty results if query vector is zero
            return []
        normalized_query = query_array / norm

        similarities = [(record_id, float(np.dot(normalized_query, stored))) for record_id, stored in items]

        # Stable sort, so equal scores stay in insertion order
        similarities.sort(key=lambda x: x[1], reverse=True)

        return [
            QueryResult(id=record_id, score=score, metadata=records[record_id].metadata)
            for record_id, score in similarities[:top_k]
        ]

    def list_ids(self) -> List[str]:
        with self._lock:
            return list(self._vectors.keys())

    def clear(self) -> None:
        """Clear all records from the store."""
        with self._lock:
            self._vectors.clear()
            self._index.clear()
