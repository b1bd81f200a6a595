"""
FAISS-backed vector index with real deletion and optional on-disk persistence.
"""

import json
import os
import threading
from typing import Dict, List, Optional, Sequence
import numpy as np

from .types import VectorRecord, QueryResult, UpsertAck
from .index import IVectorStore, normalize
from ..util.logging import logger


class FaissVectorStore(IVectorStore):
    """FAISS-backed implementation of IVectorStore.

    Vectors are normalized and stored in an inner-product flat index, so scores are
    cosine similarities. The flat index is wrapped in an IndexIDMap2 so records can be
    removed and replaced by id. FAISS ids are int64, so each record id gets a
    monotonically assigned internal id.
    """

    def __init__(self, dimension: int = 384, index_path: Optional[str] = None):
        """
        Initialize FAISS vector store.

        Args:
            dimension: Dimension of the vectors
            index_path: Where to persist the index; None keeps it in memory only
        """
        import faiss
        self.faiss = faiss
        self.dimension = dimension
        self.index_path = index_path
        self._lock = threading.Lock()

        self.index = self._new_index()
        self.id_to_vector_index: Dict[str, int] = {}
        self.vector_id_map: Dict[int, str] = {}
        self.metadata: Dict[str, Dict] = {}
        self.next_vector_index = 0

        if self.index_path:
            self._load_index()

    def _new_index(self):
        return self.faiss.IndexIDMap2(self.faiss.IndexFlatIP(self.dimension))

    @property
    def _id_map_path(self) -> str:
        return f"{self.index_path}.ids.json"

    def _load_index(self):
        """Load existing FAISS index and id map from disk."""
        index_exists = os.path.exists(self.index_path)
        id_map_exists = os.path.exists(self._id_map_path)
        if not index_exists and not id_map_exists:
            logger.info(f"No existing FAISS index at {self.index_path}, starting empty")
            return
        if index_exists != id_map_exists:
            # Starting empty here would overwrite the surviving file on the next save
            missing = self._id_map_path if index_exists else self.index_path
            raise ValueError(f"Incomplete FAISS index at {self.index_path}: {missing} is missing")

        index = self.faiss.read_index(self.index_path)
        if index.d != self.dimension:
            raise ValueError(f"Persisted index dimension {index.d} does not match expected dimension {self.dimension}")

        with open(self._id_map_path, "r", encoding="utf-8") as f:
            state = json.load(f)

        self.index = index
        self.id_to_vector_index = {k: int(v) for k, v in state["ids"].items()}
        self.vector_id_map = {v: k for k, v in self.id_to_vector_index.items()}
        self.metadata = state.get("metadata", {})
        self.next_vector_index = int(state["next_vector_index"])
        logger.info(f"Loaded FAISS index with {self.index.ntotal} vectors")

    def _save_index(self):
        """Save FAISS index and id map to disk."""
        if not self.index_path:
            return

        directory = os.path.dirname(self.index_path)
        if directory:
            os.makedirs(directory, exist_ok=True)

        # Write both files aside first so a failed save never truncates the saved pair
        index_tmp = f"{self.index_path}.tmp"
        id_map_tmp = f"{self._id_map_path}.tmp"
        self.faiss.write_index(self.index, index_tmp)
        with open(id_map_tmp, "w", encoding="utf-8") as f:
            json.dump({
                "ids": self.id_to_vector_index,
                "metadata": self.metadata,
                "next_vector_index": self.next_vector_index,
            }, f)
        os.replace(index_tmp, self.index_path)
        os.replace(id_map_tmp, self._id_map_path)

    def _snapshot(self):
        return (
            self.faiss.clone_index(self.index),
            dict(self.id_to_vector_index),
            dict(self.vector_id_map),
            dict(self.metadata),
            self.next_vector_index,
        )

    def _restore(self, snapshot):
        (self.index, self.id_to_vector_index, self.vector_id_map,
         self.metadata, self.next_vector_index) = snapshot

    def _commit(self, snapshot):
        """Persist the current state, or roll back to the snapshot if the save fails."""
        try:
            self._save_index()
        except Exception:
            self._restore(snapshot)
            raise

    def _remove(self, record_ids: Sequence[str]) -> int:
        internal = [self.id_to_vector_index.pop(record_id) for record_id in record_ids if record_id in self.id_to_vector_index]
        if not internal:
            return 0

        self.index.remove_ids(np.array(internal, dtype=np.int64))
        for vector_index in internal:
            record_id = self.vector_id_map.pop(vector_index)
            self.metadata.pop(record_id, None)
        return len(internal)

    def upsert(self, records: List[VectorRecord]) -> UpsertAck:
        if not records:
            return UpsertAck(count=0, ids=[])

        # Later duplicates of the same id win
        latest = {}
        for record in records:
            latest[record.id] = record
        batch_vectors = np.vstack([normalize(r.vector, self.dimension) for r in latest.values()]).astype(np.float32)

        with self._lock:
            snapshot = self._snapshot()
            self._remove(list(latest.keys()))

            internal_ids = np.arange(self.next_vector_index, self.next_vector_index + len(latest), dtype=np.int64)
            self.index.add_with_ids(batch_vectors, internal_ids)

            for vector_index, record in zip(internal_ids.tolist(), latest.values()):
                self.id_to_vector_index[record.id] = vector_index
                self.vector_id_map[vector_index] = record.id
                self.metadata[record.id] = dict(record.metadata or {})
            self.next_vector_index += len(latest)

            self._commit(snapshot)

        return UpsertAck(count=len(latest), ids=list(latest.keys()))

    def delete_by_ids(self, record_ids: Sequence[str]) -> None:
        with self._lock:
            snapshot = self._snapshot()
            if self._remove(list(record_ids)):
                self._commit(snapshot)

    def query(self, query_vector, top_k: int = 5) -> List[QueryResult]:
        """Search for similar vectors and return ranked results."""
        query_array = np.asarray(query_vector, dtype=np.float32).reshape(-1)
        if np.linalg.norm(query_array) == 0 or top_k <= 0:
            return []

        with self._lock:
            if not self.index.ntotal:
                return []

            normalized_query = normalize(query_array, self.dimension).reshape(1, -1)
            scores, indices = self.index.search(normalized_query, min(top_k, self.index.ntotal))

            query_results = []
            for score, vector_index in zip(scores[0], indices[0]):
                # FAISS pads missing results with -1
                if vector_index < 0 or int(vector_index) not in self.vector_id_map:
                    continue
                record_id = self.vector_id_map[int(vector_index)]
                query_results.append(QueryResult(
                    id=record_id,
                    score=float(score),
                    metadata=self.metadata.get(record_id, {})
                ))

        return query_results

    def list_ids(self) -> List[str]:
        with self._lock:
            return list(self.id_to_vector_index.keys())

    def count(self) -> int:
        return int(self.index.ntotal)

    def clear(self) -> None:
        """Clear all records from the FAISS store."""
        with self._lock:
            snapshot = self._snapshot()
            self.index = self._new_index()
            self.id_to_vector_index.clear()
            self.vector_id_map.clear()
            self.metadata.clear()
            self.next_vector_index = 0
            self._commit(snapshot)
