"""
Note create and delete across the record store and the vector index.

There is no transaction spanning both stores. Create writes the record first,
then the embedding, then the index entry; a failure after the record insert
leaves a note with no index entry. Delete removes the record first, then the
index entry; a failure on the index side leaves a dangling entry. Neither gap
is repaired here (see drift_rules.detect_drift).
"""

from typing import Union

from .dao import IRecordStore
from .errors import EmbeddingError, IndexWriteError, StoreWriteError, ValidationError
from .schema import CreatedNote
from ..vector.embeddings import IEmbeddingProvider
from ..vector.index import IVectorStore
from ..vector.types import VectorRecord
from ..util.logging import logger


class NoteIngestionPipeline:
    """Creates a note in the record store and indexes its embedding."""

    def __init__(self, record_store: IRecordStore, embedder: IEmbeddingProvider, vector_store: IVectorStore):
        self.record_store = record_store
        self.embedder = embedder
        self.vector_store = vector_store

    def create(self, text: str) -> CreatedNote:
        """
        Create a note.

        Args:
            text: Note text, must contain something other than whitespace

        Returns:
            CreatedNote with the store-assigned id, the text and the index acknowledgment

        Raises:
            ValidationError: text is empty or whitespace only (nothing is written)
            StoreWriteError: the insert did not yield a record
            EmbeddingError: no vector was produced (the note stays, unindexed)
            IndexWriteError: the upsert was not acknowledged (the note stays, unindexed)
        """
        # Whitespace-only text counts as empty
        if text is None or not str(text).strip():
            raise ValidationError("Missing text")

        note = self.record_store.insert_returning(text)
        if not note:
            raise StoreWriteError("Failed to create note")

        try:
            vectors = self.embedder.embed([text])
        except Exception as e:
            _log_orphan(note.id, "embedding_failed")
            raise EmbeddingError(f"Failed to generate vector embedding: {e}") from e

        if not vectors or vectors[0] is None or len(vectors[0]) == 0:
            _log_orphan(note.id, "embedding_empty")
            raise EmbeddingError("Failed to generate vector embedding")

        record = VectorRecord(
            id=str(note.id),
            vector=vectors[0],
            metadata={"created_at": note.created_at.isoformat() if note.created_at else None}
        )

        try:
            inserted = self.vector_store.upsert([record])
        except Exception as e:
            _log_orphan(note.id, "upsert_failed")
            raise IndexWriteError(f"Failed to index note {note.id}: {e}") from e

        if not inserted:
            _log_orphan(note.id, "upsert_unacknowledged")
            raise IndexWriteError(f"Vector index did not acknowledge note {note.id}")

        logger.log_vector_operation("upserted", record.id, {
            "provider": self.vector_store.__class__.__name__,
            "dimension": len(vectors[0])
        })
        return CreatedNote(id=note.id, text=text, inserted=inserted)


class NoteDeletionPipeline:
    """Deletes a note from the record store, then its index entry."""

    def __init__(self, record_store: IRecordStore, vector_store: IVectorStore):
        self.record_store = record_store
        self.vector_store = vector_store

    def delete(self, note_id: Union[int, str]) -> bool:
        # Raises StoreWriteError before the index is touched
        self.record_store.delete_by_id(note_id)

        record_id = str(note_id)
        try:
            self.vector_store.delete_by_ids([record_id])
        except Exception as e:
            logger.log_vector_operation("delete_failed", record_id, {
                "provider": self.vector_store.__class__.__name__,
                "consistency": "dangling_entry",
                "error": str(e)[:100]
            }, status="partial")
            raise IndexWriteError(f"Note {note_id} deleted but its index entry remains: {e}") from e

        logger.log_vector_operation("deleted", record_id, {
            "provider": self.vector_store.__class__.__name__
        })
        return True


def _log_orphan(note_id, reason: str):
    logger.log_note_operation("create", note_id=note_id, status="partial")
    logger.warning(f"Note {note_id} stored without an index entry ({reason})")
