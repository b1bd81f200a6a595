"""
Error kinds raised by the note pipelines.

Every error is terminal for the call that raised it; nothing here is retried.
"""


class NoteStoreError(Exception):
    """Base class for all pipeline failures."""

    http_status = 500


class ValidationError(NoteStoreError):
    """Input rejected before any side effect."""

    http_status = 400


class StoreWriteError(NoteStoreError):
    """Record store insert or delete failed."""


class StoreReadError(NoteStoreError):
    """Record store lookup failed."""


class EmbeddingError(NoteStoreError):
    """Embedding client returned no vector or raised."""


class IndexWriteError(NoteStoreError):
    """Vector index upsert or delete failed."""


class IndexReadError(NoteStoreError):
    """Vector index similarity query failed."""


class GenerationError(NoteStoreError):
    """Answer generator call failed."""
