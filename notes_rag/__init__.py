"""
notes_rag - a note store that answers questions from its own notes.

Notes live in SQLite; their embeddings live in a vector index keyed by note id.
Questions are answered by a generative model grounded on the closest notes.
"""

__version__ = "1.0.0"
