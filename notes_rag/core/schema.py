"""
Record types shared by the record store, the pipelines and the API.
"""

from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from ..vector.types import UpsertAck


@dataclass
class Note:
    id: int
    text: str
    created_at: Optional[datetime] = None


@dataclass
class CreatedNote:
    """Result of a successful create: the assigned id, the text and the index acknowledgment."""
    id: int
    text: str
    inserted: UpsertAck


@dataclass
class RetrievedNote:
    """A ranked similarity match joined back to its note."""
    id: str
    score: float
    text: str
