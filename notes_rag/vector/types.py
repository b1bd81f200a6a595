"""
Vector index record types. The index is a derived, non-canonical mirror of the notes table.
"""

from typing import Dict, List, Optional, Sequence, Union
import numpy as np
from dataclasses import dataclass, field


@dataclass
class VectorRecord:
    """Represents a vector record with metadata."""

    id: str
    """Note id in string form"""

    vector: Optional[Union[np.ndarray, Sequence[float]]]
    """The embedding of the note text"""

    metadata: Dict[str, object] = field(default_factory=dict)
    """Additional metadata associated with the vector"""


@dataclass
class QueryResult:
    """Represents a search result from vector store."""

    id: str
    """Identifier for the matching record"""

    score: float
    """Similarity score of the match, higher is closer"""

    metadata: Dict[str, object] = field(default_factory=dict)
    """Metadata associated with the matched record"""


@dataclass
class UpsertAck:
    """Acknowledgment returned by an upsert."""

    count: int
    ids: List[str]

    def __bool__(self) -> bool:
        return self.count > 0

    def to_dict(self) -> Dict[str, object]:
        return {"count": self.count, "ids": list(self.ids)}
