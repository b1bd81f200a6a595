"""
Consistency drift detection between the notes table and the vector index.

Detection only: findings are reported and logged, never repaired here.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List
import uuid

from .dao import IRecordStore
from ..vector.index import IVectorStore
from ..util.logging import logger

MISSING_VECTOR = "missing_vector"      # note with no index entry
ORPHANED_VECTOR = "orphaned_vector"    # index entry with no note


@dataclass
class DriftFinding:
    """Represents a detected inconsistency between the notes table and the vector index."""
    id: str
    type: str
    record_id: str
    details: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        return {"id": self.id, "type": self.type, "record_id": self.record_id, "details": self.details}


def detect_drift(record_store: IRecordStore, vector_store: IVectorStore) -> List[DriftFinding]:
    """
    Compare the notes table against the vector index.

    Finds:
    1. Notes with no index entry (create failed after the insert)
    2. Index entries with no note (delete failed after the record delete)

    Returns:
        Findings ordered by type, then by note id.
    """
    notes = {str(note.id): note for note in record_store.select_all()}
    vector_ids = set(vector_store.list_ids())

    findings = []

    for note_id, note in notes.items():
        if note_id not in vector_ids:
            findings.append(DriftFinding(
                id=str(uuid.uuid4()),
                type=MISSING_VECTOR,
                record_id=note_id,
                details={
                    "created_at": note.created_at.isoformat() if note.created_at else None,
                    "reason": "Note exists in SQLite but is missing from the vector index"
                }
            ))

    for vector_id in sorted(vector_ids - set(notes), key=_sort_key):
        findings.append(DriftFinding(
            id=str(uuid.uuid4()),
            type=ORPHANED_VECTOR,
            record_id=vector_id,
            details={"reason": "Vector entry exists but the corresponding note is missing"}
        ))

    for finding in findings:
        logger.log_drift_finding(finding.type, finding.record_id)

    return findings


def _sort_key(record_id: str):
    return (0, int(record_id), "") if record_id.isdigit() else (1, 0, record_id)
