"""
Request and response models for the notes API.
"""

from pydantic import BaseModel
from typing import Optional, List, Dict, Any
from datetime import datetime


class NoteCreateRequest(BaseModel):
    # Emptiness is checked by the ingestion pipeline so it maps to a 400
    text: Optional[str] = None


class NoteResponse(BaseModel):
    id: int
    text: str
    created_at: Optional[datetime] = None


class NoteCreateResponse(BaseModel):
    id: int
    text: str
    inserted: Dict[str, Any]


class SearchResult(BaseModel):
    id: str
    score: float
    text: str


class SearchResponse(BaseModel):
    question: str
    results: List[SearchResult]


class HealthResponse(BaseModel):
    status: str
    version: str
    db_health: bool
    note_count: int
    vector_count: int
    config_issues: List[str] = []


class DriftFindingResponse(BaseModel):
    id: str
    type: str
    record_id: str
    details: Dict[str, Any]


class DriftResponse(BaseModel):
    consistent: bool
    findings: List[DriftFindingResponse]
