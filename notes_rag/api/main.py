"""
HTTP surface for the note store: note management, HTML pages and question answering.
"""

from functools import lru_cache
from pathlib import Path
from typing import List, Optional

from fastapi import Depends, FastAPI, Header, HTTPException, Query, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import HTMLResponse, PlainTextResponse, RedirectResponse

from .schemas import (
    NoteCreateRequest,
    NoteCreateResponse,
    NoteResponse,
    SearchResult,
    SearchResponse,
    HealthResponse,
    DriftFindingResponse,
    DriftResponse,
)
from ..core.config import VERSION, debug_enabled, validate_config
from ..core.drift_rules import detect_drift
from ..core.errors import NoteStoreError
from ..core.services import NoteServices, build_services
from ..util.logging import logger

PAGES_DIR = Path(__file__).parent / "pages"


@lru_cache(maxsize=1)
def get_services() -> NoteServices:
    """Process-wide pipelines built from the environment."""
    return build_services()


def _page(name: str) -> HTMLResponse:
    return HTMLResponse((PAGES_DIR / name).read_text(encoding="utf-8"))


# Initialize the FastAPI application
app = FastAPI(
    title="Notes RAG API",
    version=VERSION,
    description="Note store with retrieval-augmented question answering",
    docs_url="/docs" if debug_enabled() else None,
    redoc_url="/redoc" if debug_enabled() else None
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(NoteStoreError)
async def note_store_error_handler(request: Request, exc: NoteStoreError):
    logger.log_operation(f"api.{request.method.lower()}", "failed", {
        "path": request.url.path,
        "error": exc.__class__.__name__,
        "message": str(exc)[:100]
    })
    return PlainTextResponse(str(exc), status_code=exc.http_status)


@app.get("/health", response_model=HealthResponse)
def health_check_endpoint(services: NoteServices = Depends(get_services)):
    """Check system health."""
    db_health = services.record_store.health_check()
    issues = validate_config()

    return HealthResponse(
        status="healthy" if db_health and not issues else "unhealthy",
        version=VERSION,
        db_health=db_health,
        note_count=services.record_store.count(),
        vector_count=services.vector_store.count(),
        config_issues=issues
    )


@app.get("/notes.json", response_model=List[NoteResponse])
def list_notes_endpoint(services: NoteServices = Depends(get_services)):
    """All notes, oldest first."""
    return [
        NoteResponse(id=note.id, text=note.text, created_at=note.created_at)
        for note in services.record_store.select_all()
    ]


@app.get("/notes", response_class=HTMLResponse)
def notes_page():
    return _page("notes.html")


@app.post("/notes", response_model=NoteCreateResponse)
def create_note_endpoint(request: NoteCreateRequest, services: NoteServices = Depends(get_services)):
    created = services.ingestion.create(request.text)
    return NoteCreateResponse(id=created.id, text=created.text, inserted=created.inserted.to_dict())


@app.delete("/notes/{note_id}")
def delete_note_endpoint(note_id: int, services: NoteServices = Depends(get_services)):
    services.deletion.delete(note_id)
    return RedirectResponse(url="/notes", status_code=303)


@app.post("/notes/{note_id}")
def override_note_endpoint(
    note_id: int,
    method_override: Optional[str] = Query(default=None, alias="_method"),
    x_http_method_override: Optional[str] = Header(default=None),
    services: NoteServices = Depends(get_services),
):
    """Method override for HTML forms, which can only POST."""
    method = (method_override or x_http_method_override or "").upper()
    if method != "DELETE":
        raise HTTPException(status_code=405, detail="Method not allowed")

    services.deletion.delete(note_id)
    return RedirectResponse(url="/notes", status_code=303)


@app.get("/ui", response_class=HTMLResponse)
def ui_page():
    return _page("ui.html")


@app.get("/write", response_class=HTMLResponse)
def write_page():
    return _page("write.html")


@app.get("/search", response_model=SearchResponse)
def search_endpoint(text: str = "", services: NoteServices = Depends(get_services)):
    """Ranked notes for a question, without generating an answer."""
    question = text or services.config.default_question
    retrieved = services.query.retrieve(question)
    return SearchResponse(
        question=question,
        results=[SearchResult(id=r.id, score=r.score, text=r.text) for r in retrieved]
    )


@app.get("/drift", response_model=DriftResponse)
def drift_endpoint(services: NoteServices = Depends(get_services)):
    """Report notes without index entries and index entries without notes."""
    findings = detect_drift(services.record_store, services.vector_store)
    return DriftResponse(
        consistent=not findings,
        findings=[DriftFindingResponse(**f.to_dict()) for f in findings]
    )


@app.get("/", response_class=PlainTextResponse)
def answer_endpoint(text: str = "", services: NoteServices = Depends(get_services)):
    """Answer a question from the stored notes."""
    return PlainTextResponse(services.query.answer(text))
