"""
Configuration for the note store, the vector index and the answer pipeline.

Settings come from environment variables (a local .env file is loaded first).
Collaborator factories read the environment at call time so tests can switch
providers with monkeypatch.setenv.
"""

import os
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional

from dotenv import load_dotenv

load_dotenv()

# Database path configuration
DB_PATH = os.getenv("DB_PATH", "./data/notes.db")

# Debug flag enables interactive API docs
DEBUG = os.getenv("DEBUG", "false").lower() == "true"

# Vector index and embedding configuration
VECTOR_PROVIDER = os.getenv("VECTOR_PROVIDER", "faiss")  # faiss|memory
# Unset means next to the database file; empty keeps the FAISS index in memory
FAISS_INDEX_PATH = os.getenv("FAISS_INDEX_PATH")
EMBED_PROVIDER = os.getenv("EMBED_PROVIDER", "hash")  # hash|sentence_transformers
EMBED_MODEL_NAME = os.getenv("EMBED_MODEL_NAME", "BAAI/bge-base-en-v1.5")
EMBED_DIM = int(os.getenv("EMBED_DIM", "384"))

# Answer generation configuration
LLM_PROVIDER = os.getenv("LLM_PROVIDER", "mock")  # mock|ollama
OLLAMA_MODEL = os.getenv("OLLAMA_MODEL", "llama3.1:8b")

# Retrieval configuration
RAG_TOP_K = int(os.getenv("RAG_TOP_K", "5"))

VALID_VECTOR_PROVIDERS = ["faiss", "memory"]
VALID_EMBED_PROVIDERS = ["hash", "sentence_transformers"]
VALID_LLM_PROVIDERS = ["mock", "ollama"]

# Version string
VERSION = "1.0.0"

DEFAULT_SYSTEM_PROMPT = (
    "You are a note-taking assistant. Please answer concisely based on the content provided below:"
)
DEFAULT_INSTRUCTIONS = (
    "INSTRUCTIONS: Answer the users QUESTION using the DOCUMENT text above. "
    "Keep your answer ground in the facts of the DOCUMENT. "
    "If the DOCUMENT doesn't contain the facts to answer the QUESTION return {NONE}"
)


@dataclass
class PipelineConfig:
    """Prompt text and retrieval limits used by the query pipeline."""

    top_k: int = 5
    system_prompt: str = DEFAULT_SYSTEM_PROMPT
    document_label: str = "DOCUMENT:"
    question_label: str = "QUESTION:"
    instructions: str = DEFAULT_INSTRUCTIONS
    no_answer_sentinel: str = "{NONE}"
    default_question: str = "What is the square root of 9?"
    context_line_prefix: str = ". "

    @classmethod
    def from_env(cls) -> "PipelineConfig":
        return cls(top_k=int(os.getenv("RAG_TOP_K", str(RAG_TOP_K))))


def debug_enabled():
    """Check if debug mode is enabled."""
    return os.getenv("DEBUG", "false").lower() == "true"


def get_db_path() -> str:
    """Get the SQLite database path."""
    return os.getenv("DB_PATH", DB_PATH)


def ensure_db_directory(db_path: str = None):
    """Ensure the database directory exists."""
    Path(db_path or get_db_path()).parent.mkdir(parents=True, exist_ok=True)


def get_embedding_provider():
    """Get configured embedding provider implementation."""
    provider = os.getenv("EMBED_PROVIDER", EMBED_PROVIDER)

    if provider == "sentence_transformers":
        from ..vector.embeddings import SentenceTransformerEmbedding
        return SentenceTransformerEmbedding(os.getenv("EMBED_MODEL_NAME", EMBED_MODEL_NAME))

    from ..vector.embeddings import HashingEmbedding
    return HashingEmbedding(dimension=int(os.getenv("EMBED_DIM", str(EMBED_DIM))))


def get_faiss_index_path(db_path: str = None) -> Optional[str]:
    """Get the FAISS index path, defaulting to the database path with a .faiss suffix."""
    index_path = os.getenv("FAISS_INDEX_PATH", FAISS_INDEX_PATH)
    if index_path is None:
        return str(Path(db_path or get_db_path()).with_suffix(".faiss"))
    return index_path or None


def get_vector_store(dimension: int, db_path: str = None):
    """Get configured vector store implementation."""
    provider = os.getenv("VECTOR_PROVIDER", VECTOR_PROVIDER)

    if provider == "faiss":
        from ..vector.faiss_store import FaissVectorStore
        return FaissVectorStore(dimension, index_path=get_faiss_index_path(db_path))

    from ..vector.index import SimpleInMemoryVectorStore
    return SimpleInMemoryVectorStore()


def get_answer_generator(no_answer_sentinel: str = "{NONE}"):
    """Get configured answer generator implementation."""
    provider = os.getenv("LLM_PROVIDER", LLM_PROVIDER)

    if provider == "ollama":
        from ..agents.ollama_agent import OllamaAnswerGenerator
        return OllamaAnswerGenerator(os.getenv("OLLAMA_MODEL", OLLAMA_MODEL))

    from ..agents.mock_agent import MockAnswerGenerator
    return MockAnswerGenerator(no_answer_sentinel=no_answer_sentinel)


def validate_config() -> List[str]:
    """Validate configuration and return any issues."""
    issues = []

    vector_provider = os.getenv("VECTOR_PROVIDER", VECTOR_PROVIDER)
    if vector_provider not in VALID_VECTOR_PROVIDERS:
        issues.append(f"Invalid VECTOR_PROVIDER: {vector_provider}")

    embed_provider = os.getenv("EMBED_PROVIDER", EMBED_PROVIDER)
    if embed_provider not in VALID_EMBED_PROVIDERS:
        issues.append(f"Invalid EMBED_PROVIDER: {embed_provider}")

    llm_provider = os.getenv("LLM_PROVIDER", LLM_PROVIDER)
    if llm_provider not in VALID_LLM_PROVIDERS:
        issues.append(f"Invalid LLM_PROVIDER: {llm_provider}")

    try:
        if int(os.getenv("RAG_TOP_K", str(RAG_TOP_K))) < 1:
            issues.append("RAG_TOP_K must be >= 1")
    except ValueError:
        issues.append("RAG_TOP_K must be an integer")

    return issues
