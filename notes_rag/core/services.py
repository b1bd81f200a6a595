"""
Wires the leaf collaborators into the note and query pipelines.
"""

from dataclasses import dataclass, field
from typing import Optional

from .config import PipelineConfig, get_answer_generator, get_embedding_provider, get_vector_store
from .dao import IRecordStore, SQLiteRecordStore
from .notes import NoteDeletionPipeline, NoteIngestionPipeline
from .search_service import RetrievalQueryPipeline
from ..agents.agent import IAnswerGenerator
from ..vector.embeddings import IEmbeddingProvider
from ..vector.index import IVectorStore


@dataclass
class NoteServices:
    record_store: IRecordStore
    embedder: IEmbeddingProvider
    vector_store: IVectorStore
    generator: IAnswerGenerator
    config: PipelineConfig = field(default_factory=PipelineConfig)

    def __post_init__(self):
        self.ingestion = NoteIngestionPipeline(self.record_store, self.embedder, self.vector_store)
        self.deletion = NoteDeletionPipeline(self.record_store, self.vector_store)
        self.query = RetrievalQueryPipeline(
            self.record_store, self.embedder, self.vector_store, self.generator, self.config
        )


def build_services(db_path: Optional[str] = None, config: Optional[PipelineConfig] = None) -> NoteServices:
    """Build the pipelines from environment configuration."""
    config = config or PipelineConfig.from_env()
    embedder = get_embedding_provider()

    return NoteServices(
        record_store=SQLiteRecordStore(db_path),
        embedder=embedder,
        vector_store=get_vector_store(embedder.get_dimension(), db_path),
        generator=get_answer_generator(config.no_answer_sentinel),
        config=config,
    )
