"""
Retrieval-augmented question answering over stored notes.

Each answer is one independent pass: embed the question, take the top-K index
matches, look the notes up in SQLite, build a grounded conversation and hand it
to the answer generator. Index entries whose note no longer exists are skipped.
"""

from typing import List, Sequence

from .config import PipelineConfig
from .dao import IRecordStore
from .errors import EmbeddingError, GenerationError, IndexReadError, NoteStoreError
from .schema import RetrievedNote
from ..agents.agent import ChatMessage, IAnswerGenerator
from ..vector.embeddings import IEmbeddingProvider
from ..vector.index import IVectorStore
from ..vector.types import QueryResult
from ..util.logging import logger


def build_context(texts: Sequence[str], line_prefix: str = ". ") -> str:
    """Join note texts one per line, in the order given. Empty input gives an empty string."""
    return "\n".join(f"{line_prefix}{text}" for text in texts)


def build_conversation(context: str, question: str, config: PipelineConfig) -> List[ChatMessage]:
    """
    Build the grounded conversation for the answer generator.

    The system turn is only present when there is context to answer from.
    """
    messages = []
    if context:
        messages.append(ChatMessage(role="system", content=config.system_prompt))
    messages.append(ChatMessage(role="user", content=config.document_label + context))
    messages.append(ChatMessage(role="user", content=config.question_label + question))
    messages.append(ChatMessage(role="user", content=config.instructions))
    return messages


class RetrievalQueryPipeline:
    """Answers free-text questions from the most similar notes."""

    def __init__(self, record_store: IRecordStore, embedder: IEmbeddingProvider,
                 vector_store: IVectorStore, generator: IAnswerGenerator,
                 config: PipelineConfig = None):
        self.record_store = record_store
        self.embedder = embedder
        self.vector_store = vector_store
        self.generator = generator
        self.config = config or PipelineConfig()

    def _embed_question(self, question: str):
        try:
            vectors = self.embedder.embed([question])
        except Exception as e:
            raise EmbeddingError(f"Failed to embed question: {e}") from e

        if not vectors or vectors[0] is None or len(vectors[0]) == 0:
            raise EmbeddingError("Failed to embed question")
        return vectors[0]

    def _search(self, vector) -> List[QueryResult]:
        try:
            return self.vector_store.query(vector, self.config.top_k)
        except Exception as e:
            raise IndexReadError(f"Vector query failed: {e}") from e

    def retrieve(self, question: str) -> List[RetrievedNote]:
        """
        Rank notes against a question.

        Returns the matches that still resolve to a note, in descending score order.
        Matches with no note behind them are dropped without error.
        """
        matches = self._search(self._embed_question(question))
        if not matches:
            return []

        # StoreReadError propagates unchanged
        notes = self.record_store.select_by_ids([m.id for m in matches])
        texts_by_id = {str(note.id): note.text for note in notes}

        retrieved = []
        for match in matches:
            text = texts_by_id.get(str(match.id))
            if text is None:
                logger.debug(f"Index entry {match.id} has no note, skipping")
                continue
            retrieved.append(RetrievedNote(id=str(match.id), score=float(match.score), text=text))
        return retrieved

    def answer(self, question: str) -> str:
        """
        Answer a question from the stored notes.

        An empty question is replaced with the configured default question. The
        generator output is returned verbatim, including the no-answer sentinel.
        """
        question = question or self.config.default_question

        retrieved = self.retrieve(question)
        context = build_context([r.text for r in retrieved], self.config.context_line_prefix)
        messages = build_conversation(context, question, self.config)

        try:
            answer = self.generator.generate(messages)
        except NoteStoreError:
            logger.log_query(question, [r.id for r in retrieved], len(retrieved), status="failed")
            raise
        except Exception as e:
            logger.log_query(question, [r.id for r in retrieved], len(retrieved), status="failed")
            raise GenerationError(f"Answer generation failed: {e}") from e

        logger.log_query(question, [r.id for r in retrieved], len(retrieved))
        return answer
