"""
Retrieval-augmented question answering: ranking, context assembly and prompt construction.
"""

import pytest
from unittest.mock import MagicMock

from notes_rag.agents.agent import ChatMessage
from notes_rag.core.config import PipelineConfig
from notes_rag.core.errors import EmbeddingError, GenerationError, IndexReadError, StoreReadError
from notes_rag.core.search_service import RetrievalQueryPipeline, build_context, build_conversation
from notes_rag.vector.types import QueryResult, VectorRecord


@pytest.fixture
def generator_mock():
    generator = MagicMock()
    generator.generate.return_value = "Paris"
    return generator


def _pipeline(services, generator=None, vector_store=None, config=None):
    return RetrievalQueryPipeline(
        services.record_store,
        services.embedder,
        vector_store or services.vector_store,
        generator or services.generator,
        config or services.config,
    )


def test_build_context_one_line_per_note():
    assert build_context(["first", "second"]) == ". first\n. second"
    assert build_context([]) == ""


def test_build_conversation_with_context():
    config = PipelineConfig()
    messages = build_conversation(". Paris is the capital of France", "Where is Paris?", config)

    assert [m.role for m in messages] == ["system", "user", "user", "user"]
    assert messages[0].content == config.system_prompt
    assert messages[1].content == "DOCUMENT:. Paris is the capital of France"
    assert messages[2].content == "QUESTION:Where is Paris?"
    assert config.no_answer_sentinel in messages[3].content


def test_build_conversation_without_context_has_no_system_turn():
    messages = build_conversation("", "Where is Paris?", PipelineConfig())

    assert [m.role for m in messages] == ["user", "user", "user"]
    assert messages[0].content == "DOCUMENT:"


def test_capital_of_france_scenario(services, generator_mock):
    paris = services.record_store.insert_returning("Paris is the capital of France")
    services.record_store.insert_returning("The sky is blue")

    vector_store = MagicMock()
    vector_store.query.return_value = [QueryResult(id=str(paris.id), score=0.93)]

    answer = _pipeline(services, generator_mock, vector_store).answer("What is the capital of France?")

    assert answer == "Paris"
    assert vector_store.query.call_args[0][1] == 5
    messages = generator_mock.generate.call_args[0][0]
    assert messages[0] == ChatMessage(role="system", content=services.config.system_prompt)
    assert messages[1] == ChatMessage(role="user", content="DOCUMENT:. Paris is the capital of France")
    assert messages[2] == ChatMessage(role="user", content="QUESTION:What is the capital of France?")


def test_closest_note_ranks_first(services, generator_mock):
    services.ingestion.create("The sky is blue")
    services.ingestion.create("Paris is the capital of France")

    retrieved = _pipeline(services, generator_mock).retrieve("What is the capital of France?")

    assert [r.text for r in retrieved] == ["Paris is the capital of France", "The sky is blue"]
    assert retrieved[0].score > retrieved[1].score


def test_empty_index_gives_empty_context_and_no_system_turn(services, generator_mock):
    generator_mock.generate.return_value = "{NONE}"

    answer = _pipeline(services, generator_mock).answer("What is the capital of France?")

    assert answer == "{NONE}"
    messages = generator_mock.generate.call_args[0][0]
    assert [m.role for m in messages] == ["user", "user", "user"]
    assert messages[0].content == "DOCUMENT:"


def test_empty_question_uses_default_question(services, embedder):
    answer = services.query.answer("")

    assert answer
    assert embedder.calls[-1] == [services.config.default_question]
    messages = services.generator.calls[-1]
    assert messages[-2].content == "QUESTION:" + services.config.default_question


def test_sentinel_is_returned_verbatim(services):
    # MockAnswerGenerator answers with the sentinel when there is no document
    assert services.query.answer("What is the capital of France?") == "{NONE}"


def test_fewer_entries_than_top_k(services, generator_mock):
    services.ingestion.create("Paris is the capital of France")
    services.ingestion.create("The sky is blue")

    answer = _pipeline(services, generator_mock).answer("What is the capital of France?")

    assert answer == "Paris"
    document = generator_mock.generate.call_args[0][0][1].content
    assert len(document[len("DOCUMENT:"):].splitlines()) == 2


def test_unresolved_ids_are_dropped_preserving_rank(services, generator_mock):
    a = services.record_store.insert_returning("first ranked")
    c = services.record_store.insert_returning("third ranked")

    vector_store = MagicMock()
    vector_store.query.return_value = [
        QueryResult(id=str(c.id), score=0.9),
        QueryResult(id="999", score=0.8),
        QueryResult(id=str(a.id), score=0.7),
    ]

    _pipeline(services, generator_mock, vector_store).answer("anything")

    document = generator_mock.generate.call_args[0][0][1].content
    assert document == "DOCUMENT:. third ranked\n. first ranked"


def test_dangling_entries_only_shrink_context(services, vector_store, generator_mock):
    kept = services.ingestion.create("Paris is the capital of France")
    vector_store.upsert([VectorRecord(id="424242", vector=[3.0, 0.0, 0.0, 0.1])])

    retrieved = _pipeline(services, generator_mock).retrieve("capital of France")

    assert [r.id for r in retrieved] == [str(kept.id)]


def test_all_entries_dangling_gives_empty_context(services, vector_store, generator_mock):
    vector_store.upsert([VectorRecord(id="1000", vector=[1.0, 0.0, 0.0, 0.1])])

    _pipeline(services, generator_mock).answer("capital of France")

    messages = generator_mock.generate.call_args[0][0]
    assert [m.role for m in messages] == ["user", "user", "user"]


def test_top_k_comes_from_config(services, generator_mock):
    for text in ["Paris", "capital", "France", "Paris capital"]:
        services.ingestion.create(text)

    retrieved = _pipeline(services, generator_mock, config=PipelineConfig(top_k=2)).retrieve("Paris")
    assert len(retrieved) == 2


def test_embedding_failure_fails_query(services, embedder, generator_mock):
    embedder.embed = MagicMock(side_effect=RuntimeError("model offline"))

    with pytest.raises(EmbeddingError):
        _pipeline(services, generator_mock).answer("question")

    generator_mock.generate.assert_not_called()


def test_index_failure_fails_query(services, generator_mock):
    vector_store = MagicMock()
    vector_store.query.side_effect = RuntimeError("index unavailable")

    with pytest.raises(IndexReadError):
        _pipeline(services, generator_mock, vector_store).answer("question")


def test_store_read_failure_fails_query(services, generator_mock):
    services.ingestion.create("Paris is the capital of France")
    services.record_store.select_by_ids = MagicMock(side_effect=StoreReadError("database is locked"))

    with pytest.raises(StoreReadError):
        _pipeline(services, generator_mock).answer("capital")


def test_generator_failure_is_not_retried(services, generator_mock):
    generator_mock.generate.side_effect = RuntimeError("model crashed")

    with pytest.raises(GenerationError):
        _pipeline(services, generator_mock).answer("question")

    assert generator_mock.generate.call_count == 1
