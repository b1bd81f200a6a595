"""
Structured operation logging.
"""

import logging

import pytest

from notes_rag.util.logging import StructuredLogger


@pytest.fixture
def structured(caplog):
    caplog.set_level(logging.DEBUG, logger="notes_rag.test")
    return StructuredLogger("notes_rag.test")


def test_level_follows_status(structured, caplog):
    structured.log_operation("note.create", "success")
    structured.log_operation("note.create", "partial")
    structured.log_operation("note.create", "failed")

    assert [r.levelno for r in caplog.records] == [logging.INFO, logging.WARNING, logging.ERROR]


def test_note_text_is_truncated(structured, caplog):
    structured.log_note_operation("create", note_id=1, text="x" * 80)

    message = caplog.records[-1].getMessage()
    assert "note.create" in message
    assert "x" * 50 + "..." in message
    assert "x" * 51 not in message


def test_query_logs_counts_not_note_text(structured, caplog):
    structured.log_query("What is the capital of France?", ["1", "2"], 2)

    message = caplog.records[-1].getMessage()
    assert "'retrieved': 2" in message
    assert "'context_lines': 2" in message


def test_drift_findings_are_warnings(structured, caplog):
    structured.log_drift_finding("orphaned_vector", "9")

    record = caplog.records[-1]
    assert record.levelno == logging.WARNING
    assert "orphaned_vector" in record.getMessage()


def test_handler_added_once():
    StructuredLogger("notes_rag.once")
    second = StructuredLogger("notes_rag.once")

    assert len(second.logger.handlers) == 1
