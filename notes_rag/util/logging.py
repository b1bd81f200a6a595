"""
Structured operation logging for note storage, vector indexing and question answering.
"""

import logging
from typing import Any, Dict, List


class StructuredLogger:
    """Structured logger for note, vector, query and drift operations."""

    def __init__(self, name: str = "notes_rag"):
        self.logger = logging.getLogger(name)
        self.logger.setLevel(logging.INFO)

        # Create handler if not already set
        if not self.logger.handlers:
            handler = logging.StreamHandler()
            formatter = logging.Formatter(
                '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
            )
            handler.setFormatter(formatter)
            self.logger.addHandler(handler)

    def log_operation(self, operation: str, status: str, details: Dict[str, Any] = None):
        """Log a structured operation."""
        message = f"Operation: {operation}, Status: {status}"
        if details:
            message += f", Details: {details}"

        if status in ("failed", "error"):
            self.logger.error(message)
        elif status in ("partial", "skipped", "detected"):
            self.logger.warning(message)
        else:
            self.logger.info(message)

    def log_note_operation(self, operation: str, note_id: Any = None, text: str = None, status: str = "success"):
        """Log a record store operation on a note."""
        details = {}
        if note_id is not None:
            details["note_id"] = note_id
        if text is not None:
            details["text"] = _truncate(text, 50)

        self.log_operation(f"note.{operation}", status, details)

    def log_vector_operation(self, operation: str, record_id: str, details: Dict[str, Any] = None, status: str = "success"):
        """Log a vector operation."""
        log_details = {"record_id": record_id}
        if details:
            log_details.update(details)

        self.log_operation(f"vector.{operation}", status, log_details)

    def log_query(self, question: str, retrieved_ids: List[str], context_lines: int, status: str = "success", details: Dict[str, Any] = None):
        """Log a question answering pass."""
        log_details = {
            "question": _truncate(question, 50),
            "retrieved": len(retrieved_ids),
            "context_lines": context_lines,
        }
        if details:
            log_details.update(details)

        self.log_operation("query.answer", status, log_details)

    def log_drift_finding(self, finding_type: str, record_id: str, details: Dict[str, Any] = None):
        """Log drift detection findings."""
        log_details = {
            "finding_type": finding_type,
            "record_id": record_id
        }
        if details:
            log_details.update(details)

        self.log_operation("drift.finding", "detected", log_details)

    # Standard logging methods for compatibility
    def info(self, message: str) -> None:
        """Log an info message."""
        self.logger.info(message)

    def warning(self, message: str) -> None:
        """Log a warning message."""
        self.logger.warning(message)

    def error(self, message: str) -> None:
        """Log an error message."""
        self.logger.error(message)

    def debug(self, message: str) -> None:
        """Log a debug message."""
        self.logger.debug(message)


def _truncate(value: str, limit: int) -> str:
    return value[:limit] + "..." if len(value) > limit else value


# Global logger instance
logger = StructuredLogger()
