"""
Record store for notes. SQLite is the canonical source of truth for note content;
the vector index only mirrors it.
"""

import sqlite3
from abc import ABC, abstractmethod
from datetime import datetime
from typing import Iterable, List, Optional

from .db import get_db, health_check, init_db
from .errors import StoreReadError, StoreWriteError
from .schema import Note
from ..util.logging import logger


class IRecordStore(ABC):
    """Abstract interface for durable note storage."""

    @abstractmethod
    def insert_returning(self, text: str) -> Optional[Note]:
        """Insert a note and return the created record, or None if nothing was written."""
        pass

    @abstractmethod
    def delete_by_id(self, note_id: int) -> None:
        """Delete a note. Deleting an unknown id is not an error."""
        pass

    @abstractmethod
    def select_by_ids(self, note_ids: Iterable) -> List[Note]:
        """Fetch the notes whose ids are in the given set, in no particular order."""
        pass

    @abstractmethod
    def select_all(self) -> List[Note]:
        """Fetch every note, oldest first."""
        pass

    @abstractmethod
    def count(self) -> int:
        pass

    def health_check(self) -> bool:
        return True


class SQLiteRecordStore(IRecordStore):
    """SQLite-backed record store. Opens one connection per operation."""

    def __init__(self, db_path: str = None):
        self.db_path = db_path
        init_db(db_path)

    def insert_returning(self, text: str) -> Optional[Note]:
        try:
            with get_db(self.db_path) as conn:
                cursor = conn.cursor()
                cursor.execute(
                    "INSERT INTO notes (text) VALUES (?) RETURNING id, text, created_at",
                    (text,)
                )
                row = cursor.fetchone()
                conn.commit()
        except sqlite3.Error as e:
            logger.log_note_operation("insert", text=text, status="failed")
            raise StoreWriteError(f"Failed to insert note: {e}") from e

        if not row:
            return None

        note = _row_to_note(row)
        logger.log_note_operation("insert", note_id=note.id, text=note.text)
        return note

    def delete_by_id(self, note_id: int) -> None:
        try:
            with get_db(self.db_path) as conn:
                cursor = conn.cursor()
                cursor.execute("DELETE FROM notes WHERE id = ?", (note_id,))
                conn.commit()
                deleted = cursor.rowcount
        except sqlite3.Error as e:
            logger.log_note_operation("delete", note_id=note_id, status="failed")
            raise StoreWriteError(f"Failed to delete note {note_id}: {e}") from e

        logger.log_note_operation("delete", note_id=note_id, status="success" if deleted else "noop")

    def select_by_ids(self, note_ids: Iterable) -> List[Note]:
        ids = list(dict.fromkeys(_coerce_id(i) for i in note_ids))
        if not ids:
            return []

        # Bind every id as a parameter rather than splicing them into the SQL
        placeholders = ", ".join("?" for _ in ids)
        try:
            with get_db(self.db_path) as conn:
                cursor = conn.cursor()
                cursor.execute(
                    f"SELECT id, text, created_at FROM notes WHERE id IN ({placeholders})",
                    ids
                )
                rows = cursor.fetchall()
        except sqlite3.Error as e:
            raise StoreReadError(f"Failed to look up notes {ids}: {e}") from e

        return [_row_to_note(row) for row in rows]

    def select_all(self) -> List[Note]:
        try:
            with get_db(self.db_path) as conn:
                cursor = conn.cursor()
                cursor.execute("SELECT id, text, created_at FROM notes ORDER BY id")
                rows = cursor.fetchall()
        except sqlite3.Error as e:
            raise StoreReadError(f"Failed to list notes: {e}") from e

        return [_row_to_note(row) for row in rows]

    def count(self) -> int:
        try:
            with get_db(self.db_path) as conn:
                cursor = conn.cursor()
                cursor.execute("SELECT COUNT(*) FROM notes")
                result = cursor.fetchone()
                return result[0] if result else 0
        except sqlite3.Error as e:
            raise StoreReadError(f"Failed to count notes: {e}") from e

    def health_check(self) -> bool:
        return health_check(self.db_path)


def _coerce_id(value):
    # Index ids are strings; integer-looking ones map back to the INTEGER primary key
    if isinstance(value, str) and value.strip().lstrip("-").isdigit():
        return int(value)
    return value


def _row_to_note(row) -> Note:
    note_id, text, created_at = row
    if isinstance(created_at, str):
        try:
            created_at = datetime.fromisoformat(created_at)
        except ValueError:
            created_at = None
    return Note(id=note_id, text=text, created_at=created_at)
