"""
Command line access to the note store.

    notes-rag add "Paris is the capital of France"
    notes-rag ask "What is the capital of France?"
    notes-rag delete 1
    notes-rag list
    notes-rag drift

The FAISS index is saved next to the database (notes.db gives notes.faiss)
unless FAISS_INDEX_PATH says otherwise. VECTOR_PROVIDER=memory keeps the
index in memory only, so it starts empty on every invocation.
"""

import argparse
import json
import sys

from .core.drift_rules import detect_drift
from .core.errors import NoteStoreError
from .core.services import build_services


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="notes-rag",
        description="Store short notes and answer questions from them."
    )
    parser.add_argument("--db", default=None, help="SQLite database path (default: $DB_PATH)")

    subparsers = parser.add_subparsers(dest="command", required=True)

    add_parser = subparsers.add_parser("add", help="Create a note")
    add_parser.add_argument("text", help="Note text")

    delete_parser = subparsers.add_parser("delete", help="Delete a note by id")
    delete_parser.add_argument("note_id", type=int, help="Note id")

    subparsers.add_parser("list", help="List all notes")

    ask_parser = subparsers.add_parser("ask", help="Answer a question from the notes")
    ask_parser.add_argument("question", nargs="?", default="", help="Question (default question if omitted)")

    subparsers.add_parser("drift", help="Report notes and index entries that disagree")

    return parser


def main(argv=None) -> int:
    args = build_parser().parse_args(argv)
    services = build_services(db_path=args.db)

    try:
        if args.command == "add":
            created = services.ingestion.create(args.text)
            print(json.dumps({"id": created.id, "text": created.text, "inserted": created.inserted.to_dict()}))

        elif args.command == "delete":
            services.deletion.delete(args.note_id)
            print(f"✓ Deleted note {args.note_id}")

        elif args.command == "list":
            for note in services.record_store.select_all():
                print(f"{note.id}\t{note.text}")

        elif args.command == "ask":
            print(services.query.answer(args.question))

        elif args.command == "drift":
            findings = detect_drift(services.record_store, services.vector_store)
            if not findings:
                print("✓ Notes and vector index agree")
            for finding in findings:
                print(f"{finding.type}\t{finding.record_id}\t{finding.details['reason']}")
            return 1 if findings else 0

    except NoteStoreError as e:
        print(f"ERROR: {e}", file=sys.stderr)
        return 2 if e.http_status == 400 else 1

    return 0


if __name__ == "__main__":
    sys.exit(main())
