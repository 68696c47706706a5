"""JSON-file note store.

Each note lives in <store root>/<note id>.json holding the note's JSON
(id, title, user_id, content). The store is the document source read by
backlink search and the persistence target for rewritten notes.
"""

from __future__ import annotations

import json
import logging
import os
import uuid
from collections.abc import Iterable
from pathlib import Path

from pydantic import ValidationError

from .config import NOTE_FILE_SUFFIX
from .errors import ErrorCode, NotelinkError
from .models import Document, PatchedDocument

log = logging.getLogger(__name__)


def atomic_write_text(path: Path, text: str, *, encoding: str = "utf-8") -> None:
    """Write text to a temp file in the same directory, fsync, then replace path."""
    path.parent.mkdir(parents=True, exist_ok=True)
    tmp_path = path.parent / f".{path.name}.tmp-{uuid.uuid4().hex}"

    try:
        with open(tmp_path, "w", encoding=encoding, newline="") as f:
            f.write(text)
            f.flush()
            os.fsync(f.fileno())
        os.replace(tmp_path, path)
    finally:
        if tmp_path.exists():
            tmp_path.unlink()


def validate_note_id(note_id: str) -> str:
    """Reject ids that cannot be used as a file name inside the store."""
    if (
        not note_id
        or note_id.startswith(".")
        or "/" in note_id
        or "\\" in note_id
        or "\x00" in note_id
    ):
        raise NotelinkError(
            ErrorCode.INVALID_NOTE_ID,
            f"Invalid note id: {note_id!r}",
            {"id": note_id},
        )
    return note_id


class JsonDocumentStore:
    """A directory of notes stored as JSON, one file per note."""

    def __init__(self, root: Path) -> None:
        self.root = Path(root)

    def note_path(self, note_id: str) -> Path:
        return self.root / f"{validate_note_id(note_id)}{NOTE_FILE_SUFFIX}"

    def load_all(self) -> list[Document]:
        """Load every readable note, ordered by id.

        Files that cannot be read or parsed are logged and skipped.
        """
        if not self.root.is_dir():
            return []

        documents: list[Document] = []
        for note_file in self.root.glob(f"*{NOTE_FILE_SUFFIX}"):
            if note_file.name.startswith("."):
                continue
            try:
                documents.append(Document.model_validate_json(note_file.read_bytes()))
            except (OSError, ValidationError) as e:
                log.warning("Skipping unreadable note %s: %s", note_file.name, e)

        documents.sort(key=lambda document: document.id)
        return documents

    def get(self, note_id: str) -> Document | None:
        """Return the note with note_id, or None if it is not stored.

        Raises:
            NotelinkError: If the note file exists but cannot be parsed.
        """
        path = self.note_path(note_id)
        if not path.is_file():
            return None
        try:
            return Document.model_validate_json(path.read_bytes())
        except (OSError, ValidationError) as e:
            raise NotelinkError(
                ErrorCode.INVALID_NOTE_FILE,
                f"Failed to read note {note_id}: {e}",
                {"id": note_id, "path": str(path)},
            ) from e

    def upsert(self, records: Iterable[Document | PatchedDocument]) -> list[str]:
        """Insert or replace each record, keyed by id.

        Records are written one at a time; if a write fails, the records
        before it stay written and the error lists them.

        Returns:
            Ids of the written records, in order.

        Raises:
            NotelinkError: If a record cannot be written.
        """
        written: list[str] = []
        for record in records:
            path = self.note_path(record.id)
            payload = record.model_dump(mode="json", by_alias=True)
            try:
                atomic_write_text(path, json.dumps(payload, indent=2, ensure_ascii=False) + "\n")
            except OSError as e:
                raise NotelinkError(
                    ErrorCode.STORE_WRITE_FAILED,
                    f"Failed to write note {record.id}: {e}",
                    {"id": record.id, "written": written},
                ) from e
            written.append(record.id)
            log.debug("Wrote note %s", record.id)
        return written
