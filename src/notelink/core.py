"""Core operations: look up backlinks, push a title change to them, rename notes.

These functions wire the pure search/rewrite steps to a JsonDocumentStore.
"""

from __future__ import annotations

import logging

from .backlinks import find_backlinks
from .errors import ErrorCode, NotelinkError
from .models import Backlink, RenameResult
from .rewriter import rewrite_backlinks
from .store import JsonDocumentStore

log = logging.getLogger(__name__)


def get_backlinks(store: JsonDocumentStore, note_id: str) -> list[Backlink]:
    """Return the notes in store that link to note_id."""
    return find_backlinks(store.load_all(), note_id)


def update_backlinks(
    store: JsonDocumentStore,
    note_id: str,
    new_title: str,
    owner_id: str | None,
    *,
    dry_run: bool = False,
) -> RenameResult:
    """Rewrite every link to note_id so it carries new_title, and save the notes.

    Args:
        store: Note store to read from and write to.
        note_id: Id of the renamed note.
        new_title: Its new title.
        owner_id: Acting owner, stamped on every written note.
        dry_run: Compute the patches but write nothing.

    Raises:
        NotelinkError: OWNER_REQUIRED without an owner, or a store error.
    """
    if not owner_id:
        raise NotelinkError(
            ErrorCode.OWNER_REQUIRED,
            "An owner id is required to update backlinks",
            {"suggestion": "Pass --owner or set NOTELINK_OWNER_ID"},
        )

    documents = store.load_all()
    backlinks = find_backlinks(documents, note_id)
    patched = rewrite_backlinks(backlinks, documents, new_title, owner_id=owner_id)

    patched_ids = {record.id for record in patched}
    result = RenameResult(
        note_id=note_id,
        new_title=new_title,
        skipped=[b.id for b in backlinks if b.id not in patched_ids],
        matches=sum(len(b.matches) for b in backlinks if b.id in patched_ids),
        dry_run=dry_run,
    )

    if dry_run:
        # Report what would be written
        result.updated = [record.id for record in patched]
        return result
    if not patched:
        return result

    result.updated = store.upsert(patched)
    log.debug(
        "Updated %d link(s) to %s across %d note(s)",
        result.matches,
        note_id,
        len(result.updated),
    )
    return result


def rename_note(
    store: JsonDocumentStore,
    note_id: str,
    new_title: str,
    owner_id: str | None,
) -> RenameResult:
    """Commit a title edit: save the note under new_title, then update its backlinks.

    Raises:
        NotelinkError: NOTE_NOT_FOUND, INVALID_TITLE, OWNER_REQUIRED or a store error.
    """
    if not new_title.strip():
        raise NotelinkError(ErrorCode.INVALID_TITLE, "Title cannot be empty")
    if not owner_id:
        raise NotelinkError(
            ErrorCode.OWNER_REQUIRED,
            "An owner id is required to rename a note",
            {"suggestion": "Pass --owner or set NOTELINK_OWNER_ID"},
        )

    note = store.get(note_id)
    if note is None:
        raise NotelinkError(
            ErrorCode.NOTE_NOT_FOUND,
            f"Note not found: {note_id}",
            {"id": note_id},
        )

    if note.title != new_title:
        store.upsert([note.model_copy(update={"title": new_title})])
        log.debug("Renamed note %s: %r -> %r", note_id, note.title, new_title)

    return update_backlinks(store, note_id, new_title, owner_id)
