"""Shared test fixtures for notelink test suite.

Design:
- tmp_store: Creates an isolated note store in a temp directory
- runner / cli_invoke: CliRunner with proper isolation
- Builders (paragraph, link, text, make_note) for content trees
"""

import json
import logging
import os
from pathlib import Path
from typing import Generator

import pytest
from click.testing import CliRunner

from notelink.cli import cli
from notelink.models import Document


# ─────────────────────────────────────────────────────────────────────────────
# Content Builders
# ─────────────────────────────────────────────────────────────────────────────


def text(value: str, **marks) -> dict:
    return {"text": value, **marks}


def link(note_id: str, title: str, *children: dict, is_text_title: bool = True) -> dict:
    return {
        "type": "link",
        "noteId": note_id,
        "noteTitle": title,
        "isTextTitle": is_text_title,
        "children": list(children) or [text(title)],
    }


def paragraph(*children: dict) -> dict:
    return {"type": "paragraph", "children": list(children)}


def make_note(note_id: str, title: str, *content: dict, owner: str | None = "u1") -> Document:
    return Document.model_validate(
        {"id": note_id, "title": title, "user_id": owner, "content": list(content)}
    )


def write_note(store_root: Path, note_id: str, title: str, *content: dict, owner: str = "u1") -> Path:
    """Helper to write a note file into a store directory.

    Usage in tests:
        from conftest import write_note, paragraph, link
        write_note(tmp_store, "a", "Alpha", paragraph(link("b", "Beta")))
    """
    path = store_root / f"{note_id}.json"
    payload = {"id": note_id, "title": title, "user_id": owner, "content": list(content)}
    path.write_text(json.dumps(payload, indent=2))
    return path


def read_note(store_root: Path, note_id: str) -> dict:
    return json.loads((store_root / f"{note_id}.json").read_text())


# ─────────────────────────────────────────────────────────────────────────────
# Core Fixtures
# ─────────────────────────────────────────────────────────────────────────────


@pytest.fixture
def runner() -> CliRunner:
    """CLI runner with isolated environment."""
    return CliRunner()


@pytest.fixture
def tmp_store(tmp_path: Path) -> Generator[Path, None, None]:
    """Create an isolated note store and point NOTELINK_STORE_ROOT at it."""
    store_root = tmp_path / "notes"
    store_root.mkdir()

    original_root = os.environ.get("NOTELINK_STORE_ROOT")
    os.environ["NOTELINK_STORE_ROOT"] = str(store_root)

    yield store_root

    if original_root is not None:
        os.environ["NOTELINK_STORE_ROOT"] = original_root
    else:
        os.environ.pop("NOTELINK_STORE_ROOT", None)


@pytest.fixture
def tmp_store_with_notes(tmp_store: Path) -> Path:
    """Store with a small linked collection.

    Creates:
    - a "Alpha": links to b (mirrored text) and c
    - b "Beta": links to c with custom text
    - c "Gamma": no links
    """
    write_note(
        tmp_store,
        "a",
        "Alpha",
        paragraph(text("See "), link("b", "Beta"), text(" and "), link("c", "Gamma")),
    )
    write_note(
        tmp_store,
        "b",
        "Beta",
        paragraph(text("Next: "), link("c", "Gamma", text("the third note"), is_text_title=False)),
    )
    write_note(tmp_store, "c", "Gamma", paragraph(text("Nothing here")))
    return tmp_store


@pytest.fixture
def cli_invoke(runner: CliRunner, tmp_store: Path):
    """Helper for invoking CLI with proper isolation.

    Usage:
        def test_backlinks(cli_invoke):
            result = cli_invoke(["backlinks", "b"])
            assert result.exit_code == 0
    """
    def _invoke(args: list[str], input: str | None = None, catch_exceptions: bool = False):
        return runner.invoke(
            cli,
            args,
            input=input,
            catch_exceptions=catch_exceptions,
            env={"NOTELINK_STORE_ROOT": str(tmp_store), "NOTELINK_OWNER_ID": "u1"},
        )
    return _invoke


@pytest.fixture(autouse=True)
def reset_package_logger() -> Generator[None, None, None]:
    """Undo configure_logging() after each test so caplog sees package records."""
    yield
    logger = logging.getLogger("notelink")
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
    logger.setLevel(logging.NOTSET)
    logger.propagate = True
