#!/usr/bin/env python3
"""
nl: CLI for notelink

Usage:
    nl backlinks NOTE_ID                    # Notes linking to NOTE_ID
    nl update-backlinks NOTE_ID "New title" # Push a title change to linking notes
    nl rename NOTE_ID "New title"           # Rename a note and update its backlinks
"""

from __future__ import annotations

import difflib
import json
import sys
from collections.abc import Sequence
from pathlib import Path
from typing import Any, NoReturn

import click
from click.exceptions import ClickException, UsageError

from . import __version__ as NOTELINK_VERSION
from .errors import NotelinkError, format_error_json


def format_table(rows: list[dict], columns: list[str], max_widths: dict | None = None) -> str:
    """Format rows as a simple table."""
    if not rows:
        return ""

    max_widths = max_widths or {}

    def cell(row: dict, col: str) -> str:
        val = str(row.get(col, ""))
        limit = max_widths.get(col, 50)
        if len(val) > limit:
            val = val[: limit - 3] + "..."
        return val

    widths = {col: len(col) for col in columns}
    for row in rows:
        for col in columns:
            widths[col] = max(widths[col], len(cell(row, col)))

    lines = [
        "  ".join(col.upper().ljust(widths[col]) for col in columns),
        "  ".join("-" * widths[col] for col in columns),
    ]
    for row in rows:
        lines.append("  ".join(cell(row, col).ljust(widths[col]) for col in columns))

    return "\n".join(lines)


def output(data, as_json: bool = False):
    """Output data as JSON or formatted text."""
    if as_json:
        click.echo(json.dumps(data, indent=2, default=str))
    else:
        click.echo(data)


def _handle_error(ctx: click.Context, error: NotelinkError, exit_code: int = 1) -> NoReturn:
    """Print a NotelinkError (as JSON with --json-errors) and exit."""
    json_errors = ctx.obj.get("json_errors", False) if ctx.obj else False

    if json_errors:
        click.echo(error.to_json(), err=True)
    else:
        click.echo(f"Error: {error.message}", err=True)
        suggestion = error.details.get("suggestion")
        if suggestion:
            click.echo(f"Hint: {suggestion}", err=True)

    sys.exit(exit_code)


def get_error_code_for_exception(exc: Exception) -> str:
    """Map Click exceptions to error codes."""
    if isinstance(exc, click.MissingParameter):
        return "MISSING_ARGUMENT"
    elif isinstance(exc, click.BadParameter):
        return "INVALID_ARGUMENT"
    elif isinstance(exc, click.NoSuchOption):
        return "UNKNOWN_OPTION"
    elif isinstance(exc, UsageError):
        return "USAGE_ERROR"
    return "CLI_ERROR"


class JsonErrorGroup(click.Group):
    """Click group that formats usage errors as JSON when --json-errors is set.

    Also suggests the closest command name for typos.
    """

    def resolve_command(self, ctx, args):
        try:
            return super().resolve_command(ctx, args)
        except UsageError as e:
            cmd_name = args[0] if args else ""
            if cmd_name and "No such command" in str(e):
                matches = difflib.get_close_matches(
                    cmd_name, self.list_commands(ctx), n=1, cutoff=0.6
                )
                if matches:
                    raise UsageError(f"No such command '{cmd_name}'. Did you mean '{matches[0]}'?")
            raise

    def main(
        self,
        args: Sequence[str] | None = None,
        prog_name: str | None = None,
        complete_var: str | None = None,
        standalone_mode: bool = True,
        **extra: Any,
    ) -> Any:
        argv = list(args) if args is not None else list(sys.argv[1:])
        if "--json-errors" not in argv:
            return super().main(args, prog_name, complete_var, standalone_mode, **extra)

        # Accept --json-errors anywhere by moving it in front of the subcommand.
        argv = ["--json-errors"] + [a for a in argv if a != "--json-errors"]
        try:
            return super().main(argv, prog_name, complete_var, standalone_mode=False, **extra)
        except ClickException as e:
            click.echo(format_json_error_for(e), err=True)
            raise SystemExit(1)


def format_json_error_for(exc: ClickException) -> str:
    return format_error_json(get_error_code_for_exception(exc), exc.format_message())


def _open_store(ctx: click.Context):
    """Open the note store from --store or configuration."""
    from .config import ConfigurationError, get_store_root
    from .errors import ErrorCode
    from .store import JsonDocumentStore

    store_root = ctx.obj.get("store_root")
    if store_root is None:
        try:
            store_root = get_store_root()
        except ConfigurationError as e:
            _handle_error(ctx, NotelinkError(ErrorCode.STORE_NOT_CONFIGURED, str(e)))
    return JsonDocumentStore(Path(store_root))


def _resolve_owner(owner: str | None) -> str | None:
    from .config import get_owner_id

    return owner or get_owner_id()


# ─────────────────────────────────────────────────────────────────────────────
# Main CLI Group
# ─────────────────────────────────────────────────────────────────────────────


@click.group(cls=JsonErrorGroup)
@click.version_option(version=NOTELINK_VERSION, prog_name="nl")
@click.option(
    "--json-errors",
    "json_errors",
    is_flag=True,
    help="Output errors as JSON (for programmatic use)",
)
@click.option(
    "--quiet",
    "-q",
    is_flag=True,
    envvar="NOTELINK_QUIET",
    help="Suppress warnings, show only errors and essential output",
)
@click.option(
    "--store",
    "store_root",
    type=click.Path(file_okay=False, path_type=Path),
    help="Note store directory (default: NOTELINK_STORE_ROOT or .notelink)",
)
@click.pass_context
def cli(ctx: click.Context, json_errors: bool, quiet: bool, store_root: Path | None):
    """nl: keep note-link titles in sync.

    \b
    Examples:
      nl backlinks 7f3a                   # Who links to note 7f3a?
      nl update-backlinks 7f3a "Roadmap"  # Point those links at the new title
      nl rename 7f3a "Roadmap" --owner u1 # Rename and update in one step
    """
    from ._logging import configure_logging, set_quiet_mode

    configure_logging()

    ctx.ensure_object(dict)
    ctx.obj["json_errors"] = json_errors
    ctx.obj["quiet"] = quiet
    ctx.obj["store_root"] = store_root

    if quiet:
        set_quiet_mode(True)


# ─────────────────────────────────────────────────────────────────────────────
# Backlinks Command
# ─────────────────────────────────────────────────────────────────────────────


@cli.command()
@click.argument("note_id")
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
@click.pass_context
def backlinks(ctx: click.Context, note_id: str, as_json: bool):
    """List notes that link to NOTE_ID.

    \b
    Examples:
      nl backlinks 7f3a
      nl backlinks 7f3a --json
    """
    from .config import CONTEXT_PREVIEW_CHARS
    from .core import get_backlinks

    store = _open_store(ctx)
    try:
        results = get_backlinks(store, note_id)
    except NotelinkError as e:
        _handle_error(ctx, e)

    if as_json:
        output([b.model_dump(mode="json") for b in results], as_json=True)
        return

    if not results:
        click.echo(f"No backlinks to {note_id}")
        return

    rows = [
        {
            "id": b.id,
            "title": b.title,
            "path": "/".join(str(i) for i in m.path),
            "context": m.context,
        }
        for b in results
        for m in b.matches
    ]
    click.echo(
        format_table(
            rows,
            ["id", "title", "path", "context"],
            {"title": 30, "context": CONTEXT_PREVIEW_CHARS},
        )
    )


# ─────────────────────────────────────────────────────────────────────────────
# Update Commands
# ─────────────────────────────────────────────────────────────────────────────


def _echo_result(result, as_json: bool) -> None:
    if as_json:
        output(result.model_dump(mode="json"), as_json=True)
        return

    verb = "Would update" if result.dry_run else "Updated"
    click.echo(
        f"{verb} {result.matches} link(s) in {len(result.updated)} note(s) "
        f"to '{result.new_title}'"
    )
    for note_id in result.updated:
        click.echo(f"  {note_id}")
    for note_id in result.skipped:
        click.echo(f"Warning: no content found for note {note_id}", err=True)


@cli.command("update-backlinks")
@click.argument("note_id")
@click.argument("new_title")
@click.option("--owner", help="Owner id stamped on written notes (default: NOTELINK_OWNER_ID)")
@click.option("--dry-run", is_flag=True, help="Show what would change without writing")
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
@click.pass_context
def update_backlinks_cmd(
    ctx: click.Context,
    note_id: str,
    new_title: str,
    owner: str | None,
    dry_run: bool,
    as_json: bool,
):
    """Point every link to NOTE_ID at NEW_TITLE.

    Links whose text mirrors the title get the new title as their text.

    \b
    Examples:
      nl update-backlinks 7f3a "Roadmap 2025" --owner u1
      nl update-backlinks 7f3a "Roadmap 2025" --dry-run
    """
    from .core import update_backlinks

    store = _open_store(ctx)
    try:
        result = update_backlinks(store, note_id, new_title, _resolve_owner(owner), dry_run=dry_run)
    except NotelinkError as e:
        _handle_error(ctx, e)

    _echo_result(result, as_json)


@cli.command()
@click.argument("note_id")
@click.argument("new_title")
@click.option("--owner", help="Owner id stamped on written notes (default: NOTELINK_OWNER_ID)")
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
@click.pass_context
def rename(ctx: click.Context, note_id: str, new_title: str, owner: str | None, as_json: bool):
    """Rename NOTE_ID to NEW_TITLE and update every link to it.

    \b
    Examples:
      nl rename 7f3a "Roadmap 2025" --owner u1
    """
    from .core import rename_note

    store = _open_store(ctx)
    try:
        result = rename_note(store, note_id, new_title, _resolve_owner(owner))
    except NotelinkError as e:
        _handle_error(ctx, e)

    _echo_result(result, as_json)


def main():
    cli()


if __name__ == "__main__":
    main()
