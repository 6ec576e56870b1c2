"""
notesync CLI.

Command line front end for the notes controller. Every invocation opens
the local store, probes the remote service once (unless --offline), runs
one operation and exits. Edits are saved immediately; there is no quiet
period to wait for in a one-shot command.

Usage:
    python cli.py --help
    python cli.py --service new --title "Groceries" --content "milk, eggs"
    python cli.py --service list --search milk
    python cli.py --service edit --note-id <id> --content "milk, eggs, bread"
    python cli.py --service delete --note-id <id> --yes
    python cli.py --service sync --verbose
    python cli.py --service status
    python cli.py --service config
"""

import asyncio
import sys
from collections.abc import Awaitable, Callable
from typing import Any

import click
import structlog

from notesync.core.exceptions import ApplicationError, NotFoundError
from notesync.core.logging import get_logger, setup_logging
from notesync.schemas.note import NoteRecord
from notesync.schemas.sync import SyncResult, SyncStatus

SERVICES = ["list", "show", "new", "edit", "delete", "sync", "status", "config"]

_STATUS_COLORS = {
    SyncStatus.SYNCED: "green",
    SyncStatus.SKIPPED: "green",
    SyncStatus.DEFERRED: "yellow",
    SyncStatus.SUPERSEDED: "yellow",
    SyncStatus.FAILED: "red",
}


@click.command()
@click.option(
    "--service", "-s",
    type=click.Choice(SERVICES),
    default="list",
    help="Operation to run.",
)
@click.option("--note-id", "-n", default=None, help="Target note id (show, edit, delete).")
@click.option("--title", "-t", default=None, help="New title (new, edit).")
@click.option("--content", "-c", default=None, help="New content (new, edit).")
@click.option("--search", "-q", default="", help="Case-insensitive filter over title and content (list).")
@click.option("--yes", "-y", is_flag=True, help="Skip the delete confirmation.")
@click.option("--offline", is_flag=True, help="Do not contact the remote service.")
@click.option("--verbose", "-v", is_flag=True, help="Enable verbose output (INFO level logging).")
@click.option("--debug", "-d", is_flag=True, help="Enable debug output (DEBUG level logging).")
def main(
    service: str,
    note_id: str | None,
    title: str | None,
    content: str | None,
    search: str,
    yes: bool,
    offline: bool,
    verbose: bool,
    debug: bool,
) -> None:
    """
    notesync CLI.

    Use --service to select what to run.

    \b
    Examples:
        python cli.py --service new --title "Groceries"
        python cli.py --service list --search groceries
        python cli.py --service edit -n <id> --content "milk"
        python cli.py --service delete -n <id>
        python cli.py --service sync --verbose
    """
    if debug:
        log_level = "DEBUG"
    elif verbose:
        log_level = "INFO"
    else:
        log_level = "WARNING"

    setup_logging(level=log_level, format_type="console", enable_file_logging=False)
    structlog.contextvars.bind_contextvars(source="cli")
    logger = get_logger(__name__)
    logger.debug("CLI invoked", extra={"service": service, "log_level": log_level})

    if service == "config":
        show_config()
        return

    if service in ("show", "edit", "delete") and not note_id:
        _fail(f"--note-id is required for --service {service}")

    if service == "delete" and not yes:
        click.confirm("Delete this note?", abort=True)

    handlers: dict[str, Callable[..., Awaitable[None]]] = {
        "list": lambda app: list_notes(app, search),
        "show": lambda app: show_note(app, note_id),
        "new": lambda app: new_note(app, title, content),
        "edit": lambda app: edit_note(app, note_id, title, content),
        "delete": lambda app: delete_note(app, note_id),
        "sync": sync_notes,
        "status": show_status,
    }

    try:
        asyncio.run(_run(handlers[service], probe=not offline))
    except ApplicationError as e:
        logger.error("Command failed", extra={"service": service, "code": e.code, "error": e.message})
        _fail(e.message)


async def _run(handler: Callable[[Any], Awaitable[None]], probe: bool) -> None:
    from notesync.main import create_app

    async with create_app(probe=probe) as app:
        _echo_connectivity(app.connectivity.online)
        await handler(app)


def _fail(message: str) -> None:
    click.echo(click.style(f"Error: {message}", fg="red"), err=True)
    sys.exit(1)


def _echo_connectivity(online: bool) -> None:
    label = click.style("Online", fg="green") if online else click.style("Offline", fg="red")
    click.echo(f"[{label}]")


def _badge(note: NoteRecord) -> str:
    if note.synced:
        return click.style("Synced  ", fg="green")
    return click.style("Unsynced", fg="yellow")


def _echo_note_line(note: NoteRecord) -> None:
    title = note.title or "Untitled"
    preview = (note.content or "...").splitlines()[0] if note.content else "..."
    click.echo(f"{_badge(note)}  {note.id}  {note.updated_at:%Y-%m-%d %H:%M:%S}  {title}")
    click.echo(f"          {preview[:72]}")


def _echo_result(result: SyncResult | None) -> None:
    if result is None:
        return
    operation = result.operation.value if result.operation else "-"
    line = f"sync: {result.status.value} ({operation})"
    if result.error is not None and result.status is SyncStatus.FAILED:
        line += f" {result.error.message}"
    click.echo(click.style(line, fg=_STATUS_COLORS[result.status]))


async def list_notes(app, search: str) -> None:
    """Print notes matching the search term, newest first."""
    notes = app.controller.set_search(search)
    if not notes:
        click.echo("No notes.")
        return
    for note in notes:
        _echo_note_line(note)


async def show_note(app, note_id: str) -> None:
    """Print one note in full."""
    note = await app.controller.open_note(note_id)
    click.echo(f"{_badge(note)}  {note.id}  {note.updated_at:%Y-%m-%d %H:%M:%S}")
    click.echo(click.style(note.title or "Untitled", bold=True))
    click.echo(note.content)


async def new_note(app, title: str | None, content: str | None) -> None:
    """Create a note, optionally with initial text, and save it."""
    note = await app.controller.create_note()
    click.echo(f"Created {note.id}")
    if title is not None or content is not None:
        app.controller.edit(title=title, content=content)
        _echo_result(await app.controller.save_now())


async def edit_note(app, note_id: str, title: str | None, content: str | None) -> None:
    """Apply an edit and save it."""
    await app.controller.open_note(note_id)
    app.controller.edit(title=title, content=content)
    _echo_result(await app.controller.save_now())
    await app.controller.close_note()


async def delete_note(app, note_id: str) -> None:
    """Delete a note locally, and remotely if it was synced."""
    if await app.store.get(note_id) is None:
        raise NotFoundError(f"Note {note_id} not found")
    result = await app.controller.delete_note(note_id)
    click.echo(f"Deleted {note_id}")
    _echo_result(result)


async def sync_notes(app) -> None:
    """Push every unsynced note."""
    results = await app.controller.sync_pending()
    if not results:
        click.echo("Nothing to sync.")
        return
    for result in results:
        click.echo(f"{result.note_id}  ", nl=False)
        _echo_result(result)


async def show_status(app) -> None:
    """Print note counts by sync state."""
    notes = app.controller.notes
    unsynced = sum(1 for note in notes if not note.synced)
    click.echo(f"Notes: {len(notes)}  synced: {len(notes) - unsynced}  unsynced: {unsynced}")


def show_config() -> None:
    """Print the effective configuration."""
    from notesync.core.config import get_app_config, get_database_path, get_remote_base_url

    app_config = get_app_config()
    base_url, timeout = get_remote_base_url()

    click.echo(f"{app_config.application.name} {app_config.application.version}")
    click.echo(f"  environment:      {app_config.application.environment}")
    click.echo(f"  database:         {get_database_path()}")
    click.echo(f"  remote:           {base_url}{app_config.remote.notes_path} (timeout {timeout}s)")
    click.echo(f"  debounce:         {app_config.sync.debounce_seconds}s")
    click.echo(f"  reconnect sync:   {app_config.sync.reconcile_on_reconnect}")


if __name__ == "__main__":
    main()
