from __future__ import annotations

import logging
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Callable

import click
import questionary
from click_default_group import DefaultGroup
from rich.console import Console
from rich.progress import BarColumn, MofNCompleteColumn, Progress, TextColumn

from .actions import archive_sessions, export_session_markdown
from .clipboard import copy_to_clipboard, resume_command
from .errors import LaunchFailure, LogStoreError
from .formatters import format_sessions, format_size, render_sessions_table, render_stats
from .index import SessionIndex
from .loaders.base import SessionSummary
from .loaders.local import DEFAULT_WORKERS, ScanProgress
from .preview import DEFAULT_PREVIEW_WIDTH, session_preview

SORT_FIELDS = ["date", "size", "project", "name"]
MIN_PREVIEW_WIDTH = 4


def _scan_options(command: Callable[..., Any]) -> Callable[..., Any]:
    options = [
        click.option(
            "--projects-dir",
            type=click.Path(path_type=Path),
            default=None,
            help="Claude Code projects directory override",
        ),
        click.option(
            "--project", "-p", default=None, help="Filter by project name (substring)"
        ),
        click.option(
            "--workers", default=DEFAULT_WORKERS, show_default=True, help="Parallel scan workers"
        ),
        click.option("--verbose", "-v", is_flag=True, help="Log scan details to stderr"),
    ]
    for option in reversed(options):
        command = option(command)
    return command


@click.group(cls=DefaultGroup, default="list", default_if_no_args=True)
def cli() -> None:
    """Browse and maintain Claude Code session logs."""


@cli.command(name="list")
@_scan_options
@click.option("--sort", "-s", type=click.Choice(SORT_FIELDS), default="date", show_default=True)
@click.option("--reverse", "-r", is_flag=True, help="Reverse sort order")
@click.option(
    "--width",
    type=click.IntRange(min=MIN_PREVIEW_WIDTH),
    default=DEFAULT_PREVIEW_WIDTH,
    show_default=True,
    help="Preview width",
)
@click.option(
    "--format",
    "output_format",
    type=click.Choice(["table", "tsv", "json", "csv"], case_sensitive=False),
    default="table",
    show_default=True,
)
def list_sessions(
    projects_dir: Path | None,
    project: str | None,
    workers: int,
    verbose: bool,
    sort: str,
    reverse: bool,
    width: int,
    output_format: str,
) -> None:
    """List sessions with a one-line preview."""
    index = _load_index(projects_dir, project, workers, verbose)
    sessions = sort_sessions(list(index.sessions), sort, reverse=reverse, width=width)

    formatted = format_sessions(sessions, output_format, width)
    if formatted is not None:
        click.echo(formatted)
        return
    render_sessions_table(sessions, width)


@cli.command()
@_scan_options
def count(projects_dir: Path | None, project: str | None, workers: int, verbose: bool) -> None:
    """Print the number of sessions."""
    index = _load_index(projects_dir, project, workers, verbose, show_progress=False)
    click.echo(len(index))


@cli.command()
@_scan_options
def stats(projects_dir: Path | None, project: str | None, workers: int, verbose: bool) -> None:
    """Show session counts and disk usage per project."""
    index = _load_index(projects_dir, project, workers, verbose)
    render_stats(index.sessions)


@cli.command()
@_scan_options
@click.option("--dry-run", is_flag=True, help="Show what would be deleted")
def prune(
    projects_dir: Path | None,
    project: str | None,
    workers: int,
    verbose: bool,
    dry_run: bool,
) -> None:
    """Delete sessions that contain no user or assistant messages."""
    index = _load_index(projects_dir, project, workers, verbose)
    result = index.prune_empty(dry_run=dry_run)

    if not result.candidates:
        click.echo("No empty sessions found.")
        return

    if dry_run:
        click.echo(f"Would delete {len(result.candidates)} empty session(s):")
        for session in result.candidates:
            click.echo(
                f"  {session.project_name} / {session.session_id} "
                f"({format_size(session.size_bytes)})"
            )
        return

    click.echo(
        f"Deleted {len(result.deleted)} session(s), freed {format_size(result.freed_bytes)}"
    )
    for failure in result.failed:
        click.echo(f"  failed: {failure}", err=True)


@cli.command()
@_scan_options
@click.option("--path", "copy_path", is_flag=True, help="Copy the log file path instead")
def browse(
    projects_dir: Path | None,
    project: str | None,
    workers: int,
    verbose: bool,
    copy_path: bool,
) -> None:
    """Pick a session and copy its resume command to the clipboard."""
    index = _load_index(projects_dir, project, workers, verbose)
    if not len(index):
        click.echo("No sessions found.")
        return

    choices = [
        questionary.Choice(title=_format_session_choice(session), value=session)
        for session in sort_sessions(list(index.sessions), "date")
    ]
    selected = questionary.select("Select a session:", choices=choices).ask()
    if selected is None:
        return

    text = str(selected.path) if copy_path else resume_command(selected)
    try:
        copy_to_clipboard(text)
    except LaunchFailure as exc:
        raise click.ClickException(str(exc)) from exc
    click.echo(f"Copied: {text}")


@cli.command()
@_scan_options
@click.argument("session_id")
@click.option(
    "--output",
    type=click.Path(path_type=Path),
    default=Path.home() / "claude-sessions-export",
    show_default=True,
    help="Directory to write the Markdown file to",
)
def export(
    projects_dir: Path | None,
    project: str | None,
    workers: int,
    verbose: bool,
    session_id: str,
    output: Path,
) -> None:
    """Export a session transcript to Markdown."""
    index = _load_index(projects_dir, project, workers, verbose, show_progress=False)
    session = _find_session(index, session_id)
    path = export_session_markdown(session, output)
    click.echo(f"Exported {session.session_id} to {path}")


@cli.command()
@_scan_options
@click.argument("session_ids", nargs=-1, required=True)
@click.option(
    "--output",
    type=click.Path(path_type=Path),
    default=None,
    help="Archive file (default: ~/claude-sessions-archive/sessions-<time>.tar.gz)",
)
def archive(
    projects_dir: Path | None,
    project: str | None,
    workers: int,
    verbose: bool,
    session_ids: tuple[str, ...],
    output: Path | None,
) -> None:
    """Archive sessions into a tar.gz file."""
    index = _load_index(projects_dir, project, workers, verbose, show_progress=False)
    sessions = [_find_session(index, session_id) for session_id in session_ids]
    if output is None:
        stamp = datetime.now(tz=timezone.utc).strftime("%Y%m%d-%H%M%S")
        output = Path.home() / "claude-sessions-archive" / f"sessions-{stamp}.tar.gz"
    path = archive_sessions(sessions, output)
    click.echo(f"Archived {len(sessions)} session(s) to {path}")


def sort_sessions(
    sessions: list[SessionSummary],
    field: str,
    reverse: bool = False,
    width: int = DEFAULT_PREVIEW_WIDTH,
) -> list[SessionSummary]:
    if field == "size":
        ordered = sorted(sessions, key=lambda s: s.size_bytes, reverse=True)
    elif field == "project":
        ordered = sorted(sessions, key=lambda s: s.project_name)
    elif field == "name":
        ordered = sorted(sessions, key=lambda s: session_preview(s, width).lower())
    else:
        ordered = sorted(sessions, key=lambda s: s.last_activity or s.modified, reverse=True)
    if reverse:
        ordered.reverse()
    return ordered


def _load_index(
    projects_dir: Path | None,
    project: str | None,
    workers: int,
    verbose: bool,
    show_progress: bool = True,
) -> SessionIndex:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )
    index = SessionIndex(projects_dir, project=project, workers=workers)
    console = Console(stderr=True)

    try:
        if show_progress and console.is_terminal:
            with Progress(
                TextColumn("Loading sessions"),
                BarColumn(),
                MofNCompleteColumn(),
                console=console,
                transient=True,
            ) as progress:
                task = progress.add_task("scan", total=None)

                def update(state: ScanProgress) -> None:
                    progress.update(task, total=state.total, completed=state.completed)

                report = index.refresh(on_progress=update)
        else:
            report = index.refresh()
    except LogStoreError as exc:
        raise click.ClickException(str(exc)) from exc

    if report.skipped:
        console.print(f"[yellow]Skipped {report.skipped} unreadable session file(s)[/yellow]")
    return index


def _find_session(index: SessionIndex, session_id: str) -> SessionSummary:
    session = index.get(session_id)
    if session is not None:
        return session
    matches = [s for s in index.sessions if s.session_id.startswith(session_id)]
    if len(matches) == 1:
        return matches[0]
    if matches:
        raise click.ClickException(f"Ambiguous session id: {session_id}")
    raise click.ClickException(f"Session not found: {session_id}")


def _format_session_choice(session: SessionSummary) -> str:
    preview = session_preview(session, 60)
    return (
        f"{session.session_id[:8]}  {session.project_name}  "
        f'"{preview}"  {session.message_count} msgs'
    )
