from __future__ import annotations

import csv
import io
import json
from datetime import datetime, timezone
from typing import Any, Sequence

from rich.console import Console
from rich.table import Table

from .loaders.base import SessionSummary
from .preview import DEFAULT_PREVIEW_WIDTH, session_preview


def session_row(session: SessionSummary, width: int = DEFAULT_PREVIEW_WIDTH) -> dict[str, Any]:
    return {
        "project": session.project_name,
        "session_id": session.session_id,
        "modified": session.modified.isoformat(),
        "last_activity": session.last_activity.isoformat() if session.last_activity else None,
        "size_bytes": session.size_bytes,
        "message_count": session.message_count,
        "token_estimate": session.token_estimate,
        "preview": session_preview(session, width),
        "path": str(session.path),
    }


def format_sessions(
    sessions: Sequence[SessionSummary],
    output_format: str,
    width: int = DEFAULT_PREVIEW_WIDTH,
) -> str | None:
    if output_format == "json":
        return json.dumps([session_row(s, width) for s in sessions], ensure_ascii=True)
    if output_format == "csv":
        return _rows_to_csv([session_row(s, width) for s in sessions])
    if output_format == "tsv":
        return "\n".join(
            "\t".join(
                [
                    s.project_name,
                    s.session_id,
                    f"{s.modified:%Y-%m-%d %H:%M}",
                    format_size(s.size_bytes),
                    session_preview(s, width),
                ]
            )
            for s in sessions
        )
    return None


def render_sessions_table(
    sessions: Sequence[SessionSummary],
    width: int = DEFAULT_PREVIEW_WIDTH,
    console: Console | None = None,
) -> None:
    console = console or Console()
    table = Table(title=f"Claude Code sessions ({len(sessions)})")
    table.add_column("Project", style="cyan")
    table.add_column("Session", style="magenta")
    table.add_column("Age", style="green")
    table.add_column("Size", justify="right")
    table.add_column("Msgs", justify="right")
    table.add_column("Preview", style="white")

    for session in sessions:
        table.add_row(
            session.project_name,
            session.session_id[:8],
            format_age(session.last_activity or session.modified),
            format_size(session.size_bytes),
            str(session.message_count),
            session_preview(session, width),
        )
    console.print(table)


def project_stats(sessions: Sequence[SessionSummary]) -> list[dict[str, Any]]:
    """Per-project totals, largest projects first."""
    totals: dict[str, dict[str, Any]] = {}
    for session in sessions:
        entry = totals.setdefault(
            session.project_name,
            {
                "project": session.project_name,
                "sessions": 0,
                "size_bytes": 0,
                "messages": 0,
                "tokens": 0,
            },
        )
        entry["sessions"] += 1
        entry["size_bytes"] += session.size_bytes
        entry["messages"] += session.message_count
        entry["tokens"] += session.token_estimate
    return sorted(totals.values(), key=lambda row: (-row["size_bytes"], row["project"]))


def render_stats(sessions: Sequence[SessionSummary], console: Console | None = None) -> None:
    console = console or Console()
    rows = project_stats(sessions)
    table = Table(title="Sessions by project", show_footer=True)
    table.add_column("Project", style="cyan", footer="TOTAL")
    table.add_column("Sessions", justify="right", footer=str(sum(r["sessions"] for r in rows)))
    table.add_column(
        "Size", justify="right", footer=format_size(sum(r["size_bytes"] for r in rows))
    )
    table.add_column("Messages", justify="right", footer=str(sum(r["messages"] for r in rows)))
    table.add_column(
        "Tokens", justify="right", footer=format_tokens(sum(r["tokens"] for r in rows))
    )
    for row in rows:
        table.add_row(
            row["project"],
            str(row["sessions"]),
            format_size(row["size_bytes"]),
            str(row["messages"]),
            format_tokens(row["tokens"]),
        )
    console.print(table)


def format_size(size_bytes: int) -> str:
    if size_bytes < 1024:
        return f"{size_bytes} B"
    size = size_bytes / 1024
    for unit in ("KiB", "MiB"):
        if size < 1024:
            return f"{size:.1f} {unit}"
        size /= 1024
    return f"{size:.1f} GiB"


def format_tokens(tokens: int) -> str:
    if tokens >= 1_000_000:
        return f"{tokens / 1_000_000:.1f}M"
    if tokens >= 1_000:
        return f"{tokens / 1_000:.1f}K"
    return str(tokens)


def format_age(moment: datetime | None) -> str:
    if moment is None:
        return "unknown"
    delta = max((datetime.now(tz=timezone.utc) - moment).total_seconds(), 0)
    if delta < 3600:
        return f"{int(delta // 60)}m ago"
    if delta < 86400:
        return f"{int(delta // 3600)}h ago"
    return f"{int(delta // 86400)}d ago"


def _rows_to_csv(rows: list[dict[str, Any]]) -> str:
    if not rows:
        return ""
    output = io.StringIO()
    writer = csv.DictWriter(output, fieldnames=rows[0].keys())
    writer.writeheader()
    writer.writerows(rows)
    return output.getvalue()
