# ABOUTME: File-level actions on sessions: delete, Markdown export and archive.
# ABOUTME: A session is its .jsonl log plus an optional sibling directory.

from __future__ import annotations

import logging
import shutil
import tarfile
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import Iterable

from .classifier import is_system_content
from .errors import FileAccessFailure
from .loaders.base import SessionSummary
from .records import LogRecord, RecordKind, iter_records

logger = logging.getLogger("claude_code_sessions.actions")


@dataclass(frozen=True)
class DisplayMessage:
    role: str
    timestamp: datetime | None
    content: str


def session_directory(session: SessionSummary) -> Path:
    """Directory Claude Code keeps next to a session log (tool outputs, agents)."""
    return session.path.with_suffix("")


def delete_session(session: SessionSummary) -> None:
    """Delete a session log and its sibling directory, if any."""
    try:
        session.path.unlink()
        directory = session_directory(session)
        if directory.is_dir():
            shutil.rmtree(directory)
    except OSError as exc:
        raise FileAccessFailure(session.path, exc.strerror or str(exc)) from exc
    logger.info("Deleted session %s (%s)", session.session_id, session.path)


def load_session_messages(path: Path) -> list[DisplayMessage]:
    """Read a session log into display messages, in file order.

    Injected user content and undecodable lines are left out.
    """
    try:
        with path.open(encoding="utf-8", errors="replace") as handle:
            items = list(iter_records(handle))
    except OSError as exc:
        raise FileAccessFailure(path, exc.strerror or str(exc)) from exc

    messages: list[DisplayMessage] = []
    for item in items:
        if not isinstance(item, LogRecord):
            continue
        message = _display_message(item)
        if message is not None:
            messages.append(message)
    return messages


def _display_message(record: LogRecord) -> DisplayMessage | None:
    if record.kind is RecordKind.USER:
        if record.is_meta or not record.text.strip() or is_system_content(record.text):
            return None
        return DisplayMessage("user", record.timestamp, record.text)
    if record.kind is RecordKind.ASSISTANT:
        if not record.text.strip():
            return None
        return DisplayMessage("assistant", record.timestamp, record.text)
    if record.kind is RecordKind.SYSTEM and record.timestamp is not None:
        return DisplayMessage("system", record.timestamp, "[System]")
    return None


def session_to_markdown(session: SessionSummary) -> str:
    lines = [
        f"# Session: {session.session_id}",
        "",
        f"**Project:** {session.project_directory}",
        f"**Date:** {session.modified:%Y-%m-%d %H:%M:%S} UTC",
    ]
    if session.custom_title:
        lines.append(f"**Title:** {session.custom_title}")
    if session.summary_text:
        lines.append(f"**Summary:** {session.summary_text}")
    lines.extend(["", "---", ""])

    for message in load_session_messages(session.path):
        stamp = f" ({message.timestamp:%H:%M:%S})" if message.timestamp else ""
        lines.append(f"### **{message.role.capitalize()}**{stamp}")
        lines.append("")
        lines.append(message.content)
        lines.append("")
    return "\n".join(lines)


def export_session_markdown(session: SessionSummary, output_dir: Path) -> Path:
    output_dir.mkdir(parents=True, exist_ok=True)
    output_path = output_dir / f"{session.project_name}_{session.session_id}.md"
    output_path.write_text(session_to_markdown(session), encoding="utf-8")
    return output_path


def archive_sessions(sessions: Iterable[SessionSummary], output_path: Path) -> Path:
    """Write sessions into a tar.gz as <project>/<session_id>.jsonl plus directories."""
    output_path.parent.mkdir(parents=True, exist_ok=True)
    with tarfile.open(output_path, "w:gz") as archive:
        for session in sessions:
            prefix = f"{session.project_name}/{session.session_id}"
            archive.add(session.path, arcname=f"{prefix}.jsonl")
            directory = session_directory(session)
            if directory.is_dir():
                archive.add(directory, arcname=prefix)
    return output_path
