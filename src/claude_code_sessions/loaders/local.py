from __future__ import annotations

import logging
import os
import threading
from concurrent.futures import FIRST_COMPLETED, ThreadPoolExecutor, wait
from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import Callable

from ..classifier import is_system_content
from ..errors import DecodeFailure, FileAccessFailure, LogStoreError, ScanCancelled
from ..records import RecordKind, decode_record
from .base import SessionIdentity, SessionSummary

logger = logging.getLogger("claude_code_sessions.scanner")

PROJECTS_DIR = Path.home() / ".claude" / "projects"
ENV_PROJECTS_DIR = "CLAUDE_CODE_PROJECTS_DIR"
DEFAULT_WORKERS = 8
CANCEL_CHECK_LINES = 256
CANCEL_POLL_SECONDS = 0.1


@dataclass(frozen=True)
class ScanProgress:
    completed: int
    total: int


@dataclass
class ScanResult:
    sessions: list[SessionSummary] = field(default_factory=list)
    warnings: list[FileAccessFailure] = field(default_factory=list)

    @property
    def skipped(self) -> int:
        return len(self.warnings)


ProgressCallback = Callable[[ScanProgress], None]


def resolve_projects_dir(root_dir: Path | None = None) -> Path:
    if root_dir is not None:
        return root_dir
    env_value = os.environ.get(ENV_PROJECTS_DIR)
    if env_value:
        return Path(env_value).expanduser()
    return PROJECTS_DIR


def discover_session_files(
    root_dir: Path, project: str | None = None
) -> list[tuple[SessionIdentity, Path]]:
    """List every session file under the log store, grouped by project directory.

    A missing root yields nothing; a root that exists but cannot be listed
    raises LogStoreError. Unreadable project directories are skipped.
    """
    if not root_dir.exists():
        return []
    try:
        project_dirs = sorted(root_dir.iterdir())
    except OSError as exc:
        raise LogStoreError(f"Cannot read log store {root_dir}: {exc}") from exc

    needle = project.lower() if project else None
    found: list[tuple[SessionIdentity, Path]] = []
    for project_dir in project_dirs:
        if not project_dir.is_dir() or project_dir.name.startswith("."):
            continue
        if needle and not _matches_project(project_dir.name, needle):
            continue
        try:
            session_files = sorted(project_dir.glob("*.jsonl"))
        except OSError as exc:
            logger.warning("Skipping project directory %s: %s", project_dir, exc)
            continue
        for session_file in session_files:
            found.append((SessionIdentity.from_path(session_file), session_file))
    return found


def _matches_project(encoded_directory: str, needle: str) -> bool:
    identity = SessionIdentity(encoded_directory=encoded_directory, session_id="")
    return needle in identity.project_name.lower() or needle in encoded_directory.lower()


def scan_session_file(
    path: Path,
    identity: SessionIdentity | None = None,
    cancel: threading.Event | None = None,
) -> SessionSummary:
    """Build a SessionSummary from one log file in a single forward pass.

    Raises FileAccessFailure if the file cannot be opened or read. Lines that
    fail to decode are counted and skipped. If cancel is set while the file
    is being read, ScanCancelled is raised without finishing it.
    """
    identity = identity or SessionIdentity.from_path(path)

    message_count = 0
    decode_failures = 0
    text_chars = 0
    first_user_text: str | None = None
    summary_text: str | None = None
    custom_title: str | None = None
    created: datetime | None = None
    last_activity: datetime | None = None
    cwd: str | None = None

    try:
        stat = path.stat()
        with path.open(encoding="utf-8", errors="replace") as handle:
            for seq, line in enumerate(handle):
                if cancel is not None and seq % CANCEL_CHECK_LINES == 0 and cancel.is_set():
                    raise ScanCancelled(f"Scan cancelled while reading {path}")
                line = line.strip()
                if not line:
                    continue
                try:
                    record = decode_record(line, seq)
                except DecodeFailure as failure:
                    decode_failures += 1
                    logger.debug("%s: %s", path, failure)
                    continue

                if record.timestamp is not None:
                    if created is None:
                        created = record.timestamp
                    if last_activity is None or record.timestamp > last_activity:
                        last_activity = record.timestamp
                if cwd is None and record.cwd:
                    cwd = record.cwd

                if record.is_message or record.kind is RecordKind.SUMMARY:
                    text_chars += len(record.text)

                if record.kind is RecordKind.USER:
                    if record.is_meta or is_system_content(record.text):
                        continue
                    message_count += 1
                    if first_user_text is None and record.text.strip():
                        first_user_text = record.text
                elif record.kind is RecordKind.ASSISTANT:
                    message_count += 1
                elif record.kind is RecordKind.SUMMARY:
                    if record.text:
                        summary_text = record.text
                elif record.kind is RecordKind.CUSTOM_TITLE:
                    if record.text:
                        custom_title = record.text
    except OSError as exc:
        raise FileAccessFailure(path, exc.strerror or str(exc)) from exc

    return SessionSummary(
        identity=identity,
        path=path,
        size_bytes=stat.st_size,
        modified=datetime.fromtimestamp(stat.st_mtime, tz=timezone.utc),
        message_count=message_count,
        first_user_text=first_user_text,
        summary_text=summary_text,
        custom_title=custom_title,
        created=created,
        last_activity=last_activity,
        cwd=cwd,
        decode_failures=decode_failures,
        text_chars=text_chars,
    )


def scan_sessions(
    root_dir: Path | None = None,
    project: str | None = None,
    workers: int = DEFAULT_WORKERS,
    on_progress: ProgressCallback | None = None,
    cancel: threading.Event | None = None,
) -> ScanResult:
    """Scan every session file under the log store.

    Files are scanned independently on a bounded thread pool. on_progress is
    called from the calling thread after each file finishes, with a
    monotonically increasing completed count. cancel is polled while files
    are in flight, so a set event drops the remaining work and raises
    ScanCancelled without waiting for a slow file to finish.
    """
    root = resolve_projects_dir(root_dir)
    files = discover_session_files(root, project=project)
    total = len(files)
    result = ScanResult()
    if on_progress is not None:
        on_progress(ScanProgress(0, total))
    if not files:
        return result

    executor = ThreadPoolExecutor(max_workers=max(1, workers))
    try:
        pending = {
            executor.submit(scan_session_file, path, identity, cancel) for identity, path in files
        }
        completed = 0
        while pending:
            timeout = CANCEL_POLL_SECONDS if cancel is not None else None
            done, pending = wait(pending, timeout=timeout, return_when=FIRST_COMPLETED)
            if cancel is not None and cancel.is_set():
                raise ScanCancelled(f"Scan cancelled after {completed} of {total} files")
            for future in done:
                completed += 1
                try:
                    result.sessions.append(future.result())
                except FileAccessFailure as failure:
                    logger.warning("Skipping unreadable session file %s", failure)
                    result.warnings.append(failure)
                if on_progress is not None:
                    on_progress(ScanProgress(completed, total))
    finally:
        executor.shutdown(wait=True, cancel_futures=True)

    result.sessions.sort(key=_sort_key, reverse=True)
    return result


def _sort_key(session: SessionSummary) -> tuple[datetime, str, str]:
    return (session.modified, session.identity.encoded_directory, session.session_id)
