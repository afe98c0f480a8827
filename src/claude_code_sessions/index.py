from __future__ import annotations

import logging
import threading
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, Iterable, Iterator

from .actions import delete_session
from .errors import FileAccessFailure
from .loaders.base import SessionSummary
from .loaders.local import (
    DEFAULT_WORKERS,
    ProgressCallback,
    ScanProgress,
    ScanResult,
    resolve_projects_dir,
    scan_sessions,
)

logger = logging.getLogger("claude_code_sessions.index")

SessionPredicate = Callable[[SessionSummary], bool]


def is_empty_session(session: SessionSummary) -> bool:
    return session.message_count == 0


@dataclass(frozen=True)
class ScanReport:
    session_count: int
    skipped: int
    warnings: tuple[FileAccessFailure, ...] = ()


@dataclass
class PruneResult:
    candidates: list[SessionSummary] = field(default_factory=list)
    deleted: list[SessionSummary] = field(default_factory=list)
    failed: list[FileAccessFailure] = field(default_factory=list)
    dry_run: bool = False

    @property
    def freed_bytes(self) -> int:
        return sum(session.size_bytes for session in self.deleted)


class SessionIndex:
    """In-memory set of session summaries, rebuilt by refresh().

    Readers get an immutable tuple; refresh and prune replace it in one
    assignment, so no reader sees a mix of old and new summaries.
    """

    def __init__(
        self,
        root_dir: Path | None = None,
        project: str | None = None,
        workers: int = DEFAULT_WORKERS,
    ) -> None:
        self.root_dir = resolve_projects_dir(root_dir)
        self.project = project
        self.workers = workers
        self._sessions: tuple[SessionSummary, ...] = ()
        self._progress: ScanProgress | None = None
        self._write_lock = threading.Lock()

    @property
    def sessions(self) -> tuple[SessionSummary, ...]:
        return self._sessions

    @property
    def progress(self) -> ScanProgress | None:
        """Files processed so far while a refresh runs, otherwise None."""
        return self._progress

    @property
    def is_refreshing(self) -> bool:
        return self._progress is not None

    def __len__(self) -> int:
        return len(self._sessions)

    def __iter__(self) -> Iterator[SessionSummary]:
        return iter(self._sessions)

    def get(self, session_id: str) -> SessionSummary | None:
        for session in self._sessions:
            if session.session_id == session_id:
                return session
        return None

    def projects(self) -> list[str]:
        return sorted({session.project_name for session in self._sessions})

    def refresh(
        self,
        on_progress: ProgressCallback | None = None,
        cancel: threading.Event | None = None,
    ) -> ScanReport:
        """Rescan the log store and swap in the new summaries.

        If the scan raises (cancelled, or the store root is unreadable) the
        previous summaries are kept.
        """

        def track(progress: ScanProgress) -> None:
            self._progress = progress
            if on_progress is not None:
                on_progress(progress)

        with self._write_lock:
            try:
                result: ScanResult = scan_sessions(
                    self.root_dir,
                    project=self.project,
                    workers=self.workers,
                    on_progress=track,
                    cancel=cancel,
                )
            finally:
                self._progress = None
            self._sessions = tuple(result.sessions)

        if result.warnings:
            logger.warning("Refresh skipped %d unreadable session file(s)", result.skipped)
        return ScanReport(
            session_count=len(result.sessions),
            skipped=result.skipped,
            warnings=tuple(result.warnings),
        )

    def remove(self, sessions: Iterable[SessionSummary]) -> None:
        doomed = {session.path for session in sessions}
        with self._write_lock:
            self._sessions = tuple(s for s in self._sessions if s.path not in doomed)

    def prune_empty(
        self,
        predicate: SessionPredicate = is_empty_session,
        dry_run: bool = False,
    ) -> PruneResult:
        """Delete sessions matching predicate, by default those with no messages.

        Emptiness comes from the scanned message count, so a log holding only
        system or summary records is pruned even though the file is not empty.
        """
        result = PruneResult(
            candidates=[session for session in self._sessions if predicate(session)],
            dry_run=dry_run,
        )
        if dry_run:
            return result

        for session in result.candidates:
            try:
                delete_session(session)
            except FileAccessFailure as failure:
                logger.warning("Could not delete session %s", failure)
                result.failed.append(failure)
            else:
                result.deleted.append(session)

        self.remove(result.deleted)
        return result
