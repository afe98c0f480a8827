# ABOUTME: Exception types for session scanning, actions and helper processes.
# ABOUTME: Separates per-line and per-file failures from fatal store errors.

from __future__ import annotations

from pathlib import Path


class SessionBrowserError(Exception):
    """Base class for all errors raised by claude_code_sessions."""


class DecodeFailure(SessionBrowserError):
    """A single log line could not be decoded into a record."""

    def __init__(self, sequence: int, reason: str) -> None:
        super().__init__(f"line {sequence}: {reason}")
        self.sequence = sequence
        self.reason = reason


class FileAccessFailure(SessionBrowserError):
    """A session file could not be opened or read."""

    def __init__(self, path: Path, reason: str) -> None:
        super().__init__(f"{path}: {reason}")
        self.path = path
        self.reason = reason


class LogStoreError(SessionBrowserError):
    """The log store root itself could not be read."""


class ScanCancelled(SessionBrowserError):
    """A scan was abandoned before every file was processed."""


class LaunchFailure(SessionBrowserError):
    """An external helper process could not be started."""
