# ABOUTME: Session identity and summary types shared by the scanner and index.
# ABOUTME: Also holds the project path <-> directory name encoding.

from __future__ import annotations

import re
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path

PATH_SENTINEL = "-"
CHARS_PER_TOKEN = 4

_SEPARATORS = re.compile(r"[\\/]")


def encode_project_path(project_path: str) -> str:
    """Encode a project path the way Claude Code names its project directories.

    "/home/user/dotfiles" -> "-home-user-dotfiles"
    """
    return _SEPARATORS.sub(PATH_SENTINEL, project_path)


def decode_project_path(encoded_directory: str) -> str:
    """Best-effort inverse of encode_project_path.

    Hyphens that were part of the original path are indistinguishable from
    separators, so "-home-user-my-app" decodes to "/home/user/my/app".
    """
    path = encoded_directory.removeprefix(PATH_SENTINEL)
    return "/" + path.replace(PATH_SENTINEL, "/")


@dataclass(frozen=True)
class SessionIdentity:
    """Where a session lives in the log store."""

    encoded_directory: str
    session_id: str

    @property
    def project_path(self) -> str:
        return decode_project_path(self.encoded_directory)

    @property
    def project_name(self) -> str:
        """Display name, e.g. "-home-user-Projects-threshold" -> "threshold"."""
        return self.encoded_directory.rsplit(PATH_SENTINEL, 1)[-1] or self.encoded_directory

    @property
    def is_agent(self) -> bool:
        return self.session_id.startswith("agent-")

    @classmethod
    def from_path(cls, path: Path) -> SessionIdentity:
        return cls(encoded_directory=path.parent.name, session_id=path.stem)


@dataclass(frozen=True)
class SessionSummary:
    """Aggregates extracted from one session log in a single pass."""

    identity: SessionIdentity
    path: Path
    size_bytes: int
    modified: datetime
    message_count: int = 0
    first_user_text: str | None = None
    summary_text: str | None = None
    custom_title: str | None = None
    created: datetime | None = None
    last_activity: datetime | None = None
    cwd: str | None = None
    decode_failures: int = 0
    text_chars: int = 0

    @property
    def token_estimate(self) -> int:
        """Rough token count of the authored text, at about four characters a token."""
        return self.text_chars // CHARS_PER_TOKEN

    @property
    def session_id(self) -> str:
        return self.identity.session_id

    @property
    def project_name(self) -> str:
        return self.identity.project_name

    @property
    def project_directory(self) -> str:
        """The directory the session ran in, preferring the recorded cwd."""
        return self.cwd or self.identity.project_path
