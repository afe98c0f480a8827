from __future__ import annotations

from .base import (
    SessionIdentity,
    SessionSummary,
    decode_project_path,
    encode_project_path,
)
from .local import (
    ScanProgress,
    ScanResult,
    discover_session_files,
    resolve_projects_dir,
    scan_session_file,
    scan_sessions,
)

__all__ = [
    "ScanProgress",
    "ScanResult",
    "SessionIdentity",
    "SessionSummary",
    "decode_project_path",
    "discover_session_files",
    "encode_project_path",
    "resolve_projects_dir",
    "scan_session_file",
    "scan_sessions",
]
