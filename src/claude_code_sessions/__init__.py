# ABOUTME: Terminal browser for Claude Code session logs.
# ABOUTME: Scans ~/.claude/projects, previews sessions and prunes empty ones.

from claude_code_sessions.index import SessionIndex
from claude_code_sessions.loaders import SessionIdentity, SessionSummary, scan_sessions
from claude_code_sessions.preview import session_preview

__all__ = ["SessionIdentity", "SessionIndex", "SessionSummary", "scan_sessions", "session_preview"]
