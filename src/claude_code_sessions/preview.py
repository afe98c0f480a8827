# ABOUTME: One-line preview text for a session.
# ABOUTME: Walks an ordered chain of candidates and truncates to a cell width.

from __future__ import annotations

import unicodedata
from typing import Callable, Iterator

from rich.cells import cell_len

from .loaders.base import SessionSummary

DEFAULT_PREVIEW_WIDTH = 50
ELLIPSIS = "..."
SHORT_ID_LENGTH = 12

_ZWJ = "\u200d"


def session_preview(session: SessionSummary, width: int = DEFAULT_PREVIEW_WIDTH) -> str:
    """Return the display line for a session. Never empty."""
    for candidate in PREVIEW_CHAIN:
        value = candidate(session)
        if value and value.strip():
            return truncate(value, width)
    return truncate(f"[{session.session_id}]", width)


def _custom_title_candidate(session: SessionSummary) -> str | None:
    return session.custom_title


def _first_user_text_candidate(session: SessionSummary) -> str | None:
    return session.first_user_text


def _summary_candidate(session: SessionSummary) -> str | None:
    return session.summary_text


def _message_count_candidate(session: SessionSummary) -> str | None:
    count = session.message_count
    if count <= 0:
        return None
    return f"[{count} message{'' if count == 1 else 's'}]"


def _session_id_candidate(session: SessionSummary) -> str | None:
    session_id = session.session_id
    if len(session_id) > SHORT_ID_LENGTH:
        session_id = session_id[:SHORT_ID_LENGTH] + ELLIPSIS
    return f"[{session_id}]"


PreviewCandidate = Callable[[SessionSummary], "str | None"]

# Order matters: an explicit title beats the user's first words, which beat a
# generated summary.
PREVIEW_CHAIN: tuple[PreviewCandidate, ...] = (
    _custom_title_candidate,
    _first_user_text_candidate,
    _summary_candidate,
    _message_count_candidate,
    _session_id_candidate,
)


def truncate(text: str, width: int = DEFAULT_PREVIEW_WIDTH) -> str:
    """Collapse whitespace and cut text to at most width terminal cells.

    Cuts happen between grapheme clusters, so combining marks and emoji
    joined with ZWJ are never split from their base character. Widths too
    narrow for the full ellipsis get a shortened one; a cut result is never
    empty, so a width below one still yields a single cell.
    """
    text = " ".join(text.split())
    if cell_len(text) <= width:
        return text

    ellipsis = ELLIPSIS[: max(width, 1)]
    budget = max(width - len(ellipsis), 0)
    kept: list[str] = []
    used = 0
    for cluster in _grapheme_clusters(text):
        size = cell_len(cluster)
        if used + size > budget:
            break
        kept.append(cluster)
        used += size
    return "".join(kept).rstrip() + ellipsis


def _grapheme_clusters(text: str) -> Iterator[str]:
    cluster = ""
    for char in text:
        if cluster and (_extends_cluster(char) or cluster.endswith(_ZWJ)):
            cluster += char
            continue
        if cluster:
            yield cluster
        cluster = char
    if cluster:
        yield cluster


def _extends_cluster(char: str) -> bool:
    if char == _ZWJ or unicodedata.category(char) in ("Mn", "Mc", "Me"):
        return True
    code = ord(char)
    # Variation selectors and emoji skin tone modifiers.
    return 0xFE00 <= code <= 0xFE0F or 0x1F3FB <= code <= 0x1F3FF
