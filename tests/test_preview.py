# ABOUTME: Tests for the session preview fallback chain.
# ABOUTME: Verifies precedence, totality and width-safe truncation.

from __future__ import annotations

from dataclasses import replace
from datetime import datetime, timezone
from pathlib import Path

import pytest
from rich.cells import cell_len

from claude_code_sessions.loaders.base import SessionIdentity, SessionSummary
from claude_code_sessions.preview import PREVIEW_CHAIN, session_preview, truncate


@pytest.fixture
def bare_session() -> SessionSummary:
    return SessionSummary(
        identity=SessionIdentity("-home-user-demo", "abc123def456"),
        path=Path("/tmp/abc123def456.jsonl"),
        size_bytes=1024,
        modified=datetime(2024, 12, 25, tzinfo=timezone.utc),
    )


class TestPreviewChain:
    """Tests for candidate precedence."""

    def test_custom_title_wins(self, bare_session: SessionSummary) -> None:
        session = replace(
            bare_session,
            custom_title="My Custom Title",
            first_user_text="First message",
            summary_text="Summary text",
            message_count=3,
        )

        assert session_preview(session) == "My Custom Title"

    def test_first_user_text_beats_summary(self, bare_session: SessionSummary) -> None:
        session = replace(bare_session, first_user_text="fix bug", summary_text="fixed bug")

        assert session_preview(session) == "fix bug"

    def test_summary_fallback(self, bare_session: SessionSummary) -> None:
        session = replace(bare_session, summary_text="Summary text", message_count=2)

        assert session_preview(session) == "Summary text"

    def test_blank_candidates_are_skipped(self, bare_session: SessionSummary) -> None:
        session = replace(bare_session, custom_title="   ", first_user_text="real words")

        assert session_preview(session) == "real words"

    def test_message_count_fallback(self, bare_session: SessionSummary) -> None:
        assert session_preview(replace(bare_session, message_count=5)) == "[5 messages]"
        assert session_preview(replace(bare_session, message_count=1)) == "[1 message]"

    def test_session_id_fallback(self, bare_session: SessionSummary) -> None:
        assert session_preview(bare_session) == "[abc123def456]"

    def test_long_session_id_is_shortened(self, bare_session: SessionSummary) -> None:
        session = replace(
            bare_session, identity=SessionIdentity("-p", "abcdefghijklmnopqrstuvwxyz")
        )

        assert session_preview(session) == "[abcdefghijkl...]"

    def test_chain_order(self) -> None:
        names = [candidate.__name__ for candidate in PREVIEW_CHAIN]

        assert names == [
            "_custom_title_candidate",
            "_first_user_text_candidate",
            "_summary_candidate",
            "_message_count_candidate",
            "_session_id_candidate",
        ]

    @pytest.mark.parametrize("width", [0, 1, 3, 10, 50])
    @pytest.mark.parametrize(
        "fields",
        [
            {},
            {"message_count": 0},
            {"custom_title": ""},
            {"first_user_text": "\n\n"},
            {"summary_text": "x" * 500},
        ],
    )
    def test_preview_is_never_empty(
        self, bare_session: SessionSummary, fields: dict, width: int
    ) -> None:
        assert session_preview(replace(bare_session, **fields), width)

    def test_empty_session_id(self, bare_session: SessionSummary) -> None:
        session = replace(bare_session, identity=SessionIdentity("-p", ""))

        assert session_preview(session) == "[]"


class TestTruncate:
    """Tests for width-bounded truncation."""

    def test_short_text_unchanged(self) -> None:
        assert truncate("short", 10) == "short"

    def test_long_text_gets_ellipsis(self) -> None:
        assert truncate("this is a long message", 10) == "this is..."

    def test_whitespace_is_collapsed(self) -> None:
        assert truncate("  line1\nline2  ", 20) == "line1 line2"

    def test_wide_characters_respect_cell_width(self) -> None:
        result = truncate("日本語のテキストです", 10)

        assert result == "日本語..."
        assert cell_len(result) <= 10

    def test_combining_marks_stay_with_base(self) -> None:
        accented = "e\u0301"
        result = truncate(accented * 20, 8)

        assert result == accented * 5 + "..."

    def test_zwj_sequence_is_not_split(self) -> None:
        family = "\U0001f468\u200d\U0001f469\u200d\U0001f467"

        for width in range(3, 16):
            result = truncate("ab" + family + "cdefghij", width)
            assert ("\U0001f468" in result) == (family in result)
            assert cell_len(result) <= width

    @pytest.mark.parametrize("width, expected", [(1, "."), (2, ".."), (3, "..."), (4, "a...")])
    def test_narrow_widths_stay_within_bound(self, width: int, expected: str) -> None:
        result = truncate("abcdef", width)

        assert result == expected
        assert cell_len(result) <= width

    def test_zero_width_still_yields_a_cell(self) -> None:
        assert truncate("abcdef", 0) == "."
