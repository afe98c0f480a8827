# ABOUTME: Tests for decoding raw JSONL lines into LogRecords.
# ABOUTME: Covers record kinds, text extraction and decode failures.

import json
from datetime import datetime, timezone

import pytest

from claude_code_sessions.errors import DecodeFailure
from claude_code_sessions.records import (
    LogRecord,
    RecordKind,
    content_text,
    decode_record,
    iter_records,
)


class TestDecodeRecord:
    """Tests for the decode_record function."""

    def test_decode_user_string_content(self) -> None:
        """A user record with string content keeps it verbatim."""
        line = json.dumps(
            {
                "type": "user",
                "timestamp": "2024-12-25T10:00:00Z",
                "cwd": "/home/user/demo",
                "message": {"role": "user", "content": "fix bug"},
            }
        )

        record = decode_record(line, 3)

        assert record.kind is RecordKind.USER
        assert record.text == "fix bug"
        assert record.sequence == 3
        assert record.timestamp == datetime(2024, 12, 25, 10, 0, tzinfo=timezone.utc)
        assert record.cwd == "/home/user/demo"
        assert record.is_meta is False
        assert record.is_message

    def test_decode_assistant_joins_text_blocks(self) -> None:
        """Only text blocks contribute to an assistant record's text."""
        line = json.dumps(
            {
                "type": "assistant",
                "message": {
                    "role": "assistant",
                    "content": [
                        {"type": "thinking", "thinking": "hmm"},
                        {"type": "text", "text": "First"},
                        {"type": "tool_use", "id": "t1", "name": "Bash", "input": {}},
                        {"type": "text", "text": "Second"},
                    ],
                },
            }
        )

        record = decode_record(line, 0)

        assert record.kind is RecordKind.ASSISTANT
        assert record.text == "First\nSecond"
        assert record.timestamp is None

    def test_decode_summary_and_custom_title(self) -> None:
        """Summary and custom-title records carry their own text fields."""
        summary = decode_record('{"type": "summary", "summary": "Fixed bug"}', 0)
        title = decode_record('{"type": "custom-title", "customTitle": "My title"}', 1)

        assert summary.kind is RecordKind.SUMMARY
        assert summary.text == "Fixed bug"
        assert title.kind is RecordKind.CUSTOM_TITLE
        assert title.text == "My title"
        assert not summary.is_message

    def test_decode_system_record(self) -> None:
        """System records expose their content field."""
        record = decode_record('{"type": "system", "content": "<tool-call>x</tool-call>"}', 0)

        assert record.kind is RecordKind.SYSTEM
        assert record.text == "<tool-call>x</tool-call>"

    def test_decode_unknown_type(self) -> None:
        """Unknown record types decode as unrecognized rather than failing."""
        record = decode_record('{"type": "file-history-snapshot", "messageId": "m"}', 0)

        assert record.kind is RecordKind.UNRECOGNIZED
        assert record.text == ""

    def test_decode_meta_flag(self) -> None:
        """isMeta marks records Claude Code wrote on the user's behalf."""
        line = json.dumps({"type": "user", "isMeta": True, "message": {"content": "x"}})

        assert decode_record(line, 0).is_meta is True

    def test_bad_timestamp_is_ignored(self) -> None:
        """An unparseable timestamp leaves the record usable."""
        line = json.dumps({"type": "user", "timestamp": "yesterday", "message": {"content": "x"}})

        assert decode_record(line, 0).timestamp is None

    @pytest.mark.parametrize(
        "line",
        [
            "not valid json",
            '{"type": "user", "message": {"content": "trunc',
            "[1, 2, 3]",
            '"just a string"',
            "[" * 100_000,
            '{"a": ' * 50_000,
        ],
        ids=["garbage", "truncated", "array", "string", "nested-arrays", "nested-objects"],
    )
    def test_decode_failure(self, line: str) -> None:
        """Malformed or non-object lines raise DecodeFailure."""
        with pytest.raises(DecodeFailure) as excinfo:
            decode_record(line, 7)

        assert excinfo.value.sequence == 7


class TestIterRecords:
    """Tests for iterating a whole file's lines."""

    def test_failures_do_not_stop_iteration(self) -> None:
        """A corrupted line in the middle yields a failure and decoding continues."""
        lines = [
            '{"type": "user", "message": {"content": "one"}}\n',
            "\n",
            "garbage\n",
            '{"type": "assistant", "message": {"content": "two"}}\n',
        ]

        items = list(iter_records(lines))

        assert len(items) == 3
        assert isinstance(items[0], LogRecord)
        assert isinstance(items[1], DecodeFailure)
        assert isinstance(items[2], LogRecord)
        assert [i.sequence for i in items] == [0, 2, 3]


def test_content_text_ignores_non_text() -> None:
    assert content_text(None) == ""
    assert content_text([{"type": "tool_result", "content": "ok"}]) == ""
    assert content_text(["stray", {"type": "text", "text": "kept"}]) == "kept"
