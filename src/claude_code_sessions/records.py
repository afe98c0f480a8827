# ABOUTME: Record decoding for Claude Code session logs.
# ABOUTME: Turns one raw JSONL line into a typed LogRecord or a DecodeFailure.

from __future__ import annotations

import json
from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Iterable, Iterator

from .errors import DecodeFailure


class RecordKind(str, Enum):
    USER = "user"
    ASSISTANT = "assistant"
    SYSTEM = "system"
    SUMMARY = "summary"
    CUSTOM_TITLE = "custom_title"
    UNRECOGNIZED = "unrecognized"


_KIND_BY_TYPE = {
    "user": RecordKind.USER,
    "assistant": RecordKind.ASSISTANT,
    "system": RecordKind.SYSTEM,
    "summary": RecordKind.SUMMARY,
    "custom-title": RecordKind.CUSTOM_TITLE,
}


@dataclass(frozen=True)
class LogRecord:
    """A decoded line from a session log."""

    kind: RecordKind
    text: str
    sequence: int
    timestamp: datetime | None = None
    cwd: str | None = None
    is_meta: bool = False

    @property
    def is_message(self) -> bool:
        return self.kind in (RecordKind.USER, RecordKind.ASSISTANT)


def decode_record(line: str, sequence: int) -> LogRecord:
    """Decode one JSONL line.

    Raises DecodeFailure for anything that is not a complete JSON object,
    including lines truncated by a writer that is still appending and lines
    nested too deeply for the parser.
    """
    try:
        raw = json.loads(line)
    except json.JSONDecodeError as exc:
        raise DecodeFailure(sequence, f"invalid JSON: {exc.msg}") from exc
    except (RecursionError, ValueError) as exc:
        raise DecodeFailure(sequence, f"undecodable line: {exc}") from exc
    if not isinstance(raw, dict):
        raise DecodeFailure(sequence, f"expected object, got {type(raw).__name__}")

    raw_type = raw.get("type")
    kind = RecordKind.UNRECOGNIZED
    if isinstance(raw_type, str):
        kind = _KIND_BY_TYPE.get(raw_type, RecordKind.UNRECOGNIZED)
    cwd = raw.get("cwd")
    return LogRecord(
        kind=kind,
        text=_extract_text(kind, raw),
        sequence=sequence,
        timestamp=parse_timestamp(raw.get("timestamp")),
        cwd=cwd if isinstance(cwd, str) and cwd else None,
        is_meta=raw.get("isMeta") is True,
    )


def iter_records(lines: Iterable[str]) -> Iterator[LogRecord | DecodeFailure]:
    """Yield a record or a failure for every non-blank line, in file order."""
    for seq, line in enumerate(lines):
        line = line.strip()
        if not line:
            continue
        try:
            yield decode_record(line, seq)
        except DecodeFailure as failure:
            yield failure


def parse_timestamp(value: Any) -> datetime | None:
    if not isinstance(value, str) or not value:
        return None
    try:
        parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError:
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def _extract_text(kind: RecordKind, raw: dict[str, Any]) -> str:
    if kind is RecordKind.SUMMARY:
        return _as_str(raw.get("summary"))
    if kind is RecordKind.CUSTOM_TITLE:
        return _as_str(raw.get("customTitle"))
    if kind is RecordKind.SYSTEM:
        return _as_str(raw.get("content"))
    if kind in (RecordKind.USER, RecordKind.ASSISTANT):
        message = raw.get("message")
        if isinstance(message, dict):
            return content_text(message.get("content"))
        return content_text(message)
    return ""


def content_text(content: Any) -> str:
    """Join the text blocks of a message's content.

    Tool use, tool results and thinking blocks carry no authored text and
    are skipped.
    """
    if isinstance(content, str):
        return content
    if not isinstance(content, list):
        return ""
    text_parts: list[str] = []
    for block in content:
        if isinstance(block, dict) and block.get("type") == "text":
            text = block.get("text")
            if isinstance(text, str):
                text_parts.append(text)
    return "\n".join(text_parts)


def _as_str(value: Any) -> str:
    return value if isinstance(value, str) else ""
