# ABOUTME: Pytest configuration and shared fixtures.
# ABOUTME: Builds throwaway Claude Code log stores under tmp_path.

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Callable

import pytest

FIXTURES_DIR = Path(__file__).parent / "fixtures"

SessionWriter = Callable[..., Path]


@pytest.fixture
def sample_session_path() -> Path:
    return FIXTURES_DIR / "sample_session.jsonl"


@pytest.fixture
def projects_dir(tmp_path: Path) -> Path:
    """An empty log store root."""
    root = tmp_path / "projects"
    root.mkdir()
    return root


@pytest.fixture
def write_session(projects_dir: Path) -> SessionWriter:
    """Write records (dicts or raw strings) as a session log and return its path."""

    def _write(
        session_id: str,
        records: list[dict[str, Any] | str],
        project: str = "-home-user-demo",
    ) -> Path:
        project_dir = projects_dir / project
        project_dir.mkdir(exist_ok=True)
        path = project_dir / f"{session_id}.jsonl"
        lines = [r if isinstance(r, str) else json.dumps(r) for r in records]
        path.write_text("".join(f"{line}\n" for line in lines))
        return path

    return _write


def user(text: Any, timestamp: str = "2024-12-25T10:00:00Z", **extra: Any) -> dict[str, Any]:
    return {
        "type": "user",
        "timestamp": timestamp,
        "message": {"role": "user", "content": text},
        **extra,
    }


def assistant(text: str, timestamp: str = "2024-12-25T10:00:05Z") -> dict[str, Any]:
    return {
        "type": "assistant",
        "timestamp": timestamp,
        "message": {"role": "assistant", "content": [{"type": "text", "text": text}]},
    }


def system(text: str, timestamp: str = "2024-12-25T10:00:10Z") -> dict[str, Any]:
    return {"type": "system", "timestamp": timestamp, "content": text}


def summary(text: str) -> dict[str, Any]:
    return {"type": "summary", "summary": text, "leafUuid": "leaf"}


def custom_title(text: str) -> dict[str, Any]:
    return {"type": "custom-title", "customTitle": text}
