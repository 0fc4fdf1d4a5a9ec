"""Test configuration and fixtures."""

import json
from pathlib import Path
from typing import Callable, List

import pytest

from memory_bridge.memory.schemas import SessionSummary
from memory_bridge.persist.sqlite_store import SessionStore


@pytest.fixture
def db_path(tmp_path) -> Path:
    """Path to a not-yet-created memory database."""
    return tmp_path / "claude" / "memory-bridge.db"


@pytest.fixture
def store(db_path):
    """Create a temporary SessionStore instance."""
    s = SessionStore(db_path)
    yield s
    s.close()


@pytest.fixture
def make_summary() -> Callable[..., SessionSummary]:
    """Factory for extracted summaries."""
    def _make(request: str = "Fix the login flow", decisions: List[str] = None) -> SessionSummary:
        return SessionSummary(
            initial_request=request,
            decisions=decisions if decisions is not None else ["- Fixed login bug"],
        )
    return _make


@pytest.fixture
def write_transcript(tmp_path) -> Callable[..., Path]:
    """Write JSONL transcript records (dicts or raw strings) to a file."""
    def _write(records, name: str = "transcript.jsonl") -> Path:
        path = tmp_path / name
        lines = [r if isinstance(r, str) else json.dumps(r) for r in records]
        path.write_text("\n".join(lines), encoding="utf-8")
        return path
    return _write
