"""Shared fixtures for CLI tests."""

from __future__ import annotations

import json
from collections.abc import Callable
from pathlib import Path
from typing import Any

import pytest

USERS = [
    {"id": 1, "name": "Ada", "email": "ada@example.com"},
    {"id": 2, "name": "Grace", "email": None},
]


@pytest.fixture
def write_rows(tmp_path: Path) -> Callable[[str, Any], Path]:
    """Return a factory writing JSON result rows to a file under *tmp_path*."""

    def _write(name: str, rows: Any) -> Path:
        path = tmp_path / name
        path.write_text(json.dumps(rows), encoding="utf-8")
        return path

    return _write


@pytest.fixture
def users_rows() -> list[dict[str, Any]]:
    return [dict(row) for row in USERS]


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch, tmp_path):
    monkeypatch.chdir(tmp_path)
    for name in ("QUERY_GRID_DEBUG", "QUERY_GRID_JSON_CAST", "QUERY_GRID_STRUCTURED_LOGGING"):
        monkeypatch.delenv(name, raising=False)
