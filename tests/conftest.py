from __future__ import annotations

import json
import re
import uuid
from collections.abc import Callable, Iterator
from pathlib import Path
from typing import Any

import pytest
from sqlalchemy import create_engine
from sqlalchemy.engine import Engine

from cdcsink.db.session import DbSession


@pytest.fixture
def sqlite_url(tmp_path: Path) -> str:
    """
    File-backed SQLite URL for tests.

    A file (not :memory:) so every connection opened by the engine sees the
    same database.
    """
    return f"sqlite:///{tmp_path / 'target.db'}"


@pytest.fixture
def engine(sqlite_url: str) -> Iterator[Engine]:
    eng = create_engine(sqlite_url)
    yield eng
    eng.dispose()


def _sanitize_table_name(name: str) -> str:
    name = re.sub(r"[^a-zA-Z0-9_]+", "_", name).strip("_").lower()
    if not name:
        name = "t"
    return name[:40]


@pytest.fixture
def table_factory(engine: Engine, request: pytest.FixtureRequest) -> Callable[[str], str]:
    """
    Factory fixture creating per-test tables.

    Usage:
        table = table_factory("id INTEGER PRIMARY KEY, name TEXT")
    """

    def _create(schema_sql: str) -> str:
        base = _sanitize_table_name(f"t_{request.node.name}")
        table = f"{base}_{uuid.uuid4().hex[:10]}"
        with engine.begin() as conn:
            conn.exec_driver_sql(f"CREATE TABLE {table} ({schema_sql})")
        return table

    return _create


@pytest.fixture
def fresh_table(table_factory: Callable[[str], str]) -> str:
    """
    A default table schema used across DB tests.

    Includes:
    - PK `id`
    - a nullable text column and an integer column
    """
    return table_factory("id INTEGER PRIMARY KEY, name TEXT NULL, value INTEGER NOT NULL DEFAULT 0")


@pytest.fixture
def session(engine: Engine) -> Iterator[DbSession]:
    with DbSession(engine) as s:
        yield s


@pytest.fixture
def make_message() -> Callable[..., bytes]:
    """
    Build a raw Debezium-style message body.

    Usage:
        raw = make_message("c", table="t", after={"id": 1})
    """

    def _make(
        op: str,
        table: str = "t",
        before: dict[str, Any] | None = None,
        after: dict[str, Any] | None = None,
        schema: dict[str, Any] | None = None,
    ) -> bytes:
        doc = {
            "schema": schema,
            "payload": {
                "before": before,
                "after": after,
                "source": {"connector": "postgresql", "db": "src", "table": table},
                "op": op,
                "ts_ms": 1_700_000_000_000,
                "transaction": None,
            },
        }
        return json.dumps(doc).encode("utf-8")

    return _make


class RecordingExecutor:
    """StatementExecutor stand-in that records calls and returns a fixed rowcount."""

    def __init__(self, rowcount: int = 1, error: Exception | None = None) -> None:
        self.rowcount = rowcount
        self.error = error
        self.calls: list[tuple[str, tuple[Any, ...]]] = []

    def execute(self, sql: str, args) -> int:
        self.calls.append((sql, tuple(args)))
        if self.error is not None:
            raise self.error
        return self.rowcount


@pytest.fixture
def recording_executor() -> RecordingExecutor:
    return RecordingExecutor()
