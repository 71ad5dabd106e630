from __future__ import annotations

import re
from typing import Any, Protocol, Sequence

from sqlalchemy import text
from sqlalchemy.engine import Connection, Engine
from sqlalchemy.sql import TextClause

# A double-quoted identifier (kept verbatim) or a standalone positional $n marker.
_POSITIONAL = re.compile(r'("(?:[^"]|"")*")|(?<![A-Za-z0-9_$])\$(\d+)')


class StatementExecutor(Protocol):
    """
    Capability used by ChangeApplier: run SQL with positional ($1..$N)
    parameters and return the affected row count.
    """

    def execute(self, sql: str, args: Sequence[Any]) -> int:
        ...


def to_text_clause(sql: str, args: Sequence[Any]) -> tuple[TextClause, dict[str, Any]]:
    """
    Rewrite `$n` markers into SQLAlchemy named binds `:pn`.

    Markers inside double-quoted identifiers are left alone, and colons inside
    those identifiers are escaped so text() does not read them as binds.
    """
    used: set[int] = set()

    def _sub(match: re.Match) -> str:
        quoted = match.group(1)
        if quoted is not None:
            return quoted.replace(":", "\\:")
        index = int(match.group(2))
        used.add(index)
        return f":p{index}"

    rewritten = _POSITIONAL.sub(_sub, sql)
    if used and (min(used) < 1 or max(used) > len(args)):
        raise ValueError(
            f"Statement references ${max(used)} but only {len(args)} argument(s) were given"
        )
    params = {f"p{i}": args[i - 1] for i in range(1, len(args) + 1)}
    return text(rewritten), params


class DbSession:
    """
    Long-lived wrapper around a single SQLAlchemy Engine connection.

    The connection is owned exclusively by one worker for the lifetime of the
    session. Each execute() runs in its own short transaction, so every change
    event commits independently.

    Use as:
        with DbSession(engine) as session:
            rc = session.execute('DELETE FROM t WHERE ("id")=($1)', [1])
    """

    def __init__(self, engine: Engine) -> None:
        self.engine = engine
        self._conn: Connection | None = None

    def __enter__(self) -> "DbSession":
        if self._conn is not None:
            raise RuntimeError("DbSession is already active; nested sessions are not allowed")
        self._conn = self.engine.connect()
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        try:
            if self._conn is not None:
                self._conn.close()
        finally:
            self._conn = None

        # propagate exceptions (if any)
        return False

    def _connection(self) -> Connection:
        if self._conn is None:
            raise RuntimeError("DbSession is not active; use within a context manager")
        return self._conn

    def execute(self, sql: str, args: Sequence[Any] = ()) -> int:
        """
        Execute a non-SELECT statement and return affected row count.
        """
        conn = self._connection()
        stmt, params = to_text_clause(sql, args)
        with conn.begin():
            result = conn.execute(stmt, params)
            try:
                if result.rowcount is None:
                    raise RuntimeError(
                        "execute() received None rowcount for statement. "
                        "This may indicate a DDL statement or unsupported operation type."
                    )
                return int(result.rowcount)
            finally:
                result.close()

    def fetch_all(self, sql: str, args: Sequence[Any] = ()) -> list[dict[str, Any]]:
        """
        Execute a SELECT expected to return multiple rows.
        """
        conn = self._connection()
        stmt, params = to_text_clause(sql, args)
        with conn.begin():
            result = conn.execute(stmt, params)
            return [dict(row) for row in result.mappings()]
