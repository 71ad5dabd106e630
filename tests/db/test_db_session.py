from __future__ import annotations

import pytest
from sqlalchemy.exc import IntegrityError

from cdcsink.db.applier import ChangeApplier
from cdcsink.db.session import DbSession, to_text_clause
from cdcsink.db.statements import build_insert


class TestToTextClause:
    def test_rewrites_positional_markers(self) -> None:
        stmt, params = to_text_clause('INSERT INTO t("id","name") VALUES ($1,$2)', [1, "a"])

        assert str(stmt) == 'INSERT INTO t("id","name") VALUES (:p1,:p2)'
        assert params == {"p1": 1, "p2": "a"}

    def test_markers_inside_quoted_identifiers_are_kept(self) -> None:
        stmt, params = to_text_clause('DELETE FROM t WHERE ("a$1")=($1)', [5])

        assert str(stmt) == 'DELETE FROM t WHERE ("a$1")=(:p1)'
        assert params == {"p1": 5}

    def test_dollar_inside_table_name_is_kept(self) -> None:
        stmt, params = to_text_clause('INSERT INTO t$1("id") VALUES ($1)', [7])

        assert str(stmt) == 'INSERT INTO t$1("id") VALUES (:p1)'
        assert params == {"p1": 7}

    def test_reference_past_last_argument_raises(self) -> None:
        with pytest.raises(ValueError):
            to_text_clause("DELETE FROM t WHERE (\"id\")=($2)", [1])


class TestDbSession:
    def test_execute_returns_rowcount_and_commits(self, engine, fresh_table: str) -> None:
        table = fresh_table

        with DbSession(engine) as session:
            rc = session.execute(f'INSERT INTO {table}("id","name") VALUES ($1,$2)', [1, "a"])
            assert rc == 1

        with DbSession(engine) as session2:
            rows = session2.fetch_all(f"SELECT id, name FROM {table}")
            assert rows == [{"id": 1, "name": "a"}]

    def test_each_statement_commits_independently(self, engine, fresh_table: str) -> None:
        table = fresh_table

        with DbSession(engine) as session:
            session.execute(f'INSERT INTO {table}("id") VALUES ($1)', [1])
            with pytest.raises(IntegrityError):
                session.execute(f'INSERT INTO {table}("id") VALUES ($1)', [1])
            session.execute(f'INSERT INTO {table}("id") VALUES ($1)', [2])

            rows = session.fetch_all(f"SELECT id FROM {table} ORDER BY id")
            assert rows == [{"id": 1}, {"id": 2}]

    def test_row_value_update_and_delete(self, session: DbSession, fresh_table: str) -> None:
        table = fresh_table
        session.execute(f'INSERT INTO {table}("id","name") VALUES ($1,$2)', [1, "a"])

        rc = session.execute(
            f'UPDATE {table} SET ("id","name")=($3,$4) WHERE ("id","name")=($1,$2)',
            [1, "a", 1, "b"],
        )
        assert rc == 1
        assert session.fetch_all(f"SELECT name FROM {table} WHERE id = $1", [1]) == [{"name": "b"}]

        rc = session.execute(f'DELETE FROM {table} WHERE ("id")=($1)', [1])
        assert rc == 1
        rc = session.execute(f'DELETE FROM {table} WHERE ("id")=($1)', [1])
        assert rc == 0

    def test_connection_is_closed_after_exit(self, engine) -> None:
        with DbSession(engine) as session:
            conn = session._conn
            assert conn is not None

        assert conn.closed
        assert session._conn is None

    def test_nested_enter_is_rejected(self, engine) -> None:
        with DbSession(engine) as session:
            with pytest.raises(RuntimeError):
                session.__enter__()

    def test_execute_outside_context_raises(self, engine) -> None:
        with pytest.raises(RuntimeError):
            DbSession(engine).execute("DELETE FROM t")

    def test_table_name_with_dollar_sign(self, engine, session: DbSession) -> None:
        table = "orders$1"
        with engine.begin() as conn:
            conn.exec_driver_sql(f"CREATE TABLE {table} (id INTEGER PRIMARY KEY, name TEXT)")

        rc = ChangeApplier(session).apply(build_insert(table, {"id": 1, "name": "a"}))

        assert rc == 1
        assert session.fetch_all(f"SELECT id, name FROM {table}") == [{"id": 1, "name": "a"}]
