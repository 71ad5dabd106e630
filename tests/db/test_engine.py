from __future__ import annotations

import pytest

from cdcsink.config import DbConfig
from cdcsink.db.engine import connect
from cdcsink.errors import ConnectError


def test_connect_returns_working_engine(sqlite_url: str) -> None:
    engine = connect(DbConfig(url=sqlite_url))
    try:
        with engine.connect() as conn:
            assert conn.exec_driver_sql("SELECT 1").scalar() == 1
    finally:
        engine.dispose()


def test_unreachable_database_raises_connect_error(tmp_path) -> None:
    missing_dir = tmp_path / "does" / "not" / "exist"

    with pytest.raises(ConnectError):
        connect(DbConfig(url=f"sqlite:///{missing_dir / 'x.db'}"))


def test_invalid_url_raises_connect_error() -> None:
    with pytest.raises(ConnectError):
        connect(DbConfig(url="not a url"))


def test_empty_url_is_rejected() -> None:
    with pytest.raises(ValueError):
        DbConfig(url="")
