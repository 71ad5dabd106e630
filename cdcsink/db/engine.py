from __future__ import annotations

import logging

from sqlalchemy import create_engine, text
from sqlalchemy.engine import Engine, make_url

from ..config import DbConfig
from ..errors import ConnectError

logger = logging.getLogger(__name__)


def connect(config: DbConfig) -> Engine:
    """
    Create the target-database engine and make sure it is reachable.

    We fail fast here: without a connection no change event can be applied,
    so this is the one error that is fatal to the whole applier.

    Raises:
        ConnectError: If the engine cannot be created or SELECT 1 fails
    """
    try:
        engine = create_engine(config.url, pool_pre_ping=config.pool_pre_ping, echo=config.echo)
    except Exception as exc:
        raise ConnectError(f"Invalid database configuration: {exc}") from exc

    try:
        with engine.connect() as conn:
            conn.execute(text("SELECT 1"))
    except Exception as exc:
        engine.dispose()
        raise ConnectError(f"Target database is not reachable: {exc}") from exc

    logger.info("Connected to target database %s", make_url(config.url).render_as_string(hide_password=True))
    return engine
