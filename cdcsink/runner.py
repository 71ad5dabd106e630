from __future__ import annotations

import threading
from typing import Optional

from .config import DbConfig, LoopConfig
from .db.applier import ChangeApplier
from .db.engine import connect
from .db.session import DbSession
from .queue.loop import StreamLoop
from .queue.source import MessageSource


def apply(
    db_config: DbConfig,
    source: MessageSource,
    loop_config: Optional[LoopConfig] = None,
    stop_event: Optional[threading.Event] = None,
) -> None:
    """
    Read change events from `source` and apply them to the target database
    until `stop_event` is set.

    Raises:
        ConnectError: If the target database is unreachable at startup
        QueueError: If the source fails
    """
    engine = connect(db_config)
    try:
        with DbSession(engine) as session:
            loop = StreamLoop(source, ChangeApplier(session), loop_config, stop_event)
            loop.run()
    finally:
        engine.dispose()
