from __future__ import annotations

import logging
import threading
from dataclasses import dataclass
from enum import Enum
from typing import Optional

from ..config import LoopConfig
from ..db.applier import ChangeApplier
from ..db.metrics import observe_apply
from ..dispatch import apply_envelope
from ..envelope.decoder import decode_envelope
from ..errors import CdcSinkError, ExecutionError, ZeroRowsWarning
from .models import QueueMessage
from .source import MessageSource

logger = logging.getLogger(__name__)


class LoopState(str, Enum):
    RUNNING = "running"
    STOPPED = "stopped"


@dataclass(frozen=True)
class MessageOutcome:
    """
    What happened to one inbound message.

    Exactly one of the following holds:
    - error is set: the message was dropped
    - warning is set: the statement ran but matched no rows
    - neither: the change was applied (or was a snapshot read)
    """
    message_id: str
    rows_affected: int = 0
    error: Optional[CdcSinkError] = None
    warning: Optional[ZeroRowsWarning] = None

    @property
    def ok(self) -> bool:
        return self.error is None


class StreamLoop:
    """
    Applies change events from a MessageSource, one at a time, in order.

    The StreamLoop is a control-flow abstraction, not a delivery guarantee
    mechanism. It coordinates:
    - Message retrieval
    - Decode, dispatch and apply of each message
    - Shutdown behavior

    Design Principles:
    - At-most-once, best-effort delivery
    - Strictly serial: one statement in flight at a time
    - No retries: a failed message is logged and skipped
    - Per-message failures never stop the loop
    - Failures of the source itself propagate

    Stop is cooperative. stop() is observed at the top of each iteration, so
    a statement that is already executing always finishes first.

    Usage:
        with DbSession(engine) as session:
            loop = StreamLoop(source, ChangeApplier(session))
            loop.run()  # until loop.stop() is called from another thread
    """

    def __init__(
        self,
        source: MessageSource,
        applier: ChangeApplier,
        config: Optional[LoopConfig] = None,
        stop_event: Optional[threading.Event] = None,
    ) -> None:
        self.source = source
        self.applier = applier
        self.config = config or LoopConfig()
        self._stopping = stop_event or threading.Event()
        self.state = LoopState.STOPPED

    def process(self, msg: QueueMessage) -> MessageOutcome:
        """
        Decode, dispatch and apply a single message.

        Never raises for per-message failures; they are logged and returned in
        the outcome instead.
        """
        try:
            envelope = decode_envelope(msg.value)
            rows_affected = apply_envelope(envelope, self.applier)
        except ExecutionError as exc:
            # ChangeApplier already recorded the failure in metrics.
            logger.error("Failed to apply CDC item %s: %s", msg.id, exc, exc_info=exc.__cause__)
            return MessageOutcome(message_id=msg.id, rows_affected=-1, error=exc)
        except CdcSinkError as exc:
            logger.error("Skipping CDC item %s: %s", msg.id, exc)
            observe_apply("unknown", "unknown", "error")
            return MessageOutcome(message_id=msg.id, rows_affected=-1, error=exc)

        if rows_affected == 0 and envelope.payload.op != "r":
            logger.warning("CDC item caused no changes (message %s, table %s)", msg.id, envelope.payload.table)
            return MessageOutcome(
                message_id=msg.id,
                rows_affected=0,
                warning=ZeroRowsWarning(f"CDC item {msg.id} caused no changes"),
            )
        return MessageOutcome(message_id=msg.id, rows_affected=rows_affected)

    def next(self) -> Optional[QueueMessage]:
        """
        Fetch at most one message, blocking for up to config.block_ms.

        Returns None immediately once stop() has been called.

        Raises:
            QueueError: If the source fails
        """
        if self._stopping.is_set():
            return None
        return self.source.read(self.config.block_ms)

    def run(self) -> None:
        """
        Loop until stopped:
        1) fetch
        2) decode, dispatch, apply
        3) ack, whatever the outcome

        UNDER NO CIRCUMSTANCES SHOULD THIS LOOP RETRY A MESSAGE.

        Raises:
            QueueError: If the source fails
        """
        self.state = LoopState.RUNNING
        logger.info("CDC apply loop started")
        try:
            while not self._stopping.is_set():
                msg = self.next()
                if msg is None:
                    continue
                self.process(msg)
                self.source.ack(msg)
        finally:
            self.state = LoopState.STOPPED
            logger.info("CDC apply loop stopped")

    def stop(self) -> None:
        """
        Signal graceful shutdown.

        Upon stop():
        - No new reads are initiated
        - A message already being applied is allowed to finish
        - Messages still waiting in the source are not drained
        """
        self._stopping.set()
