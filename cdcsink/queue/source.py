from __future__ import annotations

import itertools
import queue
from typing import Optional, Protocol, Union

from .models import QueueMessage


class MessageSource(Protocol):
    """Ordered inbound stream consumed by StreamLoop."""

    def read(self, block_ms: int) -> Optional[QueueMessage]:
        """Return the next message, or None if none arrived within block_ms."""
        ...

    def ack(self, msg: QueueMessage) -> None:
        """Mark a message as handled so it is not delivered again."""
        ...


class InMemoryQueue:
    """
    In-process MessageSource backed by queue.Queue.

    Usage:
        source = InMemoryQueue()
        source.put(b'{"payload": {...}}')
        StreamLoop(source, applier).run()
    """

    def __init__(self, maxsize: int = 0) -> None:
        self._queue: queue.Queue[QueueMessage] = queue.Queue(maxsize=maxsize)
        self._ids = itertools.count(1)
        self.acked: list[str] = []

    def put(self, value: Union[bytes, str]) -> QueueMessage:
        if isinstance(value, str):
            value = value.encode("utf-8")
        msg = QueueMessage(id=str(next(self._ids)), value=value)
        self._queue.put(msg)
        return msg

    def read(self, block_ms: int) -> Optional[QueueMessage]:
        try:
            return self._queue.get(timeout=block_ms / 1000.0)
        except queue.Empty:
            return None

    def ack(self, msg: QueueMessage) -> None:
        self.acked.append(msg.id)

    def __len__(self) -> int:
        return self._queue.qsize()
