from __future__ import annotations

from ..config import QueueConfig
from .loop import LoopState, MessageOutcome, StreamLoop
from .models import QueueMessage
from .redis_streams import RedisStreamsQueue
from .source import InMemoryQueue, MessageSource

__all__ = [
    "InMemoryQueue",
    "LoopState",
    "MessageOutcome",
    "MessageSource",
    "QueueConfig",
    "QueueMessage",
    "RedisStreamsQueue",
    "StreamLoop",
]
