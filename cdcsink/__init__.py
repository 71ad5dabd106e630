from .runner import apply
from .config import DbConfig, LoopConfig, QueueConfig
from .db.applier import ChangeApplier
from .db.session import DbSession
from .dispatch import apply_envelope, build_statement
from .envelope import ChangeEnvelope, ChangePayload, Operation, decode_envelope
from .queue import InMemoryQueue, RedisStreamsQueue, StreamLoop

__all__ = [
    "ChangeApplier",
    "ChangeEnvelope",
    "ChangePayload",
    "DbConfig",
    "DbSession",
    "InMemoryQueue",
    "LoopConfig",
    "Operation",
    "QueueConfig",
    "RedisStreamsQueue",
    "StreamLoop",
    "apply",
    "apply_envelope",
    "build_statement",
    "decode_envelope",
]
