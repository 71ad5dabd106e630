from .registry import (
    CDC_APPLY_LATENCY_SECONDS,
    CDC_EVENTS_TOTAL,
    QUEUE_MESSAGES_ACK_TOTAL,
    QUEUE_MESSAGES_READ_TOTAL,
)

__all__ = [
    "CDC_APPLY_LATENCY_SECONDS",
    "CDC_EVENTS_TOTAL",
    "QUEUE_MESSAGES_ACK_TOTAL",
    "QUEUE_MESSAGES_READ_TOTAL",
]
