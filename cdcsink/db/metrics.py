from __future__ import annotations

from ..metrics.registry import CDC_APPLY_LATENCY_SECONDS, CDC_EVENTS_TOTAL


def observe_apply(table: str, op: str, status: str, latency_s: float | None = None) -> None:
    """
    Record the outcome of one change event.

    Latency is only recorded for events that reached the database.
    """
    CDC_EVENTS_TOTAL.labels(table=table, op=op, status=status).inc()
    if latency_s is not None:
        CDC_APPLY_LATENCY_SECONDS.labels(table=table, op=op).observe(latency_s)
