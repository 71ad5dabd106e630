from prometheus_client import Counter, Histogram

CDC_EVENTS_TOTAL = Counter(
    "cdcsink_events_total",
    "Change events processed, by outcome",
    ["table", "op", "status"],
)

CDC_APPLY_LATENCY_SECONDS = Histogram(
    "cdcsink_apply_latency_seconds",
    "Time spent executing the statement built for a change event",
    ["table", "op"],
)

QUEUE_MESSAGES_READ_TOTAL = Counter(
    "cdcsink_queue_messages_read_total",
    "Messages read from the inbound stream",
    ["stream"],
)

QUEUE_MESSAGES_ACK_TOTAL = Counter(
    "cdcsink_queue_messages_ack_total",
    "Messages acknowledged on the inbound stream",
    ["stream"],
)
