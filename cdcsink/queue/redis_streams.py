from __future__ import annotations

import logging
from typing import Optional, Union

from redis import Redis
from redis.exceptions import RedisError, ResponseError

from ..config import QueueConfig
from ..errors import QueueError
from ..metrics.registry import QUEUE_MESSAGES_ACK_TOTAL, QUEUE_MESSAGES_READ_TOTAL
from .models import QueueMessage

logger = logging.getLogger(__name__)


def _as_str(value: Union[bytes, str]) -> str:
    return value.decode("utf-8") if isinstance(value, bytes) else value


def _as_bytes(value: Union[bytes, str]) -> bytes:
    return value.encode("utf-8") if isinstance(value, str) else value


class RedisStreamsQueue:
    """
    MessageSource over a Redis Stream read through a consumer group.

    Each stream entry carries one change envelope in `config.value_field`.
    Only new entries are read (XREADGROUP with ">"); pending entries of a
    crashed consumer are not reclaimed.
    """

    def __init__(self, redis: Redis, config: QueueConfig) -> None:
        """
        Raises:
            QueueError: If consumer group creation fails (except BUSYGROUP)
        """
        self.redis = redis
        self.config = config
        self._ensure_group()

    def _ensure_group(self) -> None:
        try:
            self.redis.xgroup_create(
                self.config.stream_key,
                self.config.consumer_group,
                id="$",
                mkstream=True,
            )
        except ResponseError as exc:
            if "BUSYGROUP" not in str(exc):
                raise QueueError(f"Failed to create consumer group: {exc}") from exc
        except RedisError as exc:
            raise QueueError(f"Failed to create consumer group: {exc}") from exc

    def enqueue(self, value: Union[bytes, str]) -> str:
        """Append a raw envelope to the stream and return its entry id."""
        try:
            entry_id = self.redis.xadd(self.config.stream_key, {self.config.value_field: _as_bytes(value)})
        except RedisError as exc:
            raise QueueError(f"Failed to enqueue message: {exc}") from exc
        return _as_str(entry_id)

    def read(self, block_ms: Optional[int] = None) -> Optional[QueueMessage]:
        """
        Block for up to block_ms and return the next entry, or None.

        Raises:
            QueueError: If Redis operation fails
        """
        actual_block_ms = block_ms if block_ms is not None else self.config.block_ms
        try:
            response = self.redis.xreadgroup(
                self.config.consumer_group,
                self.config.consumer_name,
                {self.config.stream_key: ">"},
                count=1,
                block=actual_block_ms,
            )
        except RedisError as exc:
            raise QueueError(f"Failed to read from stream: {exc}") from exc

        if not response:
            return None

        _stream, entries = response[0]
        if not entries:
            return None

        entry_id, fields = entries[0]
        fields = {_as_str(k): v for k, v in (fields or {}).items()}
        QUEUE_MESSAGES_READ_TOTAL.labels(stream=self.config.stream_key).inc()

        value = fields.get(self.config.value_field)
        if value is None:
            # Still delivered so the loop records and skips it.
            logger.warning(
                "Stream entry %s has no %r field", _as_str(entry_id), self.config.value_field
            )
            value = b""

        return QueueMessage(
            id=_as_str(entry_id),
            value=_as_bytes(value),
            metadata={"stream": self.config.stream_key},
        )

    def ack(self, msg: QueueMessage) -> None:
        """
        Raises:
            QueueError: If Redis operation fails
        """
        try:
            self.redis.xack(self.config.stream_key, self.config.consumer_group, msg.id)
        except RedisError as exc:
            raise QueueError(f"Failed to ack message {msg.id}: {exc}") from exc
        QUEUE_MESSAGES_ACK_TOTAL.labels(stream=self.config.stream_key).inc()
