from __future__ import annotations

import json
import logging
from types import MappingProxyType
from typing import Any, Mapping, Optional, Union

from ..errors import DecodeError, MissingPayloadError
from .models import ChangeEnvelope, ChangePayload

logger = logging.getLogger(__name__)


def _optional_mapping(obj: Mapping[str, Any], key: str) -> Optional[Mapping[str, Any]]:
    value = obj.get(key)
    if value is None:
        return None
    if not isinstance(value, dict):
        raise DecodeError(f"{key!r} must be a JSON object or null, got {type(value).__name__}")
    return MappingProxyType(value)


def decode_envelope(raw: Union[bytes, str]) -> ChangeEnvelope:
    """
    Parse a raw message body into a ChangeEnvelope.

    The whole message is validated before anything is returned; a structural
    problem anywhere aborts decoding of this message only.

    Args:
        raw: Message value as received from the inbound stream

    Returns:
        A frozen ChangeEnvelope

    Raises:
        DecodeError: If the body is not valid UTF-8 JSON or has the wrong shape
        MissingPayloadError: If the envelope has no payload (absent or null)
    """
    try:
        text = raw.decode("utf-8") if isinstance(raw, (bytes, bytearray)) else raw
        doc = json.loads(text)
    except (UnicodeDecodeError, TypeError, ValueError, RecursionError) as exc:
        raise DecodeError(f"Malformed change envelope: {exc}") from exc

    if not isinstance(doc, dict):
        raise DecodeError(f"Change envelope must be a JSON object, got {type(doc).__name__}")

    payload = doc.get("payload")
    if payload is None:
        raise MissingPayloadError("Payload is nil")
    if not isinstance(payload, dict):
        raise DecodeError(f"'payload' must be a JSON object, got {type(payload).__name__}")

    schema = _optional_mapping(doc, "schema")

    op = payload.get("op")
    if not isinstance(op, str):
        raise DecodeError(f"'op' must be a string, got {type(op).__name__}")

    timestamp = payload.get("ts_ms")
    if timestamp is not None and (isinstance(timestamp, bool) or not isinstance(timestamp, int)):
        raise DecodeError(f"'ts_ms' must be an integer, got {type(timestamp).__name__}")

    source = _optional_mapping(payload, "source")

    envelope = ChangeEnvelope(
        payload=ChangePayload(
            op=op,
            source=source if source is not None else MappingProxyType({}),
            before=_optional_mapping(payload, "before"),
            after=_optional_mapping(payload, "after"),
            timestamp=timestamp,
            transaction=_optional_mapping(payload, "transaction"),
        ),
        schema=schema,
    )
    logger.debug("Schema used for applying CDC item: %s", schema)
    return envelope
