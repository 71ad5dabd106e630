from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Mapping


@dataclass(frozen=True)
class QueueMessage:
    """
    One inbound message: an opaque value plus delivery metadata.

    `value` holds the JSON change envelope exactly as delivered.
    """
    id: str
    value: bytes
    metadata: Mapping[str, Any] = field(default_factory=dict)
