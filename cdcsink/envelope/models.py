from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Mapping, Optional


class Operation(str, Enum):
    CREATE = "c"
    UPDATE = "u"
    DELETE = "d"
    READ = "r"


@dataclass(frozen=True)
class ChangePayload:
    """
    Row images and metadata for a single change event.

    `before` and `after` map column name -> value. `source` carries at least
    the target `table`. `op` keeps the raw wire code; unknown codes are
    rejected by the dispatcher, not here.
    """
    op: str
    source: Mapping[str, Any]
    before: Optional[Mapping[str, Any]] = None
    after: Optional[Mapping[str, Any]] = None
    timestamp: Optional[int] = None
    # transaction metadata is optional contextual info, not used by core logic
    transaction: Optional[Mapping[str, Any]] = None

    @property
    def table(self) -> Any:
        return self.source.get("table")


@dataclass(frozen=True)
class ChangeEnvelope:
    payload: ChangePayload
    # schema is informational only; it is logged, never validated against
    schema: Optional[Mapping[str, Any]] = None
