from __future__ import annotations

import logging
from typing import Optional

from .db.applier import ChangeApplier
from .db.metrics import observe_apply
from .db.statements import Statement, build_delete, build_insert, build_update
from .envelope.models import ChangeEnvelope, Operation
from .errors import UnsupportedOperationError

logger = logging.getLogger(__name__)


def build_statement(envelope: ChangeEnvelope) -> Optional[Statement]:
    """
    Route an envelope to the statement builder for its operation.

    Returns None for snapshot reads, which are intentionally ignored.

    Raises:
        UnsupportedOperationError: If the operation code is unknown
        MissingFieldSetError: If the row image the operation needs is absent
        InvalidIdentifierError: If source.table is not a safe table name
    """
    payload = envelope.payload
    try:
        op = Operation(payload.op)
    except ValueError:
        raise UnsupportedOperationError(f"Unsupported operation: {payload.op!r}") from None

    if op is Operation.CREATE:
        return build_insert(payload.table, payload.after)
    elif op is Operation.UPDATE:
        return build_update(payload.table, payload.before, payload.after)
    elif op is Operation.DELETE:
        return build_delete(payload.table, payload.before)
    elif op is Operation.READ:
        return None
    raise UnsupportedOperationError(f"Unsupported operation: {op!r}")


def apply_envelope(envelope: ChangeEnvelope, applier: ChangeApplier) -> int:
    """Build and apply the statement for one envelope; snapshot reads report 0 rows."""
    statement = build_statement(envelope)
    if statement is None:
        logger.debug("Ignoring snapshot read for table %s", envelope.payload.table)
        observe_apply(str(envelope.payload.table), "read", "skipped")
        return 0
    return applier.apply(statement)
