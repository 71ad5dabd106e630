from .applier import ChangeApplier
from .engine import connect
from .session import DbSession, StatementExecutor
from .statements import (
    Statement,
    build_delete,
    build_insert,
    build_update,
    quote_identifier,
    validate_table_name,
)

__all__ = [
    "ChangeApplier",
    "DbSession",
    "Statement",
    "StatementExecutor",
    "build_delete",
    "build_insert",
    "build_update",
    "connect",
    "quote_identifier",
    "validate_table_name",
]
