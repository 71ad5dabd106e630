from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from typing import Any, Mapping, Optional

from ..envelope.models import Operation
from ..errors import InvalidIdentifierError, MissingFieldSetError

logger = logging.getLogger(__name__)

_IDENTIFIER_PART = re.compile(r"^[A-Za-z_][A-Za-z0-9_$]*$")
_MAX_IDENTIFIER_LENGTH = 63


@dataclass(frozen=True)
class Statement:
    """
    A single DML statement with positional ($1..$N) parameters.

    `args[i]` binds to placeholder `$i+1`.
    """
    sql: str
    args: tuple[Any, ...]
    table: str
    operation: Operation


def validate_table_name(name: Any) -> str:
    """
    Validate a table name taken from a change event before it is interpolated.

    Accepts `table` or `schema.table`. Each part must start with a letter or
    underscore and contain only letters, digits, underscores and dollar signs.

    ⚠️ SECURITY CONTRACT ⚠️
    Table names arrive from the event stream, so they are untrusted. Only names
    that pass this allow-list reach SQL text; anything else is rejected rather
    than escaped.

    Args:
        name: Value of `source.table`

    Returns:
        The validated name (unchanged)

    Raises:
        InvalidIdentifierError: If the name is missing or not a plain identifier

    Example:
        >>> validate_table_name("public.orders")
        'public.orders'
        >>> validate_table_name("t; DROP TABLE t--")
        InvalidIdentifierError: Invalid table 't; DROP TABLE t--': ...
    """
    if not isinstance(name, str) or not name:
        raise InvalidIdentifierError(f"table must be a non-empty string, got {name!r}")

    parts = name.split(".")
    if len(parts) > 2:
        raise InvalidIdentifierError(
            f"Invalid table {name!r}: at most one schema qualifier is allowed"
        )
    for part in parts:
        if not _IDENTIFIER_PART.match(part):
            raise InvalidIdentifierError(
                f"Invalid table {name!r}: "
                "each part must start with letter/underscore and contain only "
                "alphanumeric characters, underscores and dollar signs"
            )
        if len(part) > _MAX_IDENTIFIER_LENGTH:
            raise InvalidIdentifierError(
                f"Invalid table {name!r}: {part!r} exceeds {_MAX_IDENTIFIER_LENGTH} characters"
            )
    return name


def quote_identifier(name: str) -> str:
    """Quote a column name as a delimited SQL identifier."""
    return '"' + str(name).replace('"', '""') + '"'


def _placeholders(start: int, count: int) -> str:
    return ",".join(f"${i}" for i in range(start, start + count))


def _require(field_set: Optional[Mapping[str, Any]], name: str, op: Operation) -> Mapping[str, Any]:
    if field_set is None:
        raise MissingFieldSetError(f"Payload.{name} is nil for operation {op.name.lower()}")
    if not field_set:
        raise MissingFieldSetError(f"Payload.{name} is empty for operation {op.name.lower()}")
    return field_set


def build_insert(table: Any, after: Optional[Mapping[str, Any]]) -> Statement:
    """
    Build `INSERT INTO <table>(<cols>) VALUES ($1..$N)` from the after image.

    Columns are sorted once; the column list, placeholders and arguments all
    follow that single order.
    """
    after = _require(after, "After", Operation.CREATE)
    table = validate_table_name(table)

    columns = sorted(after)
    args = tuple(after[c] for c in columns)
    for column, value in zip(columns, args):
        logger.debug("CDC value used: op=insert field=%s value=%r", column, value)

    sql = "INSERT INTO %s(%s) VALUES (%s)" % (
        table,
        ",".join(quote_identifier(c) for c in columns),
        _placeholders(1, len(columns)),
    )
    return Statement(sql=sql, args=args, table=table, operation=Operation.CREATE)


def build_update(
    table: Any,
    before: Optional[Mapping[str, Any]],
    after: Optional[Mapping[str, Any]],
) -> Statement:
    """
    Build `UPDATE <table> SET (<cols>)=($N+1..$2N) WHERE (<cols>)=($1..$N)`.

    The column order comes from the before image. Arguments are the before
    values followed by the after values in that same order. A column missing
    from the after image binds NULL; columns only present in the after image
    are not written.
    """
    before = _require(before, "Before", Operation.UPDATE)
    after = _require(after, "After", Operation.UPDATE)
    table = validate_table_name(table)

    columns = sorted(before)
    old_args = []
    new_args = []
    for column in columns:
        old_value = before[column]
        new_value = after.get(column)
        logger.debug(
            "CDC value used: op=update field=%s oldvalue=%r newvalue=%r",
            column,
            old_value,
            new_value,
        )
        old_args.append(old_value)
        new_args.append(new_value)

    n = len(columns)
    col_list = ",".join(quote_identifier(c) for c in columns)
    sql = "UPDATE %s SET (%s)=(%s) WHERE (%s)=(%s)" % (
        table,
        col_list,
        _placeholders(n + 1, n),
        col_list,
        _placeholders(1, n),
    )
    return Statement(
        sql=sql,
        args=tuple(old_args + new_args),
        table=table,
        operation=Operation.UPDATE,
    )


def build_delete(table: Any, before: Optional[Mapping[str, Any]]) -> Statement:
    """Build `DELETE FROM <table> WHERE (<cols>)=($1..$N)` from the before image."""
    before = _require(before, "Before", Operation.DELETE)
    table = validate_table_name(table)

    columns = sorted(before)
    args = tuple(before[c] for c in columns)
    for column, value in zip(columns, args):
        logger.debug("CDC value used: op=delete field=%s oldvalue=%r", column, value)

    sql = "DELETE FROM %s WHERE (%s)=(%s)" % (
        table,
        ",".join(quote_identifier(c) for c in columns),
        _placeholders(1, len(columns)),
    )
    return Statement(sql=sql, args=args, table=table, operation=Operation.DELETE)
