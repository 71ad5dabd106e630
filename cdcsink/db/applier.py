from __future__ import annotations

import logging
import time

from ..errors import ExecutionError
from .metrics import observe_apply
from .session import StatementExecutor
from .statements import Statement

logger = logging.getLogger(__name__)


class ChangeApplier:
    """
    Executes built statements against the target database.

    Does not retry and does not swallow failures: anything raised by the
    executor surfaces as ExecutionError. A zero rows-affected result is
    returned as-is; deciding how loudly to report it is up to the caller.
    """

    def __init__(self, executor: StatementExecutor) -> None:
        self.executor = executor

    def apply(self, statement: Statement) -> int:
        """
        Run the statement and return the number of rows it affected.

        Raises:
            ExecutionError: If the database reports a failure
        """
        op = statement.operation.name.lower()
        start_time = time.monotonic()
        status = "success"

        logger.debug("Executing %s on %s: %s", op, statement.table, statement.sql)
        try:
            rows_affected = self.executor.execute(statement.sql, statement.args)
        except Exception as exc:
            status = "error"
            raise ExecutionError(f"{op} on {statement.table} failed: {exc}") from exc
        else:
            if rows_affected == 0:
                status = "no_change"
            return rows_affected
        finally:
            observe_apply(statement.table, op, status, time.monotonic() - start_time)
