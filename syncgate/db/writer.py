from __future__ import annotations

import logging
import time
from typing import Any, Iterable, Mapping, Optional, Protocol

from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError

from ..errors import CheckpointError, CommitError, StatementExecutionError
from .dialects import Dialect, make_dialect
from .metrics import observe_batch, observe_checkpoint, observe_operation
from .models import BatchResult, Operation, parse_batch
from .session import DbSession

logger = logging.getLogger(__name__)


class Persister(Protocol):
    """
    The two operations the request layer calls, whatever the backend.
    """

    def apply_batch(self, ops: Iterable[Operation | Mapping[str, Any]]) -> BatchResult:
        """Apply an ordered batch of operations."""
        ...

    def next_checkpoint(self, user_id: str, client_id: str) -> int:
        """Atomically advance and return the checkpoint for (user_id, client_id)."""
        ...

    def close(self) -> None:
        """Release pooled connections / clients."""
        ...


class SqlBatchPersister:
    """
    Applies operation batches to a relational database as one transaction.

    Each batch runs on one pooled connection inside one DbSession: operations
    are applied strictly in order, the first failure rolls everything back and
    is raised as StatementExecutionError chained to the driver error.

    Usage:
        persister = SqlBatchPersister(create_engine("mysql+pymysql://..."))
        persister.apply_batch([
            {"op": "PUT", "table": "todos", "id": "t1", "data": {"description": "milk"}},
        ])
        checkpoint = persister.next_checkpoint("u1", "c1")
    """

    def __init__(
        self,
        engine: Engine,
        dialect: Optional[Dialect] = None,
        *,
        checkpoints_table: str = "checkpoints",
    ) -> None:
        self.engine = engine
        self.dialect = dialect or make_dialect(engine.dialect.name)
        self.checkpoints_table = checkpoints_table

    @property
    def backend(self) -> str:
        return self.dialect.name

    def apply_batch(self, ops: Iterable[Operation | Mapping[str, Any]]) -> BatchResult:
        """
        Apply `ops` all-or-nothing.

        Raises:
            InvalidOperation: before any I/O, if an entry is malformed
            ConnectionAcquisitionError: if no connection could be obtained
            StatementExecutionError: if a statement failed; nothing was committed
            CommitError: if every statement ran but COMMIT failed
        """
        batch = parse_batch(ops)
        result = BatchResult()
        if not batch:
            return result

        start_time = time.monotonic()
        status = "success"
        try:
            with DbSession(self.engine) as session:
                for index, op in enumerate(batch):
                    result.rowcounts.append(self._apply_one(session, index, op))
        except SQLAlchemyError as exc:
            # statement failures are already wrapped; this one came from session exit
            status = "error"
            raise CommitError(len(batch)) from exc
        except Exception:
            status = "error"
            raise
        finally:
            observe_batch(self.backend, status, time.monotonic() - start_time)

        logger.debug(
            "Applied batch of %d operations to %s", len(batch), self.backend
        )
        return result

    def _apply_one(self, session: DbSession, index: int, op: Operation) -> int:
        rowcount = 0
        try:
            for stmt in self.dialect.build(op):
                rowcount += session.execute(stmt.sql, stmt.params)
        except Exception as exc:
            observe_operation(self.backend, op.op.value, "error")
            raise StatementExecutionError(index, op) from exc

        observe_operation(self.backend, op.op.value, "success")
        return rowcount

    def next_checkpoint(self, user_id: str, client_id: str) -> int:
        """
        Increment the checkpoint for (user_id, client_id), creating it at 1.

        The increment happens inside the engine's upsert, never as a separate
        read then write, so concurrent callers always get distinct values.

        Raises:
            CheckpointError: if the engine failed or did not return a value
        """
        statements = self.dialect.checkpoint(self.checkpoints_table, user_id, client_id)
        status = "success"
        try:
            with DbSession(self.engine) as session:
                for stmt in statements[:-1]:
                    session.execute(stmt.sql, stmt.params)
                last = statements[-1]
                value = session.execute_scalar(last.sql, last.params)
                if value is None:
                    raise CheckpointError(
                        f"no checkpoint returned for user {user_id!r}, client {client_id!r}"
                    )
        except SQLAlchemyError as exc:
            status = "error"
            raise CheckpointError(
                f"could not advance checkpoint for user {user_id!r}, client {client_id!r}"
            ) from exc
        except Exception:
            status = "error"
            raise
        finally:
            observe_checkpoint(self.backend, status)

        return int(value)

    def close(self) -> None:
        self.engine.dispose()
