from __future__ import annotations

from typing import Any


class SyncGateError(Exception):
    """Base exception for syncgate errors."""


class InvalidOperation(SyncGateError):
    """A batch entry cannot be turned into an applicable operation."""

    def __init__(self, message: str, index: int | None = None) -> None:
        if index is not None:
            message = f"operation #{index}: {message}"
        super().__init__(message)
        self.index = index


class UnknownTable(SyncGateError):
    """The target collection has no declared schema."""

    def __init__(self, table: str) -> None:
        super().__init__(f"no schema declared for table {table!r}")
        self.table = table


class StatementExecutionError(SyncGateError):
    """A storage call failed while applying a batch; the batch was rolled back."""

    def __init__(self, index: int, operation: Any) -> None:
        super().__init__(
            f"operation #{index} ({operation.op.value} on {operation.table!r}) failed"
        )
        self.index = index
        self.operation = operation


class CommitError(StatementExecutionError):
    """
    Every operation ran but the transaction could not be committed
    (deferred constraint, serialization failure, connection lost at COMMIT).
    Nothing from the batch was applied; `index` and `operation` are None.
    """

    def __init__(self, count: int) -> None:
        SyncGateError.__init__(self, f"commit of a batch of {count} operations failed")
        self.index = None
        self.operation = None
        self.count = count


class ConnectionAcquisitionError(SyncGateError):
    """No connection could be obtained from the pool or driver."""


class CheckpointError(SyncGateError):
    """The checkpoint counter could not be advanced."""


class UnsupportedBackendError(SyncGateError):
    """The connection URI scheme does not map to a known backend."""
