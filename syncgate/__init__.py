from .config import PersisterConfig
from .db.models import BatchResult, Operation, OpType, parse_batch
from .db.writer import Persister, SqlBatchPersister
from .documents.writer import DocumentPersister
from .errors import (
    CheckpointError,
    CommitError,
    ConnectionAcquisitionError,
    InvalidOperation,
    StatementExecutionError,
    SyncGateError,
    UnknownTable,
    UnsupportedBackendError,
)
from .factory import create_persister

__all__ = [
    "BatchResult",
    "CheckpointError",
    "CommitError",
    "ConnectionAcquisitionError",
    "DocumentPersister",
    "InvalidOperation",
    "Operation",
    "OpType",
    "Persister",
    "PersisterConfig",
    "SqlBatchPersister",
    "StatementExecutionError",
    "SyncGateError",
    "UnknownTable",
    "UnsupportedBackendError",
    "create_persister",
    "parse_batch",
]
