from .dialects import Dialect, make_dialect
from .helpers import Statement, quote_backtick, quote_bracket, quote_double
from .models import BatchResult, Operation, OpType, parse_batch
from .session import DbSession
from .writer import Persister, SqlBatchPersister

__all__ = [
    "BatchResult",
    "DbSession",
    "Dialect",
    "Operation",
    "OpType",
    "Persister",
    "SqlBatchPersister",
    "Statement",
    "make_dialect",
    "parse_batch",
    "quote_backtick",
    "quote_bracket",
    "quote_double",
]
