from __future__ import annotations

import logging
import time
from dataclasses import dataclass, field
from typing import Any, Iterable, Mapping, Optional

from bson.errors import BSONError
from pymongo import MongoClient, ReturnDocument
from pymongo.client_session import ClientSession
from pymongo.errors import PyMongoError

from ..db.metrics import observe_batch, observe_checkpoint, observe_operation, observe_skipped
from ..db.models import ID_COLUMN, BatchResult, Operation, OpType, parse_batch
from ..errors import (
    CheckpointError,
    CommitError,
    InvalidOperation,
    StatementExecutionError,
    UnknownTable,
)
from .schema import DEFAULT_SCHEMA, DocumentSchema, apply_schema

logger = logging.getLogger(__name__)

DEFAULT_DATABASE = "test"


@dataclass
class _Write:
    index: int
    op: Operation
    key: Any
    document: dict[str, Any] = field(default_factory=dict)


class DocumentPersister:
    """
    Applies operation batches to MongoDB collections.

    Only collections declared in `schema` are written; operations on any
    other collection are skipped with a warning. Documents are keyed by
    `_id = id`.

    Without `use_transactions` each operation is its own write: a failure
    stops the batch but earlier operations stay applied. With
    `use_transactions=True` the batch runs in one multi-document transaction,
    which needs a replica set or sharded cluster.
    """

    backend = "mongodb"

    def __init__(
        self,
        client: MongoClient,
        schema: Optional[DocumentSchema] = None,
        *,
        database: Optional[str] = None,
        checkpoints_collection: str = "checkpoints",
        use_transactions: bool = False,
    ) -> None:
        self.client = client
        # a URI without a database path falls back to "test", as the drivers do
        self.db = client[database] if database else client.get_default_database(DEFAULT_DATABASE)
        self.schema = DEFAULT_SCHEMA if schema is None else schema
        self.checkpoints_collection = checkpoints_collection
        self.use_transactions = use_transactions

    def ensure_indexes(self) -> None:
        """Create the unique (user_id, client_id) index the checkpoint upsert relies on."""
        self.db[self.checkpoints_collection].create_index(
            [("user_id", 1), ("client_id", 1)], unique=True
        )

    def table_schema(self, table: str) -> Mapping[str, Any]:
        """
        Raises:
            UnknownTable: if no schema is declared for `table`
        """
        try:
            return self.schema[table]
        except KeyError:
            raise UnknownTable(table) from None

    def _plan(self, batch: list[Operation]) -> list[Optional[_Write]]:
        writes: list[Optional[_Write]] = []
        for index, op in enumerate(batch):
            try:
                table_schema = self.table_schema(op.table)
            except UnknownTable as exc:
                logger.warning("Ignoring %s operation: %s", op.op.value, exc)
                writes.append(None)
                continue

            try:
                key = table_schema["_id"](op.id) if "_id" in table_schema else op.id
                payload = {k: v for k, v in op.data.items() if k != ID_COLUMN}
                if op.op is OpType.PUT:
                    document = apply_schema(table_schema, {"_id": op.id, **payload})
                    document["_id"] = key
                elif op.op is OpType.PATCH:
                    document = apply_schema(table_schema, payload)
                    document.pop("_id", None)
                else:
                    document = {}
            except (TypeError, ValueError, OverflowError) as exc:
                raise InvalidOperation(f"cannot coerce payload: {exc}", index) from exc

            writes.append(_Write(index, op, key, document))
        return writes

    def apply_batch(self, ops: Iterable[Operation | Mapping[str, Any]]) -> BatchResult:
        """
        Apply `ops` in order.

        Raises:
            InvalidOperation: before any write, if an entry is malformed
            StatementExecutionError: if a write failed
            CommitError: if the batch transaction could not be committed
        """
        batch = parse_batch(ops)
        writes = self._plan(batch)
        result = BatchResult()
        if not batch:
            return result

        start_time = time.monotonic()
        status = "success"
        try:
            if self.use_transactions:
                result.rowcounts = self._execute_in_transaction(writes, len(batch))
            else:
                result.rowcounts = self._execute(writes, None)
        except Exception:
            status = "error"
            raise
        finally:
            observe_batch(self.backend, status, time.monotonic() - start_time)

        return result

    def _execute_in_transaction(
        self, writes: list[Optional[_Write]], count: int
    ) -> list[Optional[int]]:
        try:
            with self.client.start_session() as session:
                with session.start_transaction():
                    return self._execute(writes, session)
        except (PyMongoError, BSONError) as exc:
            # write failures are already wrapped; this one came from commit
            raise CommitError(count) from exc

    def _execute(
        self, writes: list[Optional[_Write]], session: Optional[ClientSession]
    ) -> list[Optional[int]]:
        rowcounts: list[Optional[int]] = []
        for write in writes:
            if write is None:
                observe_skipped(self.backend)
                rowcounts.append(None)
                continue
            try:
                rowcounts.append(self._write_one(write, session))
            except (PyMongoError, BSONError) as exc:
                observe_operation(self.backend, write.op.op.value, "error")
                raise StatementExecutionError(write.index, write.op) from exc
            observe_operation(self.backend, write.op.op.value, "success")
        return rowcounts

    def _write_one(self, write: _Write, session: Optional[ClientSession]) -> int:
        collection = self.db[write.op.table]
        query = {"_id": write.key}

        if write.op.op is OpType.PUT:
            res = collection.replace_one(query, write.document, upsert=True, session=session)
            return res.matched_count + (1 if res.upserted_id is not None else 0)

        if write.op.op is OpType.PATCH:
            if not write.document:
                return 0  # nothing to set
            res = collection.update_one(query, {"$set": write.document}, session=session)
            return res.matched_count

        res = collection.delete_one(query, session=session)
        return res.deleted_count

    def next_checkpoint(self, user_id: str, client_id: str) -> int:
        """Atomically $inc the checkpoint for (user_id, client_id), creating it at 1."""
        status = "success"
        try:
            doc = self.db[self.checkpoints_collection].find_one_and_update(
                {"user_id": user_id, "client_id": client_id},
                {"$inc": {"checkpoint": 1}},
                upsert=True,
                return_document=ReturnDocument.AFTER,
            )
            if doc is None or doc.get("checkpoint") is None:
                raise CheckpointError(
                    f"no checkpoint returned for user {user_id!r}, client {client_id!r}"
                )
        except Exception:
            status = "error"
            raise
        finally:
            observe_checkpoint(self.backend, status)

        return int(doc["checkpoint"])

    def close(self) -> None:
        self.client.close()
