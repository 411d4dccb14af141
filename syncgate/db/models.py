from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Iterable, Mapping, Optional

from ..errors import InvalidOperation


ID_COLUMN = "id"


class OpType(str, Enum):
    PUT = "PUT"
    PATCH = "PATCH"
    DELETE = "DELETE"


@dataclass(frozen=True)
class Operation:
    """
    A single record-level change against one table/collection.

    `id` is the resolved row identifier: the explicit id if one was given,
    otherwise `data["id"]`. `data` is ignored for DELETE.

    Instances are validated on construction, so an Operation without a
    resolvable id or with a malformed payload cannot exist. `data` is
    left out of the hash; equal operations still hash equal.
    """
    op: OpType
    table: str
    id: Any
    data: Mapping[str, Any] = field(default_factory=dict, hash=False)

    def __post_init__(self) -> None:
        if not isinstance(self.op, OpType):
            raise InvalidOperation(f"unknown operation kind {self.op!r}")
        if not isinstance(self.table, str) or not self.table:
            raise InvalidOperation("table must be a non-empty string")
        if not isinstance(self.data, Mapping):
            raise InvalidOperation("data must be a mapping")
        for column in self.data:
            if not isinstance(column, str) or not column:
                raise InvalidOperation(f"invalid column name {column!r}")
        if self.id is None:
            raise InvalidOperation(f"{self.op.value} on {self.table!r} has no id")
        object.__setattr__(self, "data", dict(self.data))

    @classmethod
    def put(cls, table: str, data: Mapping[str, Any], id: Any = None) -> "Operation":
        return cls.from_dict({"op": OpType.PUT, "table": table, "id": id, "data": data})

    @classmethod
    def patch(cls, table: str, data: Mapping[str, Any], id: Any = None) -> "Operation":
        return cls.from_dict({"op": OpType.PATCH, "table": table, "id": id, "data": data})

    @classmethod
    def delete(cls, table: str, id: Any) -> "Operation":
        return cls.from_dict({"op": OpType.DELETE, "table": table, "id": id})

    @property
    def columns(self) -> list[str]:
        """Payload column names other than the id column, in payload order."""
        return [c for c in self.data if c != ID_COLUMN]

    @property
    def row(self) -> dict[str, Any]:
        """Payload with the id column set to the resolved id."""
        row = dict(self.data)
        row[ID_COLUMN] = self.id
        return row

    @classmethod
    def from_dict(cls, raw: Mapping[str, Any], index: Optional[int] = None) -> "Operation":
        """
        Validate one raw batch entry of the form
        {"op": "PUT"|"PATCH"|"DELETE", "table": str, "id"?: ..., "data"?: {...}}.

        Raises:
            InvalidOperation: if the entry cannot be applied as-is
        """
        if not isinstance(raw, Mapping):
            raise InvalidOperation("operation must be a mapping", index)

        op = _parse_op_type(raw.get("op"), index)

        table = raw.get("table")
        if not isinstance(table, str) or not table:
            raise InvalidOperation("table must be a non-empty string", index)

        data = raw.get("data")
        if data is None:
            if op is not OpType.DELETE:
                raise InvalidOperation(f"{op.value} requires a data mapping", index)
            data = {}
        elif not isinstance(data, Mapping):
            raise InvalidOperation("data must be a mapping", index)

        for column in data:
            if not isinstance(column, str) or not column:
                raise InvalidOperation(f"invalid column name {column!r}", index)

        id_value = raw.get("id")
        if id_value is None:
            id_value = data.get(ID_COLUMN)
        if id_value is None:
            raise InvalidOperation(f"{op.value} on {table!r} has no id", index)

        if op is OpType.DELETE:
            data = {}
        return cls(op=op, table=table, id=id_value, data=dict(data))


def _parse_op_type(value: Any, index: Optional[int]) -> OpType:
    if isinstance(value, OpType):
        return value
    if isinstance(value, str):
        try:
            return OpType(value.upper())
        except ValueError:
            pass
    raise InvalidOperation(f"unknown operation kind {value!r}", index)


def parse_batch(raw_ops: Iterable[Operation | Mapping[str, Any]]) -> list[Operation]:
    """
    Turn a decoded batch into Operations, preserving submission order.

    Every entry is validated before anything is returned, so an invalid entry
    rejects the whole batch before any storage call. Operation instances
    were already validated when they were built.
    """
    ops: list[Operation] = []
    for index, raw in enumerate(raw_ops):
        if isinstance(raw, Operation):
            ops.append(raw)
        else:
            ops.append(Operation.from_dict(raw, index))
    return ops


@dataclass
class BatchResult:
    """
    Outcome of an applied batch.

    rowcounts[i] is the number of rows/documents affected by operation i,
    or None when the operation was skipped.
    """
    rowcounts: list[Optional[int]] = field(default_factory=list)

    @property
    def applied(self) -> int:
        return sum(1 for rc in self.rowcounts if rc is not None)

    @property
    def skipped(self) -> int:
        return sum(1 for rc in self.rowcounts if rc is None)
