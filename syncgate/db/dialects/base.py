from __future__ import annotations

from abc import ABC, abstractmethod

from ..helpers import Statement
from ..models import ID_COLUMN, Operation, OpType


def escape_bind_markers(sql_fragment: str) -> str:
    """
    Escape colons so SQLAlchemy's text() never reads part of an identifier
    as a `:name` bind parameter.
    """
    return sql_fragment.replace(":", "\\:")


class Dialect(ABC):
    """
    Abstract base for relational statement builders.

    A dialect only renders SQL; executing it is the writer's job. Table and
    column names pass through `quote`, values are always bound.
    """

    name: str = ""

    @abstractmethod
    def quote_identifier(self, name: str) -> str:
        """Quote a raw identifier according to the engine's rules."""
        ...

    def quote(self, name: str) -> str:
        """Quoted identifier that is safe to embed in a text() statement."""
        return escape_bind_markers(self.quote_identifier(name))

    def build(self, op: Operation) -> list[Statement]:
        if op.op is OpType.PUT:
            return self.put(op)
        if op.op is OpType.PATCH:
            return self.patch(op)
        if op.op is OpType.DELETE:
            return self.delete(op)
        raise ValueError(f"Unsupported operation type: {op.op}")

    @abstractmethod
    def put(self, op: Operation) -> list[Statement]:
        """Insert-or-update keyed by id."""
        ...

    def patch(self, op: Operation) -> list[Statement]:
        cols = op.columns
        if not cols:
            return []  # nothing to update

        table = self.quote(op.table)
        assignments = []
        params: dict = {"id_value": op.id}
        for i, col in enumerate(cols):
            assignments.append(f"{self.quote(col)} = :p{i}")
            params[f"p{i}"] = op.data[col]

        sql = (
            f"UPDATE {table} SET {', '.join(assignments)} "
            f"WHERE {self.quote(ID_COLUMN)} = :id_value"
        )
        return [Statement(sql, params)]

    def delete(self, op: Operation) -> list[Statement]:
        sql = f"DELETE FROM {self.quote(op.table)} WHERE {self.quote(ID_COLUMN)} = :id_value"
        return [Statement(sql, {"id_value": op.id})]

    @abstractmethod
    def checkpoint(self, table: str, user_id: str, client_id: str) -> list[Statement]:
        """
        Statements that atomically advance the (user_id, client_id) counter.

        The last statement must return the new value as a single scalar.
        """
        ...
