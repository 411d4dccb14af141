from __future__ import annotations

from ..helpers import Statement, bind_names, quote_double
from ..models import ID_COLUMN, Operation
from .base import Dialect


class SQLiteDialect(Dialect):
    """SQLite upserts (3.24+) and RETURNING (3.35+)."""

    name = "sqlite"

    def quote_identifier(self, name: str) -> str:
        return quote_double(name)

    def put(self, op: Operation) -> list[Statement]:
        table = self.quote(op.table)
        row = op.row
        names = bind_names(len(row))

        columns = ", ".join(self.quote(c) for c in row)
        placeholders = ", ".join(f":{n}" for n in names)
        updates = [f"{self.quote(c)} = excluded.{self.quote(c)}" for c in op.columns]
        conflict = f"DO UPDATE SET {', '.join(updates)}" if updates else "DO NOTHING"

        sql = (
            f"INSERT INTO {table} ({columns}) VALUES ({placeholders}) "
            f"ON CONFLICT ({self.quote(ID_COLUMN)}) {conflict}"
        )
        return [Statement(sql, dict(zip(names, row.values())))]

    def checkpoint(self, table: str, user_id: str, client_id: str) -> list[Statement]:
        sql = (
            f"INSERT INTO {self.quote(table)} (user_id, client_id, checkpoint) "
            "VALUES (:user_id, :client_id, 1) "
            "ON CONFLICT (user_id, client_id) "
            "DO UPDATE SET checkpoint = checkpoint + 1 "
            "RETURNING checkpoint"
        )
        return [Statement(sql, {"user_id": user_id, "client_id": client_id})]
