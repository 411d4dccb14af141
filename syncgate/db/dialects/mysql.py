from __future__ import annotations

from ..helpers import Statement, bind_names, quote_backtick
from ..models import ID_COLUMN, Operation
from .base import Dialect


class MySQLDialect(Dialect):
    name = "mysql"

    def quote_identifier(self, name: str) -> str:
        return quote_backtick(name)

    def put(self, op: Operation) -> list[Statement]:
        table = self.quote(op.table)
        row = op.row
        names = bind_names(len(row))

        columns = ", ".join(self.quote(c) for c in row)
        placeholders = ", ".join(f":{n}" for n in names)
        updates = [f"{self.quote(c)} = VALUES({self.quote(c)})" for c in op.columns]
        if not updates:
            # keep the existing row untouched instead of failing on the duplicate
            id_col = self.quote(ID_COLUMN)
            updates = [f"{id_col} = {id_col}"]

        sql = (
            f"INSERT INTO {table} ({columns}) VALUES ({placeholders}) "
            f"ON DUPLICATE KEY UPDATE {', '.join(updates)}"
        )
        return [Statement(sql, dict(zip(names, row.values())))]

    def checkpoint(self, table: str, user_id: str, client_id: str) -> list[Statement]:
        # LAST_INSERT_ID(expr) is connection-scoped, so the SELECT must run
        # on the same connection as the upsert.
        upsert = Statement(
            f"INSERT INTO {self.quote(table)} (user_id, client_id, checkpoint) "
            "VALUES (:user_id, :client_id, LAST_INSERT_ID(1)) "
            "ON DUPLICATE KEY UPDATE checkpoint = LAST_INSERT_ID(checkpoint + 1)",
            {"user_id": user_id, "client_id": client_id},
        )
        return [upsert, Statement("SELECT LAST_INSERT_ID()")]
