from __future__ import annotations

import json

from ..helpers import Statement, quote_double
from ..models import ID_COLUMN, Operation
from .base import Dialect


class PostgresDialect(Dialect):
    """
    Postgres statements.

    Rows are sent as a single JSON parameter and expanded with
    json_populate_record, so every value is cast to the column's declared
    type by the server.
    """

    name = "postgresql"

    def quote_identifier(self, name: str) -> str:
        return quote_double(name)

    def _data_row(self, table: str, row: dict) -> tuple[str, dict]:
        cte = (
            "WITH data_row AS ("
            f"SELECT (json_populate_record(NULL::{table}, CAST(:row AS json))).*"
            ")"
        )
        return cte, {"row": json.dumps(row, default=str)}

    def put(self, op: Operation) -> list[Statement]:
        table = self.quote(op.table)
        row = op.row
        cte, params = self._data_row(table, row)

        columns = ", ".join(self.quote(c) for c in row)
        updates = [f"{self.quote(c)} = EXCLUDED.{self.quote(c)}" for c in op.columns]
        if updates:
            conflict = f"DO UPDATE SET {', '.join(updates)}"
        else:
            conflict = "DO NOTHING"

        sql = (
            f"{cte} INSERT INTO {table} ({columns}) "
            f"SELECT {columns} FROM data_row "
            f"ON CONFLICT ({self.quote(ID_COLUMN)}) {conflict}"
        )
        return [Statement(sql, params)]

    def patch(self, op: Operation) -> list[Statement]:
        cols = op.columns
        if not cols:
            return []

        table = self.quote(op.table)
        id_col = self.quote(ID_COLUMN)
        cte, params = self._data_row(table, op.row)
        assignments = ", ".join(f"{self.quote(c)} = data_row.{self.quote(c)}" for c in cols)

        sql = (
            f"{cte} UPDATE {table} SET {assignments} "
            f"FROM data_row WHERE {table}.{id_col} = data_row.{id_col}"
        )
        return [Statement(sql, params)]

    def delete(self, op: Operation) -> list[Statement]:
        table = self.quote(op.table)
        id_col = self.quote(ID_COLUMN)
        cte, params = self._data_row(table, {ID_COLUMN: op.id})

        sql = (
            f"{cte} DELETE FROM {table} USING data_row "
            f"WHERE {table}.{id_col} = data_row.{id_col}"
        )
        return [Statement(sql, params)]

    def checkpoint(self, table: str, user_id: str, client_id: str) -> list[Statement]:
        sql = (
            f"INSERT INTO {self.quote(table)} AS c (user_id, client_id, checkpoint) "
            "VALUES (:user_id, :client_id, 1) "
            "ON CONFLICT (user_id, client_id) "
            "DO UPDATE SET checkpoint = c.checkpoint + 1 "
            "RETURNING checkpoint"
        )
        return [Statement(sql, {"user_id": user_id, "client_id": client_id})]
