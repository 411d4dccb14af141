from __future__ import annotations

from ..helpers import Statement, bind_names, quote_bracket
from ..models import ID_COLUMN, Operation
from .base import Dialect


class MSSQLDialect(Dialect):
    name = "mssql"

    def quote_identifier(self, name: str) -> str:
        return quote_bracket(name)

    def put(self, op: Operation) -> list[Statement]:
        table = self.quote(op.table)
        row = op.row
        names = bind_names(len(row))
        quoted = [self.quote(c) for c in row]
        id_col = self.quote(ID_COLUMN)

        columns = ", ".join(quoted)
        source_values = ", ".join(f":{n}" for n in names)
        source_columns = ", ".join(f"source.{c}" for c in quoted)

        clauses = [
            f"MERGE INTO {table} WITH (HOLDLOCK) AS target",
            f"USING (SELECT {source_values}) AS source ({columns})",
            f"ON target.{id_col} = source.{id_col}",
        ]
        updates = [f"{self.quote(c)} = source.{self.quote(c)}" for c in op.columns]
        if updates:
            clauses.append(f"WHEN MATCHED THEN UPDATE SET {', '.join(updates)}")
        clauses.append(f"WHEN NOT MATCHED THEN INSERT ({columns}) VALUES ({source_columns});")

        return [Statement(" ".join(clauses), dict(zip(names, row.values())))]

    def checkpoint(self, table: str, user_id: str, client_id: str) -> list[Statement]:
        sql = (
            f"MERGE INTO {self.quote(table)} WITH (HOLDLOCK) AS target "
            "USING (SELECT :user_id AS user_id, :client_id AS client_id) AS source "
            "ON target.user_id = source.user_id AND target.client_id = source.client_id "
            "WHEN MATCHED THEN UPDATE SET target.checkpoint = target.checkpoint + 1 "
            "WHEN NOT MATCHED THEN INSERT (user_id, client_id, checkpoint) "
            "VALUES (source.user_id, source.client_id, 1) "
            "OUTPUT INSERTED.checkpoint;"
        )
        return [Statement(sql, {"user_id": user_id, "client_id": client_id})]
