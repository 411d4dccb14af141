from __future__ import annotations

from typing import Any

from sqlalchemy.engine import Engine

from syncgate.db.session import DbSession


TODOS_SCHEMA = """
    id TEXT NOT NULL PRIMARY KEY,
    description TEXT NULL,
    completed BOOLEAN NULL,
    list_id TEXT NULL
"""

CHECKPOINTS_SCHEMA = """
    user_id TEXT NOT NULL,
    client_id TEXT NOT NULL,
    checkpoint INTEGER NOT NULL,
    PRIMARY KEY (user_id, client_id)
"""


def fetch_row(engine: Engine, table: str, id_value: Any) -> dict[str, Any] | None:
    with DbSession(engine) as session:
        return session.fetch_one(f'SELECT * FROM "{table}" WHERE id = :id', {"id": id_value})


def count_rows(engine: Engine, table: str) -> int:
    with DbSession(engine) as session:
        return session.execute_scalar(f'SELECT COUNT(*) FROM "{table}"')
