from .base import Dialect
from .mssql import MSSQLDialect
from .mysql import MySQLDialect
from .postgres import PostgresDialect
from .sqlite import SQLiteDialect


_DIALECTS: dict[str, type[Dialect]] = {
    "postgresql": PostgresDialect,
    "mysql": MySQLDialect,
    "mariadb": MySQLDialect,
    "mssql": MSSQLDialect,
    "sqlite": SQLiteDialect,
}


def make_dialect(name: str) -> Dialect:
    """
    Create the statement builder for a SQLAlchemy backend name
    (e.g. engine.dialect.name).
    """
    try:
        return _DIALECTS[name]()
    except KeyError:
        raise ValueError(f"Unknown SQL dialect: {name}") from None


__all__ = [
    "Dialect",
    "MSSQLDialect",
    "MySQLDialect",
    "PostgresDialect",
    "SQLiteDialect",
    "make_dialect",
]
