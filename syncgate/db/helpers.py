from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Mapping


@dataclass(frozen=True)
class Statement:
    """
    A SQL text with named bind parameters.

    Only sanitized identifiers are ever part of `sql`; every value travels
    in `params`.
    """
    sql: str
    params: Mapping[str, Any] = field(default_factory=dict)


def _check_identifier(name: str) -> None:
    if not isinstance(name, str):
        raise TypeError(f"identifier must be a string, got {type(name).__name__}")
    if not name:
        raise ValueError("identifier cannot be empty")
    if "\x00" in name:
        raise ValueError(f"identifier {name!r} contains a NUL character")


def _quote_qualified(name: str, quote: str) -> str:
    _check_identifier(name)
    parts = name.split(".")
    return ".".join(quote + p.replace(quote, quote * 2) + quote for p in parts)


def quote_double(name: str) -> str:
    """
    Quote an identifier for double-quote dialects (Postgres, SQLite).

    Embedded quotes are doubled and dots separate qualified parts:

        >>> quote_double('todos')
        '"todos"'
        >>> quote_double('public.todos')
        '"public"."todos"'
        >>> quote_double('we"ird')
        '"we""ird"'
    """
    return _quote_qualified(name, '"')


def quote_backtick(name: str) -> str:
    """Quote an identifier for MySQL; same rules as quote_double using backticks."""
    return _quote_qualified(name, "`")


def quote_bracket(name: str) -> str:
    """
    Quote an identifier for SQL Server.

    The whole name is wrapped in brackets and embedded `]` is doubled;
    dots are not treated as separators.
    """
    _check_identifier(name)
    return "[" + name.replace("]", "]]") + "]"


def bind_names(count: int, prefix: str = "p") -> list[str]:
    """Positional bind parameter names; column names are never used as bind names."""
    return [f"{prefix}{i}" for i in range(count)]
