"""
Field coercion for document collections.

A schema maps collection name -> {field name -> converter}. Only declared
collections are writable and only declared fields are written.
"""
from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Callable, Mapping

Converter = Callable[[Any], Any]
DocumentSchema = Mapping[str, Mapping[str, Converter]]

_FALSY_STRINGS = {"", "0", "false", "no", "off"}


def string(value: Any) -> str:
    return str(value)


def boolean(value: Any) -> bool:
    if isinstance(value, str):
        return value.strip().lower() not in _FALSY_STRINGS
    return bool(value)


def number(value: Any) -> int | float:
    if isinstance(value, bool):
        return int(value)
    if isinstance(value, (int, float)):
        return value
    text = str(value).strip()
    try:
        return int(text)
    except ValueError:
        return float(text)


def date(value: Any) -> datetime:
    """
    Parse a date. Numbers are epoch milliseconds; strings are ISO-8601
    (a trailing "Z" is accepted).
    """
    if isinstance(value, datetime):
        return value
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return datetime.fromtimestamp(value / 1000, tz=timezone.utc)
    text = str(value).strip()
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    return datetime.fromisoformat(text)


DEFAULT_SCHEMA: DocumentSchema = {
    "counter": {
        "_id": string,
        "user_id": string,
        "count": number,
    },
}


def apply_schema(table_schema: Mapping[str, Converter], data: Mapping[str, Any]) -> dict[str, Any]:
    """
    Coerce `data` through `table_schema`.

    Declared fields absent from `data` are left out, explicit None stays
    None, everything else goes through its converter. Undeclared fields are
    dropped.

        >>> apply_schema({"count": number, "note": string}, {"count": "3", "note": None, "x": 1})
        {'count': 3, 'note': None}
    """
    converted: dict[str, Any] = {}
    for key, converter in table_schema.items():
        if key not in data:
            continue
        raw = data[key]
        converted[key] = None if raw is None else converter(raw)
    return converted
