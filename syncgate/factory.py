from __future__ import annotations

import logging
from typing import Any, Optional

from pymongo import MongoClient
from sqlalchemy import create_engine
from sqlalchemy.engine import URL, make_url

from .config import PersisterConfig
from .db.dialects import make_dialect
from .db.writer import Persister, SqlBatchPersister
from .documents.schema import DocumentSchema
from .documents.writer import DocumentPersister
from .errors import UnsupportedBackendError

logger = logging.getLogger(__name__)

_MONGO_SCHEMES = ("mongodb", "mongodb+srv")

_BACKEND_ALIASES = {"postgres": "postgresql"}

# Drivers used when the URI names only the backend.
_DEFAULT_DRIVERS = {
    "mysql": "pymysql",
    "mariadb": "pymysql",
    "mssql": "pymssql",
}

_SQL_BACKENDS = ("postgresql", "mysql", "mariadb", "mssql", "sqlite")


def _scheme(uri: str) -> str:
    scheme, sep, _ = uri.partition("://")
    if not sep:
        raise UnsupportedBackendError("connection URI has no scheme")
    return scheme.lower()


def resolve_sql_url(uri: str) -> URL:
    """
    Turn a connection URI into the SQLAlchemy URL to connect with.

    Only the scheme is touched: `postgres` becomes `postgresql` and a bare
    `mysql`/`mssql` gets its default driver.
    """
    url = make_url(uri)
    backend = url.get_backend_name()
    backend = _BACKEND_ALIASES.get(backend, backend)
    if backend not in _SQL_BACKENDS:
        raise UnsupportedBackendError(f"unsupported backend {backend!r}")

    if "+" in url.drivername:
        driver = url.get_driver_name()
    else:
        driver = _DEFAULT_DRIVERS.get(backend)
    drivername = f"{backend}+{driver}" if driver else backend
    return url.set(drivername=drivername)


def create_persister(
    config: str | PersisterConfig,
    *,
    schema: Optional[DocumentSchema] = None,
    **engine_kwargs: Any,
) -> Persister:
    """
    Build the persister for the backend named by the URI scheme.

    The backend is chosen once here; callers only use the returned
    Persister's apply_batch / next_checkpoint / close.

    Args:
        config: connection URI or a PersisterConfig
        schema: document collection schema (MongoDB only)
        engine_kwargs: extra create_engine() arguments (SQL backends only)
    """
    if isinstance(config, str):
        config = PersisterConfig(uri=config)

    scheme = _scheme(config.uri)
    if scheme in _MONGO_SCHEMES:
        logger.debug("Using MongoDB persister")
        return DocumentPersister(
            MongoClient(config.uri),
            schema,
            checkpoints_collection=config.checkpoints_table,
            use_transactions=config.mongo_transactions,
        )

    url = resolve_sql_url(config.uri)
    kwargs: dict[str, Any] = {"pool_pre_ping": True}
    if url.get_backend_name() != "sqlite":
        kwargs["pool_size"] = config.pool_size
        kwargs["max_overflow"] = config.max_overflow
    kwargs.update(engine_kwargs)

    engine = create_engine(url, **kwargs)
    dialect = make_dialect(url.get_backend_name())
    logger.debug("Using %s persister", dialect.name)
    return SqlBatchPersister(engine, dialect, checkpoints_table=config.checkpoints_table)
