from __future__ import annotations

from unittest.mock import MagicMock

import pytest

from syncgate import factory
from syncgate.config import PersisterConfig
from syncgate.db.dialects import MSSQLDialect, MySQLDialect, PostgresDialect, SQLiteDialect
from syncgate.db.writer import SqlBatchPersister
from syncgate.documents.writer import DocumentPersister
from syncgate.errors import UnsupportedBackendError
from syncgate.factory import create_persister, resolve_sql_url


@pytest.mark.parametrize(
    "uri, drivername",
    [
        ("postgres://u:p@db:5432/app", "postgresql"),
        ("postgresql://u:p@db/app", "postgresql"),
        ("postgresql+psycopg2://u:p@db/app", "postgresql+psycopg2"),
        ("mysql://u:p@db:3306/app", "mysql+pymysql"),
        ("mysql+mysqldb://u:p@db/app", "mysql+mysqldb"),
        ("mssql://u:p@db:1433/app", "mssql+pymssql"),
        ("sqlite:///tmp/app.db", "sqlite"),
    ],
)
def test_resolve_sql_url_only_touches_scheme(uri: str, drivername: str) -> None:
    url = resolve_sql_url(uri)
    assert url.drivername == drivername


def test_resolve_sql_url_keeps_credentials() -> None:
    url = resolve_sql_url("postgres://user:secret@db:5432/app")
    assert (url.username, url.password, url.host, url.port, url.database) == (
        "user",
        "secret",
        "db",
        5432,
        "app",
    )


@pytest.mark.parametrize("uri", ["redis://localhost:6379/0", "not a uri", "oracle://u:p@db/x"])
def test_unknown_scheme_is_rejected(uri: str) -> None:
    with pytest.raises(UnsupportedBackendError):
        create_persister(uri)


def test_sqlite_persister(tmp_path) -> None:
    persister = create_persister(f"sqlite:///{tmp_path / 'app.db'}")
    try:
        assert isinstance(persister, SqlBatchPersister)
        assert isinstance(persister.dialect, SQLiteDialect)
        assert persister.checkpoints_table == "checkpoints"
    finally:
        persister.close()


@pytest.mark.parametrize(
    "uri, dialect_cls",
    [
        ("postgres://u:p@db/app", PostgresDialect),
        ("mysql://u:p@db/app", MySQLDialect),
        ("mssql://u:p@db/app", MSSQLDialect),
    ],
)
def test_sql_backends_are_selected_by_scheme(monkeypatch, uri: str, dialect_cls) -> None:
    fake_create_engine = MagicMock()
    monkeypatch.setattr(factory, "create_engine", fake_create_engine)

    config = PersisterConfig(uri=uri, checkpoints_table="sync_checkpoints", pool_size=3, max_overflow=1)
    persister = create_persister(config, echo=True)

    assert isinstance(persister, SqlBatchPersister)
    assert isinstance(persister.dialect, dialect_cls)
    assert persister.checkpoints_table == "sync_checkpoints"
    (url,), kwargs = fake_create_engine.call_args
    assert url.get_backend_name() == dialect_cls.name
    assert kwargs == {"pool_pre_ping": True, "pool_size": 3, "max_overflow": 1, "echo": True}


def test_mongodb_persister(monkeypatch) -> None:
    fake_client_cls = MagicMock()
    monkeypatch.setattr(factory, "MongoClient", fake_client_cls)
    schema = {"todos": {}}

    config = PersisterConfig(uri="mongodb://localhost:27017/app", mongo_transactions=True)
    persister = create_persister(config, schema=schema)

    assert isinstance(persister, DocumentPersister)
    fake_client_cls.assert_called_once_with("mongodb://localhost:27017/app")
    assert persister.schema is schema
    assert persister.use_transactions is True
    assert persister.checkpoints_collection == "checkpoints"


def test_mongodb_srv_scheme(monkeypatch) -> None:
    monkeypatch.setattr(factory, "MongoClient", MagicMock())
    assert isinstance(create_persister("mongodb+srv://cluster.example.net/app"), DocumentPersister)
