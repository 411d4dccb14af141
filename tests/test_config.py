from __future__ import annotations

import pytest

from syncgate.config import PersisterConfig


def test_defaults() -> None:
    config = PersisterConfig(uri="sqlite://")
    assert config.checkpoints_table == "checkpoints"
    assert config.mongo_transactions is False


@pytest.mark.parametrize(
    "kwargs",
    [
        {"uri": ""},
        {"uri": "sqlite://", "checkpoints_table": ""},
        {"uri": "sqlite://", "pool_size": 0},
        {"uri": "sqlite://", "max_overflow": -1},
    ],
)
def test_invalid_values_are_rejected(kwargs) -> None:
    with pytest.raises(ValueError):
        PersisterConfig(**kwargs)


def test_from_env(monkeypatch) -> None:
    monkeypatch.setenv("SYNCGATE_DATABASE_URI", "mysql://u:p@db/app")
    monkeypatch.setenv("SYNCGATE_CHECKPOINTS_TABLE", "cp")
    monkeypatch.setenv("SYNCGATE_POOL_SIZE", "8")
    monkeypatch.setenv("SYNCGATE_MONGO_TRANSACTIONS", "true")

    config = PersisterConfig.from_env()

    assert config.uri == "mysql://u:p@db/app"
    assert config.checkpoints_table == "cp"
    assert config.pool_size == 8
    assert config.max_overflow == 10
    assert config.mongo_transactions is True


def test_from_env_requires_uri(monkeypatch) -> None:
    monkeypatch.delenv("SYNCGATE_DATABASE_URI", raising=False)
    with pytest.raises(ValueError, match="SYNCGATE_DATABASE_URI"):
        PersisterConfig.from_env()
