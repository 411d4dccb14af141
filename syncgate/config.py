from __future__ import annotations

import os
from dataclasses import dataclass


_TRUTHY = {"1", "true", "yes", "on"}


@dataclass
class PersisterConfig:
    uri: str
    checkpoints_table: str = "checkpoints"
    pool_size: int = 5
    max_overflow: int = 10
    mongo_transactions: bool = False

    def __post_init__(self) -> None:
        """Validate configuration parameters."""
        if not self.uri:
            raise ValueError("uri must be a non-empty connection string")
        if not self.checkpoints_table:
            raise ValueError("checkpoints_table cannot be empty")
        if self.pool_size <= 0:
            raise ValueError("pool_size must be > 0")
        if self.max_overflow < 0:
            raise ValueError("max_overflow must be >= 0")

    @classmethod
    def from_env(cls, prefix: str = "SYNCGATE_") -> "PersisterConfig":
        """
        Build a config from environment variables.

        Reads <prefix>DATABASE_URI (required), <prefix>CHECKPOINTS_TABLE,
        <prefix>POOL_SIZE, <prefix>MAX_OVERFLOW and <prefix>MONGO_TRANSACTIONS.
        """
        uri = os.environ.get(f"{prefix}DATABASE_URI", "")
        if not uri:
            raise ValueError(f"{prefix}DATABASE_URI is not set")

        kwargs: dict = {"uri": uri}
        table = os.environ.get(f"{prefix}CHECKPOINTS_TABLE")
        if table:
            kwargs["checkpoints_table"] = table
        pool_size = os.environ.get(f"{prefix}POOL_SIZE")
        if pool_size:
            kwargs["pool_size"] = int(pool_size)
        max_overflow = os.environ.get(f"{prefix}MAX_OVERFLOW")
        if max_overflow:
            kwargs["max_overflow"] = int(max_overflow)
        mongo_tx = os.environ.get(f"{prefix}MONGO_TRANSACTIONS")
        if mongo_tx:
            kwargs["mongo_transactions"] = mongo_tx.strip().lower() in _TRUTHY
        return cls(**kwargs)
