from __future__ import annotations

import functools
import logging
from typing import Callable

from ..metrics.registry import (
    BATCH_APPLY_LATENCY_SECONDS,
    BATCH_APPLY_TOTAL,
    CHECKPOINT_TOTAL,
    OPERATION_APPLY_TOTAL,
    OPERATION_SKIPPED_TOTAL,
)

logger = logging.getLogger(__name__)


def _never_raises(fn: Callable[..., None]) -> Callable[..., None]:
    # observe_* run in finally blocks; a metric error must not mask the write error
    @functools.wraps(fn)
    def wrapper(*args, **kwargs) -> None:
        try:
            fn(*args, **kwargs)
        except Exception:
            logger.debug("Failed to record metric %s", fn.__name__, exc_info=True)

    return wrapper


@_never_raises
def observe_batch(backend: str, status: str, latency_s: float) -> None:
    BATCH_APPLY_TOTAL.labels(backend=backend, status=status).inc()
    BATCH_APPLY_LATENCY_SECONDS.labels(backend=backend).observe(latency_s)


@_never_raises
def observe_operation(backend: str, op_type: str, status: str) -> None:
    OPERATION_APPLY_TOTAL.labels(backend=backend, op_type=op_type, status=status).inc()


@_never_raises
def observe_skipped(backend: str) -> None:
    OPERATION_SKIPPED_TOTAL.labels(backend=backend).inc()


@_never_raises
def observe_checkpoint(backend: str, status: str) -> None:
    CHECKPOINT_TOTAL.labels(backend=backend, status=status).inc()
