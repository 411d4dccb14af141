from __future__ import annotations

from prometheus_client import Counter, Histogram

# Labels are limited to low-cardinality values. Table names are caller-controlled
# and never appear as labels.

BATCH_APPLY_TOTAL = Counter(
    "syncgate_batch_apply_total",
    "Batches applied, by backend and outcome",
    ["backend", "status"],
)

BATCH_APPLY_LATENCY_SECONDS = Histogram(
    "syncgate_batch_apply_latency_seconds",
    "Wall time spent applying one batch",
    ["backend"],
)

OPERATION_APPLY_TOTAL = Counter(
    "syncgate_operation_apply_total",
    "Operations applied inside batches, by backend, kind and outcome",
    ["backend", "op_type", "status"],
)

OPERATION_SKIPPED_TOTAL = Counter(
    "syncgate_operation_skipped_total",
    "Operations skipped because their collection has no declared schema",
    ["backend"],
)

CHECKPOINT_TOTAL = Counter(
    "syncgate_checkpoint_total",
    "Checkpoint increments, by backend and outcome",
    ["backend", "status"],
)
