"""Metrics instrumentation."""

from __future__ import annotations

from prometheus_client import Counter, Gauge

mutations_total = Counter(
    "saleslog_mutations_total",
    "Store mutations applied",
    ["collection", "op"],
)
persist_failures_total = Counter(
    "saleslog_persist_failures_total",
    "Writes to the storage backend that failed",
    ["key"],
)
sales_total_amount = Gauge(
    "saleslog_sales_total_amount",
    "Sum of price * quantity over current sale records",
)


def inc_mutation(collection: str, op: str) -> None:
    mutations_total.labels(collection=collection, op=op).inc()


def inc_persist_failure(key: str) -> None:
    persist_failures_total.labels(key=key).inc()


def set_sales_total(amount: float) -> None:
    sales_total_amount.set(amount)
