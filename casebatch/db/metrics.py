from __future__ import annotations

from ..metrics.registry import (
    BULK_UPDATE_LATENCY_SECONDS,
    BULK_UPDATE_ROWS_TOTAL,
    BULK_UPDATE_TOTAL,
)


def observe_bulk_update(table: str, status: str, latency_s: float, row_count: int) -> None:
    """
    Record one bulk update attempt.

    status is "success" or "error". Rows are counted for every attempt,
    including failed ones.
    """
    BULK_UPDATE_TOTAL.labels(table=table, status=status).inc()
    BULK_UPDATE_LATENCY_SECONDS.labels(table=table).observe(latency_s)
    if row_count:
        BULK_UPDATE_ROWS_TOTAL.labels(table=table).inc(row_count)
