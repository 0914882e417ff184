from __future__ import annotations

from casebatch.db.metrics import observe_bulk_update
from casebatch.metrics.registry import (
    BULK_UPDATE_LATENCY_SECONDS,
    BULK_UPDATE_ROWS_TOTAL,
    BULK_UPDATE_TOTAL,
)


def _histogram_count(table: str) -> int:
    for family in BULK_UPDATE_LATENCY_SECONDS.labels(table=table).collect():
        for sample in family.samples:
            if sample.name.endswith("_count"):
                return int(sample.value)
    return 0


class TestObserveBulkUpdate:
    """Tests for observe_bulk_update() function."""

    def test_increments_counter_with_correct_labels(self) -> None:
        before = BULK_UPDATE_TOTAL.labels(table="metrics_t1", status="success")._value.get()
        observe_bulk_update(table="metrics_t1", status="success", latency_s=0.1, row_count=3)
        after = BULK_UPDATE_TOTAL.labels(table="metrics_t1", status="success")._value.get()
        assert after == before + 1

    def test_records_latency(self) -> None:
        before = _histogram_count("metrics_t2")
        observe_bulk_update(table="metrics_t2", status="success", latency_s=0.25, row_count=1)
        assert _histogram_count("metrics_t2") == before + 1

    def test_counts_submitted_rows(self) -> None:
        before = BULK_UPDATE_ROWS_TOTAL.labels(table="metrics_t3")._value.get()
        observe_bulk_update(table="metrics_t3", status="error", latency_s=0.1, row_count=40)
        observe_bulk_update(table="metrics_t3", status="success", latency_s=0.1, row_count=2)
        assert BULK_UPDATE_ROWS_TOTAL.labels(table="metrics_t3")._value.get() == before + 42

    def test_error_status_tracked_separately(self) -> None:
        success = BULK_UPDATE_TOTAL.labels(table="metrics_t4", status="success")._value.get()
        observe_bulk_update(table="metrics_t4", status="error", latency_s=0.1, row_count=1)
        assert BULK_UPDATE_TOTAL.labels(table="metrics_t4", status="success")._value.get() == success
        assert BULK_UPDATE_TOTAL.labels(table="metrics_t4", status="error")._value.get() >= 1
