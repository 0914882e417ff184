from prometheus_client import Counter, Histogram

BULK_UPDATE_TOTAL = Counter(
    "casebatch_bulk_update_total",
    "Bulk UPDATE executions by outcome",
    ["table", "status"],
)

BULK_UPDATE_LATENCY_SECONDS = Histogram(
    "casebatch_bulk_update_latency_seconds",
    "Wall-clock time of a bulk UPDATE, compile and execute",
    ["table"],
)

BULK_UPDATE_ROWS_TOTAL = Counter(
    "casebatch_bulk_update_rows_total",
    "Update rows submitted to bulk UPDATE",
    ["table"],
)
