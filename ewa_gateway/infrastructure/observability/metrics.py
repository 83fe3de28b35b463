"""Prometheus metrics for monitoring advances, voucher sales and backend health"""

from prometheus_client import Counter, Histogram

# Advance metrics
advance_counter = Counter(
    "ewa_advance_total",
    "Advance workflows finished",
    ["outcome"],  # completed | invalid_amount | exceeds_ceiling | cancelled | auth_failed | failed
)

advance_amount_bucket_counter = Counter(
    "ewa_advance_amount_bucket",
    "Completed advances by amount bucket",
    ["bucket"],  # R0-R500, R500-R1000, R1000-R2500, R2500+
)

# Voucher metrics
voucher_purchase_counter = Counter(
    "ewa_voucher_purchase_total",
    "Voucher purchase attempts",
    ["outcome"],  # completed | out_of_stock
)

# Backend metrics
backend_latency_histogram = Histogram(
    "backend_latency_seconds",
    "Backend API response time",
    ["operation"],
    buckets=[0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0],
)

backend_record_failures_counter = Counter(
    "backend_record_failures_total",
    "Failed transaction write-back attempts",
)

backend_fallback_counter = Counter(
    "backend_fallback_total",
    "Backend calls served from the fixture set",
    ["operation"],
)

# Service health
request_duration_histogram = Histogram(
    "http_request_duration_seconds",
    "HTTP request latency",
    ["method", "endpoint", "status"],
)


def record_advance(outcome: str, amount_cents: int = 0) -> None:
    """Record advance outcome and, for completed advances, the amount bucket"""
    advance_counter.labels(outcome=outcome).inc()
    if outcome != "completed":
        return

    if amount_cents <= 50_000:
        bucket = "R0-R500"
    elif amount_cents <= 100_000:
        bucket = "R500-R1000"
    elif amount_cents <= 250_000:
        bucket = "R1000-R2500"
    else:
        bucket = "R2500+"

    advance_amount_bucket_counter.labels(bucket=bucket).inc()


def record_voucher_purchase(outcome: str) -> None:
    voucher_purchase_counter.labels(outcome=outcome).inc()
