"""Prometheus metrics for enrollment outcomes, gateway declines and notification delivery"""

from prometheus_client import Counter, Histogram

# Enrollment metrics
enrollment_counter = Counter(
    "enrollment_payment_total",
    "Enrollment payment and invoice requests processed",
    ["method", "outcome"],  # credit-card | invoice ; enrolled | pending | rejected | declined | error
)

enrollment_amount_histogram = Histogram(
    "enrollment_amount_dollars",
    "Accepted enrollment totals in dollars",
    ["method"],
    buckets=[6_000, 10_000, 15_000, 20_000, 30_000, 45_000, 60_000, 100_000],
)

# Payment gateway metrics
gateway_decline_counter = Counter(
    "payment_gateway_declines_total",
    "Charges declined or left incomplete by the payment gateway",
    ["status"],
)

reconciliation_required_counter = Counter(
    "enrollment_reconciliation_required_total",
    "Payments captured without a recorded enrollment",
)

# Notification metrics
notification_failure_counter = Counter(
    "enrollment_notification_failures_total",
    "Confirmation or invoice emails that could not be sent",
    ["kind"],  # payment-confirmation | invoice-request
)

mail_latency_histogram = Histogram(
    "mail_send_latency_seconds",
    "Mail transport send time",
    buckets=[0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0],
)

mail_failure_counter = Counter(
    "mail_send_failures_total",
    "Failed mail transport attempts",
)

# Service health
request_duration_histogram = Histogram(
    "http_request_duration_seconds",
    "HTTP request latency",
    ["method", "endpoint", "status"],
)


def record_enrollment(method: str, outcome: str, total_cents: int | None = None) -> None:
    """Record an enrollment outcome, and the amount when the request was accepted"""
    enrollment_counter.labels(method=method, outcome=outcome).inc()
    if total_cents is not None:
        enrollment_amount_histogram.labels(method=method).observe(total_cents / 100)
