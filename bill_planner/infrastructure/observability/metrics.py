"""Prometheus metrics for rollovers, payments, storage and payoff projections"""

from prometheus_client import Counter, Histogram

# Rollover metrics
rollover_counter = Counter(
    "bill_planner_rollover_total",
    "Months closed by a rollover",
)

rollover_bills_counter = Counter(
    "bill_planner_rollover_bills_total",
    "Bills processed by rollovers by outcome",
    ["outcome"],  # archived | removed | warning
)

# Payment metrics
payment_counter = Counter(
    "bill_planner_payment_total",
    "Payments recorded",
    ["kind"],  # current | advance | undo
)

# Storage metrics
storage_failure_counter = Counter(
    "bill_planner_storage_failures_total",
    "Failed storage operations",
    ["operation"],  # load | save | backup
)

# Payoff metrics
payoff_ceiling_counter = Counter(
    "bill_planner_payoff_ceiling_total",
    "Payoff projections that stopped at the month ceiling",
)

# Service health
request_duration_histogram = Histogram(
    "http_request_duration_seconds",
    "HTTP request latency",
    ["method", "endpoint", "status"],
)


def record_rollover(archived_count: int, removed_count: int, warning_count: int) -> None:
    """Record rollover metrics"""
    rollover_counter.inc()
    rollover_bills_counter.labels(outcome="archived").inc(archived_count)
    rollover_bills_counter.labels(outcome="removed").inc(removed_count)
    rollover_bills_counter.labels(outcome="warning").inc(warning_count)
