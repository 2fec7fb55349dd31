"""Prometheus metrics for monitoring verdicts, risk tiers and rejected analyses"""

from prometheus_client import Counter, Histogram

analysis_counter = Counter(
    "mca_analysis_total",
    "Total deal analyses completed",
    ["verdict"],  # APPROVE | CAUTION | DECLINE
)

risk_tier_counter = Counter(
    "mca_risk_tier_total",
    "Completed analyses by risk tier",
    ["tier"],  # A | B | C | D
)

analysis_failures_counter = Counter(
    "mca_analysis_failures_total",
    "Analyses that could not produce a scorecard",
    ["reason"],  # no_data | invalid_transaction | incomplete_metrics | error
)

red_flag_counter = Counter(
    "mca_red_flags_total",
    "Red flags raised",
    ["type", "severity"],
)

request_duration_histogram = Histogram(
    "http_request_duration_seconds",
    "HTTP request latency",
    ["method", "endpoint", "status"],
)


def record_analysis(verdict: str, risk_tier: str, red_flags: list) -> None:
    """Record scorecard outcome for monitoring approval rates and tier distribution"""
    analysis_counter.labels(verdict=verdict).inc()
    risk_tier_counter.labels(tier=risk_tier).inc()
    for flag in red_flags:
        red_flag_counter.labels(type=flag.type.value, severity=flag.severity.value).inc()
