"""Canonical metrics and the phrase tables used to recognize them.

Evaluation order of ``CANONICAL_METRICS`` is significant: recognition is
first-match-wins, so an ambiguous phrase ("error rate of slow requests")
resolves to whichever entry appears first.
"""

from __future__ import annotations

from src.observability.models import InstrumentKind, StandardMetric

REQUESTS_TOTAL = "http_requests_total"
REQUEST_DURATION = "http_request_duration_seconds"
BASELINE_INSTRUMENTS = (REQUESTS_TOTAL, REQUEST_DURATION)
# Every series name the baseline instruments register in a client registry.
BASELINE_SERIES = (
    "http_requests",
    REQUESTS_TOTAL,
    "http_requests_created",
    REQUEST_DURATION,
    f"{REQUEST_DURATION}_bucket",
    f"{REQUEST_DURATION}_count",
    f"{REQUEST_DURATION}_sum",
    f"{REQUEST_DURATION}_created",
)
REQUEST_LABELS = ("method", "route", "status")
DURATION_BUCKETS = (0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1, 2.5, 5, 10)

RATE_WINDOW = "5m"

# {sel} is replaced with the label matcher body, e.g. app="shop"
REQUEST_RATE_EXPR = "sum(rate(http_requests_total{{{sel}}}[%s])) by (route)" % RATE_WINDOW
ERROR_RATIO_EXPR = (
    'sum(rate(http_requests_total{{{sel},status=~"5.."}}[%s]))'
    " / sum(rate(http_requests_total{{{sel}}}[%s]))" % (RATE_WINDOW, RATE_WINDOW)
)
LATENCY_P95_EXPR = (
    "histogram_quantile(0.95, sum(rate(http_request_duration_seconds_bucket{{{sel}}}[%s])) by (le))"
    % RATE_WINDOW
)
UP_EXPR = "up{{{sel}}}"

CANONICAL_METRICS = (
    StandardMetric(
        key="latency",
        name=REQUEST_DURATION,
        phrases=("response time", "latency", "request duration", "slow request"),
        expression=LATENCY_P95_EXPR,
        kind=InstrumentKind.HISTOGRAM,
        baseline=True,
    ),
    StandardMetric(
        key="errors",
        name=REQUESTS_TOTAL,
        phrases=("error rate", "error count", "5xx", "failure rate", "failed request"),
        expression=ERROR_RATIO_EXPR,
        kind=InstrumentKind.COUNTER,
        baseline=True,
    ),
    StandardMetric(
        key="active_users",
        name="{namespace}_active_users",
        phrases=("active user", "concurrent user", "online user"),
        expression="sum({name}{{{sel}}})",
        kind=InstrumentKind.GAUGE,
        baseline=False,
    ),
)

# Instrument-kind phrases for business metrics, checked in this order.
GAUGE_PHRASES = (
    "active", "current", "concurrent", "online", "queue", "size",
    "level", "in progress", "pending", "open",
)
COUNTER_PHRASES = ("total", "count", "number of times", "occurrences", "cumulative")

# Alert topic phrases, checked in this order before custom metrics.
ERROR_TOPIC_PHRASES = ("error", "5xx", "failure")
LATENCY_TOPIC_PHRASES = ("latency", "response time", "slow", "duration")

# Defaults emitted in every alert file: (identifier, expression key, comparison, for, severity, summary)
DEFAULT_ALERTS = (
    ("HighErrorRate", "error_rate", "> 0.05", "5m", "critical", "Error rate above 5% for 5 minutes"),
    ("HighLatency", "latency", "> 1", "5m", "warning", "p95 latency above 1s for 5 minutes"),
    ("ServiceDown", "up", "== 0", "1m", "critical", "Scrape target unreachable for 1 minute"),
)
DEFAULT_ALERT_THRESHOLDS = {"error_rate": 0.05, "latency": 1.0}
