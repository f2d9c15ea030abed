"""Prometheus metric inventory.

All metrics are declared here and imported by the module that owns the
behaviour being measured.  The default registry is scraped at /metrics.
"""

from __future__ import annotations

from prometheus_client import Counter, Gauge, Histogram

# ---------------------------------------------------------------------------
# HTTP (MetricsMiddleware)
# ---------------------------------------------------------------------------

REQUEST_COUNT = Counter(
    "http_requests_total",
    "Total HTTP requests by method, endpoint, and status code",
    ["method", "endpoint", "status_code"],
)

REQUEST_DURATION = Histogram(
    "http_request_duration_seconds",
    "HTTP request duration in seconds",
    ["method", "endpoint"],
    buckets=[0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0],
)

ACTIVE_REQUESTS = Gauge(
    "http_active_requests",
    "Number of HTTP requests currently being processed",
)

# ---------------------------------------------------------------------------
# Application
# ---------------------------------------------------------------------------

RATE_LIMIT_HITS = Counter(
    "rate_limit_hits_total",
    "Requests rejected by rate limiting (429s)",
    ["key_type"],  # user|ip
)

EVENTS_RECORDED = Counter(
    "statistic_events_recorded_total",
    "Tracking events appended to the event log",
    ["event_type"],
)

REPORT_DURATION = Histogram(
    "statistics_report_duration_seconds",
    "Time spent computing a statistics report, store reads included",
    ["report"],  # summary|progress
    buckets=[0.001, 0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0],
)

PRACTICES_SUBMITTED = Counter(
    "practices_submitted_total",
    "Practice results submitted by students",
)

REACTIONS_SAVED = Counter(
    "reactions_saved_total",
    "Reactions created or changed by students",
    ["target", "reaction"],  # material|practice, happy|neutral|sad|confused
)
