"""Prometheus metrics for the UAE Trails API.

Defines and exposes operational metrics for monitoring and alerting.
"""

from prometheus_client import Counter, Histogram

# HTTP metrics
http_requests_total = Counter(
    "uaetrail_http_requests_total",
    "Total HTTP requests handled",
    ["method", "route", "status"]
)

http_request_duration_seconds = Histogram(
    "uaetrail_http_request_duration_seconds",
    "HTTP request latency in seconds",
    ["method", "route"],
    buckets=[0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0]
)

# Authentication metrics
auth_events_total = Counter(
    "uaetrail_auth_events_total",
    "Authentication events",
    ["event"]  # register|login_success|login_failed|refresh|logout|password_reset
)

# Booking metrics
join_requests_total = Counter(
    "uaetrail_join_requests_total",
    "Join request lifecycle transitions",
    ["outcome"]  # created|approved|rejected|cancelled|rejected_full
)

media_uploads_total = Counter(
    "uaetrail_media_uploads_total",
    "Media upload operations",
    ["stage"]  # presigned|committed
)
