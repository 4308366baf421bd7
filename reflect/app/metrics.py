from __future__ import annotations

from prometheus_client import Counter, Histogram

REQUEST_COUNT = Counter(
    "reflect_requests_total",
    "Total HTTP requests processed by Reflect",
    ("method", "path", "status"),
)

REQUEST_LATENCY = Histogram(
    "reflect_request_latency_seconds",
    "HTTP request latency in seconds",
    ("method", "path"),
)

REQUEST_ERRORS = Counter(
    "reflect_request_errors_total",
    "HTTP requests resulting in server errors",
    ("method", "path", "status"),
)

USER_API_COUNTER = Counter(
    "reflect_user_api_hits_total",
    "Authenticated API hits per endpoint",
    ("endpoint",),
)

ANALYTICS_RESULTS = Counter(
    "reflect_analytics_results_total",
    "Mood analytics computations by outcome",
    ("result",),
)

RATE_LIMIT_REJECTIONS = Counter(
    "reflect_rate_limit_rejections_total",
    "Write requests rejected by the rate limiter",
    ("action",),
)

__all__ = [
    "ANALYTICS_RESULTS",
    "RATE_LIMIT_REJECTIONS",
    "REQUEST_COUNT",
    "REQUEST_ERRORS",
    "REQUEST_LATENCY",
    "USER_API_COUNTER",
]
