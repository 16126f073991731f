"""
Prometheus metrics for cache performance, upstream API usage, and persistence.
Exposed via /metrics endpoint for Prometheus scraping.
"""

from prometheus_client import Counter, Histogram

# Cache metrics
cache_hits_total = Counter(
    "recipe_fetch_cache_hits_total",
    "Total recipe cache hits",
    ["source"],  # premium, nutrition, free
)
cache_misses_total = Counter(
    "recipe_fetch_cache_misses_total",
    "Total recipe cache misses",
    ["source"],
)

# Upstream API success/failure and latency
upstream_calls_total = Counter(
    "recipe_fetch_upstream_calls_total",
    "Upstream API calls by status",
    ["source", "operation", "status"],  # search/detail, success/failure
)
upstream_duration_seconds = Histogram(
    "recipe_fetch_upstream_duration_seconds",
    "Upstream API call duration in seconds",
    ["source"],
    buckets=(0.05, 0.1, 0.25, 0.5, 1.0, 2.0, 3.0, 5.0, 10.0),
)

# Request outcomes
fetch_requests_total = Counter(
    "recipe_fetch_requests_total",
    "Fetch requests by source, origin and outcome",
    ["source", "origin", "outcome"],  # cache/api/none, success/failure
)

persistence_failures_total = Counter(
    "recipe_fetch_persistence_failures_total",
    "Recipe repository writes that failed and were swallowed",
)


def record_cache_hit(source: str) -> None:
    """Record a cache hit for the given source."""
    cache_hits_total.labels(source=source).inc()


def record_cache_miss(source: str) -> None:
    """Record a cache miss for the given source."""
    cache_misses_total.labels(source=source).inc()


def record_upstream_call(
    source: str, operation: str, success: bool, seconds: float
) -> None:
    """Record one upstream HTTP call result and duration."""
    status = "success" if success else "failure"
    upstream_calls_total.labels(source=source, operation=operation, status=status).inc()
    upstream_duration_seconds.labels(source=source).observe(seconds)


def record_fetch(source: str, origin: str, success: bool) -> None:
    outcome = "success" if success else "failure"
    fetch_requests_total.labels(source=source, origin=origin, outcome=outcome).inc()


def record_persistence_failure() -> None:
    persistence_failures_total.inc()
