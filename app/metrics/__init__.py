# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""
Prometheus metrics: single source of truth for all metric objects.
Imported by services and middleware. Never instantiated in controllers.
"""

from prometheus_client import Counter, Gauge, Histogram

# ── HTTP Metrics (used by middleware) ──
REQUEST_COUNT = Counter(
    "team_directory_requests_total",
    "Total HTTP requests to the team directory",
    ["method", "endpoint", "status"],
)
REQUEST_LATENCY = Histogram(
    "team_directory_request_duration_seconds",
    "Request latency in seconds",
    ["method", "endpoint"],
)
HTTP_ERRORS = Counter(
    "team_directory_http_errors_total",
    "Total HTTP error responses",
    ["method", "endpoint", "status"],
)

# ── Business Metrics (updated by service layer only) ──
UPLOADS_TOTAL = Counter(
    "team_directory_uploads_total",
    "Profile image uploads by outcome",
    ["outcome"],
)
MEMBERS_TOTAL = Gauge(
    "team_directory_members_total",
    "Number of stored team members",
)
BLOB_CLEANUP_FAILURES = Counter(
    "team_directory_blob_cleanup_failures_total",
    "Stale profile images that could not be removed",
)
