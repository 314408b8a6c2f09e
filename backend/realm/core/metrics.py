"""
Prometheus metrics configuration
"""
from prometheus_client import (CONTENT_TYPE_LATEST, REGISTRY, Counter, Histogram,
                               Info, generate_latest)

# ============================================================================
# HTTP Request Metrics
# ============================================================================

http_requests_total = Counter(
    'http_requests_total',
    'Total number of HTTP requests',
    ['method', 'endpoint', 'status_code']
)

http_request_duration_seconds = Histogram(
    'http_request_duration_seconds',
    'HTTP request duration in seconds',
    ['method', 'endpoint', 'status_code'],
    buckets=(0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0)
)

http_errors_total = Counter(
    'http_errors_total',
    'Total number of HTTP errors',
    ['method', 'endpoint', 'status_code', 'error_type']
)

# ============================================================================
# Page Rendering Metrics
# ============================================================================

page_renders_total = Counter(
    'realm_page_renders_total',
    'Total number of page renders',
    ['realm_id', 'mode', 'status']
)

page_render_duration_seconds = Histogram(
    'realm_page_render_duration_seconds',
    'Page render duration in seconds',
    ['mode'],
    buckets=(0.001, 0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0)
)

# ============================================================================
# Asset Metrics
# ============================================================================

asset_reloads_total = Counter(
    'realm_asset_reloads_total',
    'Total number of asset manifest resolutions',
    ['status', 'kind']
)

asset_version_info = Info(
    'realm_asset_version',
    'Active static asset version'
)


def get_metrics() -> bytes:
    """Metrics in Prometheus text format"""
    return generate_latest(REGISTRY)


def get_metrics_content_type() -> str:
    return CONTENT_TYPE_LATEST
