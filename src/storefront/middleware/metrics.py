"""Prometheus metrics middleware for request and checkout monitoring."""
import time
from typing import Callable

from prometheus_client import Counter, Gauge, Histogram, generate_latest
from prometheus_client import CONTENT_TYPE_LATEST
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response


# =============================================================================
# Prometheus Metrics Definitions
# =============================================================================

# Request metrics
REQUEST_COUNT = Counter(
    "http_requests_total",
    "Total HTTP requests",
    ["method", "endpoint", "status"],
)

REQUEST_LATENCY = Histogram(
    "http_request_duration_seconds",
    "HTTP request latency in seconds",
    ["method", "endpoint"],
    buckets=[0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 2.0, 5.0, 10.0],
)

ACTIVE_REQUESTS = Gauge(
    "http_requests_active",
    "Number of active HTTP requests",
)

# Storefront-specific metrics
CART_ADDITIONS = Counter(
    "cart_additions_total",
    "Total add-to-cart attempts",
    ["status"],  # success, failed, error
)

ORDERS_CREATED = Counter(
    "orders_created_total",
    "Total order placement attempts",
    ["status"],  # success, failed, error
)

ORDER_LATENCY = Histogram(
    "order_creation_seconds",
    "Order placement latency in seconds",
    buckets=[0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 2.0, 5.0],
)


def _outcome(status_code: int) -> str:
    if status_code in (200, 201):
        return "success"
    elif status_code >= 500:
        return "error"
    return "failed"


# =============================================================================
# Metrics Middleware
# =============================================================================

class PrometheusMiddleware(BaseHTTPMiddleware):
    """Middleware to collect Prometheus metrics for all HTTP requests."""

    # Endpoints to normalize for metrics (reduce cardinality)
    ENDPOINT_PATTERNS = {
        "/api/v1/cart/lines": "/api/v1/cart/lines",
        "/api/v1/cart": "/api/v1/cart",
        "/api/v1/orders": "/api/v1/orders",
        "/api/v1/campaigns": "/api/v1/campaigns",
        "/api/v1/products": "/api/v1/products",
        "/api/v1/brands": "/api/v1/brands",
        "/api/v1/auth": "/api/v1/auth",
        "/api/v1/users": "/api/v1/users",
        "/api/v1/feedback": "/api/v1/feedback",
    }

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        # Skip metrics endpoint to avoid recursion
        if request.url.path == "/metrics":
            return await call_next(request)

        ACTIVE_REQUESTS.inc()
        start_time = time.perf_counter()

        try:
            response = await call_next(request)
            status_code = response.status_code
        except Exception:
            status_code = 500
            raise
        finally:
            ACTIVE_REQUESTS.dec()
            latency = time.perf_counter() - start_time

            endpoint = self._normalize_endpoint(request.url.path)

            REQUEST_COUNT.labels(
                method=request.method,
                endpoint=endpoint,
                status=status_code,
            ).inc()

            REQUEST_LATENCY.labels(
                method=request.method,
                endpoint=endpoint,
            ).observe(latency)

            if request.method == "POST":
                if request.url.path == "/api/v1/cart/lines":
                    CART_ADDITIONS.labels(status=_outcome(status_code)).inc()
                elif request.url.path == "/api/v1/orders":
                    ORDER_LATENCY.observe(latency)
                    ORDERS_CREATED.labels(status=_outcome(status_code)).inc()

        return response

    def _normalize_endpoint(self, path: str) -> str:
        """Normalize endpoint path to reduce metric cardinality."""
        for pattern, normalized in self.ENDPOINT_PATTERNS.items():
            if path.startswith(pattern):
                return normalized

        if path in ("/health", "/metrics"):
            return path

        return "/other"


# =============================================================================
# Metrics Endpoint
# =============================================================================

async def metrics_endpoint(request: Request) -> Response:
    """Prometheus metrics scrape endpoint."""
    return Response(
        content=generate_latest(),
        media_type=CONTENT_TYPE_LATEST,
    )
