"""
Prometheus metrics for backend calls and the booking workflow.

Example:
    >>> from cowork_booking.metrics import booking_conflicts
    >>> booking_conflicts.labels(kind="RESERVED").inc()
"""

from __future__ import annotations

from prometheus_client import Counter, Histogram

# =============================================================================
# API Metrics
# =============================================================================

api_requests = Counter(
    "cowork_api_requests_total",
    "Total backend API requests made",
    ["endpoint", "method", "status_code"],
)
"""
Counter for API requests to the coworking backend.

Labels:
    endpoint: API path (e.g., "api/reservations")
    method: HTTP method
    status_code: HTTP status code, or "error" when no response was received
"""

api_latency = Histogram(
    "cowork_api_latency_seconds",
    "Backend API request latency in seconds",
    ["endpoint"],
    buckets=(0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0, float("inf")),
)

# =============================================================================
# Booking Metrics
# =============================================================================

booking_conflicts = Counter(
    "cowork_booking_conflicts_total",
    "Reservation requests rejected by the client-side conflict check",
    ["kind"],
)

invoices_generated = Counter(
    "cowork_invoices_generated_total",
    "Invoices created from the reconciliation view",
)

view_loads = Counter(
    "cowork_view_loads_total",
    "Aggregate view loads (success and failure)",
    ["view", "status"],
)
