"""Logging and Prometheus instrumentation for the API."""

from __future__ import annotations

from folio.observability.logging import configure_logging
from folio.observability.metrics import (
    LOGIN_ATTEMPTS,
    UPLOADED_BYTES,
    MetricsMiddleware,
    metrics_response,
)

__all__ = [
    "configure_logging",
    "LOGIN_ATTEMPTS",
    "UPLOADED_BYTES",
    "MetricsMiddleware",
    "metrics_response",
]
