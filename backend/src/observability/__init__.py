"""Observability module for the UAE Trails API.

Provides structured logging, metrics, trace IDs, and health checks.
"""

from .logging_config import configure_logging, get_logger
from .trace_id import trace_id_var, get_trace_id, set_trace_id, generate_trace_id, TRACE_ID_HEADER
from .health import HealthStatus, ComponentHealth
from .middleware import TraceIDMiddleware, SecurityHeadersMiddleware, BodySizeLimitMiddleware

__all__ = [
    # Logging
    "configure_logging",
    "get_logger",
    # Trace ID
    "trace_id_var",
    "get_trace_id",
    "set_trace_id",
    "generate_trace_id",
    "TRACE_ID_HEADER",
    # Health
    "HealthStatus",
    "ComponentHealth",
    # Middleware
    "TraceIDMiddleware",
    "SecurityHeadersMiddleware",
    "BodySizeLimitMiddleware",
]
