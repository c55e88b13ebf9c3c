"""Trace ID management for request correlation.

Provides context-aware trace ID generation and propagation across async operations.
"""

import uuid
from contextvars import ContextVar
from typing import Optional

# Context variable for trace_id (async-safe)
trace_id_var: ContextVar[Optional[str]] = ContextVar("trace_id", default=None)

TRACE_ID_HEADER = "x-trace-id"


def generate_trace_id() -> str:
    """Generate a new unique trace ID.

    Returns:
        str: UUID v4 trace ID
    """
    return str(uuid.uuid4())


def get_trace_id() -> str:
    """Get current trace ID from context.

    Returns:
        str: Current trace ID or "no-trace-id" if not set
    """
    return trace_id_var.get() or "no-trace-id"


def set_trace_id(trace_id: str) -> None:
    """Set trace ID in current context.

    Args:
        trace_id: Trace ID to set
    """
    trace_id_var.set(trace_id)
