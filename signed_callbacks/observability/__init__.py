"""
Observability module - Logging, Metrics, and Tracing.
"""

from signed_callbacks.observability.logging import get_logger, log_context, setup_logging
from signed_callbacks.observability.metrics import metrics
from signed_callbacks.observability.tracing import setup_tracing, trace_operation

__all__ = [
    "get_logger",
    "log_context",
    "setup_logging",
    "metrics",
    "setup_tracing",
    "trace_operation",
]
