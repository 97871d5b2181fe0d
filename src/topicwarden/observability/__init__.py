"""Observability module for topicwarden.

Provides structured logging and Prometheus metrics:
- JSON structured logging tagged with flush session ids
- Per-coordinator Prometheus collectors
"""

from topicwarden.observability.logging import (
    LogContext,
    configure_logging,
    session_id_var,
)
from topicwarden.observability.metrics import InvalidationMetrics, NoOpMetric

__all__ = [
    # Logging
    "configure_logging",
    "LogContext",
    "session_id_var",
    # Metrics
    "InvalidationMetrics",
    "NoOpMetric",
]
