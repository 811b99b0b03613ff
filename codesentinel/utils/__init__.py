"""Utility functions."""

from .logging import setup_logging, get_logger
from .metrics import AgentMetric, elapsed_ms, record_metric

__all__ = [
    "setup_logging",
    "get_logger",
    "AgentMetric",
    "elapsed_ms",
    "record_metric",
]
