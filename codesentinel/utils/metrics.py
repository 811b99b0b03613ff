"""Latency and outcome metrics emitted by agents."""

import time
from dataclasses import dataclass, field
from typing import Any, Dict

from .logging import get_logger


@dataclass
class AgentMetric:
    """One timed agent operation."""
    name: str
    latency_ms: int
    fields: Dict[str, Any] = field(default_factory=dict)

    def format(self) -> str:
        extras = " ".join(f"{key}={value}" for key, value in self.fields.items())
        line = f"[metric] {self.name} {self.latency_ms}ms"
        return f"{line} {extras}" if extras else line


def elapsed_ms(start: float) -> int:
    """Milliseconds since a time.perf_counter() reading."""
    return int((time.perf_counter() - start) * 1000)


def record_metric(name: str, latency_ms: int, **fields: Any) -> AgentMetric:
    """
    Log a metric for an agent operation.

    Args:
        name: Operation name, e.g. "PrimaryAgent.analyze"
        latency_ms: Wall time of the operation
        **fields: Extra values such as issues_found or confidence

    Returns:
        The recorded AgentMetric
    """
    metric = AgentMetric(name=name, latency_ms=latency_ms, fields=dict(fields))
    get_logger("codesentinel.metrics").info(metric.format())
    return metric
