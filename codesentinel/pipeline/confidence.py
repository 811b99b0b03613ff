"""Confidence aggregation across agents."""

import math
from typing import Optional, Sequence


class ConfidenceAggregator:
    """
    Weighted mean of agent confidences, rounded half up.

    Equal weights by default, so two agents combine 50/50. Custom weights are
    matched positionally against the confidences passed to combine().
    """

    def __init__(self, weights: Optional[Sequence[float]] = None):
        if weights is not None:
            if not weights or any(w < 0 for w in weights) or sum(weights) <= 0:
                raise ValueError("Weights must be non-negative with a positive sum")
        self.weights = tuple(weights) if weights is not None else None

    def combine(self, confidences: Sequence[float]) -> int:
        if not confidences:
            return 0

        if self.weights is None:
            weights: Sequence[float] = [1.0] * len(confidences)
        elif len(self.weights) != len(confidences):
            raise ValueError(
                f"Expected {len(self.weights)} confidences, got {len(confidences)}"
            )
        else:
            weights = self.weights

        total = sum(w * c for w, c in zip(weights, confidences))
        return int(math.floor(total / sum(weights) + 0.5))
