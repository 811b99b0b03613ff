"""CodeSentinel - multi-pass AI code review pipeline."""

__version__ = "0.1.0"
