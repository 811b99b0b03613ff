"""Configuration for the CodeSentinel review pipeline."""

from dataclasses import dataclass
from typing import Optional
import os


@dataclass
class ReviewConfig:
    """Configuration for the review pipeline."""

    # Self-correction loop
    confidence_threshold: int = 80       # Re-analyze below this combined confidence
    validator_agent_enabled: bool = True

    # Agents
    security_agent_enabled: bool = True
    quick_scan_enabled: bool = True      # Regex pre-scan in the security agent

    # Engine
    max_tokens: int = 8192
    model: Optional[str] = None          # None -> SDK default model

    # Folder review
    max_parallel_files: int = 1          # Files in flight at once (2 engine calls each)
    large_folder_threshold: int = 50     # Ask before reviewing more files than this

    def __post_init__(self):
        self.confidence_threshold = max(0, min(100, int(self.confidence_threshold)))
        self.max_parallel_files = max(1, int(self.max_parallel_files))

    @classmethod
    def from_env(cls) -> "ReviewConfig":
        """Create config from environment variables."""
        return cls(
            confidence_threshold=int(os.environ.get("CODESENTINEL_CONFIDENCE_THRESHOLD", "80")),
            validator_agent_enabled=_env_flag("CODESENTINEL_VALIDATOR_AGENT", True),
            security_agent_enabled=_env_flag("CODESENTINEL_SECURITY_AGENT", True),
            quick_scan_enabled=_env_flag("CODESENTINEL_QUICK_SCAN", True),
            max_tokens=int(os.environ.get("CODESENTINEL_MAX_TOKENS", "8192")),
            model=os.environ.get("CODESENTINEL_MODEL") or None,
            max_parallel_files=int(os.environ.get("CODESENTINEL_MAX_PARALLEL_FILES", "1")),
            large_folder_threshold=int(os.environ.get("CODESENTINEL_LARGE_FOLDER_THRESHOLD", "50")),
        )


def _env_flag(name: str, default: bool) -> bool:
    value = os.environ.get(name)
    if value is None:
        return default
    return value.lower() == "true"


# Default configuration
DEFAULT_CONFIG = ReviewConfig()
