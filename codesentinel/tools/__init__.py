"""Tools for the review pipeline."""

from .engine import AnalysisEngine, ClaudeEngine, EngineError
from .corpus import (
    CODE_EXTENSIONS,
    IGNORED_DIRECTORIES,
    CorpusProvider,
    LocalCorpus,
    language_from_extension,
)

__all__ = [
    "AnalysisEngine",
    "ClaudeEngine",
    "EngineError",
    "CODE_EXTENSIONS",
    "IGNORED_DIRECTORIES",
    "CorpusProvider",
    "LocalCorpus",
    "language_from_extension",
]
