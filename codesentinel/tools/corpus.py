"""Corpus provider: enumerates and reads source files for folder review."""

import os
from pathlib import Path
from typing import FrozenSet, List, Optional, Protocol

from ..utils import get_logger


CODE_EXTENSIONS: FrozenSet[str] = frozenset({
    ".js", ".ts", ".jsx", ".tsx", ".py", ".java", ".cpp", ".c",
    ".cs", ".go", ".rb", ".php", ".swift", ".kt", ".rs",
})

IGNORED_DIRECTORIES: FrozenSet[str] = frozenset({
    "node_modules", ".git", "dist", "build", "coverage",
    "__pycache__", ".next", "out", "target", "venv",
})

LANGUAGES = {
    ".js": "javascript",
    ".ts": "typescript",
    ".jsx": "javascriptreact",
    ".tsx": "typescriptreact",
    ".py": "python",
    ".java": "java",
    ".cpp": "cpp",
    ".c": "c",
    ".cs": "csharp",
    ".go": "go",
    ".rb": "ruby",
    ".php": "php",
    ".swift": "swift",
    ".kt": "kotlin",
    ".rs": "rust",
}


def language_from_extension(path: str) -> str:
    """Map a file path's extension to a language id, 'plaintext' if unknown."""
    return LANGUAGES.get(Path(path).suffix.lower(), "plaintext")


class CorpusProvider(Protocol):
    """Source of files for a folder review."""

    def list_files(self, root: str) -> List[str]:
        ...

    def read_text(self, path: str) -> str:
        ...


class LocalCorpus:
    """
    CorpusProvider over the local file system.

    Walks depth-first, skips hidden entries and build/VCS directories,
    and keeps files whose extension is in the allow-list.
    """

    def __init__(
        self,
        extensions: Optional[FrozenSet[str]] = None,
        ignored_directories: Optional[FrozenSet[str]] = None,
    ):
        self.extensions = extensions if extensions is not None else CODE_EXTENSIONS
        self.ignored_directories = (
            ignored_directories if ignored_directories is not None else IGNORED_DIRECTORIES
        )
        self.logger = get_logger("codesentinel.corpus")

    def list_files(self, root: str) -> List[str]:
        files: List[str] = []
        self._scan(root, files)
        return files

    def _scan(self, directory: str, files: List[str]) -> None:
        try:
            with os.scandir(directory) as it:
                entries = sorted(it, key=lambda e: e.name)
        except OSError as e:
            self.logger.warning(f"Failed to scan directory {directory}: {e}")
            return

        for entry in entries:
            if entry.name.startswith("."):
                continue
            if entry.is_dir(follow_symlinks=False):
                if entry.name not in self.ignored_directories:
                    self._scan(entry.path, files)
            elif entry.is_file():
                if os.path.splitext(entry.name)[1] in self.extensions:
                    files.append(entry.path)

    def read_text(self, path: str) -> str:
        with open(path, "r", encoding="utf-8") as f:
            return f.read()
