"""Folder review: fan the agents out over a corpus and aggregate results."""

import asyncio
import inspect
import os
import time
from datetime import datetime, timezone
from typing import Awaitable, Callable, List, Optional, Union

from ..config import ReviewConfig, DEFAULT_CONFIG
from ..models import (
    AnalysisResult,
    FileResult,
    FileRisk,
    FolderReport,
    Recommendation,
    SeverityCounts,
)
from ..tools import AnalysisEngine, CorpusProvider, LocalCorpus, language_from_extension
from ..utils import elapsed_ms, get_logger
from .agents import AnalysisAgent, PrimaryAgent, SecurityAgent
from .confidence import ConfidenceAggregator
from .risk import file_rank_weight, folder_risk_score


ProgressCallback = Callable[[int, int, str], None]
ConfirmCallback = Callable[[int], Union[bool, Awaitable[bool]]]


def build_recommendations(counts: SeverityCounts, total_files: int) -> List[Recommendation]:
    """Rule-based remediation advice for a folder."""
    recommendations = []

    if counts.critical > 0:
        recommendations.append(Recommendation(
            severity="critical",
            title=f"Fix {counts.critical} Critical Issue(s)",
            description="Critical issues found across the folder. These should be addressed immediately.",
            action="Start with the files at the top of the risk ranking",
        ))

    if counts.high > 5:
        recommendations.append(Recommendation(
            severity="high",
            title="High Priority Issues Detected",
            description=f"{counts.high} high-severity issues found. Consider refactoring affected files.",
            action="Sort files by risk and prioritize top files",
        ))

    if total_files > 0:
        average = counts.total / total_files
        if average > 5:
            recommendations.append(Recommendation(
                severity="medium",
                title="Code Quality Concerns",
                description=f"Average {average:.1f} issues per file. Consider adopting stricter linting rules.",
                action="Add linter and formatter configuration to the project",
            ))

    if counts.total == 0:
        recommendations.append(Recommendation(
            severity="info",
            title="Excellent Code Quality",
            description="No issues detected in this folder.",
            action="Maintain current practices",
        ))

    return recommendations


def aggregate_results(
    folder_path: str,
    results: List[FileResult],
    latency_ms: int = 0,
    cancelled: bool = False,
) -> FolderReport:
    """Roll per-file results up into a FolderReport."""
    counts = SeverityCounts()
    for result in results:
        counts = counts + result.counts

    ranked = [
        FileRisk(
            file=r.file,
            full_path=r.full_path,
            issues=len(r.issues),
            counts=r.counts,
        )
        for r in results
        if r.issues
    ]
    ranked.sort(key=lambda row: file_rank_weight(row.counts), reverse=True)

    return FolderReport(
        folder_path=folder_path,
        results=tuple(results),
        counts=counts,
        risk_score=folder_risk_score(counts, len(results)),
        files_by_risk=tuple(ranked),
        recommendations=tuple(build_recommendations(counts, len(results))),
        latency_ms=latency_ms,
        timestamp=datetime.now(timezone.utc).isoformat(),
        cancelled=cancelled,
    )


class FolderReviewer:
    """
    Reviews every code file under a folder.

    Features:
    - Both agents per file, run concurrently; a failing agent is isolated
    - Per-file failures recorded on the FileResult, walk continues
    - Bounded number of files in flight (config.max_parallel_files)
    - Cooperative cancellation between files
    - Confirmation hook for large folders

    Folder review does not run the self-correction validator.
    """

    def __init__(
        self,
        engine: AnalysisEngine,
        config: Optional[ReviewConfig] = None,
        corpus: Optional[CorpusProvider] = None,
    ):
        self.engine = engine
        self.config = config or DEFAULT_CONFIG
        self.corpus = corpus or LocalCorpus()
        self.aggregator = ConfidenceAggregator()
        self.primary = PrimaryAgent(engine, self.config)
        self.security = SecurityAgent(engine, self.config)
        self.logger = get_logger("codesentinel.folder")

    async def _run_agent(self, agent: AnalysisAgent, code: str, language: str, path: str) -> AnalysisResult:
        try:
            return await agent.analyze(code, language)
        except Exception as e:
            self.logger.warning(f"{agent.name} failed for {path}: {e}")
            return AnalysisResult(issues=(), confidence=0)

    async def review_file(self, path: str, root: str) -> FileResult:
        """
        Review a single file. Read errors propagate to the caller.

        Args:
            path: File to review
            root: Folder root, used for the relative name

        Returns:
            FileResult with both agents' issues and their mean confidence
        """
        relative = os.path.relpath(path, root)
        content = self.corpus.read_text(path)

        if not content or not content.strip():
            return FileResult(
                file=relative,
                full_path=path,
                lines_of_code=0,
                confidence=100,
                language="plaintext",
            )

        language = language_from_extension(path)
        primary, security = await asyncio.gather(
            self._run_agent(self.primary, content, language, path),
            self._run_agent(self.security, content, language, path),
        )

        return FileResult(
            file=relative,
            full_path=path,
            issues=primary.issues + security.issues,
            lines_of_code=len(content.split("\n")),
            confidence=self.aggregator.combine([primary.confidence, security.confidence]),
            language=language,
        )

    async def review(
        self,
        folder_path: str,
        cancel_event: Optional[asyncio.Event] = None,
        on_progress: Optional[ProgressCallback] = None,
        confirm_large_folder: Optional[ConfirmCallback] = None,
    ) -> Optional[FolderReport]:
        """
        Review every code file under folder_path.

        Args:
            folder_path: Root folder
            cancel_event: Set it to stop before the next file starts
            on_progress: Called as (index, total, relative_path) when a file starts
            confirm_large_folder: Asked with the file count when it exceeds
                config.large_folder_threshold; a false answer aborts

        Returns:
            FolderReport (partial if cancelled), or None when the folder has
            no code files or the large-folder confirmation is declined
        """
        start = time.perf_counter()
        self.logger.info(f"Starting folder review: {folder_path}")

        files = self.corpus.list_files(folder_path)
        self.logger.info(f"Found {len(files)} code files in {folder_path}")

        if not files:
            self.logger.warning("No code files found in folder")
            return None

        if len(files) > self.config.large_folder_threshold and confirm_large_folder is not None:
            answer = confirm_large_folder(len(files))
            if inspect.isawaitable(answer):
                answer = await answer
            if not answer:
                self.logger.info("User cancelled large folder review")
                return None

        semaphore = asyncio.Semaphore(self.config.max_parallel_files)
        total = len(files)

        def is_cancelled() -> bool:
            return cancel_event is not None and cancel_event.is_set()

        async def run(index: int, path: str) -> Optional[FileResult]:
            async with semaphore:
                if is_cancelled():
                    return None

                relative = os.path.relpath(path, folder_path)
                if on_progress is not None:
                    on_progress(index + 1, total, relative)

                try:
                    result = await self.review_file(path, folder_path)
                except Exception as e:
                    self.logger.error(f"Failed to review {path}: {e}")
                    return FileResult(
                        file=relative,
                        full_path=path,
                        error=str(e),
                    )

                self.logger.debug(f"Reviewed: {relative} - {len(result.issues)} issues")
                return result

        outcomes = await asyncio.gather(*(run(i, path) for i, path in enumerate(files)))
        results = [r for r in outcomes if r is not None]

        cancelled = len(results) < total
        if cancelled:
            self.logger.info(f"Folder review cancelled after {len(results)}/{total} files")

        report = aggregate_results(folder_path, results, elapsed_ms(start), cancelled)
        self.logger.info(
            f"Reviewed {report.total_files} files, found {report.total_issues} issue(s), "
            f"risk {report.risk_score}/100"
        )
        return report


async def review_folder(
    folder_path: str,
    engine: AnalysisEngine,
    config: Optional[ReviewConfig] = None,
    corpus: Optional[CorpusProvider] = None,
    **kwargs,
) -> Optional[FolderReport]:
    """Review a folder with a fresh FolderReviewer. See FolderReviewer.review."""
    reviewer = FolderReviewer(engine, config, corpus)
    return await reviewer.review(folder_path, **kwargs)


# Synchronous wrapper
def review_folder_sync(
    folder_path: str,
    engine: AnalysisEngine,
    config: Optional[ReviewConfig] = None,
    corpus: Optional[CorpusProvider] = None,
    **kwargs,
) -> Optional[FolderReport]:
    """Synchronous wrapper for review_folder."""
    return asyncio.run(review_folder(folder_path, engine, config, corpus, **kwargs))
