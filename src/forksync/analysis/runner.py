"""Analyze every boilerplate file against the fork."""

from __future__ import annotations

from forksync.analysis.classifier import classify
from forksync.analysis.comparator import compare_histories, unknown_comparison
from forksync.analysis.conflict import analyze_conflict
from forksync.analysis.ignore import PathRules
from forksync.analysis.pool import WorkerPool
from forksync.analysis.summary import summarize
from forksync.core.config import AnalysisConfig, RepoConfig
from forksync.core.errors import HistoryTimeoutError, HistoryUnavailableError
from forksync.core.log import logger
from forksync.git.backend import VcsBackend
from forksync.model.analysis import (
    AnalysisReport,
    FileAnalysisError,
    FileSyncAnalysis,
    ResolutionStrategy,
)
from forksync.model.entries import FileEntry


class FileAnalyzer:
    """Runs comparator, classifier and conflict analyzer for one file."""

    def __init__(
        self,
        backend: VcsBackend,
        boilerplate: RepoConfig,
        fork: RepoConfig,
        settings: AnalysisConfig,
    ):
        self.backend = backend
        self.boilerplate = boilerplate
        self.fork = fork
        self.settings = settings
        self.ignore = PathRules(settings.ignore)
        self.pinned = PathRules(settings.pinned)

    async def _comparison(self, path: str, warnings: list[str]):
        try:
            hb = await self.backend.file_history(
                self.boilerplate.path, self.boilerplate.branch, path
            )
            hf = await self.backend.file_history(
                self.fork.path, self.fork.branch, path
            )
        except HistoryTimeoutError as e:
            warnings.append(f"history timed out, assuming unrelated: {e}")
            logger.warn(f"{path}: history lookup timed out", error=str(e))
            return unknown_comparison()
        except HistoryUnavailableError as e:
            if not self.settings.downgrade_unavailable_history:
                raise
            warnings.append(f"history unavailable, assuming unrelated: {e}")
            logger.warn(f"{path}: history unavailable", error=str(e))
            return unknown_comparison()
        return compare_histories(hb, hf)

    async def analyze(
        self, boilerplate_file: FileEntry, forked_file: FileEntry | None
    ) -> FileSyncAnalysis:
        """Analyze one file.

        Raises:
            HistoryUnavailableError: If history could not be read and
                downgrading is disabled
        """
        path = boilerplate_file.path
        warnings: list[str] = []
        comparison = None
        if forked_file is not None and self.settings.compare_histories:
            comparison = await self._comparison(path, warnings)

        state = classify(boilerplate_file, forked_file, comparison)
        conflict = analyze_conflict(state, boilerplate_file, forked_file)
        pinned = False
        if self.ignore.matches(path):
            conflict = conflict.model_copy(
                update={"resolution_strategy": ResolutionStrategy.IGNORED}
            )
        elif forked_file is not None and self.pinned.matches(path):
            # Pinned files keep the fork copy whatever the analysis says
            pinned = True
            conflict = conflict.model_copy(
                update={"resolution_strategy": ResolutionStrategy.KEEP_FORK}
            )

        return FileSyncAnalysis(
            file_path=path,
            boilerplate_file=boilerplate_file,
            forked_file=forked_file,
            commit_comparison=comparison,
            conflict_analysis=conflict,
            pinned=pinned,
            warnings=tuple(warnings),
        )


async def analyze_files(
    backend: VcsBackend,
    boilerplate: RepoConfig,
    fork: RepoConfig,
    settings: AnalysisConfig | None = None,
) -> AnalysisReport:
    """Analyze every file tracked on the boilerplate branch.

    Per-file history failures are collected as FileAnalysisError and
    do not stop the run. Cancelling the caller cancels in-flight git
    processes and discards everything analyzed so far.

    Raises:
        UnsupportedRepositoryError: If either repository is remote;
            raised before any file is listed
    """
    settings = settings or AnalysisConfig()
    boilerplate_path = boilerplate.require_local("boilerplate")
    fork_path = fork.require_local("fork")

    with logger.span(
        "analyze",
        boilerplate=boilerplate.label,
        fork=fork.label,
    ):
        boilerplate_files = await backend.list_files(
            boilerplate_path, boilerplate.branch
        )
        fork_files = {
            entry.path: entry
            for entry in await backend.list_files(fork_path, fork.branch)
        }
        logger.info(
            f"Analyzing {len(boilerplate_files)} boilerplate files "
            f"against {len(fork_files)} fork files"
        )

        analyzer = FileAnalyzer(backend, boilerplate, fork, settings)

        async def analyze_one(entry: FileEntry):
            try:
                return await analyzer.analyze(entry, fork_files.get(entry.path))
            except HistoryUnavailableError as e:
                logger.error(f"{entry.path}: {e}")
                return FileAnalysisError(
                    file_path=entry.path,
                    kind=type(e).__name__,
                    message=str(e),
                )

        pool = WorkerPool(settings.concurrency)
        results = await pool.map(analyze_one, boilerplate_files)

    analyses = tuple(r for r in results if isinstance(r, FileSyncAnalysis))
    errors = tuple(r for r in results if isinstance(r, FileAnalysisError))
    summary = summarize(analyses, errors)
    logger.info(
        f"Analysis done: {summary.possible_conflicts} possible conflicts, "
        f"{summary.errored} errored",
        total=summary.total,
    )
    return AnalysisReport(analyses=analyses, errors=errors, summary=summary)
