"""Analyze command - report per-file sync state and conflict risk."""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING

from pydantic import BaseModel, Field

from forksync.core.log import logger
from forksync.model.analysis import AnalysisReport, FileSyncState

if TYPE_CHECKING:
    from forksync.core.config import State

EXIT_OK = 0
EXIT_ERRORED = 2


def log_report(report: AnalysisReport, show_all: bool = False):
    """Log one structured record per file, then the summary.

    Up-to-date files are skipped unless show_all is set.
    """
    for analysis in report.analyses:
        conflict = analysis.conflict_analysis
        if conflict.sync_state == FileSyncState.UP_TO_DATE and not show_all:
            continue
        attrs = {
            "state": str(conflict.sync_state),
            "likelihood": conflict.conflict_likelihood.name.lower(),
            "reason": str(conflict.conflict_reason),
            "auto_resolvable": str(conflict.auto_resolvable),
            "strategy": str(conflict.resolution_strategy),
            "boilerplate_blob": analysis.boilerplate_file.short_blob_sha,
            "boilerplate_commit": analysis.boilerplate_file.short_commit_sha,
        }
        if analysis.forked_file:
            attrs["fork_blob"] = analysis.forked_file.short_blob_sha
            attrs["fork_commit"] = analysis.forked_file.short_commit_sha
        if analysis.pinned:
            attrs["pinned"] = True
        if analysis.commit_comparison:
            attrs["ahead"] = analysis.commit_comparison.commits_ahead
            attrs["behind"] = analysis.commit_comparison.commits_behind
        logger.info(f"{analysis.file_path}: {conflict.sync_state}", **attrs)
        for warning in analysis.warnings:
            logger.warn(f"{analysis.file_path}: {warning}")

    for error in report.errors:
        logger.error(f"{error.file_path}: {error.message}", kind=error.kind)

    summary = report.summary
    logger.info(
        f"{summary.total} files: {summary.up_to_date} up to date, "
        f"{summary.possible_conflicts} possible conflicts "
        f"({summary.auto_resolvable_conflicts_by_git} auto-resolvable by "
        f"git, {summary.manual_resolvable_conflicts} manual), "
        f"{summary.ignored} ignored, {summary.pinned} pinned, "
        f"{summary.errored} errored",
        **summary.model_dump(),
    )


class AnalyzeCommand(BaseModel):
    """Compare every boilerplate file with the fork and predict
    conflicts.

    Nothing in either repository is modified. Exits 2 when the
    history of any file could not be read.
    """

    report: Path | None = Field(
        default=None,
        description="Write the full analysis report as JSON to this file",
    )
    show_all: bool = Field(
        default=False,
        alias="show-all",
        description="Also list files that are up to date",
    )

    async def run_workflow(self, state: "State") -> int:
        """Run analysis.

        Args:
            state: State instance with config loaded

        Returns:
            Exit code (0=success, 2=some files errored)
        """
        from forksync.analysis.runner import analyze_files
        from forksync.git.backend import GitBackend

        config = state.config
        logger.info(
            f"Analyzing {config.fork.label} against "
            f"{config.boilerplate.label}"
        )

        report = await analyze_files(
            GitBackend.from_config(config),
            config.boilerplate,
            config.fork,
            config.analysis,
        )
        state.runtime.analysis.report = report
        log_report(report, self.show_all)

        if self.report:
            self.report.parent.mkdir(parents=True, exist_ok=True)
            self.report.write_text(report.model_dump_json(indent=2))
            logger.info(f"Report written to {self.report}")

        return EXIT_ERRORED if report.errors else EXIT_OK
