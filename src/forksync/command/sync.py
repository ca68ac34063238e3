"""Sync command - analyze, then merge the boilerplate into the fork."""

from __future__ import annotations

from typing import TYPE_CHECKING

from pydantic import BaseModel, Field

from forksync.command.analyze import EXIT_ERRORED, EXIT_OK, log_report
from forksync.core.log import logger
from forksync.model.sync import SyncStatus

if TYPE_CHECKING:
    from forksync.core.config import State

EXIT_MANUAL = 1


class SyncCommand(BaseModel):
    """Merge the boilerplate branch into the fork branch.

    Files are settled automatically where the analysis allows; the
    rest are left conflicted for a manual merge. Exits 1 when manual
    work remains, 2 when analysis errored (nothing is merged).
    """

    show_all: bool = Field(
        default=False,
        alias="show-all",
        description="Also list files that are up to date",
    )

    async def run_workflow(self, state: "State") -> int:
        """Run analysis, then the sync workflow.

        Args:
            state: State instance with config loaded

        Returns:
            Exit code (0=completed, 1=manual merge needed,
                2=analysis errors)
        """
        from forksync.analysis.runner import analyze_files
        from forksync.git.backend import GitBackend
        from forksync.workflow.graph import run_sync

        config = state.config
        backend = GitBackend.from_config(config)

        report = await analyze_files(
            backend, config.boilerplate, config.fork, config.analysis
        )
        state.runtime.analysis.report = report
        log_report(report, self.show_all)

        if report.errors:
            logger.error(
                f"Not merging: {len(report.errors)} files could not be "
                f"analyzed"
            )
            return EXIT_ERRORED

        outcome = await run_sync(state, backend, report)
        if outcome.status == SyncStatus.COMPLETED:
            return EXIT_OK

        for path in outcome.manual_files:
            logger.warn(f"Needs manual merge: {path}")
        return EXIT_MANUAL
