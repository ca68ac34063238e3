"""Finalize node - report completed or failed, optionally commit."""

from __future__ import annotations

from dataclasses import dataclass

from pydantic_graph import BaseNode, End, GraphRunContext

from forksync.core.config import State
from forksync.core.log import logger
from forksync.model.sync import SyncOutcome, SyncStatus
from forksync.workflow.deps import SyncDeps


@dataclass
class Finalize(BaseNode[State, SyncDeps, SyncOutcome]):
    """Finish the run; FAILED means files are left for manual merge."""

    async def run(
        self, ctx: GraphRunContext[State, SyncDeps]
    ) -> End[SyncOutcome]:
        """Returns:
            End[SyncOutcome]: Terminal status with the manual file list
        """
        config = ctx.state.config
        sync = ctx.state.runtime.sync
        repo = config.fork.path

        sync.status = (
            SyncStatus.FAILED if sync.manual_files else SyncStatus.COMPLETED
        )

        committed = False
        if (
            sync.status == SyncStatus.COMPLETED
            and config.sync.commit_on_complete
            and await ctx.deps.backend.is_merge_in_progress(repo)
        ):
            message = f"Merge {sync.merged_ref} into {config.fork.branch}"
            await ctx.deps.backend.commit(repo, message)
            committed = True
            logger.info(f"Committed: {message}")

        sync.outcome = SyncOutcome(
            status=sync.status,
            merge_state=sync.merge_state,
            merged_ref=sync.merged_ref,
            staged=tuple(sync.staged),
            manual_files=tuple(sync.manual_files),
            ignored_files=tuple(sync.ignored_files),
            pinned_files=tuple(sync.pinned_files),
            committed=committed,
        )

        if sync.manual_files:
            logger.warn(
                f"{len(sync.manual_files)} files need manual merge",
                files=sync.manual_files,
            )
        else:
            logger.info("Sync completed")
        return End(sync.outcome)
