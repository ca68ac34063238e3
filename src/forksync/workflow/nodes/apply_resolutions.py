"""ApplyResolutions node - settle each file by its resolution strategy."""

from __future__ import annotations

from dataclasses import dataclass

from pydantic_graph import BaseNode, GraphRunContext

from forksync.core.config import State
from forksync.core.log import logger
from forksync.model.analysis import (
    BlobComparisonStatus,
    FileSyncAnalysis,
    ResolutionStrategy,
)
from forksync.model.sync import Side, SyncOutcome, SyncStatus
from forksync.workflow.deps import SyncDeps


@dataclass
class ApplyResolutions(BaseNode[State, SyncDeps, SyncOutcome]):
    """Stage boilerplate or fork content per file; collect the files
    that need a human."""

    def _ref(self, ctx: GraphRunContext[State, SyncDeps], side: Side):
        sync = ctx.state.runtime.sync
        return sync.fork_head if side == Side.OURS else sync.merged_ref

    async def _stage(
        self,
        ctx: GraphRunContext[State, SyncDeps],
        analysis: FileSyncAnalysis,
        side: Side,
    ):
        path = analysis.file_path
        blob = analysis.conflict_analysis.blob_status
        if blob == BlobComparisonStatus.IDENTICAL:
            # Same content on both sides; the merge already has it
            logger.spew(f"{path}: identical on both sides")
            return
        await ctx.deps.backend.stage_path(
            ctx.state.config.fork.path, path, self._ref(ctx, side)
        )
        ctx.state.runtime.sync.staged.append(path)
        logger.debug(f"{path}: staged {side}")

    async def _ignore(
        self,
        ctx: GraphRunContext[State, SyncDeps],
        analysis: FileSyncAnalysis,
    ):
        sync = ctx.state.runtime.sync
        if analysis.forked_file is not None:
            await self._stage(ctx, analysis, Side.OURS)
        else:
            await ctx.deps.backend.remove_path(
                ctx.state.config.fork.path, analysis.file_path
            )
            logger.debug(f"{analysis.file_path}: ignored, removed")
        sync.ignored_files.append(analysis.file_path)

    async def run(
        self, ctx: GraphRunContext[State, SyncDeps]
    ) -> "Finalize":
        """Returns:
            Finalize: Decide completed or failed next
        """
        sync = ctx.state.runtime.sync
        sync.status = SyncStatus.APPLYING_RESOLUTIONS

        for analysis in ctx.deps.report.analyses:
            path = analysis.file_path
            strategy = analysis.conflict_analysis.resolution_strategy

            if strategy == ResolutionStrategy.KEEP_BOILERPLATE:
                await self._stage(ctx, analysis, Side.THEIRS)
            elif strategy == ResolutionStrategy.KEEP_FORK:
                await self._stage(ctx, analysis, Side.OURS)
                if analysis.pinned:
                    logger.debug(f"{path}: kept fork copy (pinned)")
                    sync.pinned_files.append(path)
            elif strategy == ResolutionStrategy.IGNORED:
                await self._ignore(ctx, analysis)
            elif strategy == ResolutionStrategy.MANUAL_MERGE:
                sync.manual_files.append(path)
            else:
                logger.warn(
                    f"{path}: no resolution strategy, leaving for manual merge"
                )
                sync.manual_files.append(path)

        logger.info(
            f"Applied resolutions: {len(sync.staged)} staged, "
            f"{len(sync.ignored_files)} ignored, "
            f"{len(sync.pinned_files)} pinned, "
            f"{len(sync.manual_files)} need manual merge"
        )

        from forksync.workflow.nodes.finalize import Finalize
        return Finalize()
