"""MergeBoilerplate node - merge the fetched boilerplate branch."""

from __future__ import annotations

from dataclasses import dataclass

from pydantic_graph import BaseNode, GraphRunContext

from forksync.core.config import State
from forksync.core.log import logger
from forksync.model.sync import MergeState, SyncOutcome, SyncStatus
from forksync.workflow.deps import SyncDeps


@dataclass
class MergeBoilerplate(BaseNode[State, SyncDeps, SyncOutcome]):
    """Check out the fork branch and merge the boilerplate without
    committing."""

    async def run(
        self, ctx: GraphRunContext[State, SyncDeps]
    ) -> "ApplyResolutions":
        """Merge and record whether git left a merge in progress.

        A merge that stops on conflicts is expected; the backend raises
        with git's output when git refused to merge at all.

        Returns:
            ApplyResolutions: Apply per-file strategies next

        Raises:
            GitCommandError: If checkout fails or git refused the merge
        """
        config = ctx.state.config
        sync = ctx.state.runtime.sync
        backend = ctx.deps.backend
        repo = config.fork.path
        sync.status = SyncStatus.MERGING

        await backend.checkout(repo, config.fork.branch)
        sync.fork_head = await backend.rev_parse(repo, "HEAD")

        logger.info(
            f"Merging {sync.merged_ref} into {config.fork.branch} "
            f"({sync.fork_head[:7]})"
        )
        merged = await backend.merge(
            repo,
            sync.merged_ref,
            allow_unrelated_histories=config.sync.allow_unrelated_histories,
        )
        in_progress = await backend.is_merge_in_progress(repo)
        sync.merge_state = (
            MergeState.IN_PROGRESS if in_progress else MergeState.CLEAN
        )
        if merged:
            logger.info(f"Merge applied cleanly ({sync.merge_state})")
        else:
            logger.info("Merge stopped with conflicts")

        from forksync.workflow.nodes.apply_resolutions import (
            ApplyResolutions,
        )
        return ApplyResolutions()
