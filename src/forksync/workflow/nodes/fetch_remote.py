"""FetchRemote node - point a remote at the boilerplate and fetch it."""

from __future__ import annotations

from dataclasses import dataclass

from pydantic_graph import BaseNode, GraphRunContext

from forksync.core.config import State
from forksync.core.log import logger
from forksync.model.sync import SyncOutcome, SyncStatus
from forksync.workflow.deps import SyncDeps


@dataclass
class FetchRemote(BaseNode[State, SyncDeps, SyncOutcome]):
    """Ensure the boilerplate remote exists in the fork and fetch it."""

    async def run(
        self, ctx: GraphRunContext[State, SyncDeps]
    ) -> "MergeBoilerplate":
        """Returns:
            MergeBoilerplate: Merge the fetched branch next
        """
        config = ctx.state.config
        sync = ctx.state.runtime.sync
        sync.status = SyncStatus.FETCHING_REMOTE

        remote = config.sync.remote_name
        url = config.boilerplate.path.resolve()
        logger.info(f"Fetching {config.boilerplate.branch} from {url}")

        await ctx.deps.backend.ensure_remote(config.fork.path, remote, url)
        sync.merged_ref = await ctx.deps.backend.fetch(
            config.fork.path, remote, config.boilerplate.branch
        )

        from forksync.workflow.nodes.merge import MergeBoilerplate
        return MergeBoilerplate()
