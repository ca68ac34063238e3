"""Graph workflow definition."""

from pydantic_graph import End, Graph

from forksync.core.config import State, SyncRuntime
from forksync.core.errors import ForkSyncError
from forksync.core.log import logger
from forksync.git.backend import VcsBackend
from forksync.model.analysis import AnalysisReport
from forksync.model.sync import SyncOutcome, SyncStatus
from forksync.workflow.deps import SyncDeps
from forksync.workflow.lock import SyncLock


def create_workflow():
    """Create the sync workflow graph.

    FetchRemote → MergeBoilerplate → ApplyResolutions → Finalize

    Returns:
        Graph workflow with State as state_type
    """
    logger.debug("Building workflow graph")

    # Import nodes (lazy to avoid circular imports)
    from forksync.workflow.nodes.apply_resolutions import ApplyResolutions
    from forksync.workflow.nodes.fetch_remote import FetchRemote
    from forksync.workflow.nodes.finalize import Finalize
    from forksync.workflow.nodes.merge import MergeBoilerplate

    workflow = Graph(
        nodes=(
            FetchRemote,
            MergeBoilerplate,
            ApplyResolutions,
            Finalize,
        ),
        state_type=State,
    )

    return workflow


async def _log_worktree_status(backend: VcsBackend, fork_path):
    try:
        status = await backend.status(fork_path)
    except ForkSyncError as e:
        logger.warn(f"Could not read working-tree status: {e}")
        return
    logger.error(
        f"Working tree of {fork_path} after abort:\n"
        f"{status.rstrip() or '(clean)'}",
        status=status,
    )


async def run_sync(
    state: State, backend: VcsBackend, report: AnalysisReport
) -> SyncOutcome:
    """Merge the boilerplate into the fork and apply resolutions.

    Runs under the fork's single-flight lock. VCS failures abort the
    run with status FAILED; nothing is rolled back.

    Raises:
        UnsupportedRepositoryError: If either repository is remote
        SyncInProgressError: If another sync holds the fork's lock
        GitCommandError: If fetch, checkout, merge or staging fails
    """
    from forksync.workflow.nodes.fetch_remote import FetchRemote

    config = state.config
    config.boilerplate.require_local("boilerplate")
    fork_path = config.fork.require_local("fork")

    state.runtime.sync = SyncRuntime()
    workflow = create_workflow()
    deps = SyncDeps(backend=backend, report=report)

    with SyncLock(config.sync.lock_dir, fork_path):
        try:
            async with workflow.iter(
                FetchRemote(), state=state, deps=deps
            ) as run:
                async for node in run:
                    logger.trace(
                        f"Sync step {type(node).__name__}",
                        status=state.runtime.sync.status,
                    )
                    if isinstance(node, End):
                        return node.data
        except ForkSyncError as e:
            failed_in = state.runtime.sync.status
            state.runtime.sync.status = SyncStatus.FAILED
            logger.error(
                f"Sync aborted during {failed_in}; inspect {fork_path} "
                f"before retrying: {e}"
            )
            await _log_worktree_status(backend, fork_path)
            raise

    raise RuntimeError("sync workflow ended without a result")
