"""Records produced by the sync orchestrator."""

from enum import StrEnum

from pydantic import BaseModel, ConfigDict


class SyncStatus(StrEnum):
    """Orchestrator states, in the order a run passes through them."""

    IDLE = "idle"
    FETCHING_REMOTE = "fetchingRemote"
    MERGING = "merging"
    APPLYING_RESOLUTIONS = "applyingResolutions"
    COMPLETED = "completed"
    FAILED = "failed"


class MergeState(StrEnum):
    """Working-tree state right after the merge attempt."""

    CLEAN = "clean"
    IN_PROGRESS = "inProgress"


class Side(StrEnum):
    """Which side of the merge a path's content is taken from."""

    OURS = "ours"
    THEIRS = "theirs"


class SyncOutcome(BaseModel):
    """Terminal result of a sync run.

    FAILED is not an exception: the run finished but manual_files
    still need a human.
    """

    model_config = ConfigDict(frozen=True)

    status: SyncStatus
    merge_state: MergeState
    merged_ref: str
    staged: tuple[str, ...] = ()
    manual_files: tuple[str, ...] = ()
    ignored_files: tuple[str, ...] = ()
    pinned_files: tuple[str, ...] = ()
    committed: bool = False
