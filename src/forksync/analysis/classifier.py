"""Classify a fork file's sync state relative to the boilerplate."""

from forksync.model.analysis import (
    CommitComparisonSummary,
    CommitSyncStatus,
    FileSyncState,
)
from forksync.model.entries import FileEntry

_FROM_COMMIT_STATUS = {
    CommitSyncStatus.AHEAD: FileSyncState.AHEAD,
    CommitSyncStatus.BEHIND: FileSyncState.BEHIND,
    CommitSyncStatus.DIVERGED: FileSyncState.DIVERGED,
    CommitSyncStatus.UNRELATED: FileSyncState.UNRELATED,
}


def classify(
    boilerplate: FileEntry,
    fork: FileEntry | None,
    comparison: CommitComparisonSummary | None = None,
) -> FileSyncState:
    """First match wins: missing, same last commit, then the commit
    comparison. Without a comparison the file is OUTDATED."""
    if fork is None:
        return FileSyncState.MISSING
    if boilerplate.last_commit_sha == fork.last_commit_sha:
        return FileSyncState.UP_TO_DATE
    if comparison is None:
        return FileSyncState.OUTDATED
    return _FROM_COMMIT_STATUS[comparison.status]
