"""Compare a file's boilerplate and fork commit logs.

Both logs are linear and newest first. The most recent fork commit that
also appears in the boilerplate log stands in for the merge base; merge
topology and rewritten history are not considered.
"""

from collections.abc import Sequence

from forksync.model.analysis import (
    CommitComparisonSummary,
    CommitHistoryCoverage,
    CommitSyncStatus,
)
from forksync.model.entries import CommitEntry


def _status(ancestor: str | None, ahead: int, behind: int) -> CommitSyncStatus:
    if ancestor is None:
        return CommitSyncStatus.UNRELATED
    if ahead > 0 and behind == 0:
        return CommitSyncStatus.AHEAD
    if behind > 0 and ahead == 0:
        return CommitSyncStatus.BEHIND
    if ahead > 0 and behind > 0:
        return CommitSyncStatus.DIVERGED
    # Shared tip on both sides
    return CommitSyncStatus.UNRELATED


def _coverage(
    boilerplate_shas: set[str], fork_shas: set[str]
) -> CommitHistoryCoverage:
    shared = boilerplate_shas & fork_shas
    if not shared:
        return CommitHistoryCoverage.UNKNOWN
    if shared == boilerplate_shas:
        return CommitHistoryCoverage.COMPLETE
    return CommitHistoryCoverage.PARTIAL


def compare_histories(
    boilerplate: Sequence[CommitEntry],
    fork: Sequence[CommitEntry],
) -> CommitComparisonSummary:
    """Summarize how far the fork's log is ahead of or behind the
    boilerplate's.

    Args:
        boilerplate: Boilerplate log for the file, newest first
        fork: Fork log for the same file, newest first

    Returns:
        CommitComparisonSummary; ahead and behind are both 0 when the
        logs share no commit
    """
    boilerplate_index = {}
    for index, commit in enumerate(boilerplate):
        boilerplate_index.setdefault(commit.sha, index)

    ancestor = None
    ahead = behind = 0
    for index, commit in enumerate(fork):
        if commit.sha in boilerplate_index:
            ancestor = commit
            ahead = index
            behind = boilerplate_index[commit.sha]
            break

    return CommitComparisonSummary(
        status=_status(ancestor and ancestor.sha, ahead, behind),
        commits_ahead=ahead,
        commits_behind=behind,
        shared_ancestor_sha=ancestor.sha if ancestor else None,
        last_synced_at=ancestor.date if ancestor else None,
        commit_history_coverage=_coverage(
            set(boilerplate_index), {commit.sha for commit in fork}
        ),
    )


def unknown_comparison() -> CommitComparisonSummary:
    """Comparison recorded when a file's history could not be read."""
    return CommitComparisonSummary(
        status=CommitSyncStatus.UNRELATED,
        commit_history_coverage=CommitHistoryCoverage.UNKNOWN,
    )
