"""Conflict likelihood and resolution decisions for one file.

Every function here is pure; analyze_conflict() chains them in
dependency order.
"""

from forksync.model.analysis import (
    AutoResolvable,
    BlobComparisonStatus,
    ConflictAnalysis,
    ConflictLikelihood,
    ConflictReason,
    FileSyncState,
    ResolutionReason,
    ResolutionStrategy,
)
from forksync.model.entries import FileEntry

State = FileSyncState
Blob = BlobComparisonStatus
Likelihood = ConflictLikelihood


def blob_status(
    boilerplate: FileEntry, fork: FileEntry | None
) -> BlobComparisonStatus:
    if fork is None:
        return Blob.UNKNOWN
    if boilerplate.blob_sha == fork.blob_sha:
        return Blob.IDENTICAL
    return Blob.DIFFERENT


def conflict_likelihood(
    state: FileSyncState, blob: BlobComparisonStatus
) -> ConflictLikelihood:
    if state == State.MISSING:
        return Likelihood.HIGH
    if state == State.UP_TO_DATE and blob == Blob.IDENTICAL:
        return Likelihood.LOW
    if state == State.DIVERGED and blob == Blob.DIFFERENT:
        return Likelihood.HIGH
    if state == State.UNRELATED:
        return Likelihood.HIGH
    if state in (State.AHEAD, State.BEHIND) and blob == Blob.DIFFERENT:
        return Likelihood.MEDIUM
    if state == State.OUTDATED and blob == Blob.DIFFERENT:
        return Likelihood.MEDIUM
    if state in (State.OUTDATED, State.BEHIND) and blob == Blob.IDENTICAL:
        return Likelihood.LOW
    return Likelihood.MEDIUM


def conflict_reason(
    state: FileSyncState, blob: BlobComparisonStatus
) -> ConflictReason:
    if state == State.DIVERGED:
        return ConflictReason.DIVERGED_HISTORIES
    if state == State.UNRELATED:
        return ConflictReason.UNRELATED_HISTORIES
    if state == State.MISSING:
        return ConflictReason.MISSING_IN_FORK
    if state in (State.BEHIND, State.OUTDATED):
        return ConflictReason.OUTDATED_IN_FORK
    if state in (State.UP_TO_DATE, State.AHEAD):
        if blob == Blob.DIFFERENT:
            return ConflictReason.BLOB_MISMATCH
    return ConflictReason.NONE


def auto_resolvable(
    state: FileSyncState, blob: BlobComparisonStatus
) -> AutoResolvable:
    if state == State.MISSING:
        return AutoResolvable.NONE
    if blob == Blob.IDENTICAL:
        return AutoResolvable.GIT
    # One side only moved forward: git fast-forwards the file
    if state in (State.AHEAD, State.BEHIND):
        return AutoResolvable.GIT
    return AutoResolvable.NONE


def resolution_strategy(
    state: FileSyncState,
    likelihood: ConflictLikelihood,
    resolvable: AutoResolvable,
) -> ResolutionStrategy:
    """Pick a strategy; the checks run in a fixed order and the first
    match wins."""
    if likelihood == Likelihood.LOW:
        return ResolutionStrategy.KEEP_BOILERPLATE
    if state == State.AHEAD:
        return ResolutionStrategy.KEEP_FORK
    if state == State.BEHIND:
        return ResolutionStrategy.KEEP_BOILERPLATE
    if state == State.MISSING:
        return ResolutionStrategy.MANUAL_MERGE
    if resolvable == AutoResolvable.GIT:
        return ResolutionStrategy.KEEP_BOILERPLATE
    if likelihood in (Likelihood.MEDIUM, Likelihood.HIGH):
        return ResolutionStrategy.MANUAL_MERGE
    return ResolutionStrategy.UNKNOWN


def resolution_reason(
    state: FileSyncState, blob: BlobComparisonStatus
) -> ResolutionReason:
    if state == State.AHEAD:
        return ResolutionReason.FORK_HAS_NEWER_COMMITS
    if state == State.BEHIND:
        return ResolutionReason.BOILERPLATE_HAS_NEWER_COMMITS
    if state == State.UP_TO_DATE:
        if blob == Blob.IDENTICAL:
            return ResolutionReason.SHOULD_BE_IDENTICAL
        return ResolutionReason.SHOULD_BE_AUTO_MERGED
    if state in (
        State.MISSING, State.DIVERGED, State.UNRELATED, State.OUTDATED
    ):
        return ResolutionReason.MANUAL_MERGE_REQUIRED
    return ResolutionReason.UNKNOWN


def analyze_conflict(
    state: FileSyncState,
    boilerplate: FileEntry,
    fork: FileEntry | None,
) -> ConflictAnalysis:
    """Build the full ConflictAnalysis for a classified file.

    Args:
        state: Result of classify() for this file
        boilerplate: Boilerplate entry
        fork: Fork entry, or None when the fork lacks the file
    """
    blob = blob_status(boilerplate, fork)
    likelihood = conflict_likelihood(state, blob)
    resolvable = auto_resolvable(state, blob)
    return ConflictAnalysis(
        sync_state=state,
        blob_status=blob,
        conflict_likelihood=likelihood,
        conflict_reason=conflict_reason(state, blob),
        auto_resolvable=resolvable,
        resolution_strategy=resolution_strategy(
            state, likelihood, resolvable
        ),
        resolution_reason=resolution_reason(state, blob),
    )
