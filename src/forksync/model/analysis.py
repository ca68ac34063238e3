"""Per-file sync analysis records and the run-level summary."""

from __future__ import annotations

from enum import IntEnum, StrEnum

from pydantic import BaseModel, ConfigDict, Field

from forksync.model.entries import FileEntry


class CommitSyncStatus(StrEnum):
    """Relation between a file's boilerplate and fork commit logs."""

    AHEAD = "ahead"
    BEHIND = "behind"
    DIVERGED = "diverged"
    UNRELATED = "unrelated"


class CommitHistoryCoverage(StrEnum):
    """How much of the boilerplate file history the fork contains.

    - COMPLETE: every boilerplate commit is in the fork history
    - PARTIAL: some, but not all
    - UNKNOWN: none, or it could not be determined
    """

    COMPLETE = "complete"
    PARTIAL = "partial"
    UNKNOWN = "unknown"


class FileSyncState(StrEnum):
    """Classification of a fork file relative to the boilerplate."""

    UP_TO_DATE = "upToDate"
    MISSING = "missing"
    OUTDATED = "outdated"
    DIVERGED = "diverged"
    AHEAD = "ahead"
    BEHIND = "behind"
    UNRELATED = "unrelated"


class BlobComparisonStatus(StrEnum):
    IDENTICAL = "identical"
    DIFFERENT = "different"
    UNKNOWN = "unknown"


class ConflictLikelihood(IntEnum):
    """Ordinal estimate of merge-conflict risk."""

    LOW = 1
    MEDIUM = 2
    HIGH = 3


class ConflictReason(StrEnum):
    DIVERGED_HISTORIES = "divergedHistories"
    BLOB_MISMATCH = "blobMismatch"
    MISSING_IN_FORK = "missingInFork"
    UNRELATED_HISTORIES = "unrelatedHistories"
    OUTDATED_IN_FORK = "outdatedInFork"
    NONE = "none"


class AutoResolvable(StrEnum):
    """Who can settle the file's merge without a human."""

    NONE = "none"
    GIT = "git"


class ResolutionStrategy(StrEnum):
    KEEP_BOILERPLATE = "keepBoilerplate"
    KEEP_FORK = "keepFork"
    MANUAL_MERGE = "manualMerge"
    IGNORED = "ignored"
    UNKNOWN = "unknown"


class ResolutionReason(StrEnum):
    FORK_HAS_NEWER_COMMITS = "forkHasNewerCommits"
    BOILERPLATE_HAS_NEWER_COMMITS = "boilerplateHasNewerCommits"
    SHOULD_BE_IDENTICAL = "shouldBeIdentical"
    SHOULD_BE_AUTO_MERGED = "shouldBeAutoMerged"
    MANUAL_MERGE_REQUIRED = "manualMergeRequired"
    UNKNOWN = "unknown"


class CommitComparisonSummary(BaseModel):
    """Outcome of comparing one file's boilerplate and fork logs."""

    model_config = ConfigDict(frozen=True)

    status: CommitSyncStatus
    commits_ahead: int = Field(default=0, ge=0)
    commits_behind: int = Field(default=0, ge=0)
    shared_ancestor_sha: str | None = None
    last_synced_at: str | None = None
    commit_history_coverage: CommitHistoryCoverage


class ConflictAnalysis(BaseModel):
    """Predicted conflict state of a file and how to resolve it."""

    model_config = ConfigDict(frozen=True)

    sync_state: FileSyncState
    blob_status: BlobComparisonStatus
    conflict_likelihood: ConflictLikelihood
    conflict_reason: ConflictReason
    auto_resolvable: AutoResolvable
    resolution_strategy: ResolutionStrategy
    resolution_reason: ResolutionReason | None = None

    @property
    def expecting_conflict(self) -> bool:
        """Alias: any likelihood above LOW counts as an expected conflict,
        unless the file is ignored."""
        if self.resolution_strategy == ResolutionStrategy.IGNORED:
            return False
        return self.conflict_likelihood > ConflictLikelihood.LOW

    @property
    def can_auto_resolve(self) -> bool:
        """Alias for auto_resolvable == GIT."""
        return self.auto_resolvable == AutoResolvable.GIT


class FileSyncAnalysis(BaseModel):
    """Full analysis of one tracked boilerplate file."""

    model_config = ConfigDict(frozen=True)

    file_path: str
    boilerplate_file: FileEntry
    forked_file: FileEntry | None = None
    commit_comparison: CommitComparisonSummary | None = None
    conflict_analysis: ConflictAnalysis
    pinned: bool = False
    warnings: tuple[str, ...] = ()

    @property
    def ignored(self) -> bool:
        return (
            self.conflict_analysis.resolution_strategy
            == ResolutionStrategy.IGNORED
        )


class FileAnalysisError(BaseModel):
    """A file whose analysis failed; the rest of the run continues."""

    model_config = ConfigDict(frozen=True)

    file_path: str
    kind: str
    message: str


class FileSyncSummary(BaseModel):
    """Run-level counts folded from every FileSyncAnalysis."""

    model_config = ConfigDict(frozen=True)

    up_to_date: int = 0
    missing: int = 0
    outdated: int = 0
    diverged: int = 0
    ahead: int = 0
    behind: int = 0
    unrelated: int = 0

    possible_conflicts: int = 0
    auto_resolvable_conflicts_by_git: int = 0
    manual_resolvable_conflicts: int = 0

    ignored: int = 0
    pinned: int = 0
    errored: int = 0
    total: int = 0

    def count(self, state: FileSyncState) -> int:
        return getattr(self, _STATE_FIELDS[state])


_STATE_FIELDS = {
    FileSyncState.UP_TO_DATE: "up_to_date",
    FileSyncState.MISSING: "missing",
    FileSyncState.OUTDATED: "outdated",
    FileSyncState.DIVERGED: "diverged",
    FileSyncState.AHEAD: "ahead",
    FileSyncState.BEHIND: "behind",
    FileSyncState.UNRELATED: "unrelated",
}


def state_field(state: FileSyncState) -> str:
    """FileSyncSummary field holding the count for state."""
    return _STATE_FIELDS[state]


class AnalysisReport(BaseModel):
    """Everything one analysis run produced."""

    model_config = ConfigDict(frozen=True)

    analyses: tuple[FileSyncAnalysis, ...]
    errors: tuple[FileAnalysisError, ...] = ()
    summary: FileSyncSummary
