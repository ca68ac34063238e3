"""Data model shared by analysis and sync."""

from forksync.model.analysis import (
    AnalysisReport,
    AutoResolvable,
    BlobComparisonStatus,
    CommitComparisonSummary,
    CommitHistoryCoverage,
    CommitSyncStatus,
    ConflictAnalysis,
    ConflictLikelihood,
    ConflictReason,
    FileAnalysisError,
    FileSyncAnalysis,
    FileSyncState,
    FileSyncSummary,
    ResolutionReason,
    ResolutionStrategy,
)
from forksync.model.entries import CommitEntry, FileEntry
from forksync.model.sync import MergeState, Side, SyncOutcome, SyncStatus

__all__ = [
    "AnalysisReport",
    "AutoResolvable",
    "BlobComparisonStatus",
    "CommitComparisonSummary",
    "CommitEntry",
    "CommitHistoryCoverage",
    "CommitSyncStatus",
    "ConflictAnalysis",
    "ConflictLikelihood",
    "ConflictReason",
    "FileAnalysisError",
    "FileEntry",
    "FileSyncAnalysis",
    "FileSyncState",
    "FileSyncSummary",
    "MergeState",
    "ResolutionReason",
    "ResolutionStrategy",
    "Side",
    "SyncOutcome",
    "SyncStatus",
]
