"""Tests for summary aggregation."""

from forksync.analysis.summary import summarize
from forksync.model.analysis import (
    AutoResolvable,
    BlobComparisonStatus,
    ConflictAnalysis,
    ConflictLikelihood,
    ConflictReason,
    FileAnalysisError,
    FileSyncAnalysis,
    FileSyncState,
    ResolutionStrategy,
)
from forksync.model.entries import FileEntry


def analysis(
    path,
    state=FileSyncState.UP_TO_DATE,
    likelihood=ConflictLikelihood.LOW,
    auto=AutoResolvable.GIT,
    strategy=ResolutionStrategy.KEEP_BOILERPLATE,
    pinned=False,
):
    entry = FileEntry(path=path, blob_sha="b", last_commit_sha="c")
    return FileSyncAnalysis(
        file_path=path,
        boilerplate_file=entry,
        forked_file=entry,
        pinned=pinned,
        conflict_analysis=ConflictAnalysis(
            sync_state=state,
            blob_status=BlobComparisonStatus.DIFFERENT,
            conflict_likelihood=likelihood,
            conflict_reason=ConflictReason.NONE,
            auto_resolvable=auto,
            resolution_strategy=strategy,
        ),
    )


def test_conflict_counts():
    """10 files, 3 at medium/high risk, 2 of those git-resolvable."""
    analyses = [analysis(f"ok{i}.ts") for i in range(7)] + [
        analysis(
            "ahead.ts",
            FileSyncState.AHEAD,
            ConflictLikelihood.MEDIUM,
            AutoResolvable.GIT,
        ),
        analysis(
            "behind.ts",
            FileSyncState.BEHIND,
            ConflictLikelihood.MEDIUM,
            AutoResolvable.GIT,
        ),
        analysis(
            "diverged.ts",
            FileSyncState.DIVERGED,
            ConflictLikelihood.HIGH,
            AutoResolvable.NONE,
            ResolutionStrategy.MANUAL_MERGE,
        ),
    ]

    summary = summarize(analyses)

    assert summary.possible_conflicts == 3
    assert summary.auto_resolvable_conflicts_by_git == 2
    assert summary.manual_resolvable_conflicts == 1
    assert summary.up_to_date == 7
    assert summary.ahead == 1
    assert summary.behind == 1
    assert summary.diverged == 1
    assert summary.total == 10
    assert summary.errored == 0


def test_ignored_files_excluded_from_conflicts():
    analyses = [
        analysis(
            "config/app.json",
            FileSyncState.DIVERGED,
            ConflictLikelihood.HIGH,
            AutoResolvable.NONE,
            ResolutionStrategy.IGNORED,
        ),
        analysis(
            "src/a.ts",
            FileSyncState.UNRELATED,
            ConflictLikelihood.HIGH,
            AutoResolvable.NONE,
            ResolutionStrategy.MANUAL_MERGE,
        ),
    ]

    summary = summarize(analyses)

    assert summary.possible_conflicts == 1
    assert summary.ignored == 1
    assert summary.diverged == 1
    assert summary.count(FileSyncState.DIVERGED) == 1
    assert not analyses[0].conflict_analysis.expecting_conflict
    assert analyses[1].conflict_analysis.expecting_conflict


def test_pinned_files_excluded_from_conflicts():
    analyses = [
        analysis(
            ".env.example",
            FileSyncState.DIVERGED,
            ConflictLikelihood.HIGH,
            AutoResolvable.NONE,
            ResolutionStrategy.KEEP_FORK,
            pinned=True,
        ),
        analysis(
            "src/a.ts",
            FileSyncState.BEHIND,
            ConflictLikelihood.MEDIUM,
        ),
    ]

    summary = summarize(analyses)

    assert summary.pinned == 1
    assert summary.ignored == 0
    assert summary.possible_conflicts == 1
    assert summary.auto_resolvable_conflicts_by_git == 1
    assert summary.diverged == 1


def test_errors_counted_in_total():
    errors = [
        FileAnalysisError(
            file_path="x.ts", kind="HistoryUnavailableError", message="no"
        )
    ]

    summary = summarize([analysis("a.ts")], errors)

    assert summary.errored == 1
    assert summary.total == 2


def test_empty_run():
    summary = summarize([])

    assert summary.total == 0
    assert summary.possible_conflicts == 0
