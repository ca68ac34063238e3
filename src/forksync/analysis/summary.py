"""Fold per-file analyses into run-level counts."""

from collections import Counter
from collections.abc import Iterable

from forksync.model.analysis import (
    AutoResolvable,
    ConflictLikelihood,
    FileAnalysisError,
    FileSyncAnalysis,
    FileSyncSummary,
    state_field,
)


def summarize(
    analyses: Iterable[FileSyncAnalysis],
    errors: Iterable[FileAnalysisError] = (),
) -> FileSyncSummary:
    """Count sync states and expected conflicts.

    Ignored and pinned files count toward their sync state and their
    own counter, but never toward the conflict counts.
    """
    states = Counter()
    possible = auto = ignored = pinned = total = 0

    for analysis in analyses:
        total += 1
        conflict = analysis.conflict_analysis
        states[state_field(conflict.sync_state)] += 1
        if analysis.ignored:
            ignored += 1
            continue
        if analysis.pinned:
            pinned += 1
            continue
        if conflict.conflict_likelihood >= ConflictLikelihood.MEDIUM:
            possible += 1
            if conflict.auto_resolvable == AutoResolvable.GIT:
                auto += 1

    errored = sum(1 for _ in errors)
    return FileSyncSummary(
        **states,
        possible_conflicts=possible,
        auto_resolvable_conflicts_by_git=auto,
        manual_resolvable_conflicts=possible - auto,
        ignored=ignored,
        pinned=pinned,
        errored=errored,
        total=total + errored,
    )
