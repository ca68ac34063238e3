"""Tests for conflict likelihood and resolution decisions."""

import itertools

import pytest

from forksync.analysis.classifier import classify
from forksync.analysis.comparator import compare_histories
from forksync.analysis.conflict import (
    analyze_conflict,
    auto_resolvable,
    blob_status,
    conflict_likelihood,
    conflict_reason,
    resolution_reason,
    resolution_strategy,
)
from forksync.model.analysis import (
    AutoResolvable,
    BlobComparisonStatus as Blob,
    ConflictLikelihood as L,
    ConflictReason,
    FileSyncState as S,
    ResolutionReason,
    ResolutionStrategy,
)
from forksync.model.entries import CommitEntry, FileEntry


def entry(blob="b1", commit="c1", path="c.ts"):
    return FileEntry(path=path, blob_sha=blob, last_commit_sha=commit)


def test_blob_status():
    assert blob_status(entry("x"), None) == Blob.UNKNOWN
    assert blob_status(entry("x"), entry("x")) == Blob.IDENTICAL
    assert blob_status(entry("x"), entry("y")) == Blob.DIFFERENT


@pytest.mark.parametrize(
    "state,blob,expected",
    [
        (S.MISSING, Blob.UNKNOWN, L.HIGH),
        (S.UP_TO_DATE, Blob.IDENTICAL, L.LOW),
        (S.UP_TO_DATE, Blob.DIFFERENT, L.MEDIUM),
        (S.DIVERGED, Blob.DIFFERENT, L.HIGH),
        (S.DIVERGED, Blob.IDENTICAL, L.MEDIUM),
        (S.UNRELATED, Blob.IDENTICAL, L.HIGH),
        (S.UNRELATED, Blob.DIFFERENT, L.HIGH),
        (S.AHEAD, Blob.DIFFERENT, L.MEDIUM),
        (S.BEHIND, Blob.DIFFERENT, L.MEDIUM),
        (S.OUTDATED, Blob.DIFFERENT, L.MEDIUM),
        (S.OUTDATED, Blob.IDENTICAL, L.LOW),
        (S.BEHIND, Blob.IDENTICAL, L.LOW),
        (S.AHEAD, Blob.IDENTICAL, L.MEDIUM),
    ],
)
def test_conflict_likelihood_table(state, blob, expected):
    assert conflict_likelihood(state, blob) == expected


@pytest.mark.parametrize(
    "state,blob,expected",
    [
        (S.DIVERGED, Blob.IDENTICAL, ConflictReason.DIVERGED_HISTORIES),
        (S.UNRELATED, Blob.DIFFERENT, ConflictReason.UNRELATED_HISTORIES),
        (S.MISSING, Blob.UNKNOWN, ConflictReason.MISSING_IN_FORK),
        (S.BEHIND, Blob.DIFFERENT, ConflictReason.OUTDATED_IN_FORK),
        (S.OUTDATED, Blob.IDENTICAL, ConflictReason.OUTDATED_IN_FORK),
        (S.UP_TO_DATE, Blob.DIFFERENT, ConflictReason.BLOB_MISMATCH),
        (S.AHEAD, Blob.DIFFERENT, ConflictReason.BLOB_MISMATCH),
        (S.UP_TO_DATE, Blob.IDENTICAL, ConflictReason.NONE),
        (S.AHEAD, Blob.IDENTICAL, ConflictReason.NONE),
    ],
)
def test_conflict_reason_table(state, blob, expected):
    assert conflict_reason(state, blob) == expected


@pytest.mark.parametrize(
    "state,blob,expected",
    [
        (S.MISSING, Blob.UNKNOWN, AutoResolvable.NONE),
        (S.DIVERGED, Blob.IDENTICAL, AutoResolvable.GIT),
        (S.AHEAD, Blob.DIFFERENT, AutoResolvable.GIT),
        (S.BEHIND, Blob.DIFFERENT, AutoResolvable.GIT),
        (S.DIVERGED, Blob.DIFFERENT, AutoResolvable.NONE),
        (S.UNRELATED, Blob.DIFFERENT, AutoResolvable.NONE),
        (S.OUTDATED, Blob.DIFFERENT, AutoResolvable.NONE),
    ],
)
def test_auto_resolvable_table(state, blob, expected):
    assert auto_resolvable(state, blob) == expected


def test_low_likelihood_wins_over_sync_state():
    """Rule order: LOW is checked before AHEAD and BEHIND."""
    result = resolution_strategy(S.AHEAD, L.LOW, AutoResolvable.NONE)
    assert result == ResolutionStrategy.KEEP_BOILERPLATE


def test_ahead_keeps_fork_even_when_git_can_resolve():
    result = resolution_strategy(S.AHEAD, L.MEDIUM, AutoResolvable.GIT)
    assert result == ResolutionStrategy.KEEP_FORK


def test_missing_is_manual_before_auto_resolvable():
    result = resolution_strategy(S.MISSING, L.HIGH, AutoResolvable.GIT)
    assert result == ResolutionStrategy.MANUAL_MERGE


def test_git_resolvable_keeps_boilerplate():
    result = resolution_strategy(S.DIVERGED, L.MEDIUM, AutoResolvable.GIT)
    assert result == ResolutionStrategy.KEEP_BOILERPLATE


def test_unresolvable_risk_is_manual():
    result = resolution_strategy(S.UNRELATED, L.HIGH, AutoResolvable.NONE)
    assert result == ResolutionStrategy.MANUAL_MERGE


@pytest.mark.parametrize(
    "state,blob,expected",
    [
        (S.AHEAD, Blob.DIFFERENT, ResolutionReason.FORK_HAS_NEWER_COMMITS),
        (
            S.BEHIND,
            Blob.DIFFERENT,
            ResolutionReason.BOILERPLATE_HAS_NEWER_COMMITS,
        ),
        (S.UP_TO_DATE, Blob.IDENTICAL, ResolutionReason.SHOULD_BE_IDENTICAL),
        (
            S.UP_TO_DATE,
            Blob.DIFFERENT,
            ResolutionReason.SHOULD_BE_AUTO_MERGED,
        ),
        (S.MISSING, Blob.UNKNOWN, ResolutionReason.MANUAL_MERGE_REQUIRED),
        (S.DIVERGED, Blob.DIFFERENT, ResolutionReason.MANUAL_MERGE_REQUIRED),
        (S.UNRELATED, Blob.DIFFERENT, ResolutionReason.MANUAL_MERGE_REQUIRED),
        (S.OUTDATED, Blob.DIFFERENT, ResolutionReason.MANUAL_MERGE_REQUIRED),
    ],
)
def test_resolution_reason_table(state, blob, expected):
    assert resolution_reason(state, blob) == expected


def test_missing_file_analysis():
    """b.ts exists only in the boilerplate."""
    boilerplate = entry(path="b.ts")
    state = classify(boilerplate, None)
    analysis = analyze_conflict(state, boilerplate, None)

    assert analysis.sync_state == S.MISSING
    assert analysis.blob_status == Blob.UNKNOWN
    assert analysis.conflict_likelihood == L.HIGH
    assert analysis.auto_resolvable == AutoResolvable.NONE
    assert analysis.resolution_strategy == ResolutionStrategy.MANUAL_MERGE
    assert analysis.expecting_conflict
    assert not analysis.can_auto_resolve


def test_behind_with_different_blob():
    """c.ts: boilerplate [H2, H1], fork [H1], content differs."""
    boilerplate = entry("new", "H2")
    fork = entry("old", "H1")
    history = compare_histories(
        [CommitEntry(sha="H2", date="d2"), CommitEntry(sha="H1", date="d1")],
        [CommitEntry(sha="H1", date="d1")],
    )
    state = classify(boilerplate, fork, history)
    analysis = analyze_conflict(state, boilerplate, fork)

    assert state == S.BEHIND
    assert analysis.conflict_likelihood == L.MEDIUM
    assert analysis.auto_resolvable == AutoResolvable.GIT
    assert analysis.resolution_strategy == ResolutionStrategy.KEEP_BOILERPLATE
    assert (
        analysis.resolution_reason
        == ResolutionReason.BOILERPLATE_HAS_NEWER_COMMITS
    )


def test_strategy_always_defined_and_deterministic():
    forks = [None, entry("b1", "c2"), entry("b2", "c2")]
    for state, fork in itertools.product(S, forks):
        first = analyze_conflict(state, entry("b1", "c1"), fork)
        second = analyze_conflict(state, entry("b1", "c1"), fork)
        assert first == second
        assert first.resolution_strategy in ResolutionStrategy
        assert first.resolution_reason is not None


def test_git_resolvable_low_requires_identical_blob():
    forks = [None, entry("b1", "c2"), entry("b2", "c2")]
    for state, fork in itertools.product(S, forks):
        analysis = analyze_conflict(state, entry("b1", "c1"), fork)
        if (
            analysis.auto_resolvable == AutoResolvable.GIT
            and analysis.conflict_likelihood == L.LOW
        ):
            assert analysis.blob_status == Blob.IDENTICAL


def test_git_resolvable_can_be_medium():
    analysis = analyze_conflict(S.AHEAD, entry("b1"), entry("b2", "c2"))

    assert analysis.auto_resolvable == AutoResolvable.GIT
    assert analysis.conflict_likelihood == L.MEDIUM
