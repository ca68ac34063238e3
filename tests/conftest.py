"""Pytest configuration and fixtures for forksync tests."""

import asyncio
import sys
import tempfile
from pathlib import Path

import pytest

from forksync.core.errors import GitCommandError
from forksync.core.log import ConsoleSink, setup_logger


@pytest.fixture(autouse=True, scope="session")
def configure_logging():
    """Configure logging for console-only mode during tests.

    This enables debug output during test runs without requiring
    authentication or sending logs to logfire.dev.
    """
    test_log_root = Path(tempfile.gettempdir()) / "forksync-tests"
    setup_logger(
        log_root=test_log_root,
        run_name="test",
        console=ConsoleSink(level="debug"),
    )


@pytest.fixture
def mock_argv():
    """Save and restore sys.argv; settings sources read --include."""
    original = sys.argv.copy()
    sys.argv = ["forksync"]
    yield
    sys.argv = original


class FakeBackend:
    """In-memory VcsBackend.

    files: {repo_path: [FileEntry]}
    histories: {(repo_path, path): [CommitEntry] or an exception}
    Every call is appended to `calls` as (method, args...).
    """

    def __init__(self, files=None, histories=None, delay: float = 0):
        self.files = files or {}
        self.histories = histories or {}
        self.delay = delay
        self.calls = []
        self.merge_result = True
        self.merge_in_progress = True
        self.worktree_status = " M upstream.txt\n"
        self.fail_on = set()
        self.head = "f0rkhead"
        self.in_flight = 0
        self.peak = 0

    def _record(self, *call):
        self.calls.append(call)
        if call[0] in self.fail_on:
            raise GitCommandError(f"git {call[0]}", 128, "boom")

    def called(self, method):
        return [call for call in self.calls if call[0] == method]

    async def list_files(self, repo_path, ref):
        self._record("list_files", repo_path, ref)
        return list(self.files.get(repo_path, []))

    async def file_history(self, repo_path, ref, file_path):
        self._record("file_history", repo_path, ref, file_path)
        self.in_flight += 1
        self.peak = max(self.peak, self.in_flight)
        try:
            if self.delay:
                await asyncio.sleep(self.delay)
            history = self.histories.get((repo_path, file_path), [])
            if isinstance(history, Exception):
                raise history
            return list(history)
        finally:
            self.in_flight -= 1

    async def ensure_remote(self, repo_path, name, url):
        self._record("ensure_remote", repo_path, name, url)

    async def fetch(self, repo_path, remote, branch):
        self._record("fetch", repo_path, remote, branch)
        return f"{remote}/{branch}"

    async def checkout(self, repo_path, branch):
        self._record("checkout", repo_path, branch)

    async def rev_parse(self, repo_path, ref):
        self._record("rev_parse", repo_path, ref)
        return self.head

    async def merge(self, repo_path, ref, allow_unrelated_histories=False):
        self._record("merge", repo_path, ref, allow_unrelated_histories)
        if not self.merge_result and not self.merge_in_progress:
            raise GitCommandError(
                f"git merge {ref}",
                128,
                "error: Your local changes would be overwritten by merge",
            )
        return self.merge_result

    async def is_merge_in_progress(self, repo_path):
        self._record("is_merge_in_progress", repo_path)
        return self.merge_in_progress

    async def status(self, repo_path):
        self._record("status", repo_path)
        return self.worktree_status

    async def stage_path(self, repo_path, path, source_ref):
        self._record("stage_path", repo_path, path, source_ref)

    async def remove_path(self, repo_path, path):
        self._record("remove_path", repo_path, path)

    async def commit(self, repo_path, message):
        self._record("commit", repo_path, message)


@pytest.fixture
def fake_backend():
    return FakeBackend()
