"""Exception hierarchy for forksync."""

from __future__ import annotations


class ForkSyncError(Exception):
    """Base class for all forksync failures."""


class UnsupportedRepositoryError(ForkSyncError):
    """Repository configuration cannot be analyzed (e.g. remote mode)."""


class GitCommandError(ForkSyncError):
    """A git invocation exited non-zero."""

    def __init__(
        self,
        command: str,
        returncode: int,
        stderr: str = "",
        stdout: str = "",
    ):
        self.command = command
        self.returncode = returncode
        self.stderr = stderr
        self.stdout = stdout
        detail = stderr.strip() or stdout.strip()
        message = f"git command failed ({returncode}): {command}"
        if detail:
            message = f"{message}\n{detail}"
        super().__init__(message)


class GitTimeoutError(GitCommandError):
    """A git invocation exceeded its timeout and was killed."""

    def __init__(self, command: str, timeout: float):
        self.timeout = timeout
        super().__init__(command, -1, f"timed out after {timeout}s")


class HistoryUnavailableError(ForkSyncError):
    """The commit history of a file could not be determined.

    Distinct from an empty history, which means the file never existed
    on the requested ref.
    """

    def __init__(self, repo_path, ref: str, file_path: str, cause=None):
        self.repo_path = repo_path
        self.ref = ref
        self.file_path = file_path
        self.cause = cause
        message = (
            f"history unavailable for {file_path} at {ref} in {repo_path}"
        )
        if cause is not None:
            message = f"{message}: {cause}"
        super().__init__(message)


class HistoryTimeoutError(HistoryUnavailableError):
    """History lookup was abandoned because it timed out."""


class SyncInProgressError(ForkSyncError):
    """Another sync run already holds the lock for this fork path."""


__all__ = [
    "ForkSyncError",
    "UnsupportedRepositoryError",
    "GitCommandError",
    "GitTimeoutError",
    "HistoryUnavailableError",
    "HistoryTimeoutError",
    "SyncInProgressError",
]
