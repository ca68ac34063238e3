"""VCS backend contract and its git command-line implementation."""

from __future__ import annotations

import shlex
from pathlib import Path
from typing import Protocol

from forksync.core.errors import (
    GitCommandError,
    GitTimeoutError,
    HistoryTimeoutError,
    HistoryUnavailableError,
)
from forksync.core.log import logger
from forksync.core.runner import Runner
from forksync.model.entries import CommitEntry, FileEntry

GIT = "git -c core.quotepath=off"
_COMMIT_PREFIX = "commit:"


class VcsBackend(Protocol):
    """Operations the analyzer and the sync orchestrator need.

    Every method is a coroutine so a caller can run many of them under
    one concurrency limit and cancel them together.
    """

    async def list_files(self, repo_path: Path, ref: str) -> list[FileEntry]:
        """Every tracked file at ref with blob and last-commit SHAs."""
        ...

    async def file_history(
        self, repo_path: Path, ref: str, file_path: str
    ) -> list[CommitEntry]:
        """Commits touching file_path on ref, newest first, following
        renames. Empty when the file never existed on ref.

        Raises:
            HistoryUnavailableError: If the log could not be read
        """
        ...

    async def ensure_remote(self, repo_path: Path, name: str, url: str):
        ...

    async def fetch(self, repo_path: Path, remote: str, branch: str) -> str:
        """Fetch branch from remote; returns the remote-tracking ref."""
        ...

    async def checkout(self, repo_path: Path, branch: str):
        ...

    async def rev_parse(self, repo_path: Path, ref: str) -> str:
        ...

    async def merge(
        self,
        repo_path: Path,
        ref: str,
        allow_unrelated_histories: bool = False,
    ) -> bool:
        """Merge ref without committing; False when git stopped on
        conflicts.

        Raises:
            GitCommandError: If git refused the merge and left no merge
                in progress, carrying git's own output
        """
        ...

    async def is_merge_in_progress(self, repo_path: Path) -> bool:
        ...

    async def status(self, repo_path: Path) -> str:
        """Short working-tree status, one line per changed path."""
        ...

    async def stage_path(self, repo_path: Path, path: str, source_ref: str):
        """Replace path in index and worktree with its content at
        source_ref."""
        ...

    async def remove_path(self, repo_path: Path, path: str):
        ...

    async def commit(self, repo_path: Path, message: str):
        ...


def _q(value) -> str:
    return shlex.quote(str(value))


def parse_ls_tree(output: str) -> dict[str, str]:
    """Map path to blob SHA from `git ls-tree -r` output.

    Submodule (commit) entries are skipped; they have no blob.
    """
    blobs = {}
    for line in output.splitlines():
        if not line:
            continue
        meta, _, path = line.partition("\t")
        parts = meta.split()
        if len(parts) != 3 or parts[1] != "blob":
            continue
        blobs[path] = parts[2]
    return blobs


def parse_last_commits(output: str, paths) -> dict[str, str]:
    """Map each path to the newest commit that touched it.

    output is `git log --format=commit:%H --name-only`, newest first;
    the first commit a path shows up under is its last commit.
    """
    wanted = set(paths)
    last = {}
    current = None
    for line in output.splitlines():
        if line.startswith(_COMMIT_PREFIX):
            current = line[len(_COMMIT_PREFIX):].strip()
            continue
        if not line or current is None:
            continue
        if line in wanted and line not in last:
            last[line] = current
            if len(last) == len(wanted):
                break
    return last


def parse_history(output: str) -> list[CommitEntry]:
    """Parse `git log --format=%H|%aI` lines into CommitEntry records."""
    entries = []
    for line in output.splitlines():
        line = line.strip()
        if not line:
            continue
        sha, _, date = line.partition("|")
        entries.append(CommitEntry(sha=sha, date=date))
    return entries


class GitBackend:
    """VcsBackend backed by the git CLI, run through invoke."""

    def __init__(
        self,
        runner: Runner | None = None,
        command_timeout: float | None = None,
        history_timeout: float | None = None,
    ):
        """
        Args:
            runner: Command runner (a fresh Runner if None)
            command_timeout: Seconds allowed for repository commands
            history_timeout: Seconds allowed for one per-file log
        """
        self.runner = runner or Runner()
        self.command_timeout = command_timeout
        self.history_timeout = history_timeout

    @classmethod
    def from_config(cls, config) -> "GitBackend":
        """Backend with the timeouts of a loaded Config."""
        return cls(
            command_timeout=config.sync.command_timeout,
            history_timeout=config.analysis.history_timeout,
        )

    async def _git(self, repo_path: Path, args: str, check: bool = True,
                   timeout: float | None = None):
        # exec so that killing the shell on timeout or cancel kills git
        return await self.runner.execute_async(
            f"exec {GIT} {args}",
            cwd=repo_path,
            timeout=timeout or self.command_timeout,
            check=check,
        )

    async def list_files(self, repo_path: Path, ref: str) -> list[FileEntry]:
        tree = await self._git(repo_path, f"ls-tree -r {_q(ref)}")
        blobs = parse_ls_tree(tree.stdout)
        if not blobs:
            return []

        log = await self._git(
            repo_path,
            f"log --format={_COMMIT_PREFIX}%H --name-only {_q(ref)} --",
        )
        last = parse_last_commits(log.stdout, blobs)
        missing = [path for path in blobs if path not in last]
        if missing:
            # Only reachable through merge commits; attribute to ref
            head = await self.rev_parse(repo_path, ref)
            logger.debug(
                f"{len(missing)} files in {ref} have no non-merge commit"
            )
            for path in missing:
                last[path] = head

        return [
            FileEntry(path=path, blob_sha=sha, last_commit_sha=last[path])
            for path, sha in sorted(blobs.items())
        ]

    async def file_history(
        self, repo_path: Path, ref: str, file_path: str
    ) -> list[CommitEntry]:
        try:
            result = await self._git(
                repo_path,
                f"log {_q('--format=%H|%aI')} --follow {_q(ref)} "
                f"-- {_q(file_path)}",
                timeout=self.history_timeout,
            )
        except GitTimeoutError as e:
            raise HistoryTimeoutError(repo_path, ref, file_path, e) from e
        except GitCommandError as e:
            raise HistoryUnavailableError(repo_path, ref, file_path, e) from e
        return parse_history(result.stdout)

    async def ensure_remote(self, repo_path: Path, name: str, url: str):
        current = await self._git(
            repo_path, f"remote get-url {_q(name)}", check=False
        )
        if current.exited != 0:
            logger.info(f"Adding remote {name} -> {url}")
            await self._git(repo_path, f"remote add {_q(name)} {_q(url)}")
        elif current.stdout.strip() != str(url):
            logger.info(f"Pointing remote {name} at {url}")
            await self._git(repo_path, f"remote set-url {_q(name)} {_q(url)}")

    async def fetch(self, repo_path: Path, remote: str, branch: str) -> str:
        tracking = f"{remote}/{branch}"
        refspec = f"+refs/heads/{branch}:refs/remotes/{tracking}"
        await self._git(
            repo_path, f"fetch --no-tags {_q(remote)} {_q(refspec)}"
        )
        return tracking

    async def checkout(self, repo_path: Path, branch: str):
        await self._git(repo_path, f"checkout {_q(branch)}")

    async def rev_parse(self, repo_path: Path, ref: str) -> str:
        result = await self._git(
            repo_path, f"rev-parse --verify {_q(ref + '^{commit}')}"
        )
        return result.stdout.strip()

    async def merge(
        self,
        repo_path: Path,
        ref: str,
        allow_unrelated_histories: bool = False,
    ) -> bool:
        flags = "--no-commit --no-ff --no-edit"
        if allow_unrelated_histories:
            flags += " --allow-unrelated-histories"
        command = f"merge {flags} {_q(ref)}"
        result = await self._git(repo_path, command, check=False)
        if result.exited == -1:
            raise GitTimeoutError(f"git {command}", self.command_timeout)
        if result.exited == 0:
            return True
        if not await self.is_merge_in_progress(repo_path):
            # git refused to start (dirty tree, unrelated histories)
            raise GitCommandError(
                f"git {command}", result.exited, result.stderr, result.stdout
            )
        logger.debug(
            f"git merge {ref} stopped with conflicts",
            exited=result.exited,
            stdout=result.stdout,
        )
        return False

    async def is_merge_in_progress(self, repo_path: Path) -> bool:
        result = await self._git(
            repo_path, "rev-parse -q --verify MERGE_HEAD", check=False
        )
        return result.exited == 0

    async def status(self, repo_path: Path) -> str:
        result = await self._git(repo_path, "status --porcelain")
        return result.stdout

    async def stage_path(self, repo_path: Path, path: str, source_ref: str):
        await self._git(repo_path, f"checkout {_q(source_ref)} -- {_q(path)}")

    async def remove_path(self, repo_path: Path, path: str):
        await self._git(
            repo_path, f"rm -q -f --ignore-unmatch -- {_q(path)}"
        )

    async def commit(self, repo_path: Path, message: str):
        await self._git(
            repo_path, f"commit --no-edit --no-verify -m {_q(message)}"
        )
