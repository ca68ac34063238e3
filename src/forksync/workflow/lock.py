"""Single-flight guard: one sync per fork working tree."""

import contextlib
import hashlib
import os
from pathlib import Path

from forksync.core.errors import SyncInProgressError
from forksync.core.log import logger


def _pid_alive(pid: int) -> bool:
    try:
        os.kill(pid, 0)
    except ProcessLookupError:
        return False
    except PermissionError:
        # Exists but owned by someone else
        return True
    except OSError:
        return False
    return True


class SyncLock:
    """Exclusive lock file keyed by the resolved fork path.

    The file holds the owner's PID. A lock left behind by a process
    that no longer exists is reclaimed.
    """

    def __init__(self, lock_dir: Path, fork_path: Path):
        self.fork_path = Path(fork_path).resolve()
        digest = hashlib.sha1(str(self.fork_path).encode()).hexdigest()
        self.path = Path(lock_dir) / f"sync-{digest[:16]}.lock"
        self.held = False

    def _owner(self) -> int | None:
        try:
            return int(self.path.read_text().strip())
        except (FileNotFoundError, ValueError):
            return None

    def _create(self) -> bool:
        try:
            fd = os.open(self.path, os.O_CREAT | os.O_EXCL | os.O_WRONLY)
        except FileExistsError:
            return False
        with os.fdopen(fd, "w") as f:
            f.write(str(os.getpid()))
        return True

    def acquire(self):
        """Take the lock.

        Raises:
            SyncInProgressError: If a live process holds it
        """
        self.path.parent.mkdir(parents=True, exist_ok=True)
        if not self._create():
            owner = self._owner()
            if owner is not None and _pid_alive(owner):
                raise SyncInProgressError(
                    f"sync already running for {self.fork_path} "
                    f"(pid {owner}, lock {self.path})"
                )
            logger.warn(
                f"Reclaiming stale sync lock {self.path}", pid=owner
            )
            with contextlib.suppress(FileNotFoundError):
                self.path.unlink()
            if not self._create():
                raise SyncInProgressError(
                    f"sync already running for {self.fork_path} "
                    f"(lock {self.path})"
                )
        self.held = True
        logger.debug(f"Acquired sync lock {self.path}")

    def release(self):
        if not self.held:
            return
        with contextlib.suppress(FileNotFoundError):
            self.path.unlink()
        self.held = False

    def __enter__(self):
        self.acquire()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):  # noqa: U100
        self.release()
        return False
