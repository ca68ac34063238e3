"""Version control backends."""

from forksync.git.backend import GitBackend, VcsBackend

__all__ = ["GitBackend", "VcsBackend"]
