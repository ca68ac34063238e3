"""Fork synchronization and merge-conflict analysis."""

__version__ = "0.1.0"
