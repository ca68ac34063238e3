"""CLI command modules for forksync."""

from forksync.command.analyze import AnalyzeCommand
from forksync.command.sync import SyncCommand

__all__ = ["AnalyzeCommand", "SyncCommand"]
