"""Per-file sync and conflict analysis."""

from forksync.analysis.classifier import classify
from forksync.analysis.comparator import compare_histories, unknown_comparison
from forksync.analysis.conflict import analyze_conflict
from forksync.analysis.ignore import PathRules
from forksync.analysis.pool import WorkerPool
from forksync.analysis.runner import FileAnalyzer, analyze_files
from forksync.analysis.summary import summarize

__all__ = [
    "FileAnalyzer",
    "PathRules",
    "WorkerPool",
    "analyze_conflict",
    "analyze_files",
    "classify",
    "compare_histories",
    "summarize",
    "unknown_comparison",
]
