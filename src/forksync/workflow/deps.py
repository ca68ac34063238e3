"""Dependencies injected into sync workflow nodes."""

from dataclasses import dataclass

from forksync.git.backend import VcsBackend
from forksync.model.analysis import AnalysisReport


@dataclass
class SyncDeps:
    """VCS backend and the finished analysis the merge acts on."""

    backend: VcsBackend
    report: AnalysisReport
