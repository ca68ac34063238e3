"""Workflow nodes for graph state machine."""

from forksync.workflow.nodes.apply_resolutions import ApplyResolutions
from forksync.workflow.nodes.fetch_remote import FetchRemote
from forksync.workflow.nodes.finalize import Finalize
from forksync.workflow.nodes.merge import MergeBoilerplate

__all__ = [
    "FetchRemote",
    "MergeBoilerplate",
    "ApplyResolutions",
    "Finalize",
]
