"""Cherry-picker type definitions.

This module exports all data model types used by the package.
"""

from cherrypicker.types.commits import Commit, CommitFile
from cherrypicker.types.pulls import PullRequest, PullRequestRef
from cherrypicker.types.replay import CherryPickRun, MergeMode, ReplaySpec, RunState

__all__ = [
    # Commit types
    "Commit",
    "CommitFile",
    # Pull request types
    "PullRequest",
    "PullRequestRef",
    # Replay types
    "MergeMode",
    "ReplaySpec",
    "RunState",
    "CherryPickRun",
]
