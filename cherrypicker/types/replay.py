"""Replay-related data models."""

from dataclasses import dataclass, field
from enum import Enum

from cherrypicker.types.pulls import PullRequestRef


class MergeMode(str, Enum):
    """How a pull request was landed on its base branch."""

    SQUASH = "squash"
    MERGE = "merge"
    REBASE = "rebase"


@dataclass(frozen=True)
class ReplaySpec:
    """
    Everything needed to replay a pull request onto another branch.

    ``commits`` are applied in order. For merge-mode replays
    ``patch_parent_index`` is the 0-based index of the merge commit parent
    that holds the PR's own history.
    """

    mode: MergeMode
    commits: tuple[str, ...]
    patch_parent_index: int | None = None
    parent_count: int = 1

    @property
    def mainline_parent(self) -> int | None:
        """
        The 1-based parent number to pass to ``git cherry-pick -m``.

        git diffs the merge commit against the mainline parent, which must be
        the parent that does *not* carry the PR, never the patch-tree parent.
        """
        if self.patch_parent_index is None:
            return None
        for index in range(self.parent_count):
            if index != self.patch_parent_index:
                return index + 1
        return None


class RunState(str, Enum):
    """States of a cherry-pick run."""

    INIT = "init"
    FETCHING = "fetching"
    CLASSIFYING = "classifying"
    BRANCH_CREATED = "branch_created"
    REPLAYING = "replaying"
    PUSHED = "pushed"
    PR_OPENED = "pr_opened"
    DONE = "done"
    FAILED = "failed"


@dataclass
class CherryPickRun:
    """Transient state of one cherry-pick invocation."""

    pr_number: int
    target_branch: str
    state: RunState = RunState.INIT
    feature_branch: str | None = None
    replay: ReplaySpec | None = None
    has_conflicts: bool = False
    conflicting_files: list[str] = field(default_factory=list)
    pull_request: PullRequestRef | None = None

    @property
    def touched_working_tree(self) -> bool:
        """True once the local working tree may hold partial results."""
        return self.feature_branch is not None
