"""
Patch tree resolution for pull requests merged with a merge commit.

A merge commit has one parent carrying the branch history and another
carrying the PR's own commits. The PR side is the parent whose changes
match the last commit of the pull request.
"""

from cherrypicker.exceptions import (
    CherryPickerError,
    EmptyCommitListError,
    InvalidMergeCommitError,
    PatchTreeNotFoundError,
)
from cherrypicker.gateway import RepositoryGateway
from cherrypicker.logging import get_logger
from cherrypicker.types.commits import Commit
from cherrypicker.types.pulls import PullRequest
from cherrypicker.types.replay import MergeMode, ReplaySpec

logger = get_logger()


class PatchTreeResolver:
    """Finds which parent of a merge commit holds the pull request's changes."""

    def __init__(self, gateway: RepositoryGateway) -> None:
        self.gateway = gateway

    def resolve_patch_tree_parent(self, pr: PullRequest) -> int:
        """
        Return the 0-based index of the merge commit parent on the PR side.

        Callers cherry-picking the merge commit must diff against a
        *different* parent; see ReplaySpec.mainline_parent.

        Raises:
            PatchTreeNotFoundError: If no parent matches the PR's last commit
        """
        _, index = self._find_patch_parent(pr)
        return index

    def resolve(self, pr: PullRequest) -> ReplaySpec:
        """
        Resolve the replay of a merge-committed pull request.

        Args:
            pr: Pull request with its head commits loaded

        Returns:
            ReplaySpec cherry-picking the merge commit against its mainline

        Raises:
            EmptyCommitListError: If the PR has no head commits
            PatchTreeNotFoundError: If no parent matches the PR's last commit
        """
        merge_commit, index = self._find_patch_parent(pr)
        return ReplaySpec(
            mode=MergeMode.MERGE,
            commits=(merge_commit.sha,),
            patch_parent_index=index,
            parent_count=len(merge_commit.parents),
        )

    def _find_patch_parent(self, pr: PullRequest) -> tuple[Commit, int]:
        """Return the merge commit and the index of its PR-side parent."""
        if not pr.merge_commit_sha:
            raise InvalidMergeCommitError(pr.number)
        if not pr.head_commits:
            raise EmptyCommitListError(pr.number)

        owner, repo = pr.owner, pr.repo_name
        try:
            merge_commit = self.gateway.get_commit(owner, repo, pr.merge_commit_sha)
        except CherryPickerError as e:
            e.add_note(f"querying merge commit {pr.merge_commit_sha} of PR #{pr.number}")
            raise

        if not merge_commit.is_merge:
            raise PatchTreeNotFoundError(pr.number, len(merge_commit.parents))

        pr_fingerprint = pr.last_commit.fingerprint()

        for index, parent_sha in enumerate(merge_commit.parents):
            try:
                parent = self.gateway.get_commit(owner, repo, parent_sha)
            except CherryPickerError as e:
                e.add_note(f"querying parent #{index} {parent_sha} of merge commit {merge_commit.sha}")
                raise

            logger.debug("PR: %s - Parent #%d: %s", pr_fingerprint, index, parent.fingerprint())
            if parent.fingerprint() == pr_fingerprint:
                logger.info("PR #%d patch tree found in parent #%d of %s", pr.number, index, merge_commit.sha)
                return merge_commit, index

        # Never fall back to a default parent
        raise PatchTreeNotFoundError(pr.number, len(merge_commit.parents))
