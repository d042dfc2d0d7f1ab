"""
Merge mode classification.

GitHub does not report how a pull request was merged, so we infer it from
the shape and content of the commit the PR landed as.
"""

from cherrypicker.exceptions import (
    CherryPickerError,
    EmptyCommitListError,
    InvalidMergeCommitError,
)
from cherrypicker.gateway import RepositoryGateway
from cherrypicker.logging import get_logger
from cherrypicker.types.pulls import PullRequest
from cherrypicker.types.replay import MergeMode

logger = get_logger()


class MergeModeClassifier:
    """
    Decides whether a pull request was squashed, merged or rebased.

    - More than one parent on the merge commit can only be a real merge.
    - A single-commit PR is always treated as squashed. Squash and rebase
      cannot be told apart by content there, and replaying one commit is
      the same operation either way.
    - Otherwise the PR was rebased if the landed commit changed exactly the
      same blobs as the last authored commit, and squashed if not.
    """

    def __init__(self, gateway: RepositoryGateway) -> None:
        """
        Initialize the classifier.

        Args:
            gateway: Gateway used to fetch the merge commit
        """
        self.gateway = gateway

    def classify(self, pr: PullRequest) -> MergeMode:
        """
        Classify how a pull request was merged.

        Args:
            pr: Pull request with its head commits loaded

        Returns:
            The inferred MergeMode

        Raises:
            InvalidMergeCommitError: If the PR is not merged or has no merge
                commit SHA
            EmptyCommitListError: If the PR has no head commits
            NotFoundError: If the merge commit cannot be fetched
        """
        # Open PRs carry the SHA of a test merge commit
        if not pr.merged or not pr.merge_commit_sha:
            raise InvalidMergeCommitError(pr.number)
        if not pr.head_commits:
            raise EmptyCommitListError(pr.number)

        try:
            merge_commit = self.gateway.get_commit(pr.owner, pr.repo_name, pr.merge_commit_sha)
        except CherryPickerError as e:
            e.add_note(f"querying merge commit {pr.merge_commit_sha} of PR #{pr.number}")
            raise

        if merge_commit.is_merge:
            logger.info("PR #%d merged via a merge commit", pr.number)
            return MergeMode.MERGE

        if len(pr.head_commits) == 1:
            logger.info("Considering PR #%d as squash as it only has one commit", pr.number)
            return MergeMode.SQUASH

        # The landed commit is the last of the rebased sequence when the PR
        # was rebased, or a brand new combined commit when it was squashed.
        merge_fingerprint = merge_commit.fingerprint()
        pr_fingerprint = pr.last_commit.fingerprint()
        logger.debug("Merge fingerprint: %s - PR fingerprint: %s", merge_fingerprint, pr_fingerprint)

        if merge_fingerprint == pr_fingerprint:
            logger.info("PR #%d was merged via rebase", pr.number)
            return MergeMode.REBASE

        logger.info("PR #%d was merged via squash", pr.number)
        return MergeMode.SQUASH
