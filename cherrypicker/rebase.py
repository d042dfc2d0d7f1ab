"""
Rebase sequence reconstruction.

When GitHub rebases a pull request every commit is rewritten onto the base
branch: SHAs change, but each rewritten commit changes the same blobs as
the authored commit it came from, in the same order.
"""

from cherrypicker.exceptions import (
    CherryPickerError,
    EmptyCommitListError,
    HistoryExhaustedError,
    HistoryMismatchError,
    InvalidMergeCommitError,
)
from cherrypicker.gateway import RepositoryGateway
from cherrypicker.logging import get_logger
from cherrypicker.types.commits import Commit
from cherrypicker.types.pulls import PullRequest
from cherrypicker.types.replay import MergeMode, ReplaySpec

logger = get_logger()


class RebaseSequenceReconstructor:
    """Recovers the branch commits a rebased pull request landed as."""

    def __init__(self, gateway: RepositoryGateway) -> None:
        self.gateway = gateway

    def reconstruct_sequence(self, pr: PullRequest) -> list[str]:
        """
        Find the branch SHAs matching each PR commit, oldest first.

        Starting at the merge commit SHA (the rewritten last commit) we walk
        first parents backwards, one step per PR commit, asserting that each
        branch commit fingerprints like its PR counterpart.

        Args:
            pr: Pull request with its head commits loaded

        Returns:
            Branch commit SHAs in authorship order

        Raises:
            EmptyCommitListError: If the PR has no head commits
            HistoryMismatchError: If a branch commit does not match its PR commit
            HistoryExhaustedError: If a root commit is reached too early
        """
        if not pr.merge_commit_sha:
            raise InvalidMergeCommitError(pr.number)
        if not pr.head_commits:
            raise EmptyCommitListError(pr.number)

        cache: dict[str, Commit] = {}
        branch_commit = self._get_commit(pr, pr.merge_commit_sha, cache)
        shas: list[str] = []

        for index in range(len(pr.head_commits) - 1, -1, -1):
            pr_fingerprint = pr.head_commits[index].fingerprint()
            branch_fingerprint = branch_commit.fingerprint()
            if pr_fingerprint != branch_fingerprint:
                raise HistoryMismatchError(index, pr_fingerprint, branch_fingerprint)

            logger.debug("Match #%d PR:%s vs Branch:%s", index, pr_fingerprint, branch_fingerprint)

            # Record the branch commit, not the PR commit
            shas.append(branch_commit.sha)

            if index == 0:
                break
            if branch_commit.is_root:
                raise HistoryExhaustedError(index - 1, branch_commit.sha)
            branch_commit = self._get_commit(pr, branch_commit.parents[0], cache)

        shas.reverse()
        logger.info("Found %d rebased commits of PR #%d", len(shas), pr.number)
        return shas

    def resolve(self, pr: PullRequest) -> ReplaySpec:
        """Resolve the replay of a rebased pull request."""
        return ReplaySpec(mode=MergeMode.REBASE, commits=tuple(self.reconstruct_sequence(pr)))

    def _get_commit(self, pr: PullRequest, sha: str, cache: dict[str, Commit]) -> Commit:
        if sha not in cache:
            try:
                cache[sha] = self.gateway.get_commit(pr.owner, pr.repo_name, sha)
            except CherryPickerError as e:
                e.add_note(f"fetching branch commit {sha} while reconstructing PR #{pr.number}")
                raise
        return cache[sha]
