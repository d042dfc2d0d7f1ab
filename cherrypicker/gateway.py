"""
Repository gateway interface.

The gateway is the only way the cherry-picker talks to the hosting platform.
Implementations own transport concerns (authentication, pagination, retries).
"""

from abc import ABC, abstractmethod

from cherrypicker.types.commits import Commit
from cherrypicker.types.pulls import PullRequest, PullRequestRef


class RepositoryGateway(ABC):
    """Abstract base class for hosting platform gateways."""

    @abstractmethod
    def get_pull_request(self, owner: str, repo: str, number: int) -> PullRequest:
        """
        Fetch a pull request.

        Raises:
            NotFoundError: If the pull request does not exist
        """
        pass

    @abstractmethod
    def get_commit(self, owner: str, repo: str, sha: str) -> Commit:
        """
        Fetch a single commit including its changed files.

        Raises:
            NotFoundError: If the commit does not exist
        """
        pass

    @abstractmethod
    def list_pr_commits(self, owner: str, repo: str, number: int) -> list[Commit]:
        """Fetch the authored commits of a pull request, oldest first."""
        pass

    @abstractmethod
    def create_pull_request(
        self,
        owner: str,
        repo: str,
        head: str,
        base: str,
        title: str,
        body: str,
        maintainer_can_modify: bool = True,
    ) -> PullRequestRef:
        """Open a pull request from ``head`` into ``base``."""
        pass
