"""Pull request-related data models."""

from collections.abc import Iterable
from dataclasses import dataclass, replace

from cherrypicker.types.commits import Commit


@dataclass(frozen=True)
class PullRequest:
    """
    Pull request information.

    ``merge_commit_sha`` is where the platform says the PR landed. It is a
    real merge commit only when the PR was merged with a merge commit; for
    squashed and rebased PRs it is an ordinary single-parent commit.
    """

    owner: str
    repo_name: str
    number: int
    merge_commit_sha: str | None
    username: str = ""
    base_branch: str = ""
    head_ref: str = ""
    merged: bool = True
    url: str | None = None
    head_commits: tuple[Commit, ...] = ()  # oldest first

    @property
    def last_commit(self) -> Commit:
        """The newest authored commit of the PR."""
        return self.head_commits[-1]

    def with_commits(self, commits: Iterable[Commit]) -> "PullRequest":
        """Return a copy of this PR carrying the given head commits."""
        return replace(self, head_commits=tuple(commits))


@dataclass(frozen=True)
class PullRequestRef:
    """Reference to a pull request opened by a cherry-pick run."""

    owner: str
    repo_name: str
    number: int
    url: str
    head: str
    base: str
