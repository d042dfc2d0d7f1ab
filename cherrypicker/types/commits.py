"""Commit-related data models."""

from dataclasses import dataclass

from cherrypicker.fingerprint import fingerprint


@dataclass(frozen=True)
class CommitFile:
    """A file changed by a commit, relative to its first parent."""

    filename: str
    sha: str  # blob SHA of the new content


@dataclass(frozen=True)
class Commit:
    """
    A commit as reported by the hosting platform.

    Commits are immutable once fetched. A commit with no parents is a root
    commit, one parent is an ordinary commit, two or more is a merge commit.
    """

    sha: str
    parents: tuple[str, ...] = ()
    files: tuple[CommitFile, ...] = ()
    tree_sha: str | None = None

    @property
    def is_merge(self) -> bool:
        """True if the commit has more than one parent."""
        return len(self.parents) > 1

    @property
    def is_root(self) -> bool:
        """True if the commit has no parents."""
        return not self.parents

    def fingerprint(self) -> str:
        """Return the order-independent fingerprint of the changed files."""
        return fingerprint((f.filename, f.sha) for f in self.files)
