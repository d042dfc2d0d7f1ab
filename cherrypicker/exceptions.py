"""Cherry-picker exception classes."""

from collections.abc import Sequence

from cherrypicker.logging import mask_sensitive_data


class CherryPickerError(Exception):
    """Base exception for all cherry-picker errors."""

    def __init__(
        self, code: str, message: str, request_id: str | None = None
    ) -> None:
        self.code = code
        self.message = message
        self.request_id = request_id
        super().__init__(f"[{code}] {message}")


class ConfigurationError(CherryPickerError):
    """Raised when configuration is invalid or missing."""

    def __init__(self, message: str) -> None:
        super().__init__("CONFIGURATION_ERROR", message)


# ============================================================================
# Gateway / transport errors
# ============================================================================


class AuthenticationError(CherryPickerError):
    """Raised when the GitHub token is rejected."""

    pass


class AuthorizationError(CherryPickerError):
    """Raised when access is denied."""

    pass


class NotFoundError(CherryPickerError):
    """Raised when a pull request, commit or repository is not found."""

    pass


class ConflictError(CherryPickerError):
    """Raised on HTTP 409 responses."""

    pass


class RateLimitedError(CherryPickerError):
    """Raised when rate limited."""

    def __init__(
        self,
        code: str,
        message: str,
        retry_after: int,
        request_id: str | None = None,
    ) -> None:
        super().__init__(code, message, request_id)
        self.retry_after = retry_after


class ValidationError(CherryPickerError):
    """Raised on validation errors (e.g. a pull request already exists)."""

    pass


class ServerError(CherryPickerError):
    """Raised on server errors (5xx) and connection failures."""

    pass


# ============================================================================
# Input inconsistency errors
# ============================================================================


class InvalidMergeCommitError(CherryPickerError):
    """Raised when a pull request is not merged or has no merge commit."""

    def __init__(self, pr_number: int) -> None:
        super().__init__(
            "INVALID_MERGE_COMMIT",
            f"pull request #{pr_number} is not merged or has no merge commit SHA",
        )
        self.pr_number = pr_number


class EmptyCommitListError(CherryPickerError):
    """Raised when a pull request carries no head commits."""

    def __init__(self, pr_number: int) -> None:
        super().__init__(
            "EMPTY_COMMIT_LIST",
            f"pull request #{pr_number} has an empty commit list",
        )
        self.pr_number = pr_number


class PatchTreeNotFoundError(CherryPickerError):
    """Raised when no parent of a merge commit holds the PR's patch tree."""

    def __init__(self, pr_number: int, parent_count: int) -> None:
        super().__init__(
            "PATCH_TREE_NOT_FOUND",
            f"unable to find patch tree of merge commit of PR #{pr_number} "
            f"among {parent_count} parents",
        )
        self.pr_number = pr_number
        self.parent_count = parent_count


class HistoryMismatchError(CherryPickerError):
    """Raised when branch history does not line up with the PR commits."""

    def __init__(
        self, index: int, pr_fingerprint: str, branch_fingerprint: str
    ) -> None:
        super().__init__(
            "HISTORY_MISMATCH",
            f"mismatch in change fingerprints on commit #{index} "
            f"PR:{pr_fingerprint} vs Branch:{branch_fingerprint}",
        )
        self.index = index
        self.pr_fingerprint = pr_fingerprint
        self.branch_fingerprint = branch_fingerprint


class HistoryExhaustedError(CherryPickerError):
    """Raised when a root commit is reached before all PR commits matched."""

    def __init__(self, index: int, sha: str) -> None:
        super().__init__(
            "HISTORY_EXHAUSTED",
            f"branch commit {sha} has no parents but PR commit #{index} "
            "is still unmatched",
        )
        self.index = index
        self.sha = sha


# ============================================================================
# Local repository errors
# ============================================================================


class RebaseInProgressError(CherryPickerError):
    """Raised when the working tree has a rebase or cherry-pick underway."""

    def __init__(self, path: str) -> None:
        super().__init__(
            "REBASE_IN_PROGRESS",
            f"there is a rebase in progress in {path}, "
            "unable to cherry pick at this time",
        )
        self.path = path


class GitCommandError(CherryPickerError):
    """Raised when a git subprocess exits with a non-zero status."""

    def __init__(
        self, args: Sequence[str], returncode: int, stderr: str | None = None
    ) -> None:
        # Clone and remote URLs may embed credentials
        command = mask_sensitive_data(" ".join(args))
        detail = mask_sensitive_data(stderr or "").strip()
        message = f"`{command}` exited with status {returncode}"
        if detail:
            message = f"{message}: {detail}"
        super().__init__("GIT_COMMAND_FAILED", message)
        self.command = [mask_sensitive_data(arg) for arg in args]
        self.returncode = returncode
        self.stderr = mask_sensitive_data(stderr) if stderr is not None else None


class CherryPickConflictError(CherryPickerError):
    """Raised when a cherry-pick leaves unmerged paths in the working tree."""

    def __init__(
        self,
        branch: str,
        commits: Sequence[str],
        files: Sequence[str] = (),
    ) -> None:
        super().__init__(
            "CHERRY_PICK_CONFLICT",
            f"conflicts found while cherry picking {len(commits)} commit(s) "
            f"into {branch}",
        )
        self.branch = branch
        self.commits = list(commits)
        self.files = list(files)


# ============================================================================
# Orchestration errors
# ============================================================================


class CherryPickCancelledError(CherryPickerError):
    """Raised when a run observes its cancellation signal."""

    def __init__(self, state: str, partial_state: bool) -> None:
        message = f"cherry pick cancelled before {state}"
        if partial_state:
            message += ", a partially populated feature branch may exist"
        super().__init__("CANCELLED", message)
        self.state = state
        self.partial_state = partial_state


class CherryPickFailedError(CherryPickerError):
    """
    The single error surfaced by a failed cherry-pick run.

    The underlying failure is chained as ``__cause__``.
    """

    def __init__(
        self,
        state: str,
        operation: str,
        pr_number: int,
        branch: str,
        feature_branch: str | None = None,
        cause: BaseException | None = None,
    ) -> None:
        message = f"{operation} (PR #{pr_number} onto {branch})"
        if feature_branch:
            message += f", feature branch {feature_branch} left in place"
        if cause is not None:
            message += f": {cause}"
        super().__init__("CHERRY_PICK_FAILED", message)
        self.state = state
        self.operation = operation
        self.pr_number = pr_number
        self.branch = branch
        self.feature_branch = feature_branch
