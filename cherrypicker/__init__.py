"""Cherry-picker - cherry-pick merged GitHub pull requests onto other branches."""

from cherrypicker.cherrypicker import CherryPicker, CherryPickerOptions
from cherrypicker.classifier import MergeModeClassifier
from cherrypicker.client import GitHubClient
from cherrypicker.exceptions import (
    AuthenticationError,
    AuthorizationError,
    CherryPickCancelledError,
    CherryPickConflictError,
    CherryPickerError,
    CherryPickFailedError,
    ConfigurationError,
    ConflictError,
    EmptyCommitListError,
    GitCommandError,
    HistoryExhaustedError,
    HistoryMismatchError,
    InvalidMergeCommitError,
    NotFoundError,
    PatchTreeNotFoundError,
    RateLimitedError,
    RebaseInProgressError,
    ServerError,
    ValidationError,
)
from cherrypicker.fingerprint import EMPTY_FINGERPRINT, fingerprint
from cherrypicker.gateway import RepositoryGateway
from cherrypicker.git import CherryPickOptions, LocalRepository, LocalRepositoryAdapter
from cherrypicker.logging import configure_logging, get_logger
from cherrypicker.patch_tree import PatchTreeResolver
from cherrypicker.rebase import RebaseSequenceReconstructor
from cherrypicker.transport import HTTPTransport, RetryConfig
from cherrypicker.types import (
    CherryPickRun,
    Commit,
    CommitFile,
    MergeMode,
    PullRequest,
    PullRequestRef,
    ReplaySpec,
    RunState,
)

__version__ = "0.1.0"

__all__ = [
    "__version__",
    # Orchestrator
    "CherryPicker",
    "CherryPickerOptions",
    # Replay engine
    "MergeModeClassifier",
    "PatchTreeResolver",
    "RebaseSequenceReconstructor",
    "fingerprint",
    "EMPTY_FINGERPRINT",
    # Gateway
    "RepositoryGateway",
    "GitHubClient",
    # Local repository
    "LocalRepositoryAdapter",
    "LocalRepository",
    "CherryPickOptions",
    # Types
    "Commit",
    "CommitFile",
    "PullRequest",
    "PullRequestRef",
    "MergeMode",
    "ReplaySpec",
    "RunState",
    "CherryPickRun",
    # Exceptions
    "CherryPickerError",
    "AuthenticationError",
    "AuthorizationError",
    "NotFoundError",
    "ConflictError",
    "RateLimitedError",
    "ValidationError",
    "ServerError",
    "ConfigurationError",
    "InvalidMergeCommitError",
    "EmptyCommitListError",
    "PatchTreeNotFoundError",
    "HistoryMismatchError",
    "HistoryExhaustedError",
    "RebaseInProgressError",
    "GitCommandError",
    "CherryPickConflictError",
    "CherryPickCancelledError",
    "CherryPickFailedError",
    # Transport
    "HTTPTransport",
    "RetryConfig",
    # Logging
    "configure_logging",
    "get_logger",
]
