"""Cherry-picker testing utilities.

Provides a mock gateway, a fake working tree and fixtures for testing code
that drives the cherry-picker.
"""

from cherrypicker.testing.fixtures import (
    build_linear_history,
    create_mock_commit,
    create_mock_pull_request,
)
from cherrypicker.testing.mock import (
    MockCall,
    MockGateway,
    MockLocalRepository,
    MockResponse,
)

__all__ = [
    # Mock collaborators
    "MockGateway",
    "MockLocalRepository",
    "MockCall",
    "MockResponse",
    # Helper functions
    "create_mock_commit",
    "create_mock_pull_request",
    "build_linear_history",
]
