"""GitHub resource clients."""

from cherrypicker.clients.commits import CommitsClient
from cherrypicker.clients.pulls import PullsClient

__all__ = [
    "CommitsClient",
    "PullsClient",
]
