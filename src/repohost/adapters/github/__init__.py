"""Public interface for the GitHub adapter."""

from __future__ import annotations

from .client import GitHubAPIError, GitHubClient

__all__ = [
    "GitHubAPIError",
    "GitHubClient",
]
