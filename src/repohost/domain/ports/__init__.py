"""Domain port definitions for adapters."""

from __future__ import annotations

from .hosting import RepoContentClient, RepoHostClient, TokenIssuer

__all__ = [
    "RepoContentClient",
    "RepoHostClient",
    "TokenIssuer",
]
