"""File content value objects used by the pass-through content operations."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class Committer:
    name: str
    email: str


@dataclass(frozen=True, slots=True)
class RepoFile:
    path: str
    sha: str
    content: bytes
    size: int


@dataclass(frozen=True, slots=True)
class FileChange:
    """A single-file commit. ``sha`` is the blob being replaced, ``None`` for a new file."""

    path: str
    content: bytes
    message: str
    sha: str | None = None
    branch: str | None = None
    committer: Committer | None = None


@dataclass(frozen=True, slots=True)
class FileCommit:
    path: str
    content_sha: str
    commit_sha: str
