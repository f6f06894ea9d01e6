"""Ports for talking to a remote repository host."""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from repohost.domain.branches import BranchLookup, BranchRef, MergeResult, RepoCoordinate
    from repohost.domain.content import FileChange, FileCommit, RepoFile


@runtime_checkable
class RepoHostClient(Protocol):
    """Branch primitives the reconciler needs.

    ``lookup_branch`` reports remote failures as values so that "not found" and
    "could not tell" stay distinguishable. The write methods raise
    :class:`~repohost.domain.errors.RepoHostError` subclasses.
    """

    def lookup_branch(self, coordinate: RepoCoordinate, branch: str) -> BranchLookup: ...

    def create_ref(self, coordinate: RepoCoordinate, ref: str, sha: str) -> BranchRef: ...

    def merge_branch(
        self,
        coordinate: RepoCoordinate,
        *,
        base: str,
        head: str,
        message: str | None = None,
    ) -> MergeResult: ...


@runtime_checkable
class RepoContentClient(Protocol):
    """Pass-through file and diff operations."""

    def get_file(
        self,
        coordinate: RepoCoordinate,
        path: str,
        *,
        reference: str | None = None,
    ) -> RepoFile: ...

    def update_file(self, coordinate: RepoCoordinate, change: FileChange) -> FileCommit: ...

    def compare_diff(self, coordinate: RepoCoordinate, *, base: str, head: str) -> str: ...


@runtime_checkable
class TokenIssuer(Protocol):
    """Exchanges account credentials for an API token once."""

    def issue_token(
        self,
        username: str,
        password: str,
        *,
        note: str,
        note_url: str | None = None,
    ) -> str: ...


__all__ = ["RepoContentClient", "RepoHostClient", "TokenIssuer"]
