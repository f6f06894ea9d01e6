"""Branch value objects and reconciliation outcomes (pure, dependency-light)."""

from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum
from typing import Final

HEADS_PREFIX: Final[str] = "refs/heads/"


class ErrorKind(StrEnum):
    SOURCE_NOT_FOUND = "source_not_found"
    HOST_ERROR = "host_error"
    CREATE_CONFLICT = "create_conflict"
    MERGE_CONFLICT = "merge_conflict"


@dataclass(frozen=True, slots=True)
class RepoCoordinate:
    """Identifies a remote repository."""

    owner: str
    repository: str

    def __post_init__(self) -> None:
        if not self.owner.strip() or not self.repository.strip():
            raise ValueError("Repository owner and name must be non-empty")

    @property
    def slug(self) -> str:
        return f"{self.owner}/{self.repository}"


@dataclass(frozen=True, slots=True)
class BranchRef:
    """Snapshot of a named branch, optionally resolved to a commit."""

    name: str
    commit_sha: str | None = None

    @property
    def ref_name(self) -> str:
        return branch_ref_name(self.name)


def branch_ref_name(branch: str) -> str:
    return HEADS_PREFIX + branch


def branch_name_from_ref(ref: str) -> str:
    return ref.removeprefix(HEADS_PREFIX)


@dataclass(frozen=True, slots=True)
class MergeRequest:
    """One create-or-merge attempt. Used once and discarded."""

    coordinate: RepoCoordinate
    source: str
    destination: str
    message: str | None = None

    def __post_init__(self) -> None:
        if not self.source.strip():
            raise ValueError("Source branch must be non-empty")
        if not self.destination.strip():
            raise ValueError("Destination branch must be non-empty")


@dataclass(frozen=True, slots=True)
class MergeResult:
    """Host response to a merge call; ``merged`` is False when there was nothing to merge."""

    merged: bool
    sha: str | None = None
    message: str | None = None


# Outcomes


@dataclass(frozen=True, slots=True)
class Created:
    ref: BranchRef


@dataclass(frozen=True, slots=True)
class Merged:
    result: MergeResult


@dataclass(frozen=True, slots=True)
class Failed:
    reason: ErrorKind
    detail: str


type ReconciliationOutcome = Created | Merged | Failed


# Lookup results


@dataclass(frozen=True, slots=True)
class BranchResolved:
    ref: BranchRef


@dataclass(frozen=True, slots=True)
class BranchNotFound:
    name: str


@dataclass(frozen=True, slots=True)
class BranchLookupError:
    """The branch state could not be determined; absence must not be assumed."""

    name: str
    detail: str


type BranchLookup = BranchResolved | BranchNotFound | BranchLookupError
