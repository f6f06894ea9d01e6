"""Create-or-merge branch reconciliation.

The reconciler observes the source branch, then the destination branch, then
issues exactly one write: a merge when the destination exists, a ref creation
when the host reported it missing. A destination whose state could not be
determined is never treated as missing.

The window between the lookups and the write is not guarded; if another actor
changes either branch in between, the host's own response decides the outcome.
"""

from __future__ import annotations

from dataclasses import dataclass
from logging import getLogger
from typing import TYPE_CHECKING

from .branches import (
    BranchLookupError,
    BranchRef,
    BranchNotFound,
    BranchResolved,
    Created,
    ErrorKind,
    Failed,
    Merged,
    branch_ref_name,
)
from .errors import RepoHostError

if TYPE_CHECKING:
    from .branches import MergeRequest, ReconciliationOutcome
    from .ports.hosting import RepoHostClient

log = getLogger(__name__)


@dataclass(slots=True)
class BranchReconciler:
    """Decide between creating and merging a destination branch."""

    client: RepoHostClient

    def reconcile(self, request: MergeRequest) -> ReconciliationOutcome:
        """Merge ``source`` into ``destination``, creating ``destination`` if it is missing."""

        source_sha = self._resolve_source(request)
        if isinstance(source_sha, Failed):
            return source_sha

        match self.client.lookup_branch(request.coordinate, request.destination):
            case BranchResolved():
                log.info(
                    "Destination %s exists in %s, merging %s into it",
                    request.destination,
                    request.coordinate.slug,
                    request.source,
                )
                return self._merge(request)
            case BranchNotFound():
                log.info(
                    "Destination %s missing in %s, creating it from %s",
                    request.destination,
                    request.coordinate.slug,
                    request.source,
                )
                return self._create(request, source_sha)
            case BranchLookupError(detail=detail):
                log.error(
                    "Could not determine whether %s exists in %s: %s",
                    request.destination,
                    request.coordinate.slug,
                    detail,
                )
                return Failed(
                    ErrorKind.HOST_ERROR,
                    f"Lookup of destination branch '{request.destination}' failed: {detail}",
                )

    def ensure_branch_exists(self, request: MergeRequest) -> Created | Failed:
        """Create ``destination`` from the head of ``source`` without considering a merge."""

        source_sha = self._resolve_source(request)
        if isinstance(source_sha, Failed):
            return source_sha
        return self._create(request, source_sha)

    def merge(self, request: MergeRequest) -> Merged | Failed:
        """Merge ``source`` into an existing ``destination``; never creates."""

        source_sha = self._resolve_source(request)
        if isinstance(source_sha, Failed):
            return source_sha
        return self._merge(request)

    def _resolve_source(self, request: MergeRequest) -> str | Failed:
        match self.client.lookup_branch(request.coordinate, request.source):
            case BranchResolved(ref=BranchRef(commit_sha=str(sha))) if sha:
                return sha
            case BranchResolved():
                detail = f"Source branch '{request.source}' resolved without a commit"
                return self._fail(ErrorKind.HOST_ERROR, detail)
            case BranchNotFound():
                detail = f"Source branch '{request.source}' not found in {request.coordinate.slug}"
                return self._fail(ErrorKind.SOURCE_NOT_FOUND, detail)
            case BranchLookupError(detail=detail):
                return self._fail(
                    ErrorKind.HOST_ERROR,
                    f"Lookup of source branch '{request.source}' failed: {detail}",
                )

    def _create(self, request: MergeRequest, source_sha: str) -> Created | Failed:
        try:
            ref = self.client.create_ref(
                request.coordinate,
                branch_ref_name(request.destination),
                source_sha,
            )
        except RepoHostError as exc:
            return self._fail(exc.kind, f"Creating branch '{request.destination}' failed: {exc}")
        log.info("Created %s at %s", ref.ref_name, ref.commit_sha)
        return Created(ref)

    def _merge(self, request: MergeRequest) -> Merged | Failed:
        try:
            result = self.client.merge_branch(
                request.coordinate,
                base=request.destination,
                head=request.source,
                message=request.message,
            )
        except RepoHostError as exc:
            return self._fail(
                exc.kind,
                f"Merging '{request.source}' into '{request.destination}' failed: {exc}",
            )
        if result.merged:
            log.info("Merged %s into %s as %s", request.source, request.destination, result.sha)
        else:
            log.info("Nothing to merge from %s into %s", request.source, request.destination)
        return Merged(result)

    @staticmethod
    def _fail(reason: ErrorKind, detail: str) -> Failed:
        log.error("%s: %s", reason, detail)
        return Failed(reason, detail)
