"""Translate GitHub payloads into domain values."""

from __future__ import annotations

import base64
from typing import TYPE_CHECKING, Any

from repohost.domain.branches import BranchRef, MergeResult, branch_name_from_ref
from repohost.domain.content import FileCommit, RepoFile

if TYPE_CHECKING:
    from repohost.domain.content import FileChange

    from .schema import ContentFilePayload, ContentUpdatePayload, GitRefPayload, MergeCommitPayload


def parse_branch_ref(payload: GitRefPayload) -> BranchRef:
    return BranchRef(name=branch_name_from_ref(payload.ref), commit_sha=payload.object.sha)


def parse_merge_commit(payload: MergeCommitPayload | None) -> MergeResult:
    if payload is None:
        return MergeResult(merged=False)
    return MergeResult(merged=True, sha=payload.sha, message=payload.commit.message)


def parse_repo_file(payload: ContentFilePayload) -> RepoFile:
    return RepoFile(
        path=payload.path,
        sha=payload.sha,
        content=payload.decoded(),
        size=payload.size,
    )


def parse_file_commit(payload: ContentUpdatePayload) -> FileCommit:
    return FileCommit(
        path=payload.content.path,
        content_sha=payload.content.sha,
        commit_sha=payload.commit.sha,
    )


def file_change_body(change: FileChange) -> dict[str, Any]:
    """Build the request body for a contents update."""

    body: dict[str, Any] = {
        "message": change.message,
        "content": base64.b64encode(change.content).decode("ascii"),
    }
    if change.sha is not None:
        body["sha"] = change.sha
    if change.branch is not None:
        body["branch"] = change.branch
    if change.committer is not None:
        body["committer"] = {"name": change.committer.name, "email": change.committer.email}
    return body
