"""HTTP client for the GitHub REST API."""

from __future__ import annotations

import asyncio
from dataclasses import replace
from logging import getLogger
from typing import TYPE_CHECKING, Any
from urllib.parse import quote

import httpx
from pydantic import BaseModel

from repohost.adapters.http_resilience import ResilientClient
from repohost.domain.branches import BranchLookupError, BranchNotFound, BranchResolved
from repohost.domain.errors import MergeConflictError, RefConflictError, RepoHostError

from .schema import (
    AuthorizationPayload,
    ContentFilePayload,
    ContentUpdatePayload,
    ErrorPayload,
    GitRefPayload,
    MergeCommitPayload,
    UserPayload,
)
from .translator import (
    file_change_body,
    parse_branch_ref,
    parse_file_commit,
    parse_merge_commit,
    parse_repo_file,
)

if TYPE_CHECKING:
    from collections.abc import Callable

    from repohost.config.github import GitHubConfig
    from repohost.config.http_resilience import ResilienceConfig
    from repohost.domain.branches import BranchLookup, BranchRef, MergeResult, RepoCoordinate
    from repohost.domain.content import FileChange, FileCommit, RepoFile
    from repohost.domain.ports.hosting import RepoContentClient, RepoHostClient, TokenIssuer

log = getLogger(__name__)

DIFF_MEDIA_TYPE = "application/vnd.github.v3.diff"
TOKEN_SCOPES = ("user", "repo")
RATE_LIMIT_WARNING_THRESHOLD = 10


class GitHubAPIError(RepoHostError):
    """Raised when the GitHub API returns an error status or an unexpected payload."""

    def __init__(self, message: str, *, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


def _describe(response: httpx.Response) -> str:
    try:
        message = ErrorPayload.model_validate(response.json()).message
    except ValueError:
        message = response.reason_phrase or "no detail"
    return f"HTTP {response.status_code}: {message}"


def _raise_for_status(response: httpx.Response) -> None:
    if response.is_error:
        raise GitHubAPIError(_describe(response), status_code=response.status_code)


def _repo_path(coordinate: RepoCoordinate, *parts: str) -> str:
    segments = ["repos", quote(coordinate.owner, safe=""), quote(coordinate.repository, safe="")]
    segments.extend(quote(part, safe="/") for part in parts)
    return "/".join(segments)


async def _warn_on_low_rate_limit(response: httpx.Response) -> None:
    remaining = response.headers.get("X-RateLimit-Remaining")
    if remaining is None or not remaining.isdigit():
        return
    if int(remaining) <= RATE_LIMIT_WARNING_THRESHOLD:
        log.warning(
            "GitHub rate limit nearly exhausted: %s requests left, resets at %s",
            remaining,
            response.headers.get("X-RateLimit-Reset", "unknown"),
        )


class GitHubClient:
    """GitHub implementation of the repository host ports.

    Every public call opens its own pooled HTTP client; the instance holds no
    per-call state and may be shared.
    """

    def __init__(
        self,
        *,
        config: GitHubConfig,
        client_factory: Callable[[ResilienceConfig], ResilientClient] | None = None,
    ) -> None:
        self._config = config
        self._resilience = replace(
            config.resilience,
            response_hooks=(*config.resilience.response_hooks, _warn_on_low_rate_limit),
        )
        self._client_factory = client_factory or ResilientClient
        self._auth = httpx.BasicAuth(*config.credentials()) if config.authenticated else None

    # Branches

    def lookup_branch(self, coordinate: RepoCoordinate, branch: str) -> BranchLookup:
        return asyncio.run(self._lookup_branch_async(coordinate, branch))

    def create_ref(self, coordinate: RepoCoordinate, ref: str, sha: str) -> BranchRef:
        return asyncio.run(self._create_ref_async(coordinate, ref, sha))

    def merge_branch(
        self,
        coordinate: RepoCoordinate,
        *,
        base: str,
        head: str,
        message: str | None = None,
    ) -> MergeResult:
        return asyncio.run(
            self._merge_branch_async(coordinate, base=base, head=head, message=message)
        )

    # Contents

    def get_file(
        self,
        coordinate: RepoCoordinate,
        path: str,
        *,
        reference: str | None = None,
    ) -> RepoFile:
        return asyncio.run(self._get_file_async(coordinate, path, reference))

    def update_file(self, coordinate: RepoCoordinate, change: FileChange) -> FileCommit:
        return asyncio.run(self._update_file_async(coordinate, change))

    def compare_diff(self, coordinate: RepoCoordinate, *, base: str, head: str) -> str:
        return asyncio.run(self._compare_diff_async(coordinate, base, head))

    # Account

    def issue_token(
        self,
        username: str,
        password: str,
        *,
        note: str,
        note_url: str | None = None,
    ) -> str:
        return asyncio.run(self._issue_token_async(username, password, note, note_url))

    def current_user(self) -> str:
        return asyncio.run(self._current_user_async())

    async def _lookup_branch_async(self, coordinate: RepoCoordinate, branch: str) -> BranchLookup:
        path = _repo_path(coordinate, "git", "ref", "heads", branch)
        try:
            # refs are always revalidated against the host
            response = await self._perform("GET", path, headers={"Cache-Control": "no-cache"})
        except GitHubAPIError as exc:
            return BranchLookupError(name=branch, detail=str(exc))

        if response.status_code == httpx.codes.NOT_FOUND:
            log.debug("Branch %s not found in %s", branch, coordinate.slug)
            return BranchNotFound(name=branch)
        if response.is_error:
            return BranchLookupError(name=branch, detail=_describe(response))
        try:
            payload = GitRefPayload.model_validate(response.json())
        except ValueError as exc:
            return BranchLookupError(name=branch, detail=f"Unexpected ref payload: {exc}")
        return BranchResolved(ref=parse_branch_ref(payload))

    async def _create_ref_async(self, coordinate: RepoCoordinate, ref: str, sha: str) -> BranchRef:
        response = await self._perform(
            "POST",
            _repo_path(coordinate, "git", "refs"),
            json={"ref": ref, "sha": sha},
        )
        if response.status_code == httpx.codes.UNPROCESSABLE_ENTITY:
            raise RefConflictError(_describe(response))
        _raise_for_status(response)
        return parse_branch_ref(self._validate(GitRefPayload, response))

    async def _merge_branch_async(
        self,
        coordinate: RepoCoordinate,
        *,
        base: str,
        head: str,
        message: str | None,
    ) -> MergeResult:
        body = {"base": base, "head": head}
        if message:
            body["commit_message"] = message
        response = await self._perform("POST", _repo_path(coordinate, "merges"), json=body)
        if response.status_code == httpx.codes.CONFLICT:
            raise MergeConflictError(_describe(response))
        _raise_for_status(response)
        if response.status_code == httpx.codes.NO_CONTENT:
            return parse_merge_commit(None)
        return parse_merge_commit(self._validate(MergeCommitPayload, response))

    async def _get_file_async(
        self,
        coordinate: RepoCoordinate,
        path: str,
        reference: str | None,
    ) -> RepoFile:
        params = {"ref": reference} if reference else None
        response = await self._perform(
            "GET",
            _repo_path(coordinate, "contents", path.lstrip("/")),
            params=params,
        )
        _raise_for_status(response)
        payload = self._validate(ContentFilePayload, response)
        try:
            return parse_repo_file(payload)
        except ValueError as exc:
            raise GitHubAPIError(str(exc), status_code=response.status_code) from exc

    async def _update_file_async(
        self, coordinate: RepoCoordinate, change: FileChange
    ) -> FileCommit:
        response = await self._perform(
            "PUT",
            _repo_path(coordinate, "contents", change.path.lstrip("/")),
            json=file_change_body(change),
        )
        _raise_for_status(response)
        return parse_file_commit(self._validate(ContentUpdatePayload, response))

    async def _compare_diff_async(self, coordinate: RepoCoordinate, base: str, head: str) -> str:
        response = await self._perform(
            "GET",
            _repo_path(coordinate, "compare", f"{base}...{head}"),
            headers={"Accept": DIFF_MEDIA_TYPE},
        )
        _raise_for_status(response)
        return response.text

    async def _issue_token_async(
        self,
        username: str,
        password: str,
        note: str,
        note_url: str | None,
    ) -> str:
        body: dict[str, Any] = {"note": note, "scopes": list(TOKEN_SCOPES)}
        if note_url:
            body["note_url"] = note_url
        response = await self._perform(
            "POST",
            "authorizations",
            json=body,
            auth=httpx.BasicAuth(username, password),
        )
        _raise_for_status(response)
        payload = self._validate(AuthorizationPayload, response)
        if not payload.token:
            raise GitHubAPIError("GitHub returned an authorization without a token")
        log.info("Issued token %s for %s", payload.id, username)
        return payload.token

    async def _current_user_async(self) -> str:
        response = await self._perform("GET", "user")
        _raise_for_status(response)
        return self._validate(UserPayload, response).login

    async def _perform(
        self,
        method: str,
        path: str,
        *,
        json: object = None,
        params: dict[str, str] | None = None,
        headers: dict[str, str] | None = None,
        auth: httpx.Auth | None = None,
    ) -> httpx.Response:
        async with self._client_factory(self._resilience) as client:
            try:
                return await client.request(
                    method,
                    path,
                    json=json,
                    params=params,
                    headers=headers,
                    auth=auth or self._auth,
                )
            except httpx.HTTPError as exc:
                log.warning("GitHub %s %s failed: %s", method, path, exc)
                raise GitHubAPIError(f"{type(exc).__name__}: {exc}") from exc

    @staticmethod
    def _validate[M: BaseModel](model: type[M], response: httpx.Response) -> M:
        try:
            return model.model_validate(response.json())
        except ValueError as exc:
            raise GitHubAPIError(
                f"Unexpected {model.__name__} payload: {exc}",
                status_code=response.status_code,
            ) from exc


if TYPE_CHECKING:
    _host_check: type[RepoHostClient] = GitHubClient
    _content_check: type[RepoContentClient] = GitHubClient
    _token_check: type[TokenIssuer] = GitHubClient
