"""Application orchestration entry points."""

from __future__ import annotations

from logging import getLogger
from typing import TYPE_CHECKING

from repohost.adapters.github import GitHubClient
from repohost.config import get_github_config, get_settings_store, optional_env
from repohost.domain.branches import MergeRequest, RepoCoordinate
from repohost.domain.reconciliation import BranchReconciler

if TYPE_CHECKING:
    from repohost.config import SettingsStore, StoredSettings
    from repohost.domain.branches import Created, Failed, Merged, ReconciliationOutcome
    from repohost.domain.content import FileChange, FileCommit, RepoFile
    from repohost.domain.ports.hosting import RepoContentClient, RepoHostClient, TokenIssuer

log = getLogger(__name__)

DEFAULT_TOKEN_NOTE = "repohost"


def build_github_client(*, authenticated: bool = True) -> GitHubClient:
    """Build a client from stored settings and environment overrides."""

    return GitHubClient(config=get_github_config(authenticated=authenticated))


def sync_branches(
    *,
    owner: str,
    repository: str,
    source: str,
    destination: str,
    message: str | None = None,
    client: RepoHostClient | None = None,
) -> ReconciliationOutcome:
    """Merge ``source`` into ``destination``, creating ``destination`` when it is missing."""

    request = MergeRequest(RepoCoordinate(owner, repository), source, destination, message)
    log.info(
        "Starting create-or-merge in %s: source=%s, destination=%s",
        request.coordinate.slug,
        source,
        destination,
    )
    return BranchReconciler(client or build_github_client()).reconcile(request)


def create_branch(
    *,
    owner: str,
    repository: str,
    source: str,
    destination: str,
    client: RepoHostClient | None = None,
) -> Created | Failed:
    request = MergeRequest(RepoCoordinate(owner, repository), source, destination)
    log.info("Creating %s from %s in %s", destination, source, request.coordinate.slug)
    return BranchReconciler(client or build_github_client()).ensure_branch_exists(request)


def merge_branches(
    *,
    owner: str,
    repository: str,
    source: str,
    destination: str,
    message: str | None = None,
    client: RepoHostClient | None = None,
) -> Merged | Failed:
    request = MergeRequest(RepoCoordinate(owner, repository), source, destination, message)
    log.info("Merging %s into %s in %s", source, destination, request.coordinate.slug)
    return BranchReconciler(client or build_github_client()).merge(request)


def fetch_diff(
    *,
    owner: str,
    repository: str,
    base: str,
    head: str,
    anonymous: bool = False,
    client: RepoContentClient | None = None,
) -> str:
    active_client = client or build_github_client(authenticated=not anonymous)
    return active_client.compare_diff(RepoCoordinate(owner, repository), base=base, head=head)


def fetch_file(
    *,
    owner: str,
    repository: str,
    path: str,
    reference: str | None = None,
    anonymous: bool = False,
    client: RepoContentClient | None = None,
) -> RepoFile:
    active_client = client or build_github_client(authenticated=not anonymous)
    return active_client.get_file(RepoCoordinate(owner, repository), path, reference=reference)


def push_file(
    *,
    owner: str,
    repository: str,
    change: FileChange,
    client: RepoContentClient | None = None,
) -> FileCommit:
    active_client = client or build_github_client()
    result = active_client.update_file(RepoCoordinate(owner, repository), change)
    log.info("Committed %s to %s/%s as %s", result.path, owner, repository, result.commit_sha)
    return result


def generate_token(
    *,
    username: str,
    password: str,
    note: str | None = None,
    issuer: TokenIssuer | None = None,
    store: SettingsStore | None = None,
) -> str:
    """Exchange credentials for a token once and persist the username and token.

    The password is only sent to the host; it is never written to the settings store.
    """

    active_issuer = issuer or build_github_client(authenticated=False)
    token = active_issuer.issue_token(
        username,
        password,
        note=note or DEFAULT_TOKEN_NOTE,
        note_url=optional_env("REPOHOST_TOKEN_NOTE_URL"),
    )
    (store or get_settings_store()).update(username=username, token=token)
    log.info("Generated and stored GitHub authentication token for %s", username)
    return token


def load_settings(*, store: SettingsStore | None = None) -> StoredSettings:
    return (store or get_settings_store()).load()


def set_cache_enabled(enabled: bool, *, store: SettingsStore | None = None) -> StoredSettings:  # noqa: FBT001
    settings = (store or get_settings_store()).update(use_cache=enabled)
    log.info("HTTP cache %s", "enabled" if settings.cache_enabled else "disabled")
    return settings


def show_current_user(*, client: GitHubClient | None = None) -> str:
    """Return the login the stored credentials authenticate as."""

    return (client or build_github_client()).current_user()
