"""GitHub configuration values."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

from repohost import __version__

from .env import env_flag, optional_env
from .errors import MissingConfigurationError
from .http_resilience import CacheConfig, RateLimit, ResilienceConfig, RetryPolicy
from .settings import get_settings_store
from .storage import get_storage_config

if TYPE_CHECKING:
    from .settings import SettingsStore, StoredSettings

DEFAULT_GITHUB_API_URL = "https://api.github.com"
GITHUB_TIMEOUT_SECONDS = 15.0
GITHUB_ACCEPT = "application/vnd.github+json"
GITHUB_API_VERSION = "2022-11-28"
USER_AGENT = f"repohost/{__version__}"


@dataclass(frozen=True, slots=True)
class GitHubConfig:
    """Holds GitHub API configuration values."""

    username: str | None
    token: str | None
    resilience: ResilienceConfig
    authenticated: bool = True

    def credentials(self) -> tuple[str, str]:
        """Return the basic-auth pair, raising when either part is missing."""

        if not self.username or not self.token:
            pairs = (("GITHUB_USERNAME", self.username), ("GITHUB_TOKEN", self.token))
            missing = [name for name, value in pairs if not value]
            raise MissingConfigurationError(
                f"Missing configuration for: {', '.join(missing)} "
                "(run `repohost token` or set the environment variables)"
            )
        return self.username, self.token


def build_github_resilience(
    *,
    base_url: str = DEFAULT_GITHUB_API_URL,
    use_cache: bool = True,
) -> ResilienceConfig:
    cache: CacheConfig | None = None
    if use_cache:
        cache = CacheConfig(
            backend="sqlite",
            sqlite_path=str(get_storage_config().http_cache_path()),
        )
    return ResilienceConfig(
        name="github",
        base_url=base_url,
        timeout_seconds=GITHUB_TIMEOUT_SECONDS,
        retry=RetryPolicy(total=3),
        ratelimit=RateLimit(max_calls=10, per_seconds=1.0),
        cache=cache,
        default_headers={
            "Accept": GITHUB_ACCEPT,
            "X-GitHub-Api-Version": GITHUB_API_VERSION,
            "User-Agent": USER_AGENT,
        },
    )


def get_github_config(
    *,
    store: SettingsStore | None = None,
    authenticated: bool = True,
) -> GitHubConfig:
    """Resolve configuration from stored settings, overridden by the environment."""

    stored: StoredSettings = (store or get_settings_store()).load()
    env_cache = env_flag("REPOHOST_USE_CACHE")
    use_cache = stored.cache_enabled if env_cache is None else env_cache
    return GitHubConfig(
        username=optional_env("GITHUB_USERNAME") or stored.username,
        token=optional_env("GITHUB_TOKEN") or stored.token,
        resilience=build_github_resilience(
            base_url=optional_env("GITHUB_API_URL") or DEFAULT_GITHUB_API_URL,
            use_cache=use_cache,
        ),
        authenticated=authenticated,
    )
