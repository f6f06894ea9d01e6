"""Application configuration helpers."""

from __future__ import annotations

from .env import env_flag, optional_env, require_env_vars
from .errors import ConfigurationError, InvalidSettingsFileError, MissingConfigurationError
from .github import GitHubConfig, build_github_resilience, get_github_config
from .http_resilience import CacheConfig, RateLimit, ResilienceConfig, RetryPolicy
from .logging import configure_logging
from .settings import SettingsStore, StoredSettings, get_settings_store
from .storage import StorageConfig, get_storage_config

__all__ = [
    "CacheConfig",
    "ConfigurationError",
    "GitHubConfig",
    "InvalidSettingsFileError",
    "MissingConfigurationError",
    "RateLimit",
    "ResilienceConfig",
    "RetryPolicy",
    "SettingsStore",
    "StorageConfig",
    "StoredSettings",
    "build_github_resilience",
    "configure_logging",
    "env_flag",
    "get_github_config",
    "get_settings_store",
    "get_storage_config",
    "optional_env",
    "require_env_vars",
]
