"""Locations of the settings file and the HTTP cache."""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Final

APP_DIR_NAME: Final[str] = "repohost"
SETTINGS_FILENAME: Final[str] = "settings.json"
HTTP_CACHE_FILENAME: Final[str] = "http_cache.db"


@dataclass(frozen=True, slots=True)
class StorageConfig:
    """Settings live with user configuration, the HTTP cache with disposable cache data."""

    config_dir: Path
    cache_dir: Path

    def settings_path(self, *, ensure: bool = True) -> Path:
        return _file_in(self.config_dir, SETTINGS_FILENAME, ensure=ensure)

    def http_cache_path(self, *, ensure: bool = True) -> Path:
        return _file_in(self.cache_dir, HTTP_CACHE_FILENAME, ensure=ensure)


def _file_in(directory: Path, filename: str, *, ensure: bool) -> Path:
    resolved = directory.expanduser().resolve()
    if ensure:
        resolved.mkdir(parents=True, exist_ok=True)
    return resolved / filename


def _platform_dir(xdg_variable: str, *fallback: str) -> Path:
    if os.name == "nt":
        base = os.getenv("LOCALAPPDATA")
        base_path = Path(base) if base else (Path.home() / "AppData" / "Local")
    else:
        base = os.getenv(xdg_variable)
        base_path = Path(base) if base else Path.home().joinpath(*fallback)
    return base_path / APP_DIR_NAME


def get_storage_config() -> StorageConfig:
    """Resolve storage directories.

    ``REPOHOST_DATA_DIR`` places both files in one directory. Otherwise the XDG
    config and cache homes are used (``LOCALAPPDATA`` on Windows).
    """

    override = os.getenv("REPOHOST_DATA_DIR")
    if override:
        return StorageConfig(config_dir=Path(override), cache_dir=Path(override))
    return StorageConfig(
        config_dir=_platform_dir("XDG_CONFIG_HOME", ".config"),
        cache_dir=_platform_dir("XDG_CACHE_HOME", ".cache"),
    )
