"""Persisted credential and cache settings."""

from __future__ import annotations

import os
from dataclasses import dataclass
from logging import getLogger
from pathlib import Path  # noqa: TC003

from pydantic import BaseModel, ConfigDict, ValidationError

from .errors import InvalidSettingsFileError
from .storage import get_storage_config

log = getLogger(__name__)

_SETTINGS_FILE_MODE = 0o600


class StoredSettings(BaseModel):
    """Values kept between runs. The account password is never part of this model."""

    model_config = ConfigDict(extra="ignore", frozen=True)

    username: str | None = None
    token: str | None = None
    use_cache: bool | None = None

    @property
    def cache_enabled(self) -> bool:
        # an unset flag means caching is on
        return self.use_cache is None or self.use_cache


@dataclass(slots=True)
class SettingsStore:
    path: Path

    def load(self) -> StoredSettings:
        if not self.path.exists():
            return StoredSettings()
        try:
            return StoredSettings.model_validate_json(self.path.read_text(encoding="utf-8"))
        except ValidationError as exc:
            raise InvalidSettingsFileError(f"Unreadable settings file: {self.path}") from exc

    def save(self, settings: StoredSettings) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        tmp_path = self.path.with_suffix(self.path.suffix + ".tmp")
        tmp_path.unlink(missing_ok=True)
        # never world-readable, not even before the rename
        fd = os.open(tmp_path, os.O_WRONLY | os.O_CREAT | os.O_EXCL, _SETTINGS_FILE_MODE)
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as handle:
                handle.write(settings.model_dump_json(indent=2))
            os.replace(tmp_path, self.path)
        except BaseException:
            tmp_path.unlink(missing_ok=True)
            raise
        log.debug("Saved settings to %s", self.path)

    def update(
        self,
        *,
        username: str | None = None,
        token: str | None = None,
        use_cache: bool | None = None,
    ) -> StoredSettings:
        """Merge the given non-``None`` values into the stored settings and save them."""

        changes = {
            key: value
            for key, value in (("username", username), ("token", token), ("use_cache", use_cache))
            if value is not None
        }
        updated = self.load().model_copy(update=changes)
        self.save(updated)
        return updated


def get_settings_store() -> SettingsStore:
    return SettingsStore(path=get_storage_config().settings_path())
