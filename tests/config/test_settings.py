from __future__ import annotations

import json
import stat
from typing import TYPE_CHECKING

import pytest

from repohost.config import (
    InvalidSettingsFileError,
    SettingsStore,
    StoredSettings,
    get_github_config,
    get_settings_store,
)
from repohost.config import settings as settings_module

if TYPE_CHECKING:
    from pathlib import Path


def test_missing_file_loads_defaults(tmp_path: Path) -> None:
    settings = SettingsStore(path=tmp_path / "settings.json").load()

    assert settings == StoredSettings()
    assert settings.cache_enabled


def test_update_merges_and_persists(tmp_path: Path) -> None:
    store = SettingsStore(path=tmp_path / "nested" / "settings.json")

    store.update(username="octo", token="t0ken")
    store.update(use_cache=False)

    reloaded = SettingsStore(path=store.path).load()
    assert reloaded.username == "octo"
    assert reloaded.token == "t0ken"
    assert reloaded.use_cache is False
    assert not reloaded.cache_enabled


def test_saved_file_is_private(tmp_path: Path) -> None:
    store = SettingsStore(path=tmp_path / "settings.json")

    store.save(StoredSettings(username="octo", token="t0ken"))

    assert stat.S_IMODE(store.path.stat().st_mode) == 0o600
    assert json.loads(store.path.read_text())["token"] == "t0ken"


def test_failed_replace_keeps_old_file_and_removes_temp(
    monkeypatch: pytest.MonkeyPatch,
    tmp_path: Path,
) -> None:
    store = SettingsStore(path=tmp_path / "settings.json")
    store.save(StoredSettings(username="octo", token="old"))

    def fail_replace(*_: object) -> None:
        raise OSError("disk full")

    monkeypatch.setattr(settings_module.os, "replace", fail_replace)

    with pytest.raises(OSError, match="disk full"):
        store.save(StoredSettings(username="octo", token="new"))

    monkeypatch.undo()
    assert store.load().token == "old"
    assert sorted(path.name for path in tmp_path.iterdir()) == ["settings.json"]


def test_stale_temp_file_does_not_block_save(tmp_path: Path) -> None:
    store = SettingsStore(path=tmp_path / "settings.json")
    (tmp_path / "settings.json.tmp").write_text("leftover")

    store.save(StoredSettings(token="t0ken"))

    assert store.load().token == "t0ken"
    assert not (tmp_path / "settings.json.tmp").exists()


def test_unknown_keys_are_ignored(tmp_path: Path) -> None:
    path = tmp_path / "settings.json"
    path.write_text(json.dumps({"username": "octo", "password": "legacy"}))

    settings = SettingsStore(path=path).load()

    assert settings.username == "octo"
    assert "password" not in settings.model_dump()


def test_corrupt_file_raises(tmp_path: Path) -> None:
    path = tmp_path / "settings.json"
    path.write_text("{not json")

    with pytest.raises(InvalidSettingsFileError):
        SettingsStore(path=path).load()


def test_default_store_lives_in_data_dir(data_dir: Path) -> None:
    assert get_settings_store().path == data_dir / "settings.json"


def test_github_config_reads_stored_settings(tmp_path: Path) -> None:
    store = SettingsStore(path=tmp_path / "settings.json")
    store.update(username="octo", token="t0ken", use_cache=False)

    config = get_github_config(store=store)

    assert config.credentials() == ("octo", "t0ken")
    assert config.resilience.cache is None
    assert config.resilience.base_url == "https://api.github.com"


def test_github_config_environment_overrides_store(
    monkeypatch: pytest.MonkeyPatch,
    tmp_path: Path,
) -> None:
    store = SettingsStore(path=tmp_path / "settings.json")
    store.update(username="octo", token="stored", use_cache=False)
    monkeypatch.setenv("GITHUB_TOKEN", "from-env")
    monkeypatch.setenv("REPOHOST_USE_CACHE", "on")
    monkeypatch.setenv("GITHUB_API_URL", "https://ghe.example.com/api/v3")

    config = get_github_config(store=store)

    assert config.token == "from-env"
    assert config.username == "octo"
    assert config.resilience.base_url == "https://ghe.example.com/api/v3"
    assert config.resilience.cache is not None
    assert config.resilience.cache.enabled


def test_unset_cache_flag_enables_sqlite_cache(data_dir: Path) -> None:
    config = get_github_config()

    cache = config.resilience.cache
    assert cache is not None
    assert cache.backend == "sqlite"
    assert cache.sqlite_path == str(data_dir / "http_cache.db")
