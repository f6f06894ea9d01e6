from __future__ import annotations

from typing import TYPE_CHECKING

import pytest

if TYPE_CHECKING:
    from pathlib import Path

_ENVIRONMENT_OVERRIDES = (
    "GITHUB_USERNAME",
    "GITHUB_TOKEN",
    "GITHUB_PASSWORD",
    "GITHUB_API_URL",
    "REPOHOST_USE_CACHE",
    "REPOHOST_TOKEN_NOTE_URL",
)


@pytest.fixture(autouse=True)
def data_dir(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> Path:
    """Point storage at a temporary directory and clear credential overrides."""

    path = (tmp_path / "data").resolve()
    monkeypatch.setenv("REPOHOST_DATA_DIR", str(path))
    for name in _ENVIRONMENT_OVERRIDES:
        monkeypatch.delenv(name, raising=False)
    return path
