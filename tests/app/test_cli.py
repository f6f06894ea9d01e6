from __future__ import annotations

from typing import TYPE_CHECKING

import pytest

from repohost.config import SettingsStore, StoredSettings
from repohost.domain.branches import (
    BranchRef,
    Created,
    ErrorKind,
    Failed,
    Merged,
    MergeResult,
)
from repohost.domain.content import RepoFile
from repohost.ui import cli as cli_module

if TYPE_CHECKING:
    from pathlib import Path


def test_sync_passes_repository_and_branches(monkeypatch: pytest.MonkeyPatch) -> None:
    captured: dict[str, object] = {}

    def fake_sync(**kwargs: object) -> Merged:
        captured.update(kwargs)
        return Merged(result=MergeResult(merged=True, sha="merge-sha"))

    monkeypatch.setattr(cli_module, "sync_branches", fake_sync)

    cli_module.main(["sync", "octo/widgets", "main", "release", "--message", "Sync"])

    assert captured == {
        "owner": "octo",
        "repository": "widgets",
        "source": "main",
        "destination": "release",
        "message": "Sync",
    }


def test_failed_outcome_exits_with_one(monkeypatch: pytest.MonkeyPatch) -> None:
    def fake_sync(**_: object) -> Failed:
        return Failed(reason=ErrorKind.SOURCE_NOT_FOUND, detail="Source branch 'ghost' not found")

    monkeypatch.setattr(cli_module, "sync_branches", fake_sync)

    with pytest.raises(SystemExit) as excinfo:
        cli_module.main(["sync", "octo/widgets", "ghost", "release"])

    assert excinfo.value.code == 1


def test_create_branch_success_returns_normally(monkeypatch: pytest.MonkeyPatch) -> None:
    def fake_create(**kwargs: object) -> Created:
        assert "message" not in kwargs
        return Created(ref=BranchRef(name="release", commit_sha="abc123"))

    monkeypatch.setattr(cli_module, "create_branch", fake_create)

    cli_module.main(["create-branch", "octo/widgets", "main", "release"])


def test_unexpected_exception_exits_with_one(monkeypatch: pytest.MonkeyPatch) -> None:
    def fake_merge(**_: object) -> Merged:
        raise RuntimeError("boom")

    monkeypatch.setattr(cli_module, "merge_branches", fake_merge)

    with pytest.raises(SystemExit) as excinfo:
        cli_module.main(["merge", "octo/widgets", "main", "release"])

    assert excinfo.value.code == 1


@pytest.mark.parametrize(
    "repo",
    ["widgets", "octo/", "/widgets", " /widgets", "octo/ ", "octo/widgets/extra"],
)
def test_malformed_repository_is_rejected(repo: str) -> None:
    with pytest.raises(SystemExit) as excinfo:
        cli_module.main(["sync", repo, "main", "release"])

    assert excinfo.value.code == 2


@pytest.mark.parametrize(
    "argv",
    [
        ["sync", "octo/widgets", " ", "main"],
        ["sync", "octo/widgets", "main", ""],
        ["create-branch", "octo/widgets", "main", "  "],
        ["merge", "octo/widgets", "", "release"],
    ],
)
def test_blank_branch_is_usage_error(monkeypatch: pytest.MonkeyPatch, argv: list[str]) -> None:
    called: list[str] = []

    def fake_service(**_: object) -> Merged:
        called.append("service")
        return Merged(result=MergeResult(merged=False))

    for name in ("sync_branches", "create_branch", "merge_branches"):
        monkeypatch.setattr(cli_module, name, fake_service)

    with pytest.raises(SystemExit) as excinfo:
        cli_module.main(argv)

    assert excinfo.value.code == 2
    assert called == []


def test_settings_cache_off_updates_store(
    monkeypatch: pytest.MonkeyPatch,
    tmp_path: Path,
) -> None:
    store = SettingsStore(path=tmp_path / "settings.json")
    monkeypatch.setattr("repohost.app.get_settings_store", lambda: store)

    cli_module.main(["settings", "cache", "off"])

    assert store.load() == StoredSettings(use_cache=False)


def test_token_reads_password_from_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    captured: dict[str, object] = {}

    def fake_generate(**kwargs: object) -> str:
        captured.update(kwargs)
        return "issued"

    monkeypatch.setattr(cli_module, "generate_token", fake_generate)
    monkeypatch.setenv("GITHUB_PASSWORD", "hunter2")

    cli_module.main(["token", "--username", "octo", "--password-env"])

    assert captured == {"username": "octo", "password": "hunter2", "note": None}


def test_token_without_password_environment_is_validation_error(
    caplog: pytest.LogCaptureFixture,
) -> None:
    with pytest.raises(SystemExit) as excinfo:
        cli_module.main(["token", "--username", "octo", "--password-env"])

    assert excinfo.value.code == 2
    errors = [record for record in caplog.records if record.levelname == "ERROR"]
    assert len(errors) == 1
    assert "GITHUB_PASSWORD" in errors[0].getMessage()
    assert errors[0].exc_info is None


def test_get_file_writes_output(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    captured: dict[str, object] = {}

    def fake_fetch(**kwargs: object) -> RepoFile:
        captured.update(kwargs)
        return RepoFile(path="README.md", sha="blob-sha", content=b"hello", size=5)

    monkeypatch.setattr(cli_module, "fetch_file", fake_fetch)
    output = tmp_path / "README.md"

    cli_module.main(
        [
            "get-file",
            "octo/widgets",
            "README.md",
            "--ref",
            "dev",
            "--output",
            str(output),
            "--anonymous",
        ]
    )

    assert output.read_bytes() == b"hello"
    assert captured["reference"] == "dev"
    assert captured["anonymous"] is True


def test_push_file_builds_change_from_local_file(
    monkeypatch: pytest.MonkeyPatch,
    tmp_path: Path,
) -> None:
    captured: dict[str, object] = {}
    local = tmp_path / "notes.txt"
    local.write_bytes(b"new notes")

    def fake_push(**kwargs: object) -> None:
        captured.update(kwargs)

    monkeypatch.setattr(cli_module, "push_file", fake_push)

    cli_module.main(
        [
            "push-file",
            "octo/widgets",
            "docs/notes.txt",
            "--file",
            str(local),
            "--message",
            "Update notes",
            "--committer-name",
            "Octo Cat",
            "--committer-email",
            "octo@example.com",
        ]
    )

    change = captured["change"]
    assert change.content == b"new notes"  # type: ignore[attr-defined]
    assert change.committer.email == "octo@example.com"  # type: ignore[attr-defined]


def test_push_file_requires_both_committer_fields(tmp_path: Path) -> None:
    local = tmp_path / "notes.txt"
    local.write_bytes(b"x")

    with pytest.raises(SystemExit) as excinfo:
        cli_module.main(
            [
                "push-file",
                "octo/widgets",
                "notes.txt",
                "--file",
                str(local),
                "--message",
                "m",
                "--committer-name",
                "Octo Cat",
            ]
        )

    assert excinfo.value.code == 2
