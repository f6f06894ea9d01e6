from __future__ import annotations

import pytest

from repohost.domain.branches import (
    BranchRef,
    MergeRequest,
    RepoCoordinate,
    branch_name_from_ref,
    branch_ref_name,
)


def test_branch_ref_name_uses_heads_namespace() -> None:
    assert BranchRef(name="feature/login").ref_name == "refs/heads/feature/login"
    assert branch_ref_name("main") == "refs/heads/main"


def test_branch_name_from_ref_strips_heads_prefix_only() -> None:
    assert branch_name_from_ref("refs/heads/release/1.0") == "release/1.0"
    assert branch_name_from_ref("refs/tags/v1") == "refs/tags/v1"


def test_coordinate_slug() -> None:
    assert RepoCoordinate("octo", "widgets").slug == "octo/widgets"


@pytest.mark.parametrize(("owner", "repository"), [("", "widgets"), ("octo", "  ")])
def test_coordinate_rejects_blank_parts(owner: str, repository: str) -> None:
    with pytest.raises(ValueError, match="non-empty"):
        RepoCoordinate(owner, repository)


@pytest.mark.parametrize(("source", "destination"), [("", "main"), ("feature", "")])
def test_merge_request_rejects_blank_branches(source: str, destination: str) -> None:
    with pytest.raises(ValueError, match="must be non-empty"):
        MergeRequest(RepoCoordinate("octo", "widgets"), source, destination)
