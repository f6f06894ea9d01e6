"""Pydantic models describing the GitHub REST API payloads."""

from __future__ import annotations

import base64
import binascii
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator


class GitHubBaseModel(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)


class GitObject(GitHubBaseModel):
    sha: str
    type: str


class GitRefPayload(GitHubBaseModel):
    ref: str
    object: GitObject


class CommitDetail(GitHubBaseModel):
    message: str


class MergeCommitPayload(GitHubBaseModel):
    sha: str
    commit: CommitDetail
    html_url: str | None = None


class ContentFilePayload(GitHubBaseModel):
    type: Literal["file"]
    path: str
    sha: str
    size: int
    encoding: str
    content: str

    @field_validator("encoding")
    @classmethod
    def _require_base64(cls, value: str) -> str:
        if value != "base64":
            raise ValueError(f"Unsupported content encoding: {value}")
        return value

    def decoded(self) -> bytes:
        try:
            # GitHub wraps base64 payloads at 60 columns
            return base64.b64decode(self.content.replace("\n", ""), validate=True)
        except binascii.Error as exc:
            raise ValueError(f"Corrupt base64 content for {self.path}") from exc


class ContentSummary(GitHubBaseModel):
    path: str
    sha: str


class CommitSummary(GitHubBaseModel):
    sha: str


class ContentUpdatePayload(GitHubBaseModel):
    content: ContentSummary
    commit: CommitSummary


class AuthorizationPayload(GitHubBaseModel):
    id: int
    token: str
    note: str | None = None
    scopes: list[str] = Field(default_factory=list)


class UserPayload(GitHubBaseModel):
    login: str
    id: int
    name: str | None = None


class ErrorPayload(GitHubBaseModel):
    message: str
    documentation_url: str | None = None
    errors: list[object] = Field(default_factory=list)
