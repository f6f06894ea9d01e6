"""Failures raised by repository host clients on the write path."""

from __future__ import annotations

from .branches import ErrorKind


class RepoHostError(RuntimeError):
    """Transport, authentication, rate-limit or unclassified remote failure."""

    kind: ErrorKind = ErrorKind.HOST_ERROR


class RefConflictError(RepoHostError):
    """Reference creation was rejected, e.g. the ref already exists."""

    kind = ErrorKind.CREATE_CONFLICT


class MergeConflictError(RepoHostError):
    """The host refused the merge."""

    kind = ErrorKind.MERGE_CONFLICT
