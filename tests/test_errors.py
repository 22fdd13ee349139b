"""Tests for the error hierarchy."""

from __future__ import annotations

import pytest

from repo_store._errors import (
    BackendClosed,
    BatchAlreadyCommitted,
    ConflictOnCommit,
    InvalidPath,
    NotFound,
    NotSupported,
    OperationCancelled,
    PathIsDirectory,
    PermissionDenied,
    RepoStoreError,
    TransportError,
    WriterClosed,
)

ALL_ERRORS = [
    NotFound,
    PermissionDenied,
    InvalidPath,
    NotSupported,
    WriterClosed,
    BackendClosed,
    BatchAlreadyCommitted,
    PathIsDirectory,
    ConflictOnCommit,
    TransportError,
    OperationCancelled,
]


class TestBaseError:
    def test_default_attributes(self) -> None:
        e = RepoStoreError("boom")
        assert e.path is None
        assert e.backend is None
        assert str(e) == "boom"

    def test_with_attributes(self) -> None:
        e = RepoStoreError("boom", path="a/b.txt", backend="github")
        assert e.path == "a/b.txt"
        assert e.backend == "github"

    def test_str_includes_context(self) -> None:
        e = RepoStoreError("boom", path="a.txt", backend="github")
        assert str(e) == "boom | path='a.txt' | backend='github'"

    def test_repr(self) -> None:
        e = NotFound("missing", path="x")
        assert repr(e) == "NotFound('missing', path='x')"


class TestHierarchy:
    @pytest.mark.parametrize("cls", ALL_ERRORS)
    def test_is_repo_store_error(self, cls: type[RepoStoreError]) -> None:
        assert issubclass(cls, RepoStoreError)

    @pytest.mark.parametrize("cls", ALL_ERRORS)
    def test_catchable_as_base(self, cls: type[RepoStoreError]) -> None:
        with pytest.raises(RepoStoreError):
            raise cls("x", path="p")

    def test_kinds_are_distinct(self) -> None:
        assert not issubclass(NotFound, PermissionDenied)
        assert not issubclass(ConflictOnCommit, TransportError)


class TestNotSupported:
    def test_capability(self) -> None:
        e = NotSupported("no", capability="copy", backend="github")
        assert e.capability == "copy"
        assert "capability='copy'" in str(e)

    def test_capability_defaults_empty(self) -> None:
        assert NotSupported("no").capability == ""


class TestConflictOnCommit:
    def test_current_sha(self) -> None:
        e = ConflictOnCommit("moved", current_sha="abc123")
        assert e.current_sha == "abc123"
        assert "current_sha='abc123'" in str(e)

    def test_current_sha_optional(self) -> None:
        assert ConflictOnCommit("moved").current_sha is None


class TestTransportError:
    def test_cause(self) -> None:
        cause = OSError("reset")
        e = TransportError("github: reset", cause=cause)
        assert e.cause is cause

    def test_cause_defaults_none(self) -> None:
        assert TransportError("x").cause is None
