"""Normalized error hierarchy for repo_store."""

from __future__ import annotations

from typing import Optional


class RepoStoreError(Exception):
    """Base class for all repo_store errors.

    :param message: Human-readable error description.
    :param path: The path involved in the error, if any.
    :param backend: The backend name involved, if any.
    """

    def __init__(self, message: str = "", *, path: Optional[str] = None, backend: Optional[str] = None) -> None:
        self.path = path
        self.backend = backend
        super().__init__(message)

    def _context(self) -> list[str]:
        ctx = []
        if self.path is not None:
            ctx.append(f"path={self.path!r}")
        if self.backend is not None:
            ctx.append(f"backend={self.backend!r}")
        return ctx

    def __str__(self) -> str:
        parts = [super().__str__(), *self._context()]
        return " | ".join(parts) if len(parts) > 1 else parts[0]

    def __repr__(self) -> str:
        cls = type(self).__name__
        args = [repr(self.args[0] if self.args else ""), *self._context()]
        return f"{cls}({', '.join(args)})"


class NotFound(RepoStoreError):
    """Raised when a file does not exist on the branch."""


class PermissionDenied(RepoStoreError):
    """Raised when the credential is rejected or lacks access (HTTP 401/403)."""


class InvalidPath(RepoStoreError):
    """Raised for malformed, unsafe, or empty-where-a-leaf-is-required paths."""


class NotSupported(RepoStoreError):
    """Raised when an operation is not available on this backend.

    :param capability: The name of the unsupported capability.
    """

    def __init__(
        self,
        message: str = "",
        *,
        path: Optional[str] = None,
        backend: Optional[str] = None,
        capability: str = "",
    ) -> None:
        self.capability = capability
        super().__init__(message, path=path, backend=backend)

    def _context(self) -> list[str]:
        ctx = super()._context()
        if self.capability:
            ctx.append(f"capability={self.capability!r}")
        return ctx


class WriterClosed(RepoStoreError):
    """Raised when writing to a writer that was already closed."""


class BackendClosed(RepoStoreError):
    """Raised when an operation is attempted on a closed backend."""


class BatchAlreadyCommitted(RepoStoreError):
    """Raised when queueing into, or committing, a batch that already committed."""


class PathIsDirectory(RepoStoreError):
    """Raised when a file operation targets a directory."""


class ConflictOnCommit(RepoStoreError):
    """Raised when the branch moved away from the batch's base commit.

    :param current_sha: The commit the branch points to now, if known.
    """

    def __init__(
        self,
        message: str = "",
        *,
        path: Optional[str] = None,
        backend: Optional[str] = None,
        current_sha: Optional[str] = None,
    ) -> None:
        self.current_sha = current_sha
        super().__init__(message, path=path, backend=backend)

    def _context(self) -> list[str]:
        ctx = super()._context()
        if self.current_sha is not None:
            ctx.append(f"current_sha={self.current_sha!r}")
        return ctx


class TransportError(RepoStoreError):
    """Raised for any remote failure that has no more specific classification.

    :param cause: The underlying transport or API exception.
    """

    def __init__(
        self,
        message: str = "",
        *,
        path: Optional[str] = None,
        backend: Optional[str] = None,
        cause: Optional[BaseException] = None,
    ) -> None:
        self.cause = cause
        super().__init__(message, path=path, backend=backend)


class OperationCancelled(RepoStoreError):
    """Raised when the caller's cancel signal is set before a round trip starts."""
