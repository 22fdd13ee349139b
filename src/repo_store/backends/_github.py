"""GitHub repository backend over the contents and git data REST APIs."""

from __future__ import annotations

import base64
import io
import logging
import threading
from contextlib import contextmanager
from typing import TYPE_CHECKING, Any, TypeVar

import httpx

from repo_store._backend import Backend
from repo_store._capabilities import Capability, CapabilitySet, Features, HashKind
from repo_store._config import (
    DEFAULT_BASE_URL,
    DEFAULT_BATCH_MESSAGE,
    DEFAULT_BRANCH,
    DEFAULT_COMMIT_MESSAGE,
    DEFAULT_UPLOAD_URL,
    GitHubConfig,
)
from repo_store._errors import (
    BackendClosed,
    NotFound,
    NotSupported,
    PathIsDirectory,
    PermissionDenied,
    RepoStoreError,
    TransportError,
    WriterClosed,
)
from repo_store._models import DirectoryInfo, FileInfo, RepositoryIdentity
from repo_store._path import RepoPath, normalize_path, require_file_path, validate_path
from repo_store.backends._github_batch import Batch
from repo_store.backends._github_client import GitHubAPIError, GitHubClient

if TYPE_CHECKING:
    from collections.abc import Iterator
    from types import TracebackType

    from repo_store._models import CommitAuthor, ObjectInfo
    from repo_store._types import CancelSignal

T = TypeVar("T")

log = logging.getLogger(__name__)

_GITHUB_CAPABILITIES = CapabilitySet(
    {
        Capability.READ,
        Capability.WRITE,
        Capability.DELETE,
        Capability.LIST,
        Capability.STAT,
        Capability.RANGE_READ,
        Capability.LIST_PREFIX,
        Capability.VERSIONING,
        Capability.BATCH,
    }
)
_GITHUB_FEATURES = Features.from_capabilities(_GITHUB_CAPABILITIES, hashes=frozenset({HashKind.SHA1}))


class GitHubBackend(Backend):
    """Files on one branch of a GitHub repository.

    Every write and delete produces one commit on the branch; a
    :class:`Batch` groups several of them into a single commit.

    :param owner: Repository owner (user or organization).
    :param repo: Repository name.
    :param token: Access token.
    :param branch: Branch to read from and commit to.
    :param base_url: REST API base URL (enterprise deployments).
    :param upload_url: Upload URL (enterprise deployments).
    :param commit_message: Message template for single-file commits; ``{path}`` is substituted.
    :param commit_author: Author for commits; ``None`` uses the token's user.
    :param timeout: Per-request timeout in seconds.
    :param transport: Optional ``httpx`` transport, mainly for tests.
    :raises ValueError: If owner, repo or token is missing.
    """

    def __init__(
        self,
        owner: str,
        repo: str,
        token: str,
        *,
        branch: str = DEFAULT_BRANCH,
        base_url: str = DEFAULT_BASE_URL,
        upload_url: str = DEFAULT_UPLOAD_URL,
        commit_message: str = DEFAULT_COMMIT_MESSAGE,
        commit_author: CommitAuthor | None = None,
        timeout: float = 30.0,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        config = GitHubConfig(
            owner=owner,
            repo=repo,
            token=token,
            branch=branch or DEFAULT_BRANCH,
            base_url=base_url or DEFAULT_BASE_URL,
            upload_url=upload_url or DEFAULT_UPLOAD_URL,
            commit_message=commit_message or DEFAULT_COMMIT_MESSAGE,
            commit_author=commit_author,
            timeout=timeout,
        )
        config.validate()
        self._config = config
        self._identity = RepositoryIdentity(
            owner=config.owner,
            repo=config.repo,
            branch=config.branch,
            base_url=config.base_url,
            upload_url=config.upload_url,
        )
        self._transport = transport
        self._client_instance: GitHubClient | None = None
        self._closed = False
        self._lock = threading.Lock()

    @classmethod
    def from_config(cls, config: GitHubConfig, *, transport: httpx.BaseTransport | None = None) -> GitHubBackend:
        """Construct from a :class:`~repo_store.GitHubConfig`."""
        return cls(
            owner=config.owner,
            repo=config.repo,
            token=config.token,
            branch=config.branch,
            base_url=config.base_url,
            upload_url=config.upload_url,
            commit_message=config.commit_message,
            commit_author=config.commit_author,
            timeout=config.timeout,
            transport=transport,
        )

    def __repr__(self) -> str:
        return f"GitHubBackend(repo={self._identity.full_name!r}, branch={self._identity.branch!r})"

    @property
    def name(self) -> str:
        return "github"

    @property
    def capabilities(self) -> CapabilitySet:
        return _GITHUB_CAPABILITIES

    @property
    def features(self) -> Features:
        return _GITHUB_FEATURES

    @property
    def identity(self) -> RepositoryIdentity:
        return self._identity

    @property
    def config(self) -> GitHubConfig:
        return self._config

    # region: lifecycle

    @property
    def _client(self) -> GitHubClient:
        if self._client_instance is None:
            self._client_instance = GitHubClient(
                self._identity,
                self._config.token,
                timeout=self._config.timeout,
                transport=self._transport,
            )
        return self._client_instance

    @property
    def closed(self) -> bool:
        with self._lock:
            return self._closed

    def _check_open(self) -> None:
        with self._lock:
            if self._closed:
                raise BackendClosed("Backend is closed", backend=self.name)

    def close(self) -> None:
        with self._lock:
            if self._closed:
                return
            self._closed = True
            if self._client_instance is not None:
                self._client_instance.close()
                self._client_instance = None
        log.debug("Closed backend for %s", self._identity.full_name)

    def unwrap(self, type_hint: type[T]) -> T:
        if type_hint is httpx.Client:
            self._check_open()
            return self._client.http  # type: ignore[return-value]
        return super().unwrap(type_hint)

    # endregion

    # region: error mapping

    @contextmanager
    def _errors(self, path: str = "") -> Iterator[None]:
        """Map transport and API exceptions to repo_store errors."""
        try:
            yield
        except RepoStoreError:
            raise
        except (GitHubAPIError, httpx.HTTPStatusError) as exc:
            raise self._classify_error(exc, path) from exc
        except httpx.HTTPError as exc:
            raise TransportError(f"github: {exc}", path=path or None, backend=self.name, cause=exc) from exc

    def _classify_error(self, exc: Exception, path: str) -> RepoStoreError:
        """Classify a failed API call by its HTTP status.

        The status is read from the response object when the exception
        carries one, and from the structured API error otherwise.
        """
        status: int | None = None
        response = getattr(exc, "response", None)
        if isinstance(response, httpx.Response):
            status = response.status_code
        elif isinstance(exc, GitHubAPIError):
            status = exc.status_code
        shown = path or None
        if status == 404:
            return NotFound(f"Not found: {path}", path=shown, backend=self.name)
        if status in (401, 403):
            return PermissionDenied(f"Permission denied: {path}", path=shown, backend=self.name)
        return TransportError(f"github: {exc}", path=shown, backend=self.name, cause=exc)

    # endregion

    # region: lookups

    def _get_contents(self, path: str, *, ref: str | None = None, cancel: CancelSignal | None = None) -> Any:
        with self._errors(path):
            return self._client.get_contents(path, ref=ref or self._identity.branch, cancel=cancel)

    @staticmethod
    def _to_info(path: str, payload: Any) -> ObjectInfo:
        if isinstance(payload, list) or payload.get("type") == "dir":
            return DirectoryInfo(path=path)
        return FileInfo(path=path, size=int(payload.get("size", 0)), sha=str(payload["sha"]))

    def _lookup(self, path: str, *, ref: str | None = None, cancel: CancelSignal | None = None) -> ObjectInfo:
        """Resolve a normalized path at ``ref`` (default: the branch).

        :raises NotFound: If nothing exists at ``path``.
        """
        return self._to_info(path, self._get_contents(path, ref=ref, cancel=cancel))

    def _current_sha(self, path: str, *, cancel: CancelSignal | None = None) -> str | None:
        """Return the blob sha at ``path``, or ``None`` if there is no file yet.

        :raises PathIsDirectory: If ``path`` is a directory.
        """
        try:
            info = self._lookup(path, cancel=cancel)
        except NotFound:
            return None
        if info.is_dir:
            raise PathIsDirectory(f"Path is a directory: {path}", path=path, backend=self.name)
        return info.sha

    # endregion

    # region: read operations

    def read_bytes(
        self,
        path: str,
        *,
        offset: int = 0,
        limit: int | None = None,
        cancel: CancelSignal | None = None,
    ) -> bytes:
        if offset < 0:
            raise ValueError("offset must be non-negative")
        if limit is not None and limit < 0:
            raise ValueError("limit must be non-negative")
        self._check_open()
        validate_path(path)
        normalized = normalize_path(path)
        payload = self._get_contents(normalized, cancel=cancel)
        if isinstance(payload, list) or payload.get("type") == "dir":
            raise PathIsDirectory(f"Path is a directory: {normalized}", path=normalized, backend=self.name)
        if payload.get("type") != "file":
            raise NotSupported(
                f"Cannot read {payload.get('type')} entries: {normalized}",
                path=normalized,
                backend=self.name,
                capability=Capability.READ.value,
            )
        data = self._decode_content(normalized, payload)
        return _apply_window(data, offset, limit)

    def _decode_content(self, path: str, payload: dict[str, Any]) -> bytes:
        encoding = payload.get("encoding") or "base64"
        if encoding == "none":
            # Files above the contents API size cap come back without inline content.
            raise NotSupported(
                f"File too large for the contents API: {path}",
                path=path,
                backend=self.name,
                capability=Capability.STREAMING.value,
            )
        if encoding != "base64":
            raise TransportError(f"github: unexpected content encoding {encoding!r}", path=path, backend=self.name)
        return base64.b64decode(payload.get("content") or "")

    # endregion

    # region: write operations

    def open_writer(self, path: str, *, cancel: CancelSignal | None = None) -> GitHubWriter:
        """Return a writer for ``path``; its content is committed on :meth:`GitHubWriter.close`."""
        self._check_open()
        return GitHubWriter(self, require_file_path(path), cancel=cancel)

    def _commit_file(self, path: str, data: bytes, *, cancel: CancelSignal | None = None) -> None:
        """Create or update ``path`` with ``data`` as one commit."""
        self._check_open()
        sha = self._current_sha(path, cancel=cancel)
        with self._errors(path):
            result = self._client.put_contents(
                path,
                data,
                message=self._config.format_commit_message(path),
                branch=self._identity.branch,
                sha=sha,
                author=self._config.commit_author,
                cancel=cancel,
            )
        log.info(
            "%s %s on %s@%s (commit %s)",
            "Updated" if sha else "Created",
            path,
            self._identity.full_name,
            self._identity.branch,
            _commit_sha(result),
        )

    # endregion

    # region: delete operations

    def delete(self, path: str, *, cancel: CancelSignal | None = None) -> None:
        self._check_open()
        normalized = require_file_path(path)
        try:
            info = self._lookup(normalized, cancel=cancel)
        except NotFound:
            log.debug("Delete of missing %s is a no-op", normalized)
            return
        if info.is_dir:
            raise PathIsDirectory(f"Cannot delete a directory: {normalized}", path=normalized, backend=self.name)
        with self._errors(normalized):
            result = self._client.delete_contents(
                normalized,
                message=self._config.format_delete_message(normalized),
                sha=str(info.sha),
                branch=self._identity.branch,
                author=self._config.commit_author,
                cancel=cancel,
            )
        log.info(
            "Deleted %s on %s@%s (commit %s)",
            normalized,
            self._identity.full_name,
            self._identity.branch,
            _commit_sha(result),
        )

    # endregion

    # region: metadata and listing

    def exists(self, path: str, *, cancel: CancelSignal | None = None) -> bool:
        self._check_open()
        validate_path(path)
        try:
            self._lookup(normalize_path(path), cancel=cancel)
        except NotFound:
            return False
        return True

    def stat(self, path: str, *, cancel: CancelSignal | None = None) -> ObjectInfo:
        self._check_open()
        validate_path(path)
        return self._lookup(normalize_path(path), cancel=cancel)

    def list_paths(self, prefix: str = "", *, cancel: CancelSignal | None = None) -> list[str]:
        """List file paths equal to ``prefix`` or beneath ``prefix/``.

        The whole branch tree is fetched in one call; directories are
        excluded and an empty prefix matches every file.
        """
        self._check_open()
        root = RepoPath(prefix)
        with self._errors(str(root)):
            tree = self._client.get_tree_recursive(self._identity.branch, cancel=cancel)
        if tree.get("truncated"):
            log.warning("Tree listing for %s@%s was truncated", self._identity.full_name, self._identity.branch)
        entries: list[dict[str, Any]] = tree.get("tree", [])  # type: ignore[assignment]
        paths = []
        for entry in entries:
            if entry.get("type") != "blob":
                continue
            entry_path = RepoPath(str(entry["path"]))
            if entry_path.is_within(root):
                paths.append(str(entry_path))
        return paths

    # endregion

    # region: batches

    def new_batch(self, message: str = "", *, cancel: CancelSignal | None = None) -> Batch:
        """Start a batch whose queued writes and deletes land as one commit."""
        self._check_open()
        return Batch(self, message or DEFAULT_BATCH_MESSAGE, cancel=cancel)

    # endregion

    # region: unsupported operations

    def _unsupported(self, capability: str, path: str) -> None:
        self._check_open()
        super()._unsupported(capability, path)

    # endregion


class GitHubWriter:
    """Buffers bytes for one path and commits them on :meth:`close`.

    Closing twice is a no-op. Leaving a ``with`` block through an exception
    discards the buffer instead of committing it.
    """

    def __init__(self, backend: GitHubBackend, path: str, *, cancel: CancelSignal | None = None) -> None:
        self._backend = backend
        self._path = path
        self._cancel = cancel
        self._buffer = io.BytesIO()
        self._closed = False
        self._lock = threading.Lock()

    def __repr__(self) -> str:
        return f"GitHubWriter(path={self._path!r}, closed={self._closed})"

    @property
    def path(self) -> str:
        return self._path

    @property
    def closed(self) -> bool:
        with self._lock:
            return self._closed

    def writable(self) -> bool:
        return True

    def write(self, data: bytes) -> int:
        with self._lock:
            if self._closed:
                raise WriterClosed("Writer is closed", path=self._path, backend=self._backend.name)
            return self._buffer.write(data)

    def close(self) -> None:
        """Commit the buffered content. The writer is closed even if the commit fails."""
        with self._lock:
            if self._closed:
                return
            self._closed = True
            data = self._buffer.getvalue()
            self._buffer = io.BytesIO()
            self._backend._commit_file(self._path, data, cancel=self._cancel)

    def abort(self) -> None:
        """Close without committing."""
        with self._lock:
            self._closed = True
            self._buffer = io.BytesIO()

    def __enter__(self) -> GitHubWriter:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        if exc_type is not None:
            self.abort()
        else:
            self.close()


def _apply_window(data: bytes, offset: int, limit: int | None) -> bytes:
    """Slice ``data`` client-side; an offset past the end yields ``b""``."""
    if offset >= len(data):
        return b""
    data = data[offset:]
    if limit is not None and len(data) > limit:
        data = data[:limit]
    return data


def _commit_sha(result: dict[str, Any] | None) -> str | None:
    if not result:
        return None
    commit = result.get("commit")
    return commit.get("sha") if isinstance(commit, dict) else None
