"""Atomic multi-file commits through the git data API."""

from __future__ import annotations

import logging
import threading
from typing import TYPE_CHECKING

from repo_store._errors import BatchAlreadyCommitted, ConflictOnCommit, NotFound, PathIsDirectory
from repo_store._models import DeleteOp, RefConflict, WriteOp
from repo_store._path import require_file_path
from repo_store.backends._github_client import BLOB_MODE

if TYPE_CHECKING:
    from types import TracebackType

    from repo_store._models import BatchOperation
    from repo_store._types import CancelSignal, JSONDict
    from repo_store.backends._github import GitHubBackend

log = logging.getLogger(__name__)


class Batch:
    """Queue of writes and deletes applied to the branch as exactly one commit.

    Nothing is sent until :meth:`commit`. The commit is built on the
    branch's current head and the branch is advanced with a non-forced
    update, so a concurrent commit makes it fail with
    :class:`~repo_store.ConflictOnCommit` rather than overwrite history.
    A failed commit leaves the batch uncommitted; calling :meth:`commit`
    again rebuilds it on the new head.

    Used as a context manager, the batch commits when the block exits
    cleanly and is left uncommitted when it raises.

    :param backend: The backend that owns the batch.
    :param message: Commit message.
    :param cancel: Optional cancel signal checked before each remote call.
    """

    def __init__(self, backend: GitHubBackend, message: str, *, cancel: CancelSignal | None = None) -> None:
        self._backend = backend
        self._message = message
        self._cancel = cancel
        self._operations: list[BatchOperation] = []
        self._committed = False
        self._lock = threading.Lock()

    def __repr__(self) -> str:
        return f"Batch(operations={len(self)}, committed={self.committed})"

    @property
    def message(self) -> str:
        return self._message

    @property
    def committed(self) -> bool:
        with self._lock:
            return self._committed

    @property
    def operations(self) -> tuple[BatchOperation, ...]:
        """Queued operations in insertion order."""
        with self._lock:
            return tuple(self._operations)

    def __len__(self) -> int:
        with self._lock:
            return len(self._operations)

    # region: queueing

    def _queue(self, op: BatchOperation) -> None:
        with self._lock:
            if self._committed:
                raise BatchAlreadyCommitted("Batch already committed", path=op.path, backend=self._backend.name)
            self._operations.append(op)

    def write(self, path: str, content: bytes) -> None:
        """Queue a create-or-update of ``path``.

        :raises InvalidPath: If ``path`` is unsafe or empty.
        :raises BatchAlreadyCommitted: If the batch was committed.
        """
        self._queue(WriteOp(path=require_file_path(path), content=bytes(content)))

    def delete(self, path: str) -> None:
        """Queue removal of ``path``; a path missing at commit time is skipped.

        :raises InvalidPath: If ``path`` is unsafe or empty.
        :raises BatchAlreadyCommitted: If the batch was committed.
        """
        self._queue(DeleteOp(path=require_file_path(path)))

    # endregion

    # region: commit protocol

    def commit(self) -> str | None:
        """Apply all queued operations as one commit.

        :returns: The new commit sha, or ``None`` if nothing was queued.
        :raises BatchAlreadyCommitted: If the batch was committed.
        :raises ConflictOnCommit: If the branch moved during the commit.
        """
        with self._lock:
            if self._committed:
                raise BatchAlreadyCommitted("Batch already committed", backend=self._backend.name)
            self._backend._check_open()
            if not self._operations:
                self._committed = True
                log.debug("Empty batch, nothing to commit")
                return None

            backend = self._backend
            client = backend._client
            branch = backend.identity.branch
            cancel = self._cancel

            with backend._errors():
                base_commit = client.get_ref(branch, cancel=cancel)
                base_tree = str(client.get_commit(base_commit, cancel=cancel)["tree"]["sha"])  # type: ignore[index]

            entries = self._build_tree_entries(base_commit)

            with backend._errors():
                tree = client.create_tree(base_tree, entries, cancel=cancel) if entries else base_tree
                commit_sha = client.create_commit(
                    self._message,
                    tree,
                    [base_commit],
                    author=backend.config.commit_author,
                    cancel=cancel,
                )
                result = client.update_ref(branch, commit_sha, expected_sha=base_commit, cancel=cancel)

            if isinstance(result, RefConflict):
                raise ConflictOnCommit(
                    f"Branch {branch!r} moved from {base_commit} during the batch commit",
                    backend=backend.name,
                    current_sha=result.current_sha,
                )

            self._committed = True
            log.info(
                "Committed batch of %d operation(s) to %s@%s (commit %s)",
                len(self._operations),
                backend.identity.full_name,
                branch,
                commit_sha,
            )
            return commit_sha

    def _build_tree_entries(self, base_commit: str) -> list[JSONDict]:
        """Turn the queue into tree entries relative to ``base_commit``.

        Each write stores a blob. A delete becomes an entry with a null sha
        if the path exists in the base commit and is dropped otherwise.
        Later operations on a path replace earlier ones.
        """
        backend = self._backend
        entries: dict[str, JSONDict] = {}
        in_base: dict[str, bool] = {}

        for op in self._operations:
            if isinstance(op, WriteOp):
                with backend._errors(op.path):
                    blob = backend._client.create_blob(op.content, cancel=self._cancel)
                entries.pop(op.path, None)
                entries[op.path] = {"path": op.path, "mode": BLOB_MODE, "type": "blob", "sha": blob}
            elif isinstance(op, DeleteOp):
                if op.path not in in_base:
                    in_base[op.path] = self._exists_in(op.path, base_commit)
                entries.pop(op.path, None)
                if in_base[op.path]:
                    entries[op.path] = {"path": op.path, "mode": BLOB_MODE, "type": "blob", "sha": None}
                else:
                    log.debug("Skipping delete of %s: not present at %s", op.path, base_commit)

        return list(entries.values())

    def _exists_in(self, path: str, ref: str) -> bool:
        try:
            info = self._backend._lookup(path, ref=ref, cancel=self._cancel)
        except NotFound:
            return False
        if info.is_dir:
            raise PathIsDirectory(f"Cannot delete a directory: {path}", path=path, backend=self._backend.name)
        return True

    # endregion

    def __enter__(self) -> Batch:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        if exc_type is None and not self.committed:
            self.commit()
