"""Backend abstract base class: the core storage contract."""

from __future__ import annotations

import abc
import io
from typing import TYPE_CHECKING, BinaryIO, TypeVar

from repo_store._errors import NotSupported

if TYPE_CHECKING:
    from types import TracebackType

    from repo_store._capabilities import CapabilitySet, Features
    from repo_store._models import ObjectInfo
    from repo_store._types import CancelSignal, WritableContent, Writer

T = TypeVar("T")


class Backend(abc.ABC):
    """Abstract base class for storage backends.

    Every backend must implement all abstract methods. Backend-native
    exceptions must never leak; they are mapped to ``repo_store`` errors.
    Operations take an optional ``cancel`` signal; once it is set no new
    remote call is started.
    """

    @property
    @abc.abstractmethod
    def name(self) -> str:
        """Unique identifier for this backend type (e.g. ``'github'``)."""

    @property
    @abc.abstractmethod
    def capabilities(self) -> CapabilitySet:
        """Declared capabilities of this backend."""

    @property
    @abc.abstractmethod
    def features(self) -> Features:
        """Flat feature descriptor (capabilities plus supported hash kinds)."""

    @property
    @abc.abstractmethod
    def closed(self) -> bool:
        """``True`` once :meth:`close` has been called."""

    @abc.abstractmethod
    def read_bytes(
        self,
        path: str,
        *,
        offset: int = 0,
        limit: int | None = None,
        cancel: CancelSignal | None = None,
    ) -> bytes:
        """Read the content of a file, optionally windowed by ``offset``/``limit``.

        :raises NotFound: If the file does not exist.
        :raises PathIsDirectory: If ``path`` is a directory.
        """

    def read(
        self,
        path: str,
        *,
        offset: int = 0,
        limit: int | None = None,
        cancel: CancelSignal | None = None,
    ) -> BinaryIO:
        """Return a binary stream over the (windowed) content of a file."""
        return io.BytesIO(self.read_bytes(path, offset=offset, limit=limit, cancel=cancel))

    @abc.abstractmethod
    def open_writer(self, path: str, *, cancel: CancelSignal | None = None) -> Writer:
        """Return a buffered writer that stores its content on close."""

    def write(self, path: str, content: WritableContent, *, cancel: CancelSignal | None = None) -> None:
        """Create or replace a file with ``content`` (a bytes-like object or a binary stream)."""
        data = bytes(content) if isinstance(content, (bytes, bytearray, memoryview)) else content.read()
        with self.open_writer(path, cancel=cancel) as writer:
            writer.write(data)

    @abc.abstractmethod
    def delete(self, path: str, *, cancel: CancelSignal | None = None) -> None:
        """Delete a file. Deleting a missing file succeeds.

        :raises PathIsDirectory: If ``path`` is a directory.
        """

    @abc.abstractmethod
    def exists(self, path: str, *, cancel: CancelSignal | None = None) -> bool:
        """Check if a file or directory exists. Never raises ``NotFound``."""

    @abc.abstractmethod
    def stat(self, path: str, *, cancel: CancelSignal | None = None) -> ObjectInfo:
        """Get metadata for a file or directory.

        :raises NotFound: If nothing exists at ``path``.
        """

    @abc.abstractmethod
    def list_paths(self, prefix: str = "", *, cancel: CancelSignal | None = None) -> list[str]:
        """List file paths equal to or beneath ``prefix``."""

    def copy(self, src: str, dst: str) -> None:
        """Copy a file.

        :raises NotSupported: Unless the backend overrides it.
        """
        self._unsupported("copy", src)

    def move(self, src: str, dst: str) -> None:
        """Move/rename a file.

        :raises NotSupported: Unless the backend overrides it.
        """
        self._unsupported("move", src)

    def mkdir(self, path: str) -> None:
        """Create a directory.

        :raises NotSupported: Unless the backend overrides it.
        """
        self._unsupported("mkdir", path)

    def rmdir(self, path: str) -> None:
        """Remove a directory.

        :raises NotSupported: Unless the backend overrides it.
        """
        self._unsupported("rmdir", path)

    def _unsupported(self, capability: str, path: str) -> None:
        raise NotSupported(
            f"Operation '{capability}' is not supported by backend '{self.name}'",
            path=path,
            backend=self.name,
            capability=capability,
        )

    def close(self) -> None:  # noqa: B027
        """Release resources. Default is a no-op."""

    def __enter__(self: T) -> T:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        self.close()

    def unwrap(self, type_hint: type[T]) -> T:
        """Return the native backend handle if it matches the requested type.

        :param type_hint: The expected type (e.g., ``httpx.Client``).
        :raises NotSupported: If backend cannot provide the requested type.
        """
        raise NotSupported(
            f"Backend '{self.name}' does not expose native handle of type {type_hint.__name__}. "
            f"Override unwrap() in your backend to provide native access.",
            capability="unwrap",
            backend=self.name,
        )
