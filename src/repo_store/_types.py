"""Type aliases and protocols used throughout repo_store."""

from __future__ import annotations

from typing import TYPE_CHECKING, BinaryIO, Protocol

if TYPE_CHECKING:
    from types import TracebackType


class CancelSignal(Protocol):
    """Anything with an ``is_set()`` method, e.g. :class:`threading.Event`."""

    def is_set(self) -> bool: ...


class Writer(Protocol):
    """Buffered writer returned by ``Backend.open_writer``; content is stored on close."""

    @property
    def closed(self) -> bool: ...

    def write(self, data: bytes) -> int: ...

    def close(self) -> None: ...

    def abort(self) -> None: ...

    def __enter__(self) -> Writer: ...

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None: ...


WritableContent = BinaryIO | bytes | bytearray | memoryview
JSONDict = dict[str, object]
