"""Capability enum, CapabilitySet and the Features descriptor."""

from __future__ import annotations

import dataclasses
import enum
from typing import TYPE_CHECKING

from repo_store._errors import NotSupported

if TYPE_CHECKING:
    from collections.abc import Iterator


class Capability(enum.Enum):
    """Operations a backend may support."""

    READ = "read"
    WRITE = "write"
    DELETE = "delete"
    LIST = "list"
    STAT = "stat"
    COPY = "copy"
    MOVE = "move"
    MKDIR = "mkdir"
    RMDIR = "rmdir"
    RANGE_READ = "range_read"
    LIST_PREFIX = "list_prefix"
    STREAMING = "streaming"
    VERSIONING = "versioning"
    BATCH = "batch"


class HashKind(enum.Enum):
    """Content hashes a backend can report in :class:`~repo_store.FileInfo`."""

    SHA1 = "sha1"


class CapabilitySet:
    """Immutable set of capabilities declared by a backend.

    :param capabilities: The set of supported capabilities.
    """

    __slots__ = ("_caps",)
    _caps: frozenset[Capability]

    def __init__(self, capabilities: set[Capability]) -> None:
        object.__setattr__(self, "_caps", frozenset(capabilities))

    def supports(self, cap: Capability) -> bool:
        """Check whether a capability is supported."""
        return cap in self._caps

    def require(self, cap: Capability, *, backend: str = "") -> None:
        """Raise if a capability is not supported.

        :raises NotSupported: If the capability is missing.
        """
        if cap not in self._caps:
            raise NotSupported(
                f"Capability '{cap.value}' is not supported",
                capability=cap.value,
                backend=backend or None,
            )

    def __contains__(self, cap: object) -> bool:
        return cap in self._caps

    def __iter__(self) -> Iterator[Capability]:
        return iter(self._caps)

    def __len__(self) -> int:
        return len(self._caps)

    def __repr__(self) -> str:
        names = sorted(c.name for c in self._caps)
        return f"CapabilitySet({{{', '.join(names)}}})"

    def __setattr__(self, name: str, value: object) -> None:
        raise AttributeError("CapabilitySet is immutable")

    def __delattr__(self, name: str) -> None:
        raise AttributeError("CapabilitySet is immutable")


@dataclasses.dataclass(frozen=True)
class Features:
    """Flat feature descriptor, derived from a :class:`CapabilitySet`.

    :param hashes: Hash kinds reported by ``stat``.
    """

    copy: bool
    move: bool
    mkdir: bool
    rmdir: bool
    stat: bool
    streaming: bool
    versioning: bool
    range_read: bool
    list_prefix: bool
    batch: bool
    hashes: frozenset[HashKind] = frozenset()

    @classmethod
    def from_capabilities(cls, caps: CapabilitySet, *, hashes: frozenset[HashKind] = frozenset()) -> Features:
        return cls(
            copy=caps.supports(Capability.COPY),
            move=caps.supports(Capability.MOVE),
            mkdir=caps.supports(Capability.MKDIR),
            rmdir=caps.supports(Capability.RMDIR),
            stat=caps.supports(Capability.STAT),
            streaming=caps.supports(Capability.STREAMING),
            versioning=caps.supports(Capability.VERSIONING),
            range_read=caps.supports(Capability.RANGE_READ),
            list_prefix=caps.supports(Capability.LIST_PREFIX),
            batch=caps.supports(Capability.BATCH),
            hashes=hashes,
        )
