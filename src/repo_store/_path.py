"""Path validation and normalization for repository paths."""

from __future__ import annotations

import re
from typing import Final

from repo_store._errors import InvalidPath

_SEPARATORS = re.compile(r"[/\\]")


def validate_path(raw: str) -> None:
    """Reject unsafe paths before any network call.

    The check runs on the raw input, so ``a/../b`` is refused even though it
    would clean to ``b``. The empty string is valid and denotes the root.

    :raises InvalidPath: If the path holds a ``..`` segment or a null byte.
    """
    if "\0" in raw:
        raise InvalidPath("Path contains null byte", path=raw)
    if ".." in _SEPARATORS.split(raw):
        raise InvalidPath("Path contains '..' segment", path=raw)


def normalize_path(raw: str) -> str:
    """Return the canonical form of *raw*.

    Backslashes become forward slashes, empty and ``.`` segments are
    dropped, and the leading slash is removed. ``""``, ``"."`` and ``"/"``
    all map to ``""`` (the repository root). Idempotent.
    """
    parts = [segment for segment in _SEPARATORS.split(raw) if segment not in ("", ".")]
    return "/".join(parts)


def require_file_path(raw: str) -> str:
    """Validate and normalize a path that must name a leaf (write/delete targets).

    :raises InvalidPath: If the path is unsafe or resolves to the root.
    """
    validate_path(raw)
    normalized = normalize_path(raw)
    if not normalized:
        raise InvalidPath("Path must not be empty for file operations", path=raw)
    return normalized


class RepoPath:
    """An immutable, normalized path within a repository branch.

    ``RepoPath("")`` is the repository root.

    :param raw: The raw path string to normalize and validate.
    :raises InvalidPath: If the path is malformed or unsafe.
    """

    __slots__ = ("_path",)
    _path: Final[str]  # type: ignore[misc]

    def __init__(self, raw: str = "") -> None:
        validate_path(raw)
        object.__setattr__(self, "_path", normalize_path(raw))

    @property
    def is_root(self) -> bool:
        """``True`` for the repository root."""
        return not self._path

    @property
    def name(self) -> str:
        """Final component of the path (empty for the root)."""
        return self._path.rsplit("/", 1)[-1]

    @property
    def parent(self) -> RepoPath | None:
        """Parent path, or ``None`` for the root.

        Example: ``RepoPath("a/b").parent`` is ``RepoPath("a")`` and
        ``RepoPath("a").parent`` is the root.
        """
        if self.is_root:
            return None
        parent_str = self._path.rsplit("/", 1)[0] if "/" in self._path else ""
        p = object.__new__(RepoPath)
        object.__setattr__(p, "_path", parent_str)
        return p

    @property
    def parts(self) -> tuple[str, ...]:
        """Tuple of path components."""
        return tuple(self._path.split("/")) if self._path else ()

    @property
    def suffix(self) -> str:
        """File extension including the dot, or empty string."""
        name = self.name
        dot = name.rfind(".")
        if dot <= 0:
            return ""
        return name[dot:]

    def is_within(self, prefix: RepoPath) -> bool:
        """Return ``True`` if this path equals *prefix* or lies beneath it."""
        if prefix.is_root:
            return True
        return self._path == prefix._path or self._path.startswith(prefix._path + "/")

    def __truediv__(self, other: str) -> RepoPath:
        return RepoPath(f"{self._path}/{other}")

    def __str__(self) -> str:
        return self._path

    def __repr__(self) -> str:
        return f"RepoPath({self._path!r})"

    def __eq__(self, other: object) -> bool:
        if isinstance(other, RepoPath):
            return self._path == other._path
        return NotImplemented

    def __hash__(self) -> int:
        return hash(self._path)

    def __setattr__(self, name: str, value: object) -> None:
        raise AttributeError(f"RepoPath is immutable: cannot set '{name}'")

    def __delattr__(self, name: str) -> None:
        raise AttributeError(f"RepoPath is immutable: cannot delete '{name}'")
