"""Immutable value models shared by the backend, writer and batch."""

from __future__ import annotations

import dataclasses
from typing import Literal, Union


@dataclasses.dataclass(frozen=True)
class CommitAuthor:
    """Author recorded on commits instead of the authenticated user.

    :param name: Author name.
    :param email: Author email.
    """

    name: str
    email: str

    def to_payload(self) -> dict[str, str]:
        return {"name": self.name, "email": self.email}


@dataclasses.dataclass(frozen=True)
class RepositoryIdentity:
    """The repository and branch a backend session is bound to.

    :param owner: User or organization owning the repository.
    :param repo: Repository name.
    :param branch: Branch every operation reads from and commits to.
    :param base_url: REST API endpoint.
    :param upload_url: Upload endpoint (differs on enterprise deployments).
    """

    owner: str
    repo: str
    branch: str
    base_url: str
    upload_url: str

    @property
    def full_name(self) -> str:
        return f"{self.owner}/{self.repo}"

    @property
    def branch_ref(self) -> str:
        """Fully qualified ref name of the branch."""
        return f"refs/heads/{self.branch}"


# region: stat results


@dataclasses.dataclass(frozen=True)
class FileInfo:
    """Metadata for a file (blob) on the branch.

    :param path: Normalized repository path.
    :param size: Size in bytes.
    :param sha: Git blob SHA-1, the version marker for updates and deletes.
    """

    path: str
    size: int
    sha: str
    kind: Literal["file"] = dataclasses.field(default="file", init=False)

    @property
    def is_dir(self) -> bool:
        return False

    @property
    def name(self) -> str:
        return self.path.rsplit("/", 1)[-1]


@dataclasses.dataclass(frozen=True)
class DirectoryInfo:
    """Metadata for a directory (tree). Directories have no size or hash.

    :param path: Normalized repository path (``""`` for the root).
    """

    path: str
    kind: Literal["dir"] = dataclasses.field(default="dir", init=False)

    @property
    def is_dir(self) -> bool:
        return True

    @property
    def size(self) -> int:
        return 0

    @property
    def sha(self) -> None:
        return None

    @property
    def name(self) -> str:
        return self.path.rsplit("/", 1)[-1]


ObjectInfo = Union[FileInfo, DirectoryInfo]  # noqa: UP007

# endregion

# region: batch operations


@dataclasses.dataclass(frozen=True)
class WriteOp:
    """Queued create-or-update of one path."""

    path: str
    content: bytes


@dataclasses.dataclass(frozen=True)
class DeleteOp:
    """Queued removal of one path."""

    path: str


BatchOperation = Union[WriteOp, DeleteOp]  # noqa: UP007

# endregion

# region: ref update outcome


@dataclasses.dataclass(frozen=True)
class RefUpdated:
    """The branch now points at ``sha``."""

    sha: str


@dataclasses.dataclass(frozen=True)
class RefConflict:
    """The branch moved; it points at ``current_sha`` and was left untouched."""

    current_sha: str | None


RefUpdateResult = Union[RefUpdated, RefConflict]  # noqa: UP007

# endregion
