"""Configuration values describing a GitHub backend."""

from __future__ import annotations

import dataclasses
import os
from typing import TYPE_CHECKING

from repo_store._models import CommitAuthor

if TYPE_CHECKING:
    from collections.abc import Mapping

DEFAULT_BRANCH = "main"
DEFAULT_BASE_URL = "https://api.github.com/"
DEFAULT_UPLOAD_URL = "https://uploads.github.com/"
DEFAULT_COMMIT_MESSAGE = "Update {path} via repo-store"
DEFAULT_BATCH_MESSAGE = "Batch update via repo-store"
PATH_PLACEHOLDER = "{path}"

_ENV_PREFIX = "REPO_STORE_GITHUB_"


@dataclasses.dataclass(frozen=True)
class BackendConfig:
    """Describes a backend instance for :func:`repo_store.create_backend`.

    :param type: Backend type identifier (e.g. ``"github"``).
    :param options: Backend-specific configuration options.
    """

    type: str
    options: dict[str, object] = dataclasses.field(default_factory=dict)


@dataclasses.dataclass(frozen=True)
class GitHubConfig:
    """Settings for :class:`~repo_store.backends.GitHubBackend`.

    :param owner: Repository owner (user or organization). Required.
    :param repo: Repository name. Required.
    :param token: Access token; needs ``repo`` scope for private repositories. Required.
    :param branch: Branch to read from and commit to.
    :param base_url: REST API base URL; set for enterprise deployments.
    :param upload_url: Upload URL; set for enterprise deployments.
    :param commit_message: Message template for single-file commits. ``{path}``
        is replaced with the target path.
    :param commit_author: Author for commits. ``None`` uses the token's user.
    :param timeout: Per-request network timeout in seconds.
    """

    owner: str = ""
    repo: str = ""
    token: str = dataclasses.field(default="", repr=False)
    branch: str = DEFAULT_BRANCH
    base_url: str = DEFAULT_BASE_URL
    upload_url: str = DEFAULT_UPLOAD_URL
    commit_message: str = DEFAULT_COMMIT_MESSAGE
    commit_author: CommitAuthor | None = None
    timeout: float = 30.0

    def validate(self) -> None:
        """Check that the required settings are present.

        :raises ValueError: If owner, repo or token is missing.
        """
        for field in ("owner", "repo", "token"):
            value = getattr(self, field)
            if not value or not value.strip():
                raise ValueError(f"github: {field} is required")

    def format_commit_message(self, path: str) -> str:
        """Substitute *path* into the write message template."""
        template = self.commit_message or DEFAULT_COMMIT_MESSAGE
        return template.replace(PATH_PLACEHOLDER, path)

    def format_delete_message(self, path: str) -> str:
        """Derive the delete message from the write template (``Update`` -> ``Delete``)."""
        return self.format_commit_message(path).replace("Update", "Delete")

    @classmethod
    def from_dict(cls, data: Mapping[str, object]) -> GitHubConfig:
        """Construct from a flat mapping of options.

        Recognized keys: ``owner``, ``repo``, ``token``, ``branch``,
        ``base_url``, ``upload_url``, ``commit_message``,
        ``commit_author_name``, ``commit_author_email``, ``timeout``. Empty
        values for defaulted keys keep the default.
        """
        unknown = set(data) - _DICT_KEYS
        if unknown:
            raise TypeError(f"Unknown GitHub config keys: {sorted(unknown)}")

        def _str(key: str, default: str = "") -> str:
            value = data.get(key)
            return str(value) if value else default

        kwargs: dict[str, object] = {
            "owner": _str("owner"),
            "repo": _str("repo"),
            "token": _str("token"),
            "branch": _str("branch", DEFAULT_BRANCH),
            "base_url": _str("base_url", DEFAULT_BASE_URL),
            "upload_url": _str("upload_url", DEFAULT_UPLOAD_URL),
            "commit_message": _str("commit_message", DEFAULT_COMMIT_MESSAGE),
            "commit_author": _author(_str("commit_author_name"), _str("commit_author_email")),
        }
        if data.get("timeout"):
            kwargs["timeout"] = float(data["timeout"])  # type: ignore[arg-type]
        return cls(**kwargs)  # type: ignore[arg-type]

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> GitHubConfig:
        """Construct from ``REPO_STORE_GITHUB_*`` environment variables.

        ``GITHUB_OWNER``, ``GITHUB_REPO``, ``GITHUB_TOKEN`` and
        ``GITHUB_API_URL`` are used as fallbacks for the matching settings.
        """
        env = os.environ if environ is None else environ

        def _get(name: str, fallback: str | None = None) -> str:
            value = env.get(_ENV_PREFIX + name, "")
            if not value and fallback:
                value = env.get(fallback, "")
            return value

        return cls.from_dict(
            {
                "owner": _get("OWNER", "GITHUB_OWNER"),
                "repo": _get("REPO", "GITHUB_REPO"),
                "token": _get("TOKEN", "GITHUB_TOKEN"),
                "branch": _get("BRANCH"),
                "base_url": _get("BASE_URL", "GITHUB_API_URL"),
                "upload_url": _get("UPLOAD_URL"),
                "commit_message": _get("COMMIT_MESSAGE"),
                "commit_author_name": _get("COMMIT_AUTHOR_NAME"),
                "commit_author_email": _get("COMMIT_AUTHOR_EMAIL"),
                "timeout": _get("TIMEOUT"),
            }
        )


_DICT_KEYS = frozenset(
    {
        "owner",
        "repo",
        "token",
        "branch",
        "base_url",
        "upload_url",
        "commit_message",
        "commit_author_name",
        "commit_author_email",
        "timeout",
    }
)


def _author(name: str, email: str) -> CommitAuthor | None:
    if not name and not email:
        return None
    return CommitAuthor(name=name, email=email)
