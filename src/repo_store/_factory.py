"""Explicit backend construction from configuration values."""

from __future__ import annotations

from typing import TYPE_CHECKING

from repo_store._config import BackendConfig, GitHubConfig

if TYPE_CHECKING:
    import httpx

    from repo_store.backends._github import GitHubBackend

BACKEND_TYPES = ("github",)


def create_backend(
    config: GitHubConfig | BackendConfig,
    *,
    transport: httpx.BaseTransport | None = None,
) -> GitHubBackend:
    """Construct a backend from a configuration value.

    :param config: A :class:`GitHubConfig`, or a :class:`BackendConfig` whose
        ``options`` are GitHub settings (see :meth:`GitHubConfig.from_dict`).
    :param transport: Optional ``httpx`` transport handed to the backend.
    :raises ValueError: If the type is unknown or the options are invalid.
    """
    from repo_store.backends._github import GitHubBackend

    if isinstance(config, BackendConfig):
        if config.type not in BACKEND_TYPES:
            raise ValueError(f"Unknown backend type '{config.type}'. Available types: {sorted(BACKEND_TYPES)}")
        try:
            config = GitHubConfig.from_dict(config.options)
        except (TypeError, ValueError) as exc:
            raise ValueError(f"Invalid options for backend type 'github': {exc}") from exc
    return GitHubBackend.from_config(config, transport=transport)
