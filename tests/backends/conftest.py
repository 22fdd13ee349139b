"""Backend test fixtures backed by the in-memory GitHub server."""

from __future__ import annotations

from typing import TYPE_CHECKING

import pytest

from repo_store.backends._github import GitHubBackend
from tests.backends.github_server import BASE_URL, TOKEN, FakeGitHub

if TYPE_CHECKING:
    from collections.abc import Iterator


@pytest.fixture
def github() -> FakeGitHub:
    """A fresh repository ``octo/store`` with an empty ``main`` branch."""
    return FakeGitHub()


@pytest.fixture
def backend(github: FakeGitHub) -> Iterator[GitHubBackend]:
    """Backend bound to ``octo/store@main`` on the fake server."""
    b = GitHubBackend("octo", "store", TOKEN, base_url=BASE_URL, transport=github.transport)
    yield b
    b.close()


@pytest.fixture
def seeded(github: FakeGitHub, backend: GitHubBackend) -> GitHubBackend:
    """Backend whose branch already holds a small directory tree."""
    github.seed(
        {
            "README.md": b"# store\n",
            "a/b.txt": b"hello world",
            "a/c/d.txt": b"deep",
            "ab/other.txt": b"not under a",
        }
    )
    return backend
