"""Tests for explicit backend construction."""

from __future__ import annotations

import pytest

from repo_store import BackendConfig, GitHubBackend, GitHubConfig, create_backend


class TestCreateBackend:
    def test_from_github_config(self) -> None:
        backend = create_backend(GitHubConfig(owner="octo", repo="store", token="t", branch="dev"))
        assert isinstance(backend, GitHubBackend)
        assert backend.identity.full_name == "octo/store"
        assert backend.identity.branch == "dev"
        assert backend.closed is False

    def test_from_backend_config(self) -> None:
        backend = create_backend(BackendConfig(type="github", options={"owner": "o", "repo": "r", "token": "t"}))
        assert backend.name == "github"
        assert backend.identity.branch == "main"

    def test_unknown_type(self) -> None:
        with pytest.raises(ValueError, match="Unknown backend type 's3'"):
            create_backend(BackendConfig(type="s3"))

    def test_unknown_option(self) -> None:
        with pytest.raises(ValueError, match="Invalid options"):
            create_backend(BackendConfig(type="github", options={"owner": "o", "region": "x"}))

    @pytest.mark.parametrize("missing", ["owner", "repo", "token"])
    def test_missing_required(self, missing: str) -> None:
        options = {"owner": "o", "repo": "r", "token": "t"}
        del options[missing]
        with pytest.raises(ValueError, match=f"{missing} is required"):
            create_backend(BackendConfig(type="github", options=options))

    def test_construction_is_offline(self) -> None:
        # No transport and no network: nothing is contacted until the first operation.
        backend = create_backend(GitHubConfig(owner="o", repo="r", token="t"))
        backend.close()
        assert backend.closed
