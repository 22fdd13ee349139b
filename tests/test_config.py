"""Tests for configuration values."""

from __future__ import annotations

import dataclasses

import pytest

from repo_store._config import (
    DEFAULT_BASE_URL,
    DEFAULT_BRANCH,
    DEFAULT_COMMIT_MESSAGE,
    BackendConfig,
    GitHubConfig,
)
from repo_store._models import CommitAuthor


class TestBackendConfig:
    def test_fields(self) -> None:
        bc = BackendConfig(type="github", options={"owner": "octo"})
        assert bc.type == "github"
        assert bc.options == {"owner": "octo"}

    def test_defaults(self) -> None:
        assert BackendConfig(type="github").options == {}


class TestGitHubConfigDefaults:
    def test_defaults(self) -> None:
        cfg = GitHubConfig(owner="o", repo="r", token="t")
        assert cfg.branch == DEFAULT_BRANCH == "main"
        assert cfg.base_url == DEFAULT_BASE_URL
        assert cfg.commit_message == DEFAULT_COMMIT_MESSAGE
        assert cfg.commit_author is None
        assert cfg.timeout == 30.0

    def test_token_hidden_from_repr(self) -> None:
        assert "secret" not in repr(GitHubConfig(owner="o", repo="r", token="secret"))

    def test_frozen(self) -> None:
        cfg = GitHubConfig(owner="o", repo="r", token="t")
        with pytest.raises(dataclasses.FrozenInstanceError):
            cfg.branch = "dev"  # type: ignore[misc]


class TestGitHubConfigValidation:
    def test_valid(self) -> None:
        GitHubConfig(owner="o", repo="r", token="t").validate()

    @pytest.mark.parametrize("field", ["owner", "repo", "token"])
    def test_missing_required(self, field: str) -> None:
        values = {"owner": "o", "repo": "r", "token": "t", field: ""}
        with pytest.raises(ValueError, match=f"github: {field} is required"):
            GitHubConfig(**values).validate()

    def test_whitespace_only_is_missing(self) -> None:
        with pytest.raises(ValueError, match="token"):
            GitHubConfig(owner="o", repo="r", token="   ").validate()


class TestCommitMessages:
    def test_default_template(self) -> None:
        cfg = GitHubConfig(owner="o", repo="r", token="t")
        assert cfg.format_commit_message("a/b.txt") == "Update a/b.txt via repo-store"
        assert cfg.format_delete_message("a/b.txt") == "Delete a/b.txt via repo-store"

    def test_custom_template(self) -> None:
        cfg = GitHubConfig(owner="o", repo="r", token="t", commit_message="sync {path}")
        assert cfg.format_commit_message("x") == "sync x"


class TestFromDict:
    def test_full(self) -> None:
        cfg = GitHubConfig.from_dict(
            {
                "owner": "octo",
                "repo": "store",
                "token": "t",
                "branch": "dev",
                "base_url": "https://ghe.example/api/v3/",
                "commit_author_name": "Bot",
                "commit_author_email": "bot@example.com",
                "timeout": "5",
            }
        )
        assert cfg.branch == "dev"
        assert cfg.base_url == "https://ghe.example/api/v3/"
        assert cfg.commit_author == CommitAuthor("Bot", "bot@example.com")
        assert cfg.timeout == 5.0

    def test_empty_values_keep_defaults(self) -> None:
        cfg = GitHubConfig.from_dict({"owner": "o", "repo": "r", "token": "t", "branch": "", "base_url": ""})
        assert cfg.branch == DEFAULT_BRANCH
        assert cfg.base_url == DEFAULT_BASE_URL

    def test_unknown_key(self) -> None:
        with pytest.raises(TypeError, match="bucket"):
            GitHubConfig.from_dict({"owner": "o", "bucket": "b"})


class TestFromEnv:
    def test_prefixed_variables(self) -> None:
        cfg = GitHubConfig.from_env(
            {
                "REPO_STORE_GITHUB_OWNER": "octo",
                "REPO_STORE_GITHUB_REPO": "store",
                "REPO_STORE_GITHUB_TOKEN": "t",
                "REPO_STORE_GITHUB_BRANCH": "dev",
                "REPO_STORE_GITHUB_TIMEOUT": "2.5",
            }
        )
        assert (cfg.owner, cfg.repo, cfg.token, cfg.branch, cfg.timeout) == ("octo", "store", "t", "dev", 2.5)

    def test_fallback_variables(self) -> None:
        cfg = GitHubConfig.from_env(
            {
                "GITHUB_OWNER": "octo",
                "GITHUB_REPO": "store",
                "GITHUB_TOKEN": "t",
                "GITHUB_API_URL": "https://ghe.example/api/v3/",
            }
        )
        assert cfg.owner == "octo"
        assert cfg.token == "t"
        assert cfg.base_url == "https://ghe.example/api/v3/"

    def test_prefixed_wins(self) -> None:
        cfg = GitHubConfig.from_env({"REPO_STORE_GITHUB_TOKEN": "a", "GITHUB_TOKEN": "b"})
        assert cfg.token == "a"

    def test_process_environment(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("REPO_STORE_GITHUB_OWNER", "from-env")
        assert GitHubConfig.from_env().owner == "from-env"
