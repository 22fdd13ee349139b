"""Backend implementations."""

from repo_store.backends._github import GitHubBackend, GitHubWriter
from repo_store.backends._github_batch import Batch
from repo_store.backends._github_client import GitHubAPIError, GitHubClient

__all__ = ["Batch", "GitHubAPIError", "GitHubBackend", "GitHubClient", "GitHubWriter"]
