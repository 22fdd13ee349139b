"""Storage interface over a branch of a GitHub repository."""

from repo_store._backend import Backend
from repo_store._capabilities import Capability, CapabilitySet, Features, HashKind
from repo_store._config import BackendConfig, GitHubConfig
from repo_store._errors import (
    BackendClosed,
    BatchAlreadyCommitted,
    ConflictOnCommit,
    InvalidPath,
    NotFound,
    NotSupported,
    OperationCancelled,
    PathIsDirectory,
    PermissionDenied,
    RepoStoreError,
    TransportError,
    WriterClosed,
)
from repo_store._factory import create_backend
from repo_store._models import (
    BatchOperation,
    CommitAuthor,
    DeleteOp,
    DirectoryInfo,
    FileInfo,
    ObjectInfo,
    RefConflict,
    RefUpdated,
    RefUpdateResult,
    RepositoryIdentity,
    WriteOp,
)
from repo_store._path import RepoPath, normalize_path, validate_path
from repo_store.backends._github import GitHubBackend, GitHubWriter
from repo_store.backends._github_batch import Batch

__version__ = "0.1.0"

__all__ = [
    # Core
    "Backend",
    "GitHubBackend",
    "GitHubWriter",
    "Batch",
    "create_backend",
    # Path & Models
    "RepoPath",
    "validate_path",
    "normalize_path",
    "FileInfo",
    "DirectoryInfo",
    "ObjectInfo",
    "CommitAuthor",
    "RepositoryIdentity",
    "WriteOp",
    "DeleteOp",
    "BatchOperation",
    "RefUpdated",
    "RefConflict",
    "RefUpdateResult",
    # Capabilities
    "Capability",
    "CapabilitySet",
    "Features",
    "HashKind",
    # Config
    "BackendConfig",
    "GitHubConfig",
    # Errors
    "RepoStoreError",
    "NotFound",
    "PermissionDenied",
    "InvalidPath",
    "NotSupported",
    "WriterClosed",
    "BackendClosed",
    "BatchAlreadyCommitted",
    "PathIsDirectory",
    "ConflictOnCommit",
    "TransportError",
    "OperationCancelled",
    # Version
    "__version__",
]
