"""Thin REST client for the parts of the GitHub API the backend needs."""

from __future__ import annotations

import base64
import logging
from typing import TYPE_CHECKING, Any
from urllib.parse import quote

import httpx
from tenacity import before_sleep_log, retry, retry_if_exception_type, stop_after_attempt, wait_exponential

from repo_store._errors import OperationCancelled
from repo_store._models import RefConflict, RefUpdated

if TYPE_CHECKING:
    from repo_store._models import CommitAuthor, RefUpdateResult, RepositoryIdentity
    from repo_store._types import CancelSignal, JSONDict

log = logging.getLogger(__name__)

API_VERSION = "2022-11-28"
BLOB_MODE = "100644"

# Status codes GitHub answers a rejected non-forced ref update with.
_REF_CONFLICT_STATUSES = frozenset({409, 422})

# Requests that never reached the server are safe to resend, whatever the method.
_retry_unsent = retry(
    retry=retry_if_exception_type((httpx.ConnectError, httpx.ConnectTimeout)),
    stop=stop_after_attempt(3),
    wait=wait_exponential(multiplier=1, min=2, max=10),
    before_sleep=before_sleep_log(log, logging.WARNING),  # type: ignore[arg-type,unused-ignore]
    reraise=True,
)


class GitHubAPIError(Exception):
    """A non-2xx answer from the API, with its structured error payload.

    :param status_code: HTTP status of the response.
    :param message: The ``message`` field of the error payload.
    :param documentation_url: The ``documentation_url`` field, if any.
    :param errors: The ``errors`` list, if any.
    :param response: The raw response, when one is available.
    """

    def __init__(
        self,
        status_code: int,
        message: str,
        *,
        documentation_url: str | None = None,
        errors: list[Any] | None = None,
        response: httpx.Response | None = None,
    ) -> None:
        self.status_code = status_code
        self.message = message
        self.documentation_url = documentation_url
        self.errors = errors or []
        self.response = response
        super().__init__(f"{status_code} {message}")

    @classmethod
    def from_response(cls, response: httpx.Response) -> GitHubAPIError:
        try:
            payload = response.json()
        except ValueError:
            payload = None
        if not isinstance(payload, dict):
            return cls(response.status_code, response.reason_phrase or response.text, response=response)
        return cls(
            response.status_code,
            str(payload.get("message", "")),
            documentation_url=payload.get("documentation_url"),
            errors=payload.get("errors"),
            response=response,
        )


class GitHubClient:
    """Authenticated client bound to one repository.

    Every method checks ``cancel`` before it sends a request; a request
    already on the wire is allowed to finish.

    :param identity: Repository the client talks to.
    :param token: Access token sent as a bearer credential.
    :param timeout: Per-request timeout in seconds.
    :param transport: Optional ``httpx`` transport (tests inject a mock here).
    """

    def __init__(
        self,
        identity: RepositoryIdentity,
        token: str,
        *,
        timeout: float = 30.0,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        self._identity = identity
        self._repo_url = f"repos/{quote(identity.owner, safe='')}/{quote(identity.repo, safe='')}"
        self._http = httpx.Client(
            base_url=identity.base_url,
            headers={
                "Accept": "application/vnd.github+json",
                "Authorization": f"Bearer {token}",
                "X-GitHub-Api-Version": API_VERSION,
            },
            timeout=timeout,
            transport=transport,
        )

    @property
    def http(self) -> httpx.Client:
        return self._http

    def close(self) -> None:
        self._http.close()

    # region: request plumbing

    @_retry_unsent
    def _send(self, method: str, url: str, *, cancel: CancelSignal | None = None, **kwargs: Any) -> httpx.Response:
        # Runs once per attempt, so a retry never starts after cancellation.
        if cancel is not None and cancel.is_set():
            raise OperationCancelled(f"Cancelled before {method} {url}")
        return self._http.request(method, url, **kwargs)

    def _request(
        self,
        method: str,
        url: str,
        *,
        cancel: CancelSignal | None = None,
        params: dict[str, str] | None = None,
        json: JSONDict | None = None,
    ) -> Any:
        log.debug("%s %s", method, url)
        response = self._send(method, f"{self._repo_url}/{url}", cancel=cancel, params=params, json=json)
        if response.is_error:
            raise GitHubAPIError.from_response(response)
        if not response.content:
            return None
        return response.json()

    # endregion

    # region: contents API

    def get_contents(self, path: str, *, ref: str, cancel: CancelSignal | None = None) -> Any:
        """Return the contents payload: a dict for a file, a list for a directory."""
        return self._request("GET", f"contents/{quote(path)}", params={"ref": ref}, cancel=cancel)

    def put_contents(
        self,
        path: str,
        content: bytes,
        *,
        message: str,
        branch: str,
        sha: str | None = None,
        author: CommitAuthor | None = None,
        cancel: CancelSignal | None = None,
    ) -> JSONDict:
        """Create (``sha`` is ``None``) or update a file, producing one commit."""
        body: JSONDict = {
            "message": message,
            "content": base64.b64encode(content).decode("ascii"),
            "branch": branch,
        }
        if sha is not None:
            body["sha"] = sha
        if author is not None:
            body["author"] = author.to_payload()
        result: JSONDict = self._request("PUT", f"contents/{quote(path)}", json=body, cancel=cancel)
        return result

    def delete_contents(
        self,
        path: str,
        *,
        message: str,
        sha: str,
        branch: str,
        author: CommitAuthor | None = None,
        cancel: CancelSignal | None = None,
    ) -> JSONDict:
        """Delete the file whose current blob is ``sha``, producing one commit."""
        body: JSONDict = {"message": message, "sha": sha, "branch": branch}
        if author is not None:
            body["author"] = author.to_payload()
        result: JSONDict = self._request("DELETE", f"contents/{quote(path)}", json=body, cancel=cancel)
        return result

    # endregion

    # region: git data API

    def get_ref(self, branch: str, *, cancel: CancelSignal | None = None) -> str:
        """Return the commit sha the branch points at."""
        data = self._request("GET", f"git/ref/heads/{quote(branch)}", cancel=cancel)
        return str(data["object"]["sha"])

    def get_commit(self, sha: str, *, cancel: CancelSignal | None = None) -> JSONDict:
        result: JSONDict = self._request("GET", f"git/commits/{sha}", cancel=cancel)
        return result

    def create_blob(self, content: bytes, *, cancel: CancelSignal | None = None) -> str:
        body: JSONDict = {"content": base64.b64encode(content).decode("ascii"), "encoding": "base64"}
        data = self._request("POST", "git/blobs", json=body, cancel=cancel)
        return str(data["sha"])

    def create_tree(self, base_tree: str, entries: list[JSONDict], *, cancel: CancelSignal | None = None) -> str:
        """Create a tree from ``base_tree`` plus ``entries``; an entry with ``sha: None`` removes its path."""
        data = self._request("POST", "git/trees", json={"base_tree": base_tree, "tree": entries}, cancel=cancel)
        return str(data["sha"])

    def create_commit(
        self,
        message: str,
        tree: str,
        parents: list[str],
        *,
        author: CommitAuthor | None = None,
        cancel: CancelSignal | None = None,
    ) -> str:
        body: JSONDict = {"message": message, "tree": tree, "parents": parents}
        if author is not None:
            body["author"] = author.to_payload()
        data = self._request("POST", "git/commits", json=body, cancel=cancel)
        return str(data["sha"])

    def update_ref(
        self,
        branch: str,
        sha: str,
        *,
        expected_sha: str,
        cancel: CancelSignal | None = None,
    ) -> RefUpdateResult:
        """Advance the branch to ``sha`` without forcing.

        The server refuses the update unless it is a fast-forward, so a
        branch that moved away from ``expected_sha`` yields
        :class:`RefConflict` carrying the branch's current commit.
        """
        try:
            self._request("PATCH", f"git/refs/heads/{quote(branch)}", json={"sha": sha, "force": False}, cancel=cancel)
        except GitHubAPIError as exc:
            if exc.status_code not in _REF_CONFLICT_STATUSES:
                raise
            current = self._current_ref_or_none(branch, cancel)
            if current == expected_sha:
                # The branch did not move, so the rejection has another cause.
                raise
            log.warning("Ref update rejected: %s moved from %s to %s", branch, expected_sha, current)
            return RefConflict(current_sha=current)
        return RefUpdated(sha=sha)

    def _current_ref_or_none(self, branch: str, cancel: CancelSignal | None) -> str | None:
        try:
            return self.get_ref(branch, cancel=cancel)
        except (GitHubAPIError, httpx.HTTPError, OperationCancelled) as exc:
            log.debug("Could not re-read %s after a rejected update: %s", branch, exc)
            return None

    def get_tree_recursive(self, ref: str, *, cancel: CancelSignal | None = None) -> JSONDict:
        """Return the full recursive tree payload (``tree`` entries plus ``truncated``)."""
        result: JSONDict = self._request(
            "GET", f"git/trees/{quote(ref, safe='')}", params={"recursive": "1"}, cancel=cancel
        )
        return result

    # endregion
