"""Minimal GitHub REST client for pull requests, releases and git data.

Only the endpoints the release workflow needs are wrapped. Secondary rate
limit responses are retried after the delay GitHub asks for, so callers
never see them unless the retries run out.
"""

from __future__ import annotations

import base64
import json
import logging
import time
import urllib.error
import urllib.parse
import urllib.request
from collections.abc import Callable, Mapping
from typing import Any

from pychangesets.errors import GitHubAPIError

logger = logging.getLogger(__name__)

DEFAULT_API_URL = "https://api.github.com"
USER_AGENT = "pychangesets"
MAX_RETRY_DELAY_SECONDS = 120.0


class GitHubClient:
    """GitHub REST API client scoped to one repository.

    Attributes:
        repository: Repository in ``owner/name`` form.
        api_url: Base URL of the REST API.
    """

    def __init__(
        self,
        token: str,
        repository: str,
        *,
        api_url: str = DEFAULT_API_URL,
        max_retries: int = 3,
        timeout: float = 30.0,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        """Initialize client.

        Args:
            token: API token.
            repository: Repository in ``owner/name`` form.
            api_url: Base URL of the REST API.
            max_retries: Retries for rate-limited requests.
            timeout: Per-request timeout in seconds.
            sleep: Sleep function, replaceable in tests.
        """
        self._token = token
        self.repository = repository
        self.api_url = api_url.rstrip("/")
        self.max_retries = max(0, max_retries)
        self.timeout = timeout
        self._sleep = sleep

    @property
    def owner(self) -> str:
        return self.repository.split("/")[0]

    def request(
        self,
        method: str,
        path: str,
        data: Mapping[str, Any] | None = None,
        *,
        query: Mapping[str, str] | None = None,
    ) -> Any:
        """Send a request and decode the JSON response.

        Args:
            method: HTTP method.
            path: Path below the API URL, e.g. ``/repos/o/r/pulls``.
            data: JSON body.
            query: Query string parameters.

        Returns:
            Decoded JSON, or None for empty responses.

        Raises:
            GitHubAPIError: On HTTP or network errors.
        """
        url = f"{self.api_url}{path}"
        if query:
            url = f"{url}?{urllib.parse.urlencode(query)}"

        body = json.dumps(data).encode("utf-8") if data is not None else None
        headers = {
            "Authorization": f"Bearer {self._token}",
            "Accept": "application/vnd.github+json",
            "X-GitHub-Api-Version": "2022-11-28",
            "User-Agent": USER_AGENT,
        }
        if body is not None:
            headers["Content-Type"] = "application/json"

        attempt = 0
        while True:
            req = urllib.request.Request(url, data=body, headers=headers, method=method)
            try:
                with urllib.request.urlopen(req, timeout=self.timeout) as resp:
                    raw = resp.read()
                    return json.loads(raw) if raw else None
            except urllib.error.HTTPError as e:
                error_body = e.read().decode("utf-8", errors="replace") if e.fp else ""
                delay = _retry_delay(e.code, e.headers, attempt)
                if delay is not None and attempt < self.max_retries:
                    attempt += 1
                    logger.debug(
                        "Rate limited on %s %s; retrying in %.1fs (attempt %d/%d)",
                        method,
                        path,
                        delay,
                        attempt,
                        self.max_retries,
                    )
                    self._sleep(delay)
                    continue
                raise GitHubAPIError(
                    _error_message(error_body) or str(e.reason),
                    status=e.code,
                    method=method,
                    path=path,
                ) from e
            except urllib.error.URLError as e:
                raise GitHubAPIError(str(e.reason), method=method, path=path) from e
            except json.JSONDecodeError as e:
                raise GitHubAPIError(f"Invalid JSON response: {e}", method=method, path=path) from e

    def _repo_path(self, suffix: str) -> str:
        return f"/repos/{self.repository}{suffix}"

    # Pull requests

    def list_pull_requests(
        self, *, head: str, base: str, state: str = "open"
    ) -> list[dict[str, Any]]:
        """List pull requests from ``head`` (a branch name in this repository) into ``base``."""
        result = self.request(
            "GET",
            self._repo_path("/pulls"),
            query={"head": f"{self.owner}:{head}", "base": base, "state": state},
        )
        return list(result or [])

    def create_pull_request(self, *, title: str, body: str, head: str, base: str) -> dict[str, Any]:
        return self.request(
            "POST",
            self._repo_path("/pulls"),
            {"title": title, "body": body, "head": head, "base": base},
        )

    def update_pull_request(self, number: int, *, title: str, body: str) -> dict[str, Any]:
        return self.request(
            "PATCH",
            self._repo_path(f"/pulls/{number}"),
            {"title": title, "body": body},
        )

    def add_labels(self, number: int, labels: list[str]) -> None:
        self.request("POST", self._repo_path(f"/issues/{number}/labels"), {"labels": labels})

    # Releases

    def create_release(
        self,
        *,
        tag_name: str,
        name: str,
        body: str,
        prerelease: bool = False,
        target_commitish: str | None = None,
    ) -> dict[str, Any]:
        payload: dict[str, Any] = {
            "tag_name": tag_name,
            "name": name,
            "body": body,
            "prerelease": prerelease,
        }
        if target_commitish:
            payload["target_commitish"] = target_commitish
        return self.request("POST", self._repo_path("/releases"), payload)

    # Git data

    def get_commit(self, sha: str) -> dict[str, Any]:
        return self.request("GET", self._repo_path(f"/git/commits/{sha}"))

    def create_blob(self, content: bytes) -> str:
        """Upload file contents and return the blob sha."""
        result = self.request(
            "POST",
            self._repo_path("/git/blobs"),
            {"content": base64.b64encode(content).decode("ascii"), "encoding": "base64"},
        )
        return result["sha"]

    def create_tree(self, base_tree: str, entries: list[dict[str, Any]]) -> str:
        result = self.request(
            "POST",
            self._repo_path("/git/trees"),
            {"base_tree": base_tree, "tree": entries},
        )
        return result["sha"]

    def create_commit(self, message: str, tree: str, parents: list[str]) -> str:
        result = self.request(
            "POST",
            self._repo_path("/git/commits"),
            {"message": message, "tree": tree, "parents": parents},
        )
        return result["sha"]

    def get_ref(self, ref: str) -> dict[str, Any] | None:
        """Get a reference such as ``heads/main``; None if it does not exist."""
        try:
            return self.request("GET", self._repo_path(f"/git/ref/{ref}"))
        except GitHubAPIError as e:
            if e.status == 404:
                return None
            raise

    def create_ref(self, ref: str, sha: str) -> dict[str, Any]:
        """Create a fully qualified reference such as ``refs/tags/v1.0.0``."""
        return self.request("POST", self._repo_path("/git/refs"), {"ref": ref, "sha": sha})

    def update_ref(self, ref: str, sha: str, *, force: bool = False) -> dict[str, Any]:
        """Move a reference such as ``heads/main`` to sha."""
        return self.request(
            "PATCH",
            self._repo_path(f"/git/refs/{ref}"),
            {"sha": sha, "force": force},
        )


def _retry_delay(status: int, headers: Any, attempt: int) -> float | None:
    """Seconds to wait before retrying a rate-limited response, None if not rate limited."""
    if status not in (403, 429) or headers is None:
        return None

    retry_after = headers.get("retry-after")
    if retry_after:
        try:
            return min(float(retry_after), MAX_RETRY_DELAY_SECONDS)
        except ValueError:
            pass

    if headers.get("x-ratelimit-remaining") == "0":
        reset = headers.get("x-ratelimit-reset")
        if reset:
            try:
                wait = float(reset) - time.time()
            except ValueError:
                wait = 0.0
            return min(max(wait, 1.0), MAX_RETRY_DELAY_SECONDS)
        return min(60.0 * (attempt + 1), MAX_RETRY_DELAY_SECONDS)

    if status == 429:
        return min(2.0 ** (attempt + 1), MAX_RETRY_DELAY_SECONDS)
    return None


def _error_message(body: str) -> str:
    """Pull a readable message out of a GitHub error payload."""
    if not body:
        return ""
    try:
        data = json.loads(body)
    except json.JSONDecodeError:
        return body.strip()
    if not isinstance(data, dict):
        return body.strip()

    message = str(data.get("message", ""))
    details = []
    for err in data.get("errors") or []:
        if isinstance(err, dict) and err.get("message"):
            details.append(str(err["message"]))
        elif isinstance(err, str):
            details.append(err)
    if details:
        message = f"{message} ({'; '.join(details)})" if message else "; ".join(details)
    return message
