"""CodeHostClient - Read-only access to GitHub pull requests and issues."""

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import Any, TypeVar

import httpx

from ticketsync.codehost.models import Issue, Page, PullRequest
from ticketsync.exceptions import RemoteFetchError
from ticketsync.logging import sanitize_for_log, truncate_output

logger = logging.getLogger("ticketsync.codehost")

PAGE_SIZE = 100

T = TypeVar("T")


class CodeHostClient:
    """Client for the GitHub REST API.

    Only the read operations the sync job needs are exposed. Every failure is
    raised as RemoteFetchError; nothing is retried.
    """

    def __init__(
        self,
        token: str,
        username: str = "",
        base_url: str = "https://api.github.com",
        timeout: float = 30.0,
    ) -> None:
        """Initialize the client.

        Args:
            token: GitHub personal access token.
            username: When set, authenticate with basic auth (username + token)
                      instead of a bearer token.
            base_url: GitHub API base URL (for testing/enterprise).
            timeout: Per-request timeout in seconds.
        """
        self.token = token
        self.username = username
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self._client: httpx.Client | None = None

    @property
    def client(self) -> httpx.Client:
        """Get or create HTTP client for GitHub API."""
        if self._client is None:
            headers = {
                "Accept": "application/vnd.github+json",
                "X-GitHub-Api-Version": "2022-11-28",
            }
            auth: httpx.BasicAuth | None = None
            if self.username:
                auth = httpx.BasicAuth(self.username, self.token)
            else:
                headers["Authorization"] = f"Bearer {self.token}"
            self._client = httpx.Client(
                base_url=self.base_url,
                headers=headers,
                auth=auth,
                timeout=self.timeout,
            )
        return self._client

    def close(self) -> None:
        """Close the HTTP client."""
        if self._client is not None:
            self._client.close()
            self._client = None

    def _get(
        self, operation: str, path: str, params: dict[str, Any] | None = None
    ) -> httpx.Response:
        try:
            response = self.client.get(path, params=params)
        except httpx.HTTPError as e:
            raise RemoteFetchError(
                f"{operation} {path} failed: {sanitize_for_log(str(e))}", operation=operation
            ) from e

        if response.status_code != 200:
            body = sanitize_for_log(truncate_output(response.text))
            raise RemoteFetchError(
                f"{operation} {path} failed: {response.status_code} - {body}",
                operation=operation,
                status_code=response.status_code,
            )
        return response

    @staticmethod
    def _parse(operation: str, response: httpx.Response, parse: Callable[[Any], T]) -> T:
        """Decode a successful response, mapping unexpected payloads to RemoteFetchError."""
        try:
            return parse(response.json())
        except (ValueError, KeyError, TypeError, AttributeError) as e:
            body = sanitize_for_log(truncate_output(response.text, 200))
            raise RemoteFetchError(
                f"{operation} returned an unexpected payload: {e!r} - {body}",
                operation=operation,
                status_code=response.status_code,
            ) from e

    @staticmethod
    def _next_page(response: httpx.Response) -> int | None:
        """Page number of the ``rel="next"`` link, None on the last page."""
        next_link = response.links.get("next")
        if not next_link or "url" not in next_link:
            return None
        page = httpx.URL(next_link["url"]).params.get("page")
        return int(page) if page and page.isdigit() else None

    def list_issues(
        self,
        owner: str,
        repo: str,
        creator: str | None = None,
        labels: list[str] | None = None,
        page: int = 1,
        state: str = "all",
    ) -> Page[Issue]:
        """List issue records in a repository (pull requests included).

        Args:
            owner: Repository owner.
            repo: Repository name.
            creator: Only return records created by this login.
            labels: Only return records carrying all of these labels.
            page: 1-based page number.
            state: "open", "closed" or "all".

        Raises:
            RemoteFetchError: If the request fails.
        """
        params: dict[str, Any] = {"state": state, "per_page": PAGE_SIZE, "page": page}
        if creator:
            params["creator"] = creator
        if labels:
            params["labels"] = ",".join(labels)

        response = self._get("list_issues", f"/repos/{owner}/{repo}/issues", params)
        items = self._parse(
            "list_issues",
            response,
            lambda data: [Issue.from_api(item, owner, repo) for item in data],
        )
        logger.debug("Fetched %d issue(s) from %s/%s page %d", len(items), owner, repo, page)
        return Page(items=items, next_page=self._next_page(response))

    def list_pull_requests(
        self, owner: str, repo: str, page: int = 1, state: str = "all"
    ) -> Page[PullRequest]:
        """List pull requests in a repository.

        Raises:
            RemoteFetchError: If the request fails.
        """
        params = {"state": state, "per_page": PAGE_SIZE, "page": page}
        response = self._get("list_pull_requests", f"/repos/{owner}/{repo}/pulls", params)
        items = self._parse(
            "list_pull_requests",
            response,
            lambda data: [PullRequest.from_api(item, owner, repo) for item in data],
        )
        logger.debug(
            "Fetched %d pull request(s) from %s/%s page %d", len(items), owner, repo, page
        )
        return Page(items=items, next_page=self._next_page(response))

    def get_pull_request(self, owner: str, repo: str, number: int) -> PullRequest:
        """Get a single pull request, including its merged flag.

        Raises:
            RemoteFetchError: If the request fails or the PR doesn't exist.
        """
        response = self._get("get_pull_request", f"/repos/{owner}/{repo}/pulls/{number}")
        return self._parse(
            "get_pull_request", response, lambda data: PullRequest.from_api(data, owner, repo)
        )

    def get_issue(self, owner: str, repo: str, number: int) -> Issue:
        """Get the issue record of a pull request.

        Raises:
            RemoteFetchError: If the request fails or the issue doesn't exist.
        """
        response = self._get("get_issue", f"/repos/{owner}/{repo}/issues/{number}")
        return self._parse("get_issue", response, lambda data: Issue.from_api(data, owner, repo))
