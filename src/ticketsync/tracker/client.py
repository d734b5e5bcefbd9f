"""TrackerClient - Interfaces with Jira for ticket search, transitions and creation."""

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import Any, TypeVar

import httpx

from ticketsync.exceptions import RemoteFetchError, RemoteUpdateError
from ticketsync.logging import sanitize_for_log, truncate_output
from ticketsync.tracker.exceptions import AuthenticationError
from ticketsync.tracker.models import CreatedTicket, SearchPage, Sprint, Ticket, Transition

logger = logging.getLogger("ticketsync.tracker")

API = "/rest/api/2"
AGILE_API = "/rest/agile/1.0"

T = TypeVar("T")


class TrackerClient:
    """Client for the Jira REST (v2) and Agile (1.0) APIs.

    Authenticates once with a session cookie which the underlying HTTP client
    then sends with every request. Reads raise RemoteFetchError, writes raise
    RemoteUpdateError; nothing is retried.
    """

    def __init__(
        self,
        host: str,
        username: str,
        password: str,
        link_field_id: str = "",
        timeout: float = 30.0,
    ) -> None:
        """Initialize the client.

        Args:
            host: Jira base URL, e.g. "https://jira.example.com".
            username: Jira user name.
            password: Jira password or API token.
            link_field_id: Custom field holding the pull-request link, requested
                           with every search so tickets carry their link.
            timeout: Per-request timeout in seconds.
        """
        self.host = host.rstrip("/")
        self.username = username
        self.password = password
        self.link_field_id = link_field_id
        self.timeout = timeout
        self._client: httpx.Client | None = None

    @property
    def client(self) -> httpx.Client:
        """Get or create HTTP client for the Jira API."""
        if self._client is None:
            self._client = httpx.Client(
                base_url=self.host,
                headers={
                    "Accept": "application/json",
                    "Content-Type": "application/json",
                },
                timeout=self.timeout,
            )
        return self._client

    def close(self) -> None:
        """Close the HTTP client."""
        if self._client is not None:
            self._client.close()
            self._client = None

    def _request(
        self,
        method: str,
        path: str,
        operation: str,
        expected: tuple[int, ...],
        error: type[RemoteFetchError] | type[RemoteUpdateError],
        **kwargs: Any,
    ) -> httpx.Response:
        try:
            response = self.client.request(method, path, **kwargs)
        except httpx.HTTPError as e:
            raise error(
                f"{operation} failed: {sanitize_for_log(str(e))}", operation=operation
            ) from e

        if response.status_code not in expected:
            body = sanitize_for_log(truncate_output(response.text))
            raise error(
                f"{operation} failed: {response.status_code} - {body}",
                operation=operation,
                status_code=response.status_code,
            )
        return response

    @staticmethod
    def _parse(
        operation: str,
        response: httpx.Response,
        parse: Callable[[Any], T],
        error: type[RemoteFetchError] | type[RemoteUpdateError] = RemoteFetchError,
    ) -> T:
        """Decode a successful response, mapping unexpected payloads to ``error``."""
        try:
            return parse(response.json())
        except (ValueError, KeyError, TypeError, AttributeError) as e:
            body = sanitize_for_log(truncate_output(response.text, 200))
            raise error(
                f"{operation} returned an unexpected payload: {e!r} - {body}",
                operation=operation,
                status_code=response.status_code,
            ) from e

    def _fetch(self, path: str, operation: str, **kwargs: Any) -> httpx.Response:
        return self._request("GET", path, operation, (200,), RemoteFetchError, **kwargs)

    def _update(
        self, method: str, path: str, operation: str, expected: tuple[int, ...], **kwargs: Any
    ) -> httpx.Response:
        return self._request(method, path, operation, expected, RemoteUpdateError, **kwargs)

    def authenticate(self) -> None:
        """Acquire a session cookie for the configured credentials.

        Raises:
            AuthenticationError: If Jira rejects the credentials or is unreachable.
        """
        logger.info("Authenticating to %s as %s", self.host, self.username)
        try:
            response = self.client.post(
                "/rest/auth/1/session",
                json={"username": self.username, "password": self.password},
            )
        except httpx.HTTPError as e:
            raise AuthenticationError(
                f"Could not reach {self.host}: {sanitize_for_log(str(e))}",
                operation="authenticate",
            ) from e

        if response.status_code != 200:
            raise AuthenticationError(
                f"Authentication as {self.username} failed: {response.status_code}",
                operation="authenticate",
                status_code=response.status_code,
            )
        logger.debug("Acquired Jira session for %s", self.username)

    def search(
        self,
        jql: str,
        start_at: int = 0,
        max_results: int = 50,
        fields: list[str] | None = None,
    ) -> SearchPage:
        """Run a JQL search and return one page of tickets.

        Raises:
            RemoteFetchError: If the search fails.
        """
        if fields is None:
            fields = ["summary", "status", "issuetype", "created"]
            if self.link_field_id:
                fields.append(self.link_field_id)

        response = self._fetch(
            f"{API}/search",
            "search",
            params={
                "jql": jql,
                "startAt": start_at,
                "maxResults": max_results,
                "fields": ",".join(fields),
            },
        )

        def parse(data: dict[str, Any]) -> SearchPage:
            tickets = [Ticket.from_api(item, self.link_field_id) for item in data.get("issues", [])]
            return SearchPage(
                tickets=tickets,
                start_at=int(data.get("startAt", start_at)),
                total=int(data.get("total", len(tickets))),
            )

        page = self._parse("search", response, parse)
        logger.debug("Search %r at %d returned %d ticket(s)", jql, start_at, len(page.tickets))
        return page

    def get_custom_fields(self, ticket_id: str) -> dict[str, Any]:
        """Get the custom field values of a ticket, keyed by field ID.

        Raises:
            RemoteFetchError: If the ticket can't be fetched.
        """
        response = self._fetch(f"{API}/issue/{ticket_id}", "get_custom_fields")
        fields = self._parse(
            "get_custom_fields", response, lambda data: dict(data.get("fields") or {})
        )
        return {key: value for key, value in fields.items() if key.startswith("customfield_")}

    def list_transitions(self, ticket_id: str) -> list[Transition]:
        """List the transitions currently allowed for a ticket.

        Raises:
            RemoteFetchError: If the transitions can't be fetched.
        """
        response = self._fetch(f"{API}/issue/{ticket_id}/transitions", "list_transitions")
        return self._parse(
            "list_transitions",
            response,
            lambda data: [
                Transition(id=str(item["id"]), name=item["name"])
                for item in data.get("transitions", [])
            ],
        )

    def create_transition(
        self, ticket_id: str, transition_id: str, fields: dict[str, Any] | None = None
    ) -> None:
        """Execute a transition on a ticket.

        Args:
            ticket_id: Jira issue ID.
            transition_id: ID of one of the ticket's allowed transitions.
            fields: Fields to set during the transition (e.g. resolution).

        Raises:
            RemoteUpdateError: If Jira rejects the transition.
        """
        payload: dict[str, Any] = {"transition": {"id": transition_id}}
        if fields:
            payload["fields"] = fields
        self._update(
            "POST",
            f"{API}/issue/{ticket_id}/transitions",
            "create_transition",
            (200, 204),
            json=payload,
        )

    def create_issue(self, fields: dict[str, Any]) -> CreatedTicket:
        """Create a ticket.

        Raises:
            RemoteUpdateError: If Jira rejects the issue.
        """
        response = self._update(
            "POST", f"{API}/issue", "create_issue", (200, 201), json={"fields": fields}
        )
        return self._parse(
            "create_issue",
            response,
            lambda data: CreatedTicket(id=str(data["id"]), key=data["key"]),
            error=RemoteUpdateError,
        )

    def list_sprints(self, board_id: int) -> list[Sprint]:
        """List all sprints of a board, following Agile API pagination.

        Raises:
            RemoteFetchError: If any page can't be fetched.
        """
        sprints: list[Sprint] = []
        start_at = 0
        while True:
            response = self._fetch(
                f"{AGILE_API}/board/{board_id}/sprint",
                "list_sprints",
                params={"startAt": start_at},
            )
            values, is_last = self._parse("list_sprints", response, _parse_sprint_page)
            sprints.extend(values)
            if is_last or not values:
                break
            start_at += len(values)
        return sprints

    def add_issues_to_sprint(self, sprint_id: int, keys: list[str]) -> None:
        """Move tickets into a sprint.

        Raises:
            RemoteUpdateError: If Jira rejects the move.
        """
        self._update(
            "POST",
            f"{AGILE_API}/sprint/{sprint_id}/issue",
            "add_issues_to_sprint",
            (200, 204),
            json={"issues": keys},
        )


def _parse_sprint_page(data: dict[str, Any]) -> tuple[list[Sprint], bool]:
    values = [
        Sprint(id=int(item["id"]), name=item.get("name", ""), state=item.get("state", ""))
        for item in data.get("values", [])
    ]
    return values, bool(data.get("isLast", True))
