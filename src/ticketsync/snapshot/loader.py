"""SnapshotLoader - Fetches the working sets for a run."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from ticketsync.codehost.models import Issue, PullRequest
from ticketsync.snapshot.models import Snapshot
from ticketsync.tracker.models import Ticket

if TYPE_CHECKING:
    from ticketsync.codehost import CodeHostClient
    from ticketsync.config import CodeHostConfig, TrackerConfig, WorkflowConfig
    from ticketsync.tracker import TrackerClient

logger = logging.getLogger("ticketsync.snapshot")

TICKET_PAGE_SIZE = 50


def quote_jql(value: str) -> str:
    """Quote a JQL string literal."""
    escaped = value.replace("\\", "\\\\").replace('"', '\\"')
    return f'"{escaped}"'


def open_tickets_jql(link_field_name: str, terminal_statuses: list[str]) -> str:
    """JQL for tickets with a pull-request link that are not finished yet."""
    jql = f"{quote_jql(link_field_name)} is not EMPTY"
    if terminal_statuses:
        statuses = ", ".join(quote_jql(status) for status in terminal_statuses)
        jql += f" AND status not in ({statuses})"
    return jql


class SnapshotLoader:
    """Loads tickets and pull requests once per run.

    Every load follows pagination to the end and fails fast: the first page
    error propagates as RemoteFetchError and no partial result is returned.
    """

    def __init__(
        self,
        tracker: TrackerClient,
        codehost: CodeHostClient,
        tracker_config: TrackerConfig,
        codehost_config: CodeHostConfig,
        workflow: WorkflowConfig,
    ) -> None:
        self.tracker = tracker
        self.codehost = codehost
        self.tracker_config = tracker_config
        self.codehost_config = codehost_config
        self.workflow = workflow

    def load_tickets(self) -> list[Ticket]:
        """Open tickets that have a pull-request link set."""
        jql = open_tickets_jql(self.tracker_config.link_field_name, self.workflow.terminal_statuses)
        tickets: list[Ticket] = []
        start_at = 0
        while True:
            page = self.tracker.search(jql, start_at=start_at, max_results=TICKET_PAGE_SIZE)
            tickets.extend(page.tickets)
            start_at += len(page.tickets)
            # A short page is the last one
            if len(page.tickets) < TICKET_PAGE_SIZE or start_at >= page.total:
                break
        logger.info("Loaded %d open ticket(s) with a PR link", len(tickets))
        return tickets

    def load_issues(self) -> list[Issue]:
        """Issue records created by the tracked users, optionally filtered by label."""
        owner, repo = self.codehost_config.owner, self.codehost_config.repo
        issues: list[Issue] = []
        for user in self.codehost_config.users:
            page_number: int | None = 1
            while page_number is not None:
                page = self.codehost.list_issues(
                    owner,
                    repo,
                    creator=user,
                    labels=self.codehost_config.labels or None,
                    page=page_number,
                )
                issues.extend(page.items)
                page_number = page.next_page
        logger.info("Loaded %d issue record(s) from %s/%s", len(issues), owner, repo)
        return issues

    def load_pull_requests(self) -> list[PullRequest]:
        """Pull requests in the target repository authored by the tracked users."""
        owner, repo = self.codehost_config.owner, self.codehost_config.repo
        users = set(self.codehost_config.users)
        pulls: list[PullRequest] = []
        page_number: int | None = 1
        while page_number is not None:
            page = self.codehost.list_pull_requests(owner, repo, page=page_number)
            pulls.extend(pr for pr in page.items if pr.author in users)
            page_number = page.next_page
        logger.info("Loaded %d pull request(s) from %s/%s", len(pulls), owner, repo)
        return pulls

    def load(self) -> Snapshot:
        """Fetch all working sets, in order, into a read-only snapshot."""
        tickets = self.load_tickets()
        issues = self.load_issues()
        pulls = self.load_pull_requests()
        return Snapshot(tickets=tuple(tickets), issues=tuple(issues), pull_requests=tuple(pulls))
