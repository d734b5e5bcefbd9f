"""TicketGenerator - Files tickets for pull requests nobody linked."""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable, Iterable
from datetime import datetime, timedelta, timezone
from typing import TYPE_CHECKING, Any

from ticketsync.codehost.links import normalize_link
from ticketsync.exceptions import RemoteError
from ticketsync.generator.exceptions import NoActiveSprintError
from ticketsync.generator.models import GenerationOutcome, GenerationStatus
from ticketsync.reconcile.engine import is_merged
from ticketsync.snapshot.loader import quote_jql

if TYPE_CHECKING:
    from ticketsync.codehost import PullRequest
    from ticketsync.config import GeneratorConfig, TrackerConfig
    from ticketsync.tracker import Sprint, TrackerClient

logger = logging.getLogger("ticketsync.generator")


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class TicketGenerator:
    """Creates a ticket in the active sprint for each old enough, unlinked pull request.

    Each pull request URL is claimed under a lock before the duplicate-guard
    search runs, so overlapping or concurrent calls on one generator never
    create two tickets for the same URL.
    """

    def __init__(
        self,
        tracker: TrackerClient,
        tracker_config: TrackerConfig,
        generator_config: GeneratorConfig,
        dry_run: bool = False,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        """Initialize the generator.

        Args:
            tracker: Jira client used to search, create and move tickets.
            tracker_config: Project, board, issue type and field settings.
            generator_config: Age threshold for unlinked pull requests.
            dry_run: Search for duplicates but never create or move tickets.
            clock: Returns the current time (timezone-aware).
        """
        self.tracker = tracker
        self.tracker_config = tracker_config
        self.generator_config = generator_config
        self.dry_run = dry_run
        self.clock = clock
        self._claimed: set[str] = set()
        self._lock = threading.Lock()

    def is_old_enough(self, pr: PullRequest, now: datetime | None = None) -> bool:
        now = now or self.clock()
        return now - pr.created_at > timedelta(seconds=self.generator_config.min_age_seconds)

    def eligible(
        self, pulls: Iterable[PullRequest], linked_urls: Iterable[str]
    ) -> list[PullRequest]:
        """Open pull requests with no linked ticket that are older than the threshold.

        Merged and closed pull requests never get a new ticket. Each URL appears
        at most once in the result.
        """
        seen = {normalize_link(url) for url in linked_urls}
        now = self.clock()
        result = []
        for pr in pulls:
            url = normalize_link(pr.url)
            if url in seen:
                continue
            seen.add(url)
            if is_merged(pr) or pr.closed_at is not None:
                continue
            if self.is_old_enough(pr, now):
                result.append(pr)
        return result

    def find_active_sprint(self) -> Sprint:
        """The active sprint of the configured board.

        Raises:
            NoActiveSprintError: If no sprint on the board is active.
            RemoteFetchError: If the sprints can't be listed.
        """
        board_id = self.tracker_config.board_id
        if board_id is None:
            raise NoActiveSprintError("No board configured for new tickets")
        for sprint in self.tracker.list_sprints(board_id):
            if sprint.is_active:
                return sprint
        raise NoActiveSprintError(f"Board {board_id} has no active sprint")

    def build_fields(self, pr: PullRequest) -> dict[str, Any]:
        """Jira fields of the ticket created for ``pr``."""
        config = self.tracker_config
        fields: dict[str, Any] = {
            "project": {"key": config.project_key},
            "issuetype": {"name": config.new_issue_type},
            "summary": pr.title,
            "description": pr.body,
            config.link_field_id: pr.url,
        }
        assignee = config.user_mapping.get(pr.author)
        if assignee:
            fields["assignee"] = {"name": assignee}
        if config.team_field_id and config.team_id:
            fields[config.team_field_id] = {"id": config.team_id}
        return fields

    def _claim(self, url: str) -> bool:
        with self._lock:
            if url in self._claimed:
                return False
            self._claimed.add(url)
            return True

    def _release(self, url: str) -> None:
        with self._lock:
            self._claimed.discard(url)

    def find_existing(self, pr: PullRequest) -> str | None:
        """Key of a ticket already linked to ``pr``, if any.

        Raises:
            RemoteFetchError: If the search fails.
        """
        jql = f"{quote_jql(self.tracker_config.link_field_name)} = {quote_jql(pr.url)}"
        page = self.tracker.search(jql, start_at=0, max_results=1)
        return page.tickets[0].key if page.tickets else None

    def create_for(self, pr: PullRequest, sprint: Sprint) -> GenerationOutcome:
        """Create a ticket for ``pr`` and move it into ``sprint``.

        Failures are logged and reported in the outcome, never raised.
        """
        url = normalize_link(pr.url)
        if not self._claim(url):
            logger.info("Ticket for %s is already being created, not creating new one", pr.url)
            return GenerationOutcome(pr_url=pr.url, status=GenerationStatus.DUPLICATE_SKIPPED)

        try:
            existing = self.find_existing(pr)
        except RemoteError as e:
            self._release(url)
            logger.error("Could not check for existing issue, not creating new one: %s", e)
            return GenerationOutcome(pr_url=pr.url, status=GenerationStatus.FAILED, error=str(e))

        if existing:
            logger.info("Found existing issue for %s: %s, not creating new one", pr.url, existing)
            return GenerationOutcome(
                pr_url=pr.url, status=GenerationStatus.DUPLICATE_SKIPPED, ticket_key=existing
            )

        if self.dry_run:
            logger.info("[dry-run] Would create ticket for %s in sprint %s", pr.url, sprint.name)
            return GenerationOutcome(pr_url=pr.url, status=GenerationStatus.PLANNED)

        try:
            created = self.tracker.create_issue(self.build_fields(pr))
        except RemoteError as e:
            logger.error("Could not create issue for %s: %s", pr.url, e)
            return GenerationOutcome(pr_url=pr.url, status=GenerationStatus.FAILED, error=str(e))
        logger.info("Created %s for %s", created.key, pr.url)

        outcome = GenerationOutcome(
            pr_url=pr.url, status=GenerationStatus.CREATED, ticket_key=created.key
        )
        try:
            self.tracker.add_issues_to_sprint(sprint.id, [created.key])
        except RemoteError as e:
            logger.error("Could not move %s to sprint %s: %s", created.key, sprint.name, e)
            outcome.error = str(e)
            return outcome

        outcome.added_to_sprint = True
        return outcome
