"""Data models for the per-run snapshot."""

from __future__ import annotations

from dataclasses import dataclass

from ticketsync.codehost.links import normalize_link
from ticketsync.codehost.models import Issue, PullRequest, PullRequestRef
from ticketsync.tracker.models import Ticket


@dataclass(frozen=True)
class Snapshot:
    """Tickets, issue records and pull requests fetched once at the start of a run.

    Shared read-only by every reconciliation and generation task.
    """

    tickets: tuple[Ticket, ...] = ()
    issues: tuple[Issue, ...] = ()
    pull_requests: tuple[PullRequest, ...] = ()

    def find_pull_request(self, link: str, ref: PullRequestRef | None = None) -> PullRequest | None:
        """Preloaded pull request matching ``link`` (or, failing that, ``ref``)."""
        wanted = normalize_link(link)
        for pr in self.pull_requests:
            if normalize_link(pr.url) == wanted:
                return pr
        if ref is not None:
            for pr in self.pull_requests:
                if pr.number == ref.number and ref.same_repo(pr.owner, pr.repo):
                    return pr
        return None

    def find_issue(self, ref: PullRequestRef) -> Issue | None:
        """Preloaded issue record for the pull request identified by ``ref``."""
        for issue in self.issues:
            if issue.number == ref.number and ref.same_repo(issue.owner, issue.repo):
                return issue
        return None
