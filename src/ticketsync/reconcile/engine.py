"""ReconciliationEngine - Decides and applies one transition per ticket.

The decision rules are pure functions of the pull request's condition, the
ticket's condition and the workflow configuration:

    PR condition   Ticket condition   Action
    DONE           DONE               no-op
    DONE           other              done transition, resolution "Done"
    CLOSED         DONE               no-op
    CLOSED         other              done transition, resolution "Won't Do"
    REVIEWED       REVIEWED           no-op
    REVIEWED       other              ready-to-merge transition
    OPEN           IN_PROGRESS        no-op
    OPEN           NOT_STARTED        start transition (per issue type)

Any other combination issues nothing, so a re-run against an unchanged world
is a no-op.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from ticketsync.codehost.exceptions import LinkError
from ticketsync.codehost.links import parse_link
from ticketsync.exceptions import RemoteError
from ticketsync.reconcile.exceptions import TransitionNotFoundError
from ticketsync.reconcile.models import (
    NO_OP,
    Decision,
    OutcomeStatus,
    PRCondition,
    TicketCondition,
    TicketOutcome,
)

if TYPE_CHECKING:
    from ticketsync.codehost import CodeHostClient, Issue, PullRequest, PullRequestRef
    from ticketsync.config import WorkflowConfig
    from ticketsync.reconcile.transitions import TransitionApplier
    from ticketsync.snapshot import Snapshot
    from ticketsync.tracker import Ticket, TrackerClient

logger = logging.getLogger("ticketsync.reconcile")


def is_merged(pr: PullRequest) -> bool:
    """Merged flag when reported, otherwise a merge timestamp."""
    if pr.merged is None:
        return pr.merged_at is not None
    return pr.merged


def is_closed(pr: PullRequest) -> bool:
    return pr.closed_at is not None and not is_merged(pr)


def classify_ticket(ticket: Ticket, workflow: WorkflowConfig) -> TicketCondition:
    if ticket.status in workflow.terminal_statuses:
        return TicketCondition.DONE
    if ticket.status == workflow.reviewed_status:
        return TicketCondition.REVIEWED
    if ticket.status in workflow.in_progress_statuses:
        return TicketCondition.IN_PROGRESS
    return TicketCondition.NOT_STARTED


def decide(
    pr_condition: PRCondition,
    ticket_condition: TicketCondition,
    issue_type: str,
    workflow: WorkflowConfig,
) -> Decision:
    """Apply the decision table; first matching row wins."""
    match pr_condition:
        case PRCondition.DONE:
            if ticket_condition is TicketCondition.DONE:
                return NO_OP
            return Decision(
                workflow.done_transition, {"resolution": {"name": workflow.resolution_done}}
            )
        case PRCondition.CLOSED:
            if ticket_condition is TicketCondition.DONE:
                return NO_OP
            return Decision(
                workflow.done_transition, {"resolution": {"name": workflow.resolution_wont_do}}
            )
        case PRCondition.REVIEWED:
            if ticket_condition is TicketCondition.REVIEWED:
                return NO_OP
            return Decision(workflow.ready_transition)
        case PRCondition.OPEN:
            if ticket_condition is TicketCondition.NOT_STARTED:
                return Decision(workflow.start_transition_for(issue_type))
            return NO_OP
    return NO_OP


class ReconciliationEngine:
    """Reconciles a single ticket against its linked pull request.

    Holds no per-ticket state, so one engine is shared by all tasks of a run.
    """

    def __init__(
        self,
        tracker: TrackerClient,
        codehost: CodeHostClient,
        applier: TransitionApplier,
        workflow: WorkflowConfig,
        link_field_id: str,
        dry_run: bool = False,
    ) -> None:
        """Initialize the engine.

        Args:
            tracker: Jira client for links and transitions.
            codehost: GitHub client for pull requests missing from the snapshot.
            applier: Executes the decided transition.
            workflow: Status, transition and label names.
            link_field_id: Custom field holding the pull-request URL.
            dry_run: Decide and log, but never execute a transition.
        """
        self.tracker = tracker
        self.codehost = codehost
        self.applier = applier
        self.workflow = workflow
        self.link_field_id = link_field_id
        self.dry_run = dry_run

    def resolve_link(self, ticket: Ticket) -> str | None:
        """The ticket's pull-request URL, from search fields or its custom fields."""
        if ticket.link:
            return ticket.link
        value = self.tracker.get_custom_fields(ticket.id).get(self.link_field_id)
        link = str(value).strip() if value else ""
        return link or None

    def locate_pull_request(
        self, link: str, ref: PullRequestRef, snapshot: Snapshot
    ) -> PullRequest:
        pr = snapshot.find_pull_request(link, ref)
        if pr is not None:
            return pr
        logger.debug("PR %s not preloaded, fetching", link)
        return self.codehost.get_pull_request(ref.owner, ref.repo, ref.number)

    def locate_issue(self, pr: PullRequest, snapshot: Snapshot) -> Issue:
        issue = snapshot.find_issue(pr.ref)
        if issue is not None:
            return issue
        logger.debug("Issue record for %s not preloaded, fetching", pr.url)
        return self.codehost.get_issue(pr.owner, pr.repo, pr.number)

    def classify_pull_request(self, pr: PullRequest, snapshot: Snapshot) -> PRCondition:
        """Merged beats closed, closed beats reviewed."""
        if is_merged(pr):
            return PRCondition.DONE
        if is_closed(pr):
            return PRCondition.CLOSED
        if self.locate_issue(pr, snapshot).has_label(self.workflow.approved_label):
            return PRCondition.REVIEWED
        return PRCondition.OPEN

    def reconcile(self, ticket: Ticket, snapshot: Snapshot) -> TicketOutcome:
        """Decide and apply at most one transition for ``ticket``.

        Failures are confined to this ticket: they are logged and reported in
        the returned outcome rather than raised.
        """
        outcome = TicketOutcome(ticket_key=ticket.key, status=OutcomeStatus.NO_OP)
        try:
            link = self.resolve_link(ticket)
            if link is None:
                logger.warning("%s has no PR link, skipping", ticket.key)
                outcome.status = OutcomeStatus.SKIPPED
                return outcome
            outcome.link = link

            ref = parse_link(link)
            pr = self.locate_pull_request(link, ref, snapshot)
            transitions = self.tracker.list_transitions(ticket.id)

            outcome.pr_condition = self.classify_pull_request(pr, snapshot)
            outcome.ticket_condition = classify_ticket(ticket, self.workflow)
            outcome.decision = decide(
                outcome.pr_condition, outcome.ticket_condition, ticket.issue_type, self.workflow
            )
        except LinkError as e:
            logger.warning("%s has an unusable PR link: %s", ticket.key, e)
            outcome.status = OutcomeStatus.SKIPPED
            outcome.error = str(e)
            return outcome
        except RemoteError as e:
            logger.error("%s Failed to load PR or transitions: %s", ticket.key, e)
            outcome.status = OutcomeStatus.FAILED
            outcome.error = str(e)
            return outcome

        decision = outcome.decision
        if decision.target is None:
            logger.debug(
                "%s is up to date (PR %s, ticket %s)",
                ticket.key,
                outcome.pr_condition,
                outcome.ticket_condition,
            )
            return outcome

        try:
            if self.dry_run:
                self.applier.find_transition(ticket, decision.target, transitions)
                logger.info("[dry-run] Would change %s status to %s", ticket.key, decision.target)
                outcome.status = OutcomeStatus.PLANNED
                return outcome
            self.applier.apply(ticket, decision.target, transitions, decision.fields)
        except (TransitionNotFoundError, RemoteError) as e:
            logger.error("%s Failed to change status to %s: %s", ticket.key, decision.target, e)
            outcome.status = OutcomeStatus.FAILED
            outcome.error = str(e)
            return outcome

        outcome.status = OutcomeStatus.TRANSITIONED
        return outcome
