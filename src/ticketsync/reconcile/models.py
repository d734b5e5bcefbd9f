"""Data models for the reconciliation engine."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import StrEnum
from typing import Any


class PRCondition(StrEnum):
    """Observed condition of a pull request, in decision priority order."""

    DONE = "done"
    CLOSED = "closed"
    REVIEWED = "reviewed"
    OPEN = "open"


class TicketCondition(StrEnum):
    """Workflow condition of a ticket derived from its status name."""

    DONE = "done"
    REVIEWED = "reviewed"
    IN_PROGRESS = "in_progress"
    NOT_STARTED = "not_started"


class OutcomeStatus(StrEnum):
    """What happened to a ticket during a run."""

    TRANSITIONED = "transitioned"
    PLANNED = "planned"
    NO_OP = "no_op"
    SKIPPED = "skipped"
    FAILED = "failed"


@dataclass(frozen=True)
class Decision:
    """The single transition decided for a ticket, or none.

    Attributes:
        target: Name of the transition to execute; None means no-op.
        fields: Fields sent with the transition (e.g. resolution).
    """

    target: str | None = None
    fields: dict[str, Any] = field(default_factory=dict)

    @property
    def is_noop(self) -> bool:
        return self.target is None


NO_OP = Decision()


@dataclass
class TicketOutcome:
    """Result of reconciling one ticket.

    ``link`` is set as soon as the ticket's link is known, even when a later
    step fails, so the generator never files a second ticket for it.
    """

    ticket_key: str
    status: OutcomeStatus
    link: str | None = None
    pr_condition: PRCondition | None = None
    ticket_condition: TicketCondition | None = None
    decision: Decision = NO_OP
    error: str | None = None
