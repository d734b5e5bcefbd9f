"""Data models for the ticket generator."""

from dataclasses import dataclass
from enum import StrEnum


class GenerationStatus(StrEnum):
    """What happened to an unlinked pull request during a run."""

    CREATED = "created"
    PLANNED = "planned"
    DUPLICATE_SKIPPED = "duplicate_skipped"
    FAILED = "failed"


@dataclass
class GenerationOutcome:
    """Result of generating a ticket for one pull request.

    Attributes:
        pr_url: URL of the pull request.
        status: Outcome of the attempt.
        ticket_key: Created ticket, or the existing one for a duplicate.
        added_to_sprint: Whether the created ticket was moved to the active sprint.
        error: Failure description, if any.
    """

    pr_url: str
    status: GenerationStatus
    ticket_key: str | None = None
    added_to_sprint: bool = False
    error: str | None = None
