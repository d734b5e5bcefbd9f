"""Data models for the sync runner."""

from __future__ import annotations

from collections import Counter
from dataclasses import dataclass, field

from ticketsync.generator.models import GenerationOutcome, GenerationStatus
from ticketsync.reconcile.models import OutcomeStatus, TicketOutcome


@dataclass
class RunReport:
    """Per-item outcomes of one run.

    Attributes:
        tickets: One outcome per reconciled ticket.
        generated: One outcome per pull request considered for a new ticket.
        generation_error: Why the generation phase could not start, if it didn't.
    """

    tickets: list[TicketOutcome] = field(default_factory=list)
    generated: list[GenerationOutcome] = field(default_factory=list)
    generation_error: str | None = None

    @property
    def linked_urls(self) -> set[str]:
        return {outcome.link for outcome in self.tickets if outcome.link}

    def ticket_counts(self) -> Counter[OutcomeStatus]:
        return Counter(outcome.status for outcome in self.tickets)

    def generation_counts(self) -> Counter[GenerationStatus]:
        return Counter(outcome.status for outcome in self.generated)

    @property
    def failures(self) -> int:
        return (
            self.ticket_counts()[OutcomeStatus.FAILED]
            + self.generation_counts()[GenerationStatus.FAILED]
        )

    def summary(self) -> str:
        tickets = self.ticket_counts()
        generated = self.generation_counts()
        return (
            f"Tickets: {len(self.tickets)} "
            f"(transitioned {tickets[OutcomeStatus.TRANSITIONED]}, "
            f"planned {tickets[OutcomeStatus.PLANNED]}, "
            f"up to date {tickets[OutcomeStatus.NO_OP]}, "
            f"skipped {tickets[OutcomeStatus.SKIPPED]}, "
            f"failed {tickets[OutcomeStatus.FAILED]}); "
            f"New tickets: {generated[GenerationStatus.CREATED]} created, "
            f"{generated[GenerationStatus.PLANNED]} planned, "
            f"{generated[GenerationStatus.DUPLICATE_SKIPPED]} duplicates skipped, "
            f"{generated[GenerationStatus.FAILED]} failed"
        )
