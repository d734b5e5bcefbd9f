"""Exceptions for the reconciliation engine."""

from ticketsync.exceptions import SyncError


class TransitionNotFoundError(SyncError):
    """The decided transition is not among the ticket's allowed transitions."""

    def __init__(self, ticket_key: str, target: str, available: list[str] | None = None) -> None:
        self.ticket_key = ticket_key
        self.target = target
        self.available = available or []
        super().__init__(
            f"Transition for {ticket_key} to {target!r} not found. "
            f"Available: {self.available}"
        )
