"""TransitionApplier - Executes a decided transition on a ticket."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from ticketsync.reconcile.exceptions import TransitionNotFoundError

if TYPE_CHECKING:
    from ticketsync.tracker import Ticket, TrackerClient, Transition

logger = logging.getLogger("ticketsync.reconcile.transitions")


class TransitionApplier:
    """Matches a target status name against a ticket's allowed transitions."""

    def __init__(self, tracker: TrackerClient) -> None:
        self.tracker = tracker

    @staticmethod
    def find_transition(
        ticket: Ticket, target: str, transitions: list[Transition]
    ) -> Transition:
        """First allowed transition named ``target``.

        Raises:
            TransitionNotFoundError: If no allowed transition has that name.
        """
        for transition in transitions:
            if transition.name == target:
                return transition
        raise TransitionNotFoundError(ticket.key, target, [t.name for t in transitions])

    def apply(
        self,
        ticket: Ticket,
        target: str,
        transitions: list[Transition],
        fields: dict[str, Any] | None = None,
    ) -> Transition:
        """Execute the transition named ``target`` on ``ticket``.

        No remote call is made when the transition isn't allowed. Execution
        failures (RemoteUpdateError) propagate to the caller.

        Raises:
            TransitionNotFoundError: If no allowed transition has that name.
        """
        transition = self.find_transition(ticket, target, transitions)
        logger.info("Changing %s status to %s with fields %s", ticket.key, target, fields or {})
        self.tracker.create_transition(ticket.id, transition.id, fields or None)
        return transition
