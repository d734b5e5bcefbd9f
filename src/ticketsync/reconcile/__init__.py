"""Reconciliation - Maps pull-request state to ticket transitions."""

from ticketsync.reconcile.engine import (
    ReconciliationEngine,
    classify_ticket,
    decide,
    is_closed,
    is_merged,
)
from ticketsync.reconcile.exceptions import TransitionNotFoundError
from ticketsync.reconcile.models import (
    NO_OP,
    Decision,
    OutcomeStatus,
    PRCondition,
    TicketCondition,
    TicketOutcome,
)
from ticketsync.reconcile.transitions import TransitionApplier

__all__ = [
    "NO_OP",
    "Decision",
    "OutcomeStatus",
    "PRCondition",
    "ReconciliationEngine",
    "TicketCondition",
    "TicketOutcome",
    "TransitionApplier",
    "TransitionNotFoundError",
    "classify_ticket",
    "decide",
    "is_closed",
    "is_merged",
]
