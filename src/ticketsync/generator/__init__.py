"""Ticket generator - Creates tickets for unlinked pull requests."""

from ticketsync.generator.exceptions import GeneratorError, NoActiveSprintError
from ticketsync.generator.generator import TicketGenerator
from ticketsync.generator.models import GenerationOutcome, GenerationStatus

__all__ = [
    "GenerationOutcome",
    "GenerationStatus",
    "GeneratorError",
    "NoActiveSprintError",
    "TicketGenerator",
]
