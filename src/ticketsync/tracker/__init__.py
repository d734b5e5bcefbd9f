"""Issue tracker - Jira tickets, transitions and sprints."""

from ticketsync.tracker.client import TrackerClient
from ticketsync.tracker.exceptions import AuthenticationError
from ticketsync.tracker.models import CreatedTicket, SearchPage, Sprint, Ticket, Transition

__all__ = [
    "AuthenticationError",
    "CreatedTicket",
    "SearchPage",
    "Sprint",
    "Ticket",
    "TrackerClient",
    "Transition",
]
