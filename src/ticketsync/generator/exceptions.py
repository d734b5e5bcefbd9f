"""Exceptions for the ticket generator."""

from ticketsync.exceptions import SyncError


class GeneratorError(SyncError):
    """Base exception for ticket generation errors."""


class NoActiveSprintError(GeneratorError):
    """The configured board has no active sprint to put new tickets in."""
