"""Base exceptions shared by all ticketsync components."""

from __future__ import annotations


class SyncError(Exception):
    """Base exception for ticketsync errors."""


class RemoteError(SyncError):
    """A call to the tracker or the code host failed.

    Attributes:
        operation: Short name of the remote operation (e.g. "search").
        status_code: HTTP status code, or None for transport errors.
    """

    def __init__(self, message: str, operation: str = "", status_code: int | None = None) -> None:
        super().__init__(message)
        self.operation = operation
        self.status_code = status_code


class RemoteFetchError(RemoteError):
    """A paginated or single-item read failed."""


class RemoteUpdateError(RemoteError):
    """A write (transition, issue creation, sprint assignment) failed."""
