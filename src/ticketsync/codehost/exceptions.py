"""Exceptions for code-host link handling."""

from ticketsync.exceptions import SyncError


class LinkError(SyncError):
    """Base exception for pull-request link errors."""


class MalformedLinkError(LinkError):
    """Link path does not have the owner/repo/kind/number shape."""


class InvalidIdentifierError(LinkError):
    """Link number segment is not a non-negative integer."""
