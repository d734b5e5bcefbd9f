"""Exceptions for the issue tracker client."""

from ticketsync.exceptions import RemoteError


class AuthenticationError(RemoteError):
    """Jira rejected the configured credentials."""
