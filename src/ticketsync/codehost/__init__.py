"""Code host - GitHub pull requests, issue records and link parsing."""

from ticketsync.codehost.client import CodeHostClient
from ticketsync.codehost.exceptions import (
    InvalidIdentifierError,
    LinkError,
    MalformedLinkError,
)
from ticketsync.codehost.links import normalize_link, parse_link
from ticketsync.codehost.models import Issue, Page, PullRequest, PullRequestRef

__all__ = [
    "CodeHostClient",
    "InvalidIdentifierError",
    "Issue",
    "LinkError",
    "MalformedLinkError",
    "Page",
    "PullRequest",
    "PullRequestRef",
    "normalize_link",
    "parse_link",
]
