"""Pull-request link parsing.

A link is the URL stored on a ticket, e.g.
``https://github.com/acme/widgets/pull/42``. Its path must be exactly
``/{owner}/{repo}/{kind}/{number}``.
"""

from __future__ import annotations

from urllib.parse import urlparse

from ticketsync.codehost.exceptions import InvalidIdentifierError, MalformedLinkError
from ticketsync.codehost.models import PullRequestRef

LINK_SEGMENTS = 4


def parse_link(link: str) -> PullRequestRef:
    """Extract owner, repository and number from a pull-request link.

    Raises:
        MalformedLinkError: If the path does not have exactly four segments.
        InvalidIdentifierError: If the number segment is not a non-negative integer.
    """
    path = urlparse(link.strip()).path
    segments = path.strip("/").split("/") if path.strip("/") else []

    if len(segments) != LINK_SEGMENTS or not all(segments):
        raise MalformedLinkError(
            f"Path to PR has wrong number of elements. "
            f"Expected {LINK_SEGMENTS}, got {len(segments)} in {path!r}"
        )

    owner, repo, _kind, number = segments
    if not (number.isascii() and number.isdigit()):
        raise InvalidIdentifierError(f"PR number {number!r} in {link!r} is not a valid number")

    return PullRequestRef(owner=owner, repo=repo, number=int(number))


def normalize_link(link: str) -> str:
    """Canonical form used to compare links: whitespace and trailing slashes dropped."""
    return link.strip().strip("/")
