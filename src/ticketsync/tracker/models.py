"""Data models for the issue tracker (Jira)."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any


@dataclass(frozen=True)
class Ticket:
    """A Jira issue as returned by search.

    ``link`` holds the pull-request URL custom field when the search returned
    it; None means it has to be looked up through the custom fields.
    """

    id: str
    key: str
    status: str
    issue_type: str
    link: str | None = None
    created: datetime | None = None

    @classmethod
    def from_api(cls, data: dict[str, Any], link_field_id: str = "") -> Ticket:
        """Build from a Jira REST issue payload."""
        fields = data.get("fields") or {}
        link = str(fields.get(link_field_id) or "").strip() if link_field_id else ""
        created = fields.get("created")
        return cls(
            id=str(data["id"]),
            key=data.get("key") or "",
            status=(fields.get("status") or {}).get("name", ""),
            issue_type=(fields.get("issuetype") or {}).get("name", ""),
            link=link or None,
            created=parse_jira_timestamp(created) if created else None,
        )


@dataclass(frozen=True)
class Transition:
    """An allowed move out of a ticket's current status."""

    id: str
    name: str


@dataclass(frozen=True)
class Sprint:
    """A board iteration; the one being worked on has state "active"."""

    id: int
    name: str
    state: str

    @property
    def is_active(self) -> bool:
        return self.state == "active"


@dataclass(frozen=True)
class CreatedTicket:
    """Identity of a ticket returned by issue creation."""

    id: str
    key: str


@dataclass
class SearchPage:
    """One page of a JQL search."""

    tickets: list[Ticket] = field(default_factory=list)
    start_at: int = 0
    total: int = 0


def parse_jira_timestamp(value: str) -> datetime:
    """Parse a Jira timestamp such as ``2024-05-01T12:00:00.000+0000``."""
    if len(value) >= 5 and value[-5] in "+-" and value[-4:].isdigit():
        value = f"{value[:-2]}:{value[-2:]}"
    return datetime.fromisoformat(value.replace("Z", "+00:00"))
