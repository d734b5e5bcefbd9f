"""Data models for the code host (GitHub)."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Generic, TypeVar

T = TypeVar("T")


@dataclass(frozen=True)
class PullRequestRef:
    """Identity of a pull request (or its issue record) on the code host."""

    owner: str
    repo: str
    number: int

    def same_repo(self, owner: str, repo: str) -> bool:
        return self.owner.lower() == owner.lower() and self.repo.lower() == repo.lower()


@dataclass(frozen=True)
class PullRequest:
    """Pull request as observed at snapshot time.

    ``merged`` is None when the host did not report the flag (list endpoints
    omit it); ``merged_at`` is then the fallback merge signal.
    """

    owner: str
    repo: str
    number: int
    url: str
    author: str
    title: str
    body: str
    created_at: datetime
    merged: bool | None = None
    merged_at: datetime | None = None
    closed_at: datetime | None = None

    @property
    def ref(self) -> PullRequestRef:
        return PullRequestRef(self.owner, self.repo, self.number)

    @classmethod
    def from_api(cls, data: dict[str, Any], owner: str, repo: str) -> PullRequest:
        """Build from a GitHub REST pull request payload."""
        merged = data.get("merged")
        return cls(
            owner=owner,
            repo=repo,
            number=int(data["number"]),
            url=data["html_url"],
            author=(data.get("user") or {}).get("login", ""),
            title=data.get("title") or "",
            body=data.get("body") or "",
            created_at=parse_timestamp(data["created_at"]),
            merged=bool(merged) if merged is not None else None,
            merged_at=parse_optional_timestamp(data.get("merged_at")),
            closed_at=parse_optional_timestamp(data.get("closed_at")),
        )


@dataclass(frozen=True)
class Issue:
    """Issue record of a pull request; carries the review labels."""

    owner: str
    repo: str
    number: int
    url: str
    author: str
    labels: list[str] = field(default_factory=list)

    @property
    def ref(self) -> PullRequestRef:
        return PullRequestRef(self.owner, self.repo, self.number)

    def has_label(self, name: str) -> bool:
        return name in self.labels

    @classmethod
    def from_api(cls, data: dict[str, Any], owner: str, repo: str) -> Issue:
        """Build from a GitHub REST issue payload."""
        return cls(
            owner=owner,
            repo=repo,
            number=int(data["number"]),
            url=data.get("html_url") or "",
            author=(data.get("user") or {}).get("login", ""),
            labels=[label["name"] for label in data.get("labels") or []],
        )


@dataclass
class Page(Generic[T]):
    """One page of a list endpoint; ``next_page`` is None on the last page."""

    items: list[T]
    next_page: int | None = None


def parse_timestamp(value: str) -> datetime:
    """Parse a GitHub ISO 8601 timestamp (``2024-05-01T12:00:00Z``)."""
    return datetime.fromisoformat(value.replace("Z", "+00:00"))


def parse_optional_timestamp(value: str | None) -> datetime | None:
    return parse_timestamp(value) if value else None
