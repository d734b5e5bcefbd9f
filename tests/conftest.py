"""Shared pytest fixtures and configuration."""

from __future__ import annotations

from collections.abc import Callable
from datetime import datetime, timezone
from typing import Any

import pytest

from ticketsync.codehost import Issue, PullRequest
from ticketsync.config import CodeHostConfig, GeneratorConfig, TrackerConfig, WorkflowConfig
from ticketsync.tracker import Ticket


# Register custom markers
def pytest_configure(config: pytest.Config) -> None:
    """Register custom markers for test categorization."""
    config.addinivalue_line("markers", "unit: fast tests with no external dependencies")
    config.addinivalue_line("markers", "integration: component interaction tests")
    config.addinivalue_line("markers", "real: talks to a live Jira or GitHub (local only)")


@pytest.fixture
def workflow() -> WorkflowConfig:
    """Default workflow with a bug-specific start transition."""
    return WorkflowConfig(start_transition_by_type={"Bug": "In Progress"})


@pytest.fixture
def tracker_config() -> TrackerConfig:
    """Tracker settings with ticket creation configured."""
    return TrackerConfig(
        host="https://jira.example.com",
        username="bot",
        password="secret",
        link_field_name="GH PR link",
        link_field_id="customfield_22000",
        project_key="PROJ",
        board_id=42,
        new_issue_type="Task",
        team_field_id="customfield_19000",
        team_id="17",
        user_mapping={"octocat": "jdoe"},
    )


@pytest.fixture
def codehost_config() -> CodeHostConfig:
    """Code-host settings tracking two users in acme/widgets."""
    return CodeHostConfig(
        token="test-token",
        owner="acme",
        repo="widgets",
        users=["octocat", "hubot"],
    )


@pytest.fixture
def generator_config() -> GeneratorConfig:
    """Generator requiring PRs to be a day old."""
    return GeneratorConfig(enabled=True, min_age_seconds=86400)


@pytest.fixture
def make_ticket() -> Callable[..., Ticket]:
    """Factory for tickets linked to acme/widgets PRs."""

    def _make(
        key: str = "PROJ-1",
        status: str = "To Do",
        issue_type: str = "Task",
        link: str | None = "https://github.com/acme/widgets/pull/1",
        id: str | None = None,
    ) -> Ticket:
        return Ticket(
            id=id or key.split("-")[-1],
            key=key,
            status=status,
            issue_type=issue_type,
            link=link,
        )

    return _make


@pytest.fixture
def make_pr() -> Callable[..., PullRequest]:
    """Factory for open acme/widgets pull requests."""

    def _make(number: int = 1, **overrides: Any) -> PullRequest:
        values: dict[str, Any] = {
            "owner": "acme",
            "repo": "widgets",
            "number": number,
            "url": f"https://github.com/acme/widgets/pull/{number}",
            "author": "octocat",
            "title": f"PR {number}",
            "body": f"Body of PR {number}",
            "created_at": datetime(2026, 2, 1, tzinfo=timezone.utc),
        }
        values.update(overrides)
        return PullRequest(**values)

    return _make


@pytest.fixture
def make_issue() -> Callable[..., Issue]:
    """Factory for acme/widgets issue records."""

    def _make(number: int = 1, labels: list[str] | None = None) -> Issue:
        return Issue(
            owner="acme",
            repo="widgets",
            number=number,
            url=f"https://github.com/acme/widgets/pull/{number}",
            author="octocat",
            labels=labels or [],
        )

    return _make
