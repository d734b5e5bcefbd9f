"""Unit tests for tracker data models."""

from datetime import datetime, timedelta, timezone

import pytest

from ticketsync.tracker import Sprint, Ticket
from ticketsync.tracker.models import parse_jira_timestamp


@pytest.mark.unit
class TestParseJiraTimestamp:
    """Tests for parse_jira_timestamp."""

    def test_compact_offset(self) -> None:
        assert parse_jira_timestamp("2026-01-10T08:30:00.000+0000") == datetime(
            2026, 1, 10, 8, 30, tzinfo=timezone.utc
        )

    def test_negative_offset(self) -> None:
        parsed = parse_jira_timestamp("2026-01-10T08:30:00.000-0500")

        assert parsed.utcoffset() == timedelta(hours=-5)

    def test_zulu(self) -> None:
        assert parse_jira_timestamp("2026-01-10T08:30:00Z").tzinfo is not None


@pytest.mark.unit
class TestTicketFromApi:
    """Tests for Ticket.from_api."""

    def test_reads_link_field(self) -> None:
        ticket = Ticket.from_api(
            {
                "id": "10001",
                "key": "PROJ-1",
                "fields": {
                    "status": {"name": "In Development"},
                    "issuetype": {"name": "Bug"},
                    "customfield_22000": " https://github.com/acme/widgets/pull/1 ",
                    "created": "2026-01-10T08:30:00.000+0000",
                },
            },
            link_field_id="customfield_22000",
        )

        assert ticket.id == "10001"
        assert ticket.status == "In Development"
        assert ticket.issue_type == "Bug"
        assert ticket.link == "https://github.com/acme/widgets/pull/1"
        assert ticket.created is not None

    def test_missing_link_is_none(self) -> None:
        ticket = Ticket.from_api(
            {"id": 5, "key": "PROJ-5", "fields": {"customfield_22000": None}},
            link_field_id="customfield_22000",
        )

        assert ticket.id == "5"
        assert ticket.link is None
        assert ticket.status == ""


@pytest.mark.unit
class TestSprint:
    """Tests for Sprint."""

    def test_is_active(self) -> None:
        assert Sprint(id=1, name="S1", state="active").is_active
        assert not Sprint(id=2, name="S2", state="future").is_active
