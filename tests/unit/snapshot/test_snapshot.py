"""Unit tests for Snapshot lookups."""

from collections.abc import Callable

import pytest

from ticketsync.codehost import Issue, PullRequest, PullRequestRef
from ticketsync.snapshot import Snapshot


@pytest.mark.unit
class TestFindPullRequest:
    """Tests for Snapshot.find_pull_request."""

    def test_matches_url(self, make_pr: Callable[..., PullRequest]) -> None:
        snapshot = Snapshot(pull_requests=(make_pr(1), make_pr(2)))

        pr = snapshot.find_pull_request("https://github.com/acme/widgets/pull/2/")

        assert pr is not None
        assert pr.number == 2

    def test_falls_back_to_ref(self, make_pr: Callable[..., PullRequest]) -> None:
        snapshot = Snapshot(pull_requests=(make_pr(7),))

        pr = snapshot.find_pull_request(
            "https://github.com/Acme/Widgets/pulls/7", PullRequestRef("Acme", "Widgets", 7)
        )

        assert pr is not None
        assert pr.number == 7

    def test_other_repo_misses(self, make_pr: Callable[..., PullRequest]) -> None:
        snapshot = Snapshot(pull_requests=(make_pr(7),))

        assert (
            snapshot.find_pull_request(
                "https://github.com/other/repo/pull/7", PullRequestRef("other", "repo", 7)
            )
            is None
        )


@pytest.mark.unit
class TestFindIssue:
    """Tests for Snapshot.find_issue."""

    def test_matches_number(self, make_issue: Callable[..., Issue]) -> None:
        snapshot = Snapshot(issues=(make_issue(1), make_issue(2, labels=["lgtm"])))

        issue = snapshot.find_issue(PullRequestRef("acme", "widgets", 2))

        assert issue is not None
        assert issue.has_label("lgtm")

    def test_miss(self, make_issue: Callable[..., Issue]) -> None:
        snapshot = Snapshot(issues=(make_issue(1),))

        assert snapshot.find_issue(PullRequestRef("acme", "widgets", 3)) is None
