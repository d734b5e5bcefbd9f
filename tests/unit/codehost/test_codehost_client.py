"""Unit tests for CodeHostClient."""

from datetime import datetime, timezone
from unittest.mock import MagicMock

import httpx
import pytest

from ticketsync.codehost import CodeHostClient, Issue, PullRequest
from ticketsync.exceptions import RemoteFetchError


@pytest.fixture
def mock_client() -> MagicMock:
    """Create a mock HTTP client."""
    return MagicMock()


@pytest.fixture
def client(mock_client: MagicMock) -> CodeHostClient:
    """Create a CodeHostClient with mocked HTTP client."""
    host = CodeHostClient(token="test-token")
    host._client = mock_client
    return host


def _mock_response(
    data: object, status_code: int = 200, links: dict | None = None
) -> MagicMock:
    response = MagicMock()
    response.status_code = status_code
    response.json.return_value = data
    response.text = str(data)
    response.links = links or {}
    return response


def _pr_payload(number: int = 5, **overrides: object) -> dict:
    payload = {
        "number": number,
        "html_url": f"https://github.com/acme/widgets/pull/{number}",
        "user": {"login": "octocat"},
        "title": "Add widget",
        "body": None,
        "created_at": "2026-01-10T08:30:00Z",
        "merged_at": None,
        "closed_at": None,
    }
    payload.update(overrides)
    return payload


@pytest.mark.unit
class TestClientConstruction:
    """Tests for HTTP client construction."""

    def test_bearer_token_by_default(self) -> None:
        host = CodeHostClient(token="abc")

        assert host.client.headers["Authorization"] == "Bearer abc"
        host.close()

    def test_basic_auth_with_username(self) -> None:
        host = CodeHostClient(token="abc", username="bot")

        assert "Authorization" not in host.client.headers
        assert isinstance(host.client.auth, httpx.BasicAuth)
        host.close()

    def test_close_resets_client(self, client: CodeHostClient, mock_client: MagicMock) -> None:
        client.close()

        mock_client.close.assert_called_once()
        assert client._client is None


@pytest.mark.unit
class TestListPullRequests:
    """Tests for list_pull_requests."""

    def test_parses_pull_requests(self, client: CodeHostClient, mock_client: MagicMock) -> None:
        mock_client.get.return_value = _mock_response([_pr_payload(5)])

        page = client.list_pull_requests("acme", "widgets")

        pr = page.items[0]
        assert isinstance(pr, PullRequest)
        assert pr.number == 5
        assert pr.author == "octocat"
        assert pr.body == ""
        assert pr.created_at == datetime(2026, 1, 10, 8, 30, tzinfo=timezone.utc)
        assert pr.merged is None
        assert pr.merged_at is None
        assert page.next_page is None

    def test_requests_all_states(self, client: CodeHostClient, mock_client: MagicMock) -> None:
        mock_client.get.return_value = _mock_response([])

        client.list_pull_requests("acme", "widgets", page=3)

        mock_client.get.assert_called_once_with(
            "/repos/acme/widgets/pulls", params={"state": "all", "per_page": 100, "page": 3}
        )

    def test_next_page_from_link_header(
        self, client: CodeHostClient, mock_client: MagicMock
    ) -> None:
        mock_client.get.return_value = _mock_response(
            [_pr_payload()],
            links={"next": {"url": "https://api.github.com/repos/acme/widgets/pulls?page=2"}},
        )

        page = client.list_pull_requests("acme", "widgets")

        assert page.next_page == 2

    def test_error_raises(self, client: CodeHostClient, mock_client: MagicMock) -> None:
        mock_client.get.return_value = _mock_response({"message": "Bad creds"}, status_code=401)

        with pytest.raises(RemoteFetchError) as exc_info:
            client.list_pull_requests("acme", "widgets")

        assert exc_info.value.status_code == 401
        assert exc_info.value.operation == "list_pull_requests"

    def test_transport_error_raises(
        self, client: CodeHostClient, mock_client: MagicMock
    ) -> None:
        mock_client.get.side_effect = httpx.ConnectError("connection refused")

        with pytest.raises(RemoteFetchError, match="connection refused"):
            client.list_pull_requests("acme", "widgets")


@pytest.mark.unit
class TestListIssues:
    """Tests for list_issues."""

    def test_filters_by_creator_and_labels(
        self, client: CodeHostClient, mock_client: MagicMock
    ) -> None:
        mock_client.get.return_value = _mock_response([])

        client.list_issues("acme", "widgets", creator="octocat", labels=["lgtm", "ready"])

        mock_client.get.assert_called_once_with(
            "/repos/acme/widgets/issues",
            params={
                "state": "all",
                "per_page": 100,
                "page": 1,
                "creator": "octocat",
                "labels": "lgtm,ready",
            },
        )

    def test_parses_labels(self, client: CodeHostClient, mock_client: MagicMock) -> None:
        mock_client.get.return_value = _mock_response(
            [
                {
                    "number": 5,
                    "html_url": "https://github.com/acme/widgets/pull/5",
                    "user": {"login": "octocat"},
                    "labels": [{"name": "lgtm"}, {"name": "size/S"}],
                }
            ]
        )

        page = client.list_issues("acme", "widgets")

        assert page.items == [
            Issue(
                owner="acme",
                repo="widgets",
                number=5,
                url="https://github.com/acme/widgets/pull/5",
                author="octocat",
                labels=["lgtm", "size/S"],
            )
        ]


@pytest.mark.unit
class TestGetPullRequest:
    """Tests for get_pull_request and get_issue."""

    def test_merged_flag(self, client: CodeHostClient, mock_client: MagicMock) -> None:
        mock_client.get.return_value = _mock_response(
            _pr_payload(
                9,
                merged=True,
                merged_at="2026-01-11T10:00:00Z",
                closed_at="2026-01-11T10:00:00Z",
            )
        )

        pr = client.get_pull_request("acme", "widgets", 9)

        mock_client.get.assert_called_once_with("/repos/acme/widgets/pulls/9", params=None)
        assert pr.merged is True
        assert pr.merged_at == datetime(2026, 1, 11, 10, 0, tzinfo=timezone.utc)
        assert pr.closed_at is not None

    def test_not_found_raises(self, client: CodeHostClient, mock_client: MagicMock) -> None:
        mock_client.get.return_value = _mock_response({"message": "Not Found"}, status_code=404)

        with pytest.raises(RemoteFetchError, match="404"):
            client.get_issue("acme", "widgets", 9)


@pytest.mark.unit
class TestUnexpectedPayload:
    """A successful status with an unusable body is still a fetch error."""

    def test_html_body(self) -> None:
        host = CodeHostClient(token="test-token")
        host._client = httpx.Client(
            base_url=host.base_url,
            transport=httpx.MockTransport(
                lambda request: httpx.Response(200, text="<html>proxy login</html>")
            ),
        )

        with pytest.raises(RemoteFetchError) as exc_info:
            host.list_pull_requests("acme", "widgets")

        assert exc_info.value.operation == "list_pull_requests"
        assert exc_info.value.status_code == 200
        host.close()

    def test_missing_key(self, client: CodeHostClient, mock_client: MagicMock) -> None:
        payload = _pr_payload(9)
        del payload["created_at"]
        mock_client.get.return_value = _mock_response(payload)

        with pytest.raises(RemoteFetchError, match="get_pull_request"):
            client.get_pull_request("acme", "widgets", 9)

    def test_object_instead_of_list(
        self, client: CodeHostClient, mock_client: MagicMock
    ) -> None:
        mock_client.get.return_value = _mock_response({"message": "rate limited"})

        with pytest.raises(RemoteFetchError):
            client.list_issues("acme", "widgets")
