import asyncio

import aiohttp
import pytest

from issue_relay.clients.github import GitHubClient
from issue_relay.errors import GitHubAPIError


class FakeResponse:
    def __init__(self, status, payload):
        self.status = status
        self._payload = payload

    async def json(self):
        return self._payload

    async def __aenter__(self):
        return self

    async def __aexit__(self, *exc):
        return False


class FakeSession:
    closed = False

    def __init__(self, *responses, error=None):
        self._responses = list(responses)
        self._error = error
        self.requests = []

    def get(self, url, params=None, headers=None):
        self.requests.append((url, params, headers))
        if self._error:
            raise self._error
        return self._responses.pop(0)


ISSUE_PAYLOAD = {
    "id": 9,
    "number": 42,
    "title": "Crash",
    "body": "Stack trace",
    "state": "open",
    "user": {"login": "octocat", "avatar_url": "https://avatars.example/octocat.png"},
    "labels": [{"name": "bug", "color": "d73a4a"}],
    "comments": 2,
    "html_url": "https://github.com/octo/repo/issues/42",
    "created_at": "2024-01-01T00:00:00Z",
    "updated_at": "2024-01-03T00:00:00Z",
}


def _client(session):
    return GitHubClient("secret", api_url="https://api.example/", session=session)


def test_get_issue_builds_record_and_sends_auth():
    session = FakeSession(FakeResponse(200, ISSUE_PAYLOAD))
    issue = asyncio.run(_client(session).get_issue("octo", "repo", 42))

    assert issue.title == "Crash"
    assert issue.full_name == "octo/repo"
    url, _, headers = session.requests[0]
    assert url == "https://api.example/repos/octo/repo/issues/42"
    assert headers["Authorization"] == "Bearer secret"
    assert headers["Accept"] == "application/vnd.github+json"


@pytest.mark.parametrize("status, fragment", [(404, "Issue #42 not found in octo/repo"), (403, "rate limit"), (401, "authentication"), (502, "HTTP 502")])
def test_error_statuses(status, fragment):
    session = FakeSession(FakeResponse(status, {"message": "nope"}))
    with pytest.raises(GitHubAPIError) as excinfo:
        asyncio.run(_client(session).get_issue("octo", "repo", 42))

    assert excinfo.value.status == status
    assert fragment in str(excinfo.value)


def test_transport_failure_maps_to_503():
    session = FakeSession(error=aiohttp.ClientConnectionError("reset"))
    with pytest.raises(GitHubAPIError) as excinfo:
        asyncio.run(_client(session).get_issue("octo", "repo", 1))

    assert excinfo.value.status == 503


def test_timeout_maps_to_503():
    session = FakeSession(error=asyncio.TimeoutError())
    with pytest.raises(GitHubAPIError) as excinfo:
        asyncio.run(_client(session).get_issue("octo", "repo", 1))

    assert excinfo.value.status == 503
    assert isinstance(excinfo.value.__cause__, asyncio.TimeoutError)


def test_search_issues_skips_pull_requests():
    pr = dict(ISSUE_PAYLOAD, number=43, pull_request={"url": "x"})
    session = FakeSession(FakeResponse(200, {"items": [ISSUE_PAYLOAD, pr]}))

    issues = asyncio.run(_client(session).search_issues("octo", "repo", "crash"))

    assert [i.number for i in issues] == [42]
    _, params, _ = session.requests[0]
    assert params["q"] == "repo:octo/repo crash state:open"


def test_validate_repository():
    assert asyncio.run(_client(FakeSession(FakeResponse(200, {}))).validate_repository("octo", "repo"))
    assert not asyncio.run(_client(FakeSession(FakeResponse(404, {}))).validate_repository("octo", "gone"))
    with pytest.raises(GitHubAPIError):
        asyncio.run(_client(FakeSession(FakeResponse(401, {}))).validate_repository("octo", "repo"))


def test_get_rate_limit():
    payload = {"resources": {"core": {"limit": 5000, "remaining": 4990, "reset": 1700000000}}}
    info = asyncio.run(_client(FakeSession(FakeResponse(200, payload))).get_rate_limit())

    assert (info.limit, info.remaining, info.reset_at) == (5000, 4990, 1700000000)


def test_close_leaves_injected_session_open():
    session = FakeSession()
    client = _client(session)
    asyncio.run(client.close())
    assert session.closed is False
