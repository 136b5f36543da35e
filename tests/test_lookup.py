import asyncio

import pytest

from issue_relay.errors import CacheError, GitHubAPIError
from issue_relay.lookup import IssueLookup, describe_failure, parse_issue_number, split_repository


class FakeCache:
    def __init__(self, cached=None, fail_set=False):
        self.cached = cached
        self.fail_set = fail_set
        self.stored = []

    async def get_issue(self, owner, repo, number):
        return self.cached

    async def set_issue(self, owner, repo, number, issue, ttl=None):
        if self.fail_set:
            raise CacheError("disk full", key=f"issue:{owner}:{repo}:{number}", operation="set")
        self.stored.append((owner, repo, number, issue))


class FakeGitHub:
    def __init__(self, issue=None, error=None):
        self.issue = issue
        self.error = error
        self.calls = []

    async def get_issue(self, owner, repo, number):
        self.calls.append((owner, repo, number))
        if self.error:
            raise self.error
        return self.issue


def test_cached_issue_skips_github(make_issue):
    issue = make_issue(1)
    github = FakeGitHub()
    result = asyncio.run(IssueLookup(FakeCache(cached=issue), github).get("octo", "repo", 1))

    assert result is issue
    assert github.calls == []


def test_miss_fetches_and_caches(make_issue):
    issue = make_issue(2)
    cache = FakeCache()
    github = FakeGitHub(issue=issue)

    result = asyncio.run(IssueLookup(cache, github).get("octo", "repo", 2))

    assert result is issue
    assert github.calls == [("octo", "repo", 2)]
    assert cache.stored == [("octo", "repo", 2, issue)]


def test_cache_write_failure_still_returns_issue(make_issue):
    issue = make_issue(3)
    lookup = IssueLookup(FakeCache(fail_set=True), FakeGitHub(issue=issue))

    assert asyncio.run(lookup.get("octo", "repo", 3)) is issue


def test_github_error_propagates():
    lookup = IssueLookup(FakeCache(), FakeGitHub(error=GitHubAPIError("nope", 404)))

    with pytest.raises(GitHubAPIError):
        asyncio.run(lookup.get("octo", "repo", 4))


@pytest.mark.parametrize(
    "status, fragment",
    [(404, "not found"), (403, "rate limit"), (401, "authentication"), (500, "Could not fetch issue #9")],
)
def test_describe_failure(status, fragment):
    assert fragment in describe_failure(GitHubAPIError("x", status), 9)


@pytest.mark.parametrize("raw, expected", [("#123", 123), (" 45 ", 45), ("0", None), ("abc", None), ("#", None)])
def test_parse_issue_number(raw, expected):
    assert parse_issue_number(raw) == expected


def test_split_repository():
    assert split_repository("microsoft/vscode") == ("microsoft", "vscode")
    for bad in ("vscode", "/vscode", "microsoft/", "a/b/c"):
        with pytest.raises(ValueError):
            split_repository(bad)
