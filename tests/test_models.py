import pytest

from issue_relay import models
from issue_relay.models import CachedIssue, CacheStats, IssueLabel


def _payload(**overrides):
    payload = {
        "id": 1,
        "number": 123,
        "title": "Editor freezes",
        "body": "",
        "state": "open",
        "user": None,
        "labels": ["bug", {"name": "ui", "color": None}],
        "comments": None,
        "html_url": "https://github.com/octo/repo/issues/123",
        "created_at": "2024-01-01T00:00:00Z",
        "updated_at": "2024-01-01T00:00:00Z",
    }
    payload.update(overrides)
    return payload


def test_from_github_fills_defaults():
    issue = CachedIssue.from_github(_payload(), "octo", "repo")

    assert issue.full_name == "octo/repo"
    assert issue.body is None
    assert issue.author.login == "unknown"
    assert issue.comments == 0
    assert issue.labels == (IssueLabel("bug", "000000"), IssueLabel("ui", "000000"))


def test_row_round_trip_preserves_record(make_issue):
    issue = make_issue(7, draft=True, body=None)
    assert CachedIssue.from_row(issue.to_row()) == issue


def test_to_row_encodes_draft_and_labels(make_issue):
    row = make_issue(1).to_row()
    assert row["draft"] == 0
    assert row["labels"] == '[{"name": "bug", "color": "d73a4a"}, {"name": "p1", "color": "ffffff"}]'


@pytest.mark.parametrize(
    "overrides",
    [
        {"number": 0},
        {"number": True},
        {"state": "merged"},
        {"comments": -1},
        {"created_at": "2024-02-01T00:00:00Z", "updated_at": "2024-01-01T00:00:00Z"},
    ],
)
def test_invalid_records_rejected(make_issue, overrides):
    with pytest.raises(ValueError):
        make_issue(**overrides)


def test_labels_coerced_to_tuple(make_issue):
    issue = make_issue(labels=[IssueLabel("a")])
    assert issue.labels == (IssueLabel("a"),)


def test_cache_stats_to_dict():
    stats = CacheStats(hits=3, misses=1, size=2)
    assert stats.to_dict() == {
        "hits": 3,
        "misses": 1,
        "sets": 0,
        "deletes": 0,
        "memory_hits": 0,
        "store_hits": 0,
        "size": 2,
    }


def test_module_docstring_describes_row_schema():
    assert "cache table" in models.__doc__
