import os, sys
import warnings
from pathlib import Path

import pytest

# Add src/ to sys.path so tests run without an editable install
sys.path.insert(0, str(Path(__file__).resolve().parent.parent / "src"))

# Keep configuration deterministic regardless of the developer's .env
os.environ.setdefault("DISCORD_BOT_TOKEN", "test-token")
os.environ.setdefault("GITHUB_TOKEN", "test-github")
os.environ.setdefault("DEFAULT_REPOSITORY", "octo/repo")
os.environ.setdefault("CHANNEL_IDS", "123")
os.environ.setdefault("ISSUE_RELAY_CONFIG", str(Path(__file__).resolve().parent / "missing.toml"))

# Silence deprecation warnings surfaced from third-party dependencies during tests
warnings.filterwarnings(
    "ignore", category=DeprecationWarning, module=r"^discord\\.player$"
)
warnings.filterwarnings("ignore", "'audioop' is deprecated", DeprecationWarning)


def pytest_configure(config):
    warnings.filterwarnings(
        "ignore", category=DeprecationWarning, module=r"^discord\\.player$"
    )
    warnings.filterwarnings("ignore", "'audioop' is deprecated", DeprecationWarning)


class FakeClock:
    """Manually advanced clock usable for both wall and monotonic time."""

    def __init__(self, start: float = 1_700_000_000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def make_issue():
    from issue_relay.models import CachedIssue, IssueAuthor, IssueLabel

    def _make(number=42, *, owner="octo", repo="repo", **overrides):
        fields = dict(
            owner=owner,
            repo=repo,
            number=number,
            id=1000 + number,
            title="Bug",
            body="Something broke",
            state="open",
            draft=False,
            author=IssueAuthor("octocat", "https://avatars.example/octocat.png"),
            labels=(IssueLabel("bug", "d73a4a"), IssueLabel("p1", "ffffff")),
            comments=3,
            html_url=f"https://github.com/{owner}/{repo}/issues/{number}",
            created_at="2024-01-01T10:00:00Z",
            updated_at="2024-01-02T12:30:00Z",
        )
        fields.update(overrides)
        return CachedIssue(**fields)

    return _make
