import os

from .loader import section


class GitHub:
    def __init__(self, config: dict | None = None) -> None:
        gh_cfg = section(config, "github")
        self.API_URL: str = str(gh_cfg.get("api_url", os.getenv("GITHUB_API_URL", "https://api.github.com")))
        self.USER_AGENT: str = str(
            gh_cfg.get("user_agent", os.getenv("GITHUB_USER_AGENT", "issue-relay/0.1.0"))
        )
        self.TIMEOUT: float = float(gh_cfg.get("timeout", os.getenv("GITHUB_TIMEOUT", "10")))
