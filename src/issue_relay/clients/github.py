"""
GitHub REST client
==================
1. Input : (owner, repo, number) or a search query.
2. ``GET`` against the REST API with token auth over a shared
   :class:`aiohttp.ClientSession`.
3. Return :class:`~issue_relay.models.CachedIssue` /
   :class:`~issue_relay.models.RateLimitInfo` objects.

Non-2xx responses raise :class:`~issue_relay.errors.GitHubAPIError` carrying
the HTTP status. Transport failures and timeouts are reported with status
``503``.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Dict, List, Optional

import aiohttp

from issue_relay.errors import GitHubAPIError
from issue_relay.models import CachedIssue, RateLimitInfo

logger = logging.getLogger(__name__)

_ACCEPT = "application/vnd.github+json"


class GitHubClient:
    """Thin async wrapper over the endpoints the bot needs."""

    def __init__(
        self,
        token: str | None,
        *,
        api_url: str = "https://api.github.com",
        user_agent: str = "issue-relay",
        timeout: float = 10.0,
        session: aiohttp.ClientSession | None = None,
    ) -> None:
        self.api_url = api_url.rstrip("/")
        self._headers = {"Accept": _ACCEPT, "User-Agent": user_agent}
        if token:
            self._headers["Authorization"] = f"Bearer {token}"
        self._timeout = aiohttp.ClientTimeout(total=timeout)
        self._session = session
        self._owns_session = session is None

    def _get_session(self) -> aiohttp.ClientSession:
        if self._session is None or self._session.closed:
            self._session = aiohttp.ClientSession(headers=self._headers, timeout=self._timeout)
            self._owns_session = True
        return self._session

    async def close(self) -> None:
        if self._owns_session and self._session is not None and not self._session.closed:
            await self._session.close()
        self._session = None

    async def _get_json(
        self, path: str, *, params: Optional[Dict[str, Any]] = None, context: Dict[str, Any]
    ) -> Any:
        url = f"{self.api_url}{path}"
        session = self._get_session()
        try:
            async with session.get(url, params=params, headers=self._headers) as resp:
                if resp.status >= 400:
                    raise _status_error(resp.status, context)
                return await resp.json()
        except (aiohttp.ClientError, asyncio.TimeoutError) as exc:
            raise GitHubAPIError(
                f"GitHub request failed: {exc!r}", 503, context
            ) from exc

    # ---------- public contract -------------------------------------- #

    async def get_issue(self, owner: str, repo: str, number: int) -> CachedIssue:
        """Fetch ``owner/repo#number``."""

        logger.info("Fetching issue: %s/%s#%s", owner, repo, number)
        ctx = {"owner": owner, "repo": repo, "issue_number": number}
        try:
            data = await self._get_json(f"/repos/{owner}/{repo}/issues/{number}", context=ctx)
        except GitHubAPIError as exc:
            logger.error("Failed to fetch issue %s/%s#%s: %s", owner, repo, number, exc)
            raise

        issue = CachedIssue.from_github(data, owner, repo)
        logger.info("Successfully fetched issue: %s/%s#%s", owner, repo, number)
        return issue

    async def search_issues(
        self, owner: str, repo: str, query: str, state: str = "open", limit: int = 10
    ) -> List[CachedIssue]:
        """Search issues (pull requests excluded), most recently updated first."""

        logger.info('Searching issues in %s/%s: "%s"', owner, repo, query)
        params = {
            "q": f"repo:{owner}/{repo} {query} state:{state}",
            "sort": "updated",
            "order": "desc",
            "per_page": limit,
        }
        ctx = {"owner": owner, "repo": repo, "query": query, "state": state}
        data = await self._get_json("/search/issues", params=params, context=ctx)

        issues = [
            CachedIssue.from_github(item, owner, repo)
            for item in data.get("items", [])
            if "pull_request" not in item
        ]
        logger.info('Found %d issues for query: "%s"', len(issues), query)
        return issues

    async def validate_repository(self, owner: str, repo: str) -> bool:
        """Return ``True`` if the repository exists and is visible to the token."""

        try:
            await self._get_json(f"/repos/{owner}/{repo}", context={"owner": owner, "repo": repo})
        except GitHubAPIError as exc:
            if exc.status == 404:
                logger.warning("Repository %s/%s not found", owner, repo)
                return False
            raise
        return True

    async def get_rate_limit(self) -> RateLimitInfo:
        data = await self._get_json("/rate_limit", context={})
        core = data.get("resources", {}).get("core") or data.get("rate", {})
        info = RateLimitInfo(
            limit=int(core.get("limit", 0)),
            remaining=int(core.get("remaining", 0)),
            reset_at=int(core.get("reset", 0)),
        )
        logger.debug("Rate limit info: %d/%d", info.remaining, info.limit)
        return info


def _status_error(status: int, context: Dict[str, Any]) -> GitHubAPIError:
    if status == 404:
        number = context.get("issue_number")
        if number is not None:
            msg = f"Issue #{number} not found in {context['owner']}/{context['repo']}"
        else:
            msg = "GitHub resource not found"
    elif status == 403:
        msg = "GitHub API rate limit exceeded or access forbidden"
    elif status == 401:
        msg = "GitHub API authentication failed"
    else:
        msg = f"GitHub API returned HTTP {status}"
    return GitHubAPIError(msg, status, context)


__all__ = ["GitHubClient"]
