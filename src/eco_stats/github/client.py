"""GitHub REST API client."""

from __future__ import annotations

import logging
from collections.abc import AsyncIterator
from dataclasses import dataclass, field
from typing import Any

import httpx

from .pagination import next_page_url
from .rate_limit import RateLimitMonitor

logger = logging.getLogger(__name__)

BASE_URL = "https://api.github.com"
SEARCH_PAGE_SIZE = 100


@dataclass
class Page:
    """One page of a listing together with its ``Link`` header."""

    items: list[Any] = field(default_factory=list)
    link: str | None = None


class GitHubClient:
    """Async GitHub REST API client.

    Requests are issued one at a time; callers await each call before
    making the next.
    """

    def __init__(
        self,
        token: str,
        base_url: str | None = None,
        verify_ssl: bool = True,
        timeout: float = 30.0,
    ) -> None:
        headers = {
            "Accept": "application/vnd.github+json",
            "Authorization": f"Bearer {token}",
            "X-GitHub-Api-Version": "2022-11-28",
        }
        self._client = httpx.AsyncClient(
            base_url=base_url or BASE_URL,
            headers=headers,
            timeout=timeout,
            verify=verify_ssl,
        )
        self._rate_limit = RateLimitMonitor()

    async def close(self) -> None:
        await self._client.aclose()

    async def __aenter__(self) -> GitHubClient:
        return self

    async def __aexit__(self, *exc: object) -> None:
        await self.close()

    async def _get(
        self, url: str, params: dict[str, Any] | None = None
    ) -> httpx.Response:
        await self._rate_limit.wait_if_needed()
        logger.debug("GET %s %s", url, params or "")
        response = await self._client.get(url, params=params)
        self._rate_limit.update(response)
        response.raise_for_status()
        return response

    async def _first_page(
        self, url: str, params: dict[str, Any] | None = None
    ) -> Page:
        """Fetch a single page with one item per page."""
        params = dict(params or {})
        params["per_page"] = 1
        response = await self._get(url, params)
        data = response.json()
        items = data if isinstance(data, list) else []
        return Page(items=items, link=response.headers.get("Link"))

    async def get_repository(self, owner: str, repo: str) -> dict[str, Any]:
        response = await self._get(f"/repos/{owner}/{repo}")
        return response.json()

    async def list_contributors_page(self, owner: str, repo: str) -> Page:
        """First contributor, anonymous contributors included."""
        return await self._first_page(
            f"/repos/{owner}/{repo}/contributors", params={"anon": "true"}
        )

    async def list_issues_page(
        self, owner: str, repo: str, state: str = "open"
    ) -> Page:
        """First issue. GitHub's issues listing also includes pull requests."""
        return await self._first_page(
            f"/repos/{owner}/{repo}/issues", params={"state": state}
        )

    async def list_pull_requests_page(
        self, owner: str, repo: str, state: str = "open"
    ) -> Page:
        return await self._first_page(
            f"/repos/{owner}/{repo}/pulls", params={"state": state}
        )

    async def list_releases_page(self, owner: str, repo: str) -> Page:
        """Most recent release only."""
        return await self._first_page(f"/repos/{owner}/{repo}/releases")

    async def search_repositories(
        self,
        query: str,
        sort: str = "stars",
        order: str = "desc",
        per_page: int = SEARCH_PAGE_SIZE,
    ) -> AsyncIterator[list[dict[str, Any]]]:
        """Yield search hits page by page, following ``rel="next"`` links.

        The next page is only requested once the caller asks for it.
        """
        next_url: str | None = "/search/repositories"
        params: dict[str, Any] = {
            "q": query,
            "sort": sort,
            "order": order,
            "per_page": per_page,
        }
        page_number = 0

        while next_url is not None:
            response = await self._get(next_url, params)
            page_number += 1
            data = response.json()
            items = data.get("items", []) if isinstance(data, dict) else []
            if page_number == 1 and isinstance(data, dict):
                logger.info(
                    "Search %r matched %s repositories",
                    query,
                    data.get("total_count", "?"),
                )
            yield items

            next_url = next_page_url(response.headers.get("Link"))
            params = {}  # URL already contains params
