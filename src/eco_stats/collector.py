"""Collect repository metrics for every repository tagged with a topic."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import AsyncIterator, Awaitable, Callable
from typing import Any

from .github.client import GitHubClient
from .github.pagination import last_page_or_item_count
from .models import CrawlResult, ReleaseInfo, RepoOutcome, RepositoryMetric

logger = logging.getLogger(__name__)

DEFAULT_COURTESY_DELAY = 0.1  # seconds

CourtesyDelay = Callable[[], Awaitable[None]]


def fixed_delay(seconds: float = DEFAULT_COURTESY_DELAY) -> CourtesyDelay:
    """Pause for ``seconds`` after each processed repository."""

    async def pause() -> None:
        await asyncio.sleep(seconds)

    return pause


async def no_delay() -> None:
    return None


def _normalize_limit(max_results: int | None) -> int | None:
    # -1 (or any negative) is the legacy "unbounded" sentinel
    if max_results is None or max_results < 0:
        return None
    return max_results


def _to_metric(owner: str, repo: str, data: dict[str, Any]) -> RepositoryMetric:
    license_info = data.get("license") or {}
    return RepositoryMetric(
        repository=f"{owner}/{repo}",
        name=data.get("name") or repo,
        full_name=data.get("full_name"),
        description=data.get("description"),
        language=data.get("language"),
        topics=list(data.get("topics") or []),
        stars=data.get("stargazers_count") or 0,
        forks=data.get("forks_count") or 0,
        watchers=data.get("watchers_count") or 0,
        created_at=data.get("created_at"),
        updated_at=data.get("updated_at"),
        pushed_at=data.get("pushed_at"),
        default_branch=data.get("default_branch"),
        license=license_info.get("spdx_id"),
        archived=bool(data.get("archived")),
        disabled=bool(data.get("disabled")),
        has_wiki=bool(data.get("has_wiki")),
        has_pages=bool(data.get("has_pages")),
        size=data.get("size") or 0,
    )


class EcosystemCollector:
    """Fetches per-repository metrics and crawls a topic search."""

    def __init__(
        self,
        client: GitHubClient,
        courtesy_delay: CourtesyDelay | None = None,
    ) -> None:
        self._client = client
        self._courtesy_delay = courtesy_delay or fixed_delay()

    async def fetch_repository_metrics(self, owner: str, repo: str) -> RepositoryMetric:
        """Repository metadata plus contributor, issue and PR counts.

        Errors from the repository call itself propagate; the count
        sub-fetches fall back to 0.
        """
        logger.info("Fetching metrics for %s/%s", owner, repo)
        data = await self._client.get_repository(owner, repo)
        metric = _to_metric(owner, repo, data)
        metric.contributors = await self.fetch_contributors_count(owner, repo)
        metric.open_issues, metric.open_prs = await self.fetch_issue_and_pr_counts(
            owner, repo
        )
        return metric

    async def fetch_contributors_count(self, owner: str, repo: str) -> int:
        try:
            page = await self._client.list_contributors_page(owner, repo)
            return last_page_or_item_count(page.link, len(page.items))
        except Exception as exc:
            logger.warning("Could not fetch contributors for %s/%s: %s", owner, repo, exc)
            return 0

    async def fetch_issue_and_pr_counts(self, owner: str, repo: str) -> tuple[int, int]:
        try:
            issues = await self._client.list_issues_page(owner, repo, state="open")
            prs = await self._client.list_pull_requests_page(owner, repo, state="open")
            return (
                last_page_or_item_count(issues.link, len(issues.items)),
                last_page_or_item_count(prs.link, len(prs.items)),
            )
        except Exception as exc:
            logger.warning(
                "Could not fetch issue/PR counts for %s/%s: %s", owner, repo, exc
            )
            return 0, 0

    async def fetch_release_info(self, owner: str, repo: str) -> ReleaseInfo:
        """Latest release. No release and a failed lookup both give the default."""
        try:
            page = await self._client.list_releases_page(owner, repo)
            if not page.items:
                return ReleaseInfo()
            latest = page.items[0]
            return ReleaseInfo(
                has_releases=True,
                latest_release=latest.get("tag_name"),
                latest_release_date=latest.get("published_at"),
            )
        except Exception as exc:
            logger.warning("Could not fetch releases for %s/%s: %s", owner, repo, exc)
            return ReleaseInfo()

    async def collect_repository(self, owner: str, repo: str) -> RepoOutcome:
        full_name = f"{owner}/{repo}"
        try:
            metric = await self.fetch_repository_metrics(owner, repo)
            release = await self.fetch_release_info(owner, repo)
        except Exception as exc:
            logger.error("Failed to process %s: %s", full_name, exc)
            return RepoOutcome(repository=full_name, skip_reason=str(exc) or type(exc).__name__)
        return RepoOutcome(repository=full_name, metric=metric.with_release(release))

    async def iter_topic_repositories(
        self, topic: str, max_results: int | None = None
    ) -> AsyncIterator[RepoOutcome]:
        """Yield one outcome per search hit, in search order.

        Stops once ``max_results`` repositories have been collected
        successfully; ``None`` means every page is crawled.
        """
        limit = _normalize_limit(max_results)
        collected = 0
        logger.info("Collecting repositories with topic: %s", topic)

        async for hits in self._client.search_repositories(f"topic:{topic}"):
            for hit in hits:
                if limit is not None and collected >= limit:
                    logger.info("Reached maximum repository limit: %d", limit)
                    return
                owner = (hit.get("owner") or {}).get("login", "")
                outcome = await self.collect_repository(owner, hit.get("name", ""))
                yield outcome
                if not outcome.ok:
                    continue
                collected += 1
                logger.info("Processed %d repositories", collected)
                await self._courtesy_delay()
            if limit is not None and collected >= limit:
                logger.info("Reached maximum repository limit: %d", limit)
                return

    async def collect_topic_repositories(
        self,
        topic: str,
        max_results: int | None = None,
        on_outcome: Callable[[RepoOutcome], None] | None = None,
    ) -> CrawlResult:
        result = CrawlResult(topic=topic)
        async for outcome in self.iter_topic_repositories(topic, max_results):
            result.add(outcome)
            if on_outcome is not None:
                on_outcome(outcome)
        logger.info(
            "Collected %d of %d attempted repositories", result.succeeded, result.attempted
        )
        return result
