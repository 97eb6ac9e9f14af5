"""Data aggregation: language groupings and ecosystem-wide totals."""

from __future__ import annotations

from collections import defaultdict
from collections.abc import Iterable

from .models import AggregateStats, RepositoryMetric

UNKNOWN_LANGUAGE = "Unknown"
DEFAULT_TOP_N = 5


def _language(repo: RepositoryMetric) -> str:
    return repo.language or UNKNOWN_LANGUAGE


def _stars(repo: RepositoryMetric) -> int:
    return repo.stars or 0


def group_by_language(
    repositories: Iterable[RepositoryMetric],
) -> dict[str, list[RepositoryMetric]]:
    """Partition repositories by primary language, most-starred first.

    The sort is stable, so repositories with equal stars keep their input
    order.
    """
    by_language: dict[str, list[RepositoryMetric]] = defaultdict(list)
    for repo in repositories:
        by_language[_language(repo)].append(repo)

    return {
        lang: sorted(repos, key=_stars, reverse=True)
        for lang, repos in by_language.items()
    }


def get_top_per_language(
    repositories: Iterable[RepositoryMetric], top_n: int = DEFAULT_TOP_N
) -> dict[str, list[RepositoryMetric]]:
    """Return at most ``top_n`` repositories for each language."""
    if top_n < 0:
        raise ValueError(f"top_n must be non-negative, got {top_n}")
    return {
        lang: repos[:top_n] for lang, repos in group_by_language(repositories).items()
    }


def calculate_aggregate_stats(repositories: Iterable[RepositoryMetric]) -> AggregateStats:
    """Sum per-repository metrics in one pass. Missing values count as 0."""
    stats = AggregateStats()
    distribution: dict[str, int] = defaultdict(int)

    for repo in repositories:
        stats.total_repositories += 1
        stats.total_stars += repo.stars or 0
        stats.total_forks += repo.forks or 0
        stats.total_contributors += repo.contributors or 0
        stats.total_open_issues += repo.open_issues or 0
        stats.total_open_prs += repo.open_prs or 0
        if repo.has_releases:
            stats.repositories_with_releases += 1
        if repo.archived:
            stats.archived_repositories += 1
        distribution[_language(repo)] += 1

    stats.language_distribution = dict(distribution)
    return stats
