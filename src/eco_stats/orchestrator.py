"""Orchestrator: wires together client, collector, aggregator and storage."""

from __future__ import annotations

import logging
from pathlib import Path

from rich.progress import Progress, SpinnerColumn, TextColumn

from .aggregator import DEFAULT_TOP_N, calculate_aggregate_stats, get_top_per_language
from .collector import DEFAULT_COURTESY_DELAY, EcosystemCollector, fixed_delay, no_delay
from .github.client import GitHubClient
from .models import RepoOutcome, RunReport, Snapshot
from .renderer import render_summary
from .storage import SnapshotStorage

logger = logging.getLogger(__name__)


async def collect_snapshot(
    collector: EcosystemCollector,
    storage: SnapshotStorage,
    topic: str,
    max_results: int | None = None,
    top_n: int = DEFAULT_TOP_N,
    stage_dir: str | Path | None = None,
) -> RunReport:
    """Crawl the topic, aggregate, save today's snapshot and rebuild history."""
    with Progress(
        SpinnerColumn(),
        TextColumn("[progress.description]{task.description}"),
        transient=True,
    ) as progress:
        task = progress.add_task(f"Collecting repositories for topic:{topic}...", total=None)

        def advance(outcome: RepoOutcome) -> None:
            progress.update(task, description=f"Collected {outcome.repository}")
            progress.advance(task)

        crawl = await collector.collect_topic_repositories(
            topic, max_results, on_outcome=advance
        )

    logger.info("Calculating aggregate statistics...")
    snapshot = Snapshot(
        topic=topic,
        aggregate_stats=calculate_aggregate_stats(crawl.repositories),
        repositories=crawl.repositories,
        top_per_language=get_top_per_language(crawl.repositories, top_n),
    )

    snapshot_path = storage.save_snapshot(snapshot)
    history_path = storage.save_historical_summary()

    staged: list[Path] = []
    if stage_dir is not None:
        staged = storage.stage_data_files(stage_dir)

    return RunReport(
        crawl=crawl,
        snapshot=snapshot,
        snapshot_path=str(snapshot_path),
        history_path=str(history_path) if history_path is not None else None,
        staged_files=[str(p) for p in staged],
    )


async def run(
    token: str,
    topic: str,
    max_results: int | None = None,
    data_dir: str | Path = "data",
    top_n: int = DEFAULT_TOP_N,
    delay: float = DEFAULT_COURTESY_DELAY,
    stage_dir: str | None = None,
    api_url: str | None = None,
    verify_ssl: bool = True,
) -> RunReport:
    """Main pipeline: collect, aggregate, persist, render."""
    storage = SnapshotStorage(data_dir)
    courtesy_delay = fixed_delay(delay) if delay > 0 else no_delay

    async with GitHubClient(token=token, base_url=api_url, verify_ssl=verify_ssl) as client:
        collector = EcosystemCollector(client, courtesy_delay=courtesy_delay)
        report = await collect_snapshot(
            collector,
            storage,
            topic,
            max_results=max_results,
            top_n=top_n,
            stage_dir=stage_dir,
        )

    render_summary(report)
    return report
