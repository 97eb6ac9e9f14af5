"""Rich-based terminal summary of a collection run."""

from __future__ import annotations

from rich.console import Console
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from .models import RunReport

TOP_LANGUAGES = 10


def _format_number(n: int) -> str:
    return f"{n:,}"


def _make_bar(count: int, max_count: int, width: int = 20) -> str:
    if max_count == 0:
        return ""
    filled = round(count / max_count * width)
    return "\u2588" * filled + "\u2591" * (width - filled)


def render_summary(report: RunReport, console: Console | None = None) -> None:
    """Print the collection summary for one run."""
    console = console or Console()
    crawl = report.crawl
    stats = report.snapshot.aggregate_stats

    console.print(Panel(
        Text(f"eco-stats: topic:{report.snapshot.topic}", justify="center"),
        style="bold cyan",
    ))
    console.print()

    skipped = crawl.attempted - crawl.succeeded
    if skipped:
        names = ", ".join(o.repository for o in crawl.skipped)
        console.print(
            f"[bold yellow]Warning:[/bold yellow] Skipped {skipped} "
            f"repo(s) that could not be collected: {names}"
        )
        console.print()

    console.print("[bold]Collection Summary[/bold]")
    summary = Table(show_header=False, box=None, padding=(0, 2))
    summary.add_column("label", style="dim")
    summary.add_column("value", style="bold")
    summary.add_row("Attempted", _format_number(crawl.attempted))
    summary.add_row("Collected", _format_number(crawl.succeeded))
    summary.add_row("Total Stars", _format_number(stats.total_stars))
    summary.add_row("Total Forks", _format_number(stats.total_forks))
    summary.add_row("Total Contributors", _format_number(stats.total_contributors))
    summary.add_row("Open Issues", _format_number(stats.total_open_issues))
    summary.add_row("Open PRs", _format_number(stats.total_open_prs))
    summary.add_row("With Releases", _format_number(stats.repositories_with_releases))
    summary.add_row("Archived", _format_number(stats.archived_repositories))
    console.print(summary)
    console.print()

    if stats.language_distribution:
        console.print("[bold]Language Distribution[/bold]")
        lang_table = Table(show_header=True, header_style="bold")
        lang_table.add_column("Language")
        lang_table.add_column("Bar")
        lang_table.add_column("Repos", justify="right")

        ranked = sorted(
            stats.language_distribution.items(), key=lambda x: x[1], reverse=True
        )[:TOP_LANGUAGES]
        max_count = ranked[0][1]
        for lang, count in ranked:
            lang_table.add_row(lang, _make_bar(count, max_count), _format_number(count))
        console.print(lang_table)
        console.print()

    console.print(f"Saved snapshot to {report.snapshot_path}")
    if report.history_path:
        console.print(f"Saved history to {report.history_path}")
    if report.staged_files:
        console.print(f"Staged {len(report.staged_files)} data file(s) for the dashboard")
