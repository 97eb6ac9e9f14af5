"""Tests for the renderer module."""

from __future__ import annotations

from eco_stats.aggregator import calculate_aggregate_stats
from eco_stats.models import CrawlResult, RepoOutcome, RepositoryMetric, RunReport, Snapshot
from eco_stats.renderer import render_summary


def _make_report(**kwargs) -> RunReport:
    repos = [
        RepositoryMetric(repository="org/a", name="a", language="Python", stars=1200),
        RepositoryMetric(repository="org/b", name="b", language="Go", stars=30),
    ]
    crawl = CrawlResult(topic="json-schema", attempted=2, repositories=repos)
    defaults = dict(
        crawl=crawl,
        snapshot=Snapshot(
            topic="json-schema",
            aggregate_stats=calculate_aggregate_stats(repos),
            repositories=repos,
        ),
        snapshot_path="data/2026-01-01.json",
        history_path="data/history.json",
    )
    defaults.update(kwargs)
    return RunReport(**defaults)


def test_render_summary_no_error(capsys):
    render_summary(_make_report())
    captured = capsys.readouterr()
    assert "json-schema" in captured.out
    assert "1,230" in captured.out
    assert "Python" in captured.out
    assert "data/2026-01-01.json" in captured.out
    assert "history.json" in captured.out


def test_render_summary_reports_skipped(capsys):
    report = _make_report()
    report.crawl.attempted = 3
    report.crawl.skipped.append(RepoOutcome("org/broken", skip_reason="404"))
    render_summary(report)
    captured = capsys.readouterr()
    assert "Skipped 1" in captured.out
    assert "org/broken" in captured.out


def test_render_summary_empty_run(capsys):
    report = _make_report(
        crawl=CrawlResult(topic="empty"),
        snapshot=Snapshot(topic="empty"),
        history_path=None,
    )
    render_summary(report)
    captured = capsys.readouterr()
    assert "Language Distribution" not in captured.out
    assert "Saved history" not in captured.out


def test_render_summary_staged_files(capsys):
    render_summary(_make_report(staged_files=["dist/a.json", "dist/b.json"]))
    assert "Staged 2" in capsys.readouterr().out
