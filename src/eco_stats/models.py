"""Data models for eco-stats.

Every record serializes to the camelCase JSON layout used by the snapshot
and history files. Decoding is lenient about missing keys so snapshots
written by older or newer versions still load.
"""

from __future__ import annotations

from dataclasses import dataclass, field, fields
from typing import Any


def _camel(name: str) -> str:
    head, *rest = name.split("_")
    return head + "".join(part.title() for part in rest)


def _json_key(f) -> str:
    return f.metadata.get("json", _camel(f.name))


def _as_int(value: Any) -> int:
    if value is None or isinstance(value, bool):
        return 0
    try:
        return max(int(value), 0)
    except (TypeError, ValueError):
        return 0


@dataclass
class ReleaseInfo:
    """Latest release of a repository, or the no-release default."""

    has_releases: bool = False
    latest_release: str | None = None
    latest_release_date: str | None = None


@dataclass
class RepositoryMetric:
    repository: str
    name: str
    full_name: str | None = None
    description: str | None = None
    language: str | None = None
    topics: list[str] = field(default_factory=list)
    stars: int = 0
    forks: int = 0
    watchers: int = 0
    open_issues: int = 0
    open_prs: int = field(default=0, metadata={"json": "openPRs"})
    contributors: int = 0
    created_at: str | None = None
    updated_at: str | None = None
    pushed_at: str | None = None
    default_branch: str | None = None
    license: str | None = None
    archived: bool = False
    disabled: bool = False
    has_wiki: bool = False
    has_pages: bool = False
    size: int = 0
    # Filled in from ReleaseInfo by the collector
    has_releases: bool = False
    latest_release: str | None = None
    latest_release_date: str | None = None

    def with_release(self, release: ReleaseInfo) -> RepositoryMetric:
        self.has_releases = release.has_releases
        self.latest_release = release.latest_release
        self.latest_release_date = release.latest_release_date
        return self

    def to_dict(self) -> dict[str, Any]:
        out: dict[str, Any] = {}
        for f in fields(self):
            value = getattr(self, f.name)
            out[_json_key(f)] = list(value) if f.name == "topics" else value
        return out

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> RepositoryMetric:
        kwargs: dict[str, Any] = {}
        for f in fields(cls):
            key = _json_key(f)
            if key not in data:
                continue
            value = data[key]
            if f.type == "int":
                value = _as_int(value)
            elif f.type == "bool":
                value = bool(value)
            elif f.name == "topics":
                value = list(value or [])
            kwargs[f.name] = value
        kwargs.setdefault("repository", data.get("fullName") or "")
        kwargs.setdefault("name", "")
        return cls(**kwargs)


@dataclass
class AggregateStats:
    total_repositories: int = 0
    total_stars: int = 0
    total_forks: int = 0
    total_contributors: int = 0
    total_open_issues: int = 0
    total_open_prs: int = field(default=0, metadata={"json": "totalOpenPRs"})
    language_distribution: dict[str, int] = field(default_factory=dict)
    repositories_with_releases: int = 0
    archived_repositories: int = 0

    def to_dict(self) -> dict[str, Any]:
        out: dict[str, Any] = {}
        for f in fields(self):
            value = getattr(self, f.name)
            out[_json_key(f)] = dict(value) if isinstance(value, dict) else value
        return out

    @classmethod
    def from_dict(cls, data: dict[str, Any] | None) -> AggregateStats:
        data = data or {}
        kwargs: dict[str, Any] = {}
        for f in fields(cls):
            key = _json_key(f)
            if f.name == "language_distribution":
                raw = data.get(key) or {}
                kwargs[f.name] = {str(k): _as_int(v) for k, v in raw.items()}
            else:
                kwargs[f.name] = _as_int(data.get(key))
        return cls(**kwargs)


@dataclass
class Snapshot:
    """One collection run: aggregate stats plus every repository record."""

    topic: str
    collected_at: str | None = None
    aggregate_stats: AggregateStats = field(default_factory=AggregateStats)
    repositories: list[RepositoryMetric] = field(default_factory=list)
    top_per_language: dict[str, list[RepositoryMetric]] = field(default_factory=dict)

    @property
    def total_repositories(self) -> int:
        return len(self.repositories)

    def to_dict(self) -> dict[str, Any]:
        return {
            "collectedAt": self.collected_at,
            "metadata": {
                "topic": self.topic,
                "totalRepositories": self.total_repositories,
            },
            "aggregateStats": self.aggregate_stats.to_dict(),
            "repositories": [r.to_dict() for r in self.repositories],
            "topPerLanguage": {
                lang: [r.to_dict() for r in repos]
                for lang, repos in self.top_per_language.items()
            },
        }

    @classmethod
    def from_dict(cls, data: Any) -> Snapshot:
        if not isinstance(data, dict):
            raise ValueError(
                f"Snapshot document must be a JSON object, got {type(data).__name__}"
            )
        metadata = data.get("metadata") or {}
        return cls(
            topic=metadata.get("topic", ""),
            collected_at=data.get("collectedAt"),
            aggregate_stats=AggregateStats.from_dict(data.get("aggregateStats")),
            repositories=[
                RepositoryMetric.from_dict(r) for r in data.get("repositories") or []
            ],
            top_per_language={
                lang: [RepositoryMetric.from_dict(r) for r in repos]
                for lang, repos in (data.get("topPerLanguage") or {}).items()
            },
        )


@dataclass
class TimelineEntry:
    date: str
    total_repositories: int = 0
    total_stars: int = 0
    total_forks: int = 0
    total_contributors: int = 0
    total_open_issues: int = 0
    total_open_prs: int = field(default=0, metadata={"json": "totalOpenPRs"})
    repositories_with_releases: int = 0
    archived_repositories: int = 0

    @classmethod
    def from_stats(cls, date: str, stats: Any) -> TimelineEntry:
        """Project raw aggregateStats JSON onto an entry, missing fields as 0."""
        if not isinstance(stats, dict):
            stats = {}
        kwargs = {
            f.name: _as_int(stats.get(_json_key(f)))
            for f in fields(cls)
            if f.name != "date"
        }
        return cls(date=date, **kwargs)

    def to_dict(self) -> dict[str, Any]:
        return {_json_key(f): getattr(self, f.name) for f in fields(self)}


@dataclass
class HistoricalTimeline:
    generated_at: str
    snapshot_count: int
    date_range_start: str
    date_range_end: str
    timeline: list[TimelineEntry] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "generatedAt": self.generated_at,
            "snapshotCount": self.snapshot_count,
            "dateRange": {
                "start": self.date_range_start,
                "end": self.date_range_end,
            },
            "timeline": [e.to_dict() for e in self.timeline],
        }


@dataclass
class RepoOutcome:
    """Result of collecting one search hit: a record or a skip marker."""

    repository: str
    metric: RepositoryMetric | None = None
    skip_reason: str | None = None

    @property
    def ok(self) -> bool:
        return self.metric is not None


@dataclass
class CrawlResult:
    topic: str
    attempted: int = 0
    repositories: list[RepositoryMetric] = field(default_factory=list)
    skipped: list[RepoOutcome] = field(default_factory=list)

    @property
    def succeeded(self) -> int:
        return len(self.repositories)

    def add(self, outcome: RepoOutcome) -> None:
        self.attempted += 1
        if outcome.ok:
            self.repositories.append(outcome.metric)
        else:
            self.skipped.append(outcome)


@dataclass
class RunReport:
    """Everything one collection run produced, for display."""

    crawl: CrawlResult
    snapshot: Snapshot
    snapshot_path: str
    history_path: str | None = None
    staged_files: list[str] = field(default_factory=list)
