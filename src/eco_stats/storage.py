"""File-based snapshot storage and historical summary.

One JSON snapshot per calendar date lives in the data directory as
``YYYY-MM-DD.json``. The fixed date format makes lexicographic order of
file names chronological order. ``history.json`` is rebuilt from every
snapshot on each run.
"""

from __future__ import annotations

import dataclasses
import json
import logging
import re
import shutil
from collections.abc import Callable
from datetime import date, datetime, timezone
from pathlib import Path
from typing import Any

from .models import HistoricalTimeline, Snapshot, TimelineEntry

logger = logging.getLogger(__name__)

DEFAULT_DATA_DIR = Path("data")
HISTORY_FILENAME = "history.json"
SNAPSHOT_FILENAME_RE = re.compile(r"\d{4}-\d{2}-\d{2}\.json")


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _isoformat(moment: datetime) -> str:
    """ISO-8601 UTC with millisecond precision and a ``Z`` suffix."""
    moment = moment.astimezone(timezone.utc)
    return moment.isoformat(timespec="milliseconds").replace("+00:00", "Z")


def _write_json(path: Path, payload: Any) -> None:
    # Write a sibling first, then rename over the target in one step.
    tmp = path.with_name(path.name + ".tmp")
    try:
        tmp.write_text(json.dumps(payload, indent=2, ensure_ascii=False), encoding="utf-8")
        tmp.replace(path)
    except BaseException:
        tmp.unlink(missing_ok=True)
        raise


def _read_json(path: Path) -> Any:
    return json.loads(path.read_text(encoding="utf-8"))


class SnapshotStorage:
    """Dated JSON snapshots in a single directory."""

    def __init__(
        self,
        data_dir: Path | str = DEFAULT_DATA_DIR,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        self._data_dir = Path(data_dir)
        self._clock = clock
        if not self._data_dir.exists():
            self._data_dir.mkdir(parents=True, exist_ok=True)
            logger.info("Created data directory: %s", self._data_dir)

    @property
    def data_dir(self) -> Path:
        return self._data_dir

    @property
    def history_path(self) -> Path:
        return self._data_dir / HISTORY_FILENAME

    def path_for_date(self, day: date) -> Path:
        return self._data_dir / f"{day.isoformat()}.json"

    def today_path(self) -> Path:
        return self.path_for_date(self._clock().astimezone(timezone.utc).date())

    def save_snapshot(
        self, snapshot: Snapshot, target: date | Path | str | None = None
    ) -> Path:
        """Write ``snapshot`` stamped with the current time.

        ``target`` may be a date (that day's file) or an explicit path; by
        default today's file is used. An existing file is overwritten.
        """
        if target is None:
            path = self.today_path()
        elif isinstance(target, datetime):
            path = self.path_for_date(target.astimezone(timezone.utc).date())
        elif isinstance(target, date):
            path = self.path_for_date(target)
        else:
            path = Path(target)

        stamped = dataclasses.replace(snapshot, collected_at=_isoformat(self._clock()))
        _write_json(path, stamped.to_dict())
        logger.info("Saved snapshot to: %s", path)
        return path

    def load_snapshot(self, path: Path | str) -> Snapshot | None:
        """Load a snapshot, or ``None`` if the file does not exist.

        Malformed content raises.
        """
        path = Path(path)
        if not path.exists():
            logger.warning("Snapshot file not found: %s", path)
            return None
        return Snapshot.from_dict(_read_json(path))

    def list_snapshot_files(self) -> list[Path]:
        """Snapshot files in chronological order."""
        names = sorted(
            p.name
            for p in self._data_dir.iterdir()
            if p.is_file() and SNAPSHOT_FILENAME_RE.fullmatch(p.name)
        )
        return [self._data_dir / name for name in names]

    def load_all_snapshots(self) -> list[tuple[str, Any]]:
        """``(date, raw JSON document)`` for every snapshot, oldest first."""
        return [(path.stem, _read_json(path)) for path in self.list_snapshot_files()]

    def generate_historical_summary(self) -> HistoricalTimeline | None:
        snapshots = self.load_all_snapshots()
        if not snapshots:
            logger.warning("No snapshots found for historical summary")
            return None

        timeline = []
        for day, document in snapshots:
            stats = document.get("aggregateStats") if isinstance(document, dict) else None
            timeline.append(TimelineEntry.from_stats(day, stats))

        return HistoricalTimeline(
            generated_at=_isoformat(self._clock()),
            snapshot_count=len(snapshots),
            date_range_start=snapshots[0][0],
            date_range_end=snapshots[-1][0],
            timeline=timeline,
        )

    def save_historical_summary(self) -> Path | None:
        history = self.generate_historical_summary()
        if history is None:
            return None
        _write_json(self.history_path, history.to_dict())
        logger.info("Saved historical summary to: %s", self.history_path)
        return self.history_path

    def get_latest_snapshot(self) -> Snapshot | None:
        files = self.list_snapshot_files()
        if not files:
            return None
        return self.load_snapshot(files[-1])

    def export_for_visualization(self) -> dict[str, Any]:
        """Latest snapshot and history bundled for a dashboard."""
        history = self.generate_historical_summary()
        latest = self.get_latest_snapshot()
        return {
            "current": latest.to_dict() if latest is not None else None,
            "historical": history.to_dict() if history is not None else None,
            "exportedAt": _isoformat(self._clock()),
        }

    def stage_data_files(self, destination: Path | str) -> list[Path]:
        """Copy every JSON file in the data directory into ``destination``."""
        destination = Path(destination)
        destination.mkdir(parents=True, exist_ok=True)
        copied: list[Path] = []
        for source in sorted(self._data_dir.glob("*.json")):
            target = destination / source.name
            shutil.copyfile(source, target)
            logger.info("Copied %s to %s", source.name, destination)
            copied.append(target)
        return copied
