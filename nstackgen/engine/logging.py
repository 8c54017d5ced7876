"""
nstackgen Build Log — Structured JSON file-based record of every build pass.

Implements:
- BuildEventLogger: one JSON line per pass event, daily files
  ``{log_dir}/builds/{YYYY-MM-DD}.jsonl``
- Log entry builders for started / skipped / completed / failed passes
- query() to read entries back (newest first)

Module loggers (``logging.getLogger("nstackgen.*")``) still carry the
human-readable trail; this file is the machine-readable one.
"""

from __future__ import annotations

import json
import logging
import threading
from collections import defaultdict
from datetime import date, datetime, timedelta, timezone
from pathlib import Path
from typing import Any, Dict, List, Optional

logger = logging.getLogger("nstackgen.engine.logging")


class LogEntry:
    """A structured build log entry."""

    __slots__ = ("category", "data")

    def __init__(self, category: str, data: Dict[str, Any]):
        self.category = category
        self.data = data

    def to_json(self) -> str:
        return json.dumps(self.data, default=str, separators=(",", ":"))


class BuildEventLogger:
    """
    Appends build log entries to per-category daily JSONL files.

    Thread-safe — uses a lock per file path. Passes for different inputs may
    run concurrently and share one logger.
    """

    def __init__(self, log_dir: str = ".nstackgen/logs"):
        self._log_dir = Path(log_dir)
        self._file_locks: Dict[str, threading.Lock] = defaultdict(threading.Lock)

    def write(self, entry: LogEntry) -> None:
        """Write a single log entry to today's file."""
        file_path = self._resolve_path(entry.category)
        file_path.parent.mkdir(parents=True, exist_ok=True)

        with self._file_locks[str(file_path)]:
            with open(file_path, "a", encoding="utf-8") as f:
                f.write(entry.to_json())
                f.write("\n")

    def _resolve_path(self, category: str, day: Optional[date] = None) -> Path:
        day = day or date.today()
        return self._log_dir / category / f"{day.isoformat()}.jsonl"

    @property
    def log_dir(self) -> Path:
        return self._log_dir

    def query(
        self,
        category: str = "builds",
        *,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
        filters: Optional[Dict[str, Any]] = None,
        limit: int = 500,
    ) -> List[Dict[str, Any]]:
        """
        Query build log entries.

        Args:
            category: The category folder.
            start_date: Earliest date to include (defaults to 7 days ago).
            end_date: Latest date to include (defaults to today).
            filters: Only entries matching ALL key/value pairs are returned.
            limit: Max number of entries to return.

        Returns:
            List of parsed log-entry dicts, newest first.
        """
        if end_date is None:
            end_date = date.today()
        if start_date is None:
            start_date = end_date - timedelta(days=7)

        results: List[Dict[str, Any]] = []
        current = end_date
        while current >= start_date and len(results) < limit:
            file_path = self._resolve_path(category, current)
            if file_path.exists():
                day_entries = self._read_jsonl(file_path, filters)
                day_entries.reverse()
                results.extend(day_entries[: limit - len(results)])
            current -= timedelta(days=1)
        return results

    @staticmethod
    def _read_jsonl(path: Path, filters: Optional[Dict[str, Any]]) -> List[Dict[str, Any]]:
        entries: List[Dict[str, Any]] = []
        try:
            with open(path, "r", encoding="utf-8") as f:
                for line in f:
                    line = line.strip()
                    if not line:
                        continue
                    try:
                        data = json.loads(line)
                    except json.JSONDecodeError:
                        continue
                    if filters and not all(data.get(k) == v for k, v in filters.items()):
                        continue
                    entries.append(data)
        except OSError as exc:
            logger.warning("Could not read log file %s: %s", path, exc)
        return entries


# ---------------------------------------------------------------------------
# Log Entry Builders
# ---------------------------------------------------------------------------

def _base_entry(event: str, level: str, asset: str, **extra: Any) -> Dict[str, Any]:
    entry: Dict[str, Any] = {
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "level": level,
        "event": event,
        "asset": asset,
    }
    entry.update({k: v for k, v in extra.items() if v is not None})
    return entry


def log_build_started(asset: str, target: str) -> LogEntry:
    return LogEntry("builds", _base_entry("build_started", "INFO", asset, target=target))


def log_build_skipped(asset: str, trigger: str) -> LogEntry:
    return LogEntry("builds", _base_entry("build_skipped", "DEBUG", asset, trigger=trigger))


def log_build_completed(
    asset: str,
    output: str,
    duration_ms: float,
    sections: int,
    keys: int,
    languages: int,
) -> LogEntry:
    """Build a completed-pass log entry."""
    data = _base_entry(
        "build_completed",
        "INFO",
        asset,
        output=output,
        duration_ms=duration_ms,
        sections=sections,
        keys=keys,
        languages=languages,
    )
    return LogEntry("builds", data)


def log_build_failed(
    asset: str,
    stage: str,
    duration_ms: float,
    error: Dict[str, Any],
) -> LogEntry:
    """Build a failed-pass log entry; ``error`` is ``NStackGenError.to_dict()``."""
    data = _base_entry(
        "build_failed",
        "ERROR",
        asset,
        stage=stage,
        duration_ms=duration_ms,
        error=error,
    )
    return LogEntry("builds", data)
