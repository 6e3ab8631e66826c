"""Structured JSONL run log of finished tasks."""

from __future__ import annotations

import json
import threading
from dataclasses import asdict, dataclass
from datetime import UTC, datetime
from pathlib import Path

from jar_compat.tasks import TaskOutcome


@dataclass(slots=True, frozen=True)
class RunEvent:
    """One finished task as recorded in the run log."""

    timestamp: str
    task: str
    ok: bool
    error: str | None
    duration_seconds: float


def utc_timestamp() -> str:
    """Return an ISO-8601 UTC timestamp."""
    return datetime.now(tz=UTC).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def event_from_outcome(outcome: TaskOutcome, timestamp: str | None = None) -> RunEvent:
    """Convert a scheduler outcome into a run-log event."""
    return RunEvent(
        timestamp=timestamp or utc_timestamp(),
        task=outcome.name,
        ok=outcome.ok,
        error=outcome.error,
        duration_seconds=round(outcome.duration_seconds, 3),
    )


class JsonlRunLogger:
    """Append-only JSONL run logger and bounded reader."""

    def __init__(self, path: Path) -> None:
        self._path = path
        self._path.parent.mkdir(parents=True, exist_ok=True)
        self._lock = threading.Lock()

    @property
    def path(self) -> Path:
        """Return on-disk JSONL path."""
        return self._path

    def append(self, event: RunEvent) -> None:
        """Append an event as one JSON object per line."""
        line = json.dumps(asdict(event), sort_keys=True)
        with self._lock, self._path.open("a", encoding="utf-8") as handle:
            handle.write(line)
            handle.write("\n")

    def read(self, limit: int = 50) -> list[dict[str, object]]:
        """Read the most recent events, skipping malformed lines."""
        if limit < 1:
            return []
        entries: list[dict[str, object]] = []
        if not self._path.exists():
            return entries
        with self._path.open("r", encoding="utf-8") as handle:
            for line in handle:
                stripped = line.strip()
                if not stripped:
                    continue
                try:
                    record = json.loads(stripped)
                except json.JSONDecodeError:
                    continue
                entries.append(record)
        if len(entries) <= limit:
            return entries
        return entries[-limit:]
