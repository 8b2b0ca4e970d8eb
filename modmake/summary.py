"""Run summary: append-only log shared by all tasks of one run."""

from __future__ import annotations

import threading
from datetime import datetime, timezone

from pydantic import BaseModel, ConfigDict, Field

from modmake.tasks import Call, walk


class LogEntry(BaseModel):
    """A single log record of a run."""

    model_config = ConfigDict(frozen=True)

    level: str
    message: str
    thread: str = Field(default_factory=lambda: threading.current_thread().name)
    instant: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

    def __str__(self) -> str:
        return f"{self.instant.isoformat()}|{self.level}|{self.thread}|{self.message}"


class Summary:
    """Thread-safe collector of ``LogEntry`` records."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._entries: list[LogEntry] = []

    def add(self, level: str, message: str) -> LogEntry:
        entry = LogEntry(level=level, message=message)
        with self._lock:
            self._entries.append(entry)
        return entry

    @property
    def entries(self) -> list[LogEntry]:
        with self._lock:
            return list(self._entries)

    def messages(self, level: str | None = None) -> list[str]:
        return [e.message for e in self.entries if level is None or e.level == level]

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def to_markdown(self, plan: Call | None = None, title: str = "Summary") -> str:
        """Render the plan tree and every log line as a markdown document."""
        lines = [f"# {title}", ""]
        if plan is not None:
            lines += ["## Plan", "", "```text"]
            walk(plan, lines.append)
            lines += ["```", ""]
        lines += ["## Log", "", "```text"]
        lines += [str(entry) for entry in self.entries]
        lines += ["```", ""]
        return "\n".join(lines)
