"""Tool runner: blocking subprocess execution with structured results.

``ProcessTool`` runs an external program with an argument list (never
through a shell), captures both output streams, enforces a timeout, and
returns a frozen ``ToolResult``.  Any object with a ``name`` attribute and
a ``run(args) -> ToolResult`` method can stand in for it.
"""

from __future__ import annotations

import subprocess
import time
from typing import Protocol, Sequence

from pydantic import BaseModel, ConfigDict, Field

# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------

MAX_STDOUT_BYTES: int = 50_000  # 50 KB
MAX_STDERR_BYTES: int = 10_000  # 10 KB
DEFAULT_TIMEOUT_S: int = 600


# ---------------------------------------------------------------------------
# Model
# ---------------------------------------------------------------------------


class ToolResult(BaseModel):
    """Structured result of a tool invocation."""

    model_config = ConfigDict(frozen=True)

    exit_code: int = Field(..., description="Process exit code (-1 if crashed)")
    stdout: str = Field(default="", description="Captured stdout (may be truncated)")
    stderr: str = Field(default="", description="Captured stderr (may be truncated)")
    duration_ms: int = Field(default=0, ge=0, description="Wall-clock duration in ms")
    truncated: bool = Field(
        default=False,
        description="True if stdout or stderr was truncated",
    )
    killed: bool = Field(
        default=False,
        description="True if the process was killed due to timeout",
    )

    @property
    def ok(self) -> bool:
        return self.exit_code == 0


class Tool(Protocol):
    """Anything that can be invoked by name with an ordered argument list."""

    name: str

    def run(self, args: Sequence[str]) -> ToolResult: ...


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _truncate(text: str, max_bytes: int) -> tuple[str, bool]:
    """Truncate *text* to at most *max_bytes* characters.

    Returns ``(text, False)`` when no truncation occurred, or
    ``(truncated_text, True)`` with an appended notice otherwise.
    """
    if len(text) <= max_bytes:
        return text, False
    return (
        text[:max_bytes] + f"\n\n[... truncated at {max_bytes} bytes ...]",
        True,
    )


def _decode(data: str | bytes | None) -> str:
    if data is None:
        return ""
    if isinstance(data, bytes):
        return data.decode("utf-8", errors="replace")
    return data


# ---------------------------------------------------------------------------
# Process-backed tool
# ---------------------------------------------------------------------------


class ProcessTool:
    """Runs an executable found on the system."""

    def __init__(
        self,
        name: str,
        executable: str | None = None,
        *,
        timeout_s: int = DEFAULT_TIMEOUT_S,
        cwd: str | None = None,
    ) -> None:
        self.name = name
        self.executable = executable or name
        self.timeout_s = timeout_s
        self.cwd = cwd

    def run(self, args: Sequence[str]) -> ToolResult:
        command = [self.executable, *args]
        start = time.perf_counter()
        try:
            completed = subprocess.run(
                command,
                capture_output=True,
                text=True,
                cwd=self.cwd,
                timeout=self.timeout_s,
            )
            exit_code = completed.returncode
            raw_out, raw_err, killed = completed.stdout or "", completed.stderr or "", False
        except subprocess.TimeoutExpired as exc:
            exit_code = -1
            raw_out, raw_err, killed = _decode(exc.stdout), _decode(exc.stderr), True
            raw_err += f"\n{self.name} timed out after {self.timeout_s}s"
        except OSError as exc:
            exit_code, raw_out, raw_err, killed = -1, "", f"Error: {exc}", False

        elapsed = int((time.perf_counter() - start) * 1000)
        stdout, trunc_out = _truncate(raw_out, MAX_STDOUT_BYTES)
        stderr, trunc_err = _truncate(raw_err, MAX_STDERR_BYTES)
        return ToolResult(
            exit_code=exit_code,
            stdout=stdout,
            stderr=stderr,
            duration_ms=elapsed,
            truncated=trunc_out or trunc_err,
            killed=killed,
        )

    def __repr__(self) -> str:
        return f"ProcessTool({self.name!r}, {self.executable!r})"
