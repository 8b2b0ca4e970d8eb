"""Build error hierarchy.

Every error carries typed fields (not just a message string),
supports ``to_dict()`` for serialisation into the run summary,
and has a readable ``__str__`` for logging.
"""

from __future__ import annotations


class MakeError(Exception):
    """Base error for all build failures."""

    def __init__(self, message: str, *, detail: dict | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.detail = detail or {}

    def to_dict(self) -> dict:
        return {"error": type(self).__name__, "message": self.message, **self.detail}

    def __str__(self) -> str:
        return self.message


class ToolNotFound(MakeError):
    """Call name matches neither a registered tool nor a built-in action."""

    def __init__(self, tool_name: str, available_tools: list[str]) -> None:
        self.tool_name = tool_name
        self.available_tools = available_tools
        super().__init__(
            f"Tool '{tool_name}' not found. Available: {', '.join(available_tools)}",
            detail={"tool_name": tool_name, "available_tools": available_tools},
        )


class ToolFailure(MakeError):
    """A tool returned a nonzero exit code."""

    def __init__(self, tool_name: str, exit_code: int, stderr: str = "") -> None:
        self.tool_name = tool_name
        self.exit_code = exit_code
        self.stderr = stderr
        message = f"{tool_name} run failed: {exit_code}"
        if stderr.strip():
            message += f"\n{stderr.rstrip()}"
        super().__init__(
            message,
            detail={"tool_name": tool_name, "exit_code": exit_code, "stderr": stderr},
        )


class ActionFailure(MakeError):
    """A built-in action raised while running."""

    def __init__(self, action_name: str, reason: str) -> None:
        self.action_name = action_name
        self.reason = reason
        super().__init__(
            f"{action_name} run failed: {reason}",
            detail={"action_name": action_name, "reason": reason},
        )


class PlanFailure(MakeError):
    """More than one child of a parallel plan failed."""

    def __init__(self, plan_name: str, errors: list[BaseException]) -> None:
        self.plan_name = plan_name
        self.errors = list(errors)
        super().__init__(
            f"{len(self.errors)} tasks of '{plan_name}' failed: "
            + "; ".join(str(e).splitlines()[0] for e in self.errors),
            detail={"plan_name": plan_name, "errors": [str(e) for e in self.errors]},
        )


class BuildFailure(MakeError):
    """Generic fatal failure, e.g. an I/O error while scanning the source tree."""

    def __init__(self, reason: str, *, path: str | None = None) -> None:
        self.reason = reason
        self.path = path or ""
        detail: dict = {"reason": reason}
        if path:
            detail["path"] = path
        super().__init__(reason, detail=detail)
