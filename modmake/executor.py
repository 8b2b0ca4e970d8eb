"""Executor: walks a plan tree and dispatches every leaf call.

Sequential plans run their children in order and stop at the first
failure.  Parallel plans start all children at once and wait for every
one of them; failures are collected and raised after the last sibling
finished.  Leaves are dispatched in two tiers:

1. an external tool registered under the call name (``ToolRegistry``);
2. a built-in action of the same name (``modmake.actions``).

A name found in neither tier raises ``ToolNotFound``.  Blocking work runs
in a thread pool so that parallel siblings overlap; the run ``Summary`` is
the only state those threads share.
"""

from __future__ import annotations

import asyncio
import inspect
import logging
from concurrent.futures import ThreadPoolExecutor
from typing import Any, Callable, Mapping

from modmake.actions import BUILTIN_ACTIONS
from modmake.config import Settings
from modmake.errors import ActionFailure, MakeError, PlanFailure, ToolFailure, ToolNotFound
from modmake.folder import Folder
from modmake.project import Project
from modmake.registry import ToolRegistry
from modmake.runner import ToolResult
from modmake.summary import Summary
from modmake.tasks import Call, Plan

logger = logging.getLogger(__name__)

Action = Callable[..., Any]


class Executor:
    """Runs plans for one project against one set of tools."""

    def __init__(
        self,
        folder: Folder,
        project: Project,
        settings: Settings,
        *,
        registry: ToolRegistry | None = None,
        actions: Mapping[str, Action] | None = None,
        summary: Summary | None = None,
    ) -> None:
        self.folder = folder
        self.project = project
        self.settings = settings
        self.registry = registry if registry is not None else ToolRegistry()
        self.actions: dict[str, Action] = dict(BUILTIN_ACTIONS if actions is None else actions)
        self.summary = summary if summary is not None else Summary()
        self.plan: Call | None = None
        self.release: int | None = settings.RELEASE
        self._pool: ThreadPoolExecutor | None = None

    # ------------------------------------------------------------------
    # Logging
    # ------------------------------------------------------------------

    def log(self, level: str, message: str, *args: object, indent: str = "") -> str:
        """Append to the run summary and mirror to the module logger.

        *indent* reflects the depth in the plan tree.  It prefixes the logger
        output only; summary entries hold the bare message.
        """
        text = message % args if args else message
        self.summary.add(level, text)
        logger.log(logging.getLevelName(level), "%s%s", indent, text)
        return text

    # ------------------------------------------------------------------
    # Entry points
    # ------------------------------------------------------------------

    def run(self, call: Call) -> None:
        """Execute *call* to completion; raises the first fatal error."""
        asyncio.run(self.execute(call))

    async def execute(self, call: Call, indent: str = "") -> None:
        """Execute *call*; nested executions reuse the running thread pool."""
        if self.plan is None:
            self.plan = call
        if self._pool is not None:
            await self._execute(call, indent)
            return
        with ThreadPoolExecutor(
            max_workers=self.settings.MAX_WORKERS,
            thread_name_prefix="modmake",
        ) as pool:
            self._pool = pool
            try:
                await self._execute(call, indent)
            finally:
                self._pool = None

    async def capture(self, name: str, *args: str) -> ToolResult:
        """Invoke an external tool and return its result without raising."""
        tool = self.registry.get(name)
        return await self._in_thread(tool.run, list(args))

    # ------------------------------------------------------------------
    # Tree walk
    # ------------------------------------------------------------------

    async def _execute(self, call: Call, indent: str) -> None:
        self.log("DEBUG", "run(%s)", call, indent=indent)

        if isinstance(call, Plan):
            await self._execute_plan(call, indent)
            return

        if self.settings.DRY_RUN:
            return
        await self._dispatch(call, indent)

    async def _execute_plan(self, plan: Plan, indent: str) -> None:
        if not plan.calls:
            self.log("INFO", "%s", plan.name, indent=indent)
            return
        child_indent = indent + "  "
        if plan.parallel:
            results = await asyncio.gather(
                *(self._execute(child, child_indent) for child in plan.calls),
                return_exceptions=True,
            )
            errors = [r for r in results if isinstance(r, BaseException)]
            if len(errors) == 1:
                raise errors[0]
            if errors:
                failure = PlanFailure(plan.name, errors)
                self.log("ERROR", "%s", failure)
                raise failure
        else:
            for child in plan.calls:
                await self._execute(child, child_indent)
        self.log("DEBUG", "end(%s)", plan.name, indent=indent)

    # ------------------------------------------------------------------
    # Dispatch
    # ------------------------------------------------------------------

    async def _dispatch(self, call: Call, indent: str) -> None:
        tool = self.registry.find(call.name)
        if tool is not None:
            result = await self._in_thread(tool.run, list(call.args))
            self._record(call, result, indent)
            return

        action = self.actions.get(call.name)
        if action is None:
            available = sorted([*self.registry.tool_names(), *self.actions])
            self.log("ERROR", "%s run failed: no such tool or action", call.name)
            raise ToolNotFound(call.name, available)

        try:
            if inspect.iscoroutinefunction(action):
                await action(self, list(call.args), indent)
            else:
                await self._in_thread(action, self, list(call.args), indent)
        except MakeError:
            raise
        except Exception as exc:
            failure = ActionFailure(call.name, str(exc) or type(exc).__name__)
            self.log("ERROR", "%s", failure)
            raise failure from exc

    def _record(self, call: Call, result: ToolResult, indent: str) -> None:
        for line in result.stdout.splitlines():
            self.log("DEBUG", "%s", line, indent=indent + "  ")
        for line in result.stderr.splitlines():
            self.log("WARNING", "%s", line, indent=indent + "  ")
        if result.exit_code != 0:
            self.log("ERROR", "%s run failed: %d", call.name, result.exit_code)
            raise ToolFailure(call.name, result.exit_code, result.stderr)
        self.log("DEBUG", "%s finished in %d ms", call.name, result.duration_ms, indent=indent)

    async def _in_thread(self, fn: Callable[..., Any], *args: Any) -> Any:
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(self._pool, fn, *args)
