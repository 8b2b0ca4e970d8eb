"""Tool registry: maps tool names to external tool implementations.

The ``ToolRegistry`` is a plain class (not a singleton) so tests can create
fresh instances.  ``Make`` creates one per run and fills it via
``discover`` with the tools found on ``PATH``.
"""

from __future__ import annotations

import logging
import shutil
from typing import Iterable

from modmake.errors import ToolNotFound
from modmake.runner import DEFAULT_TIMEOUT_S, ProcessTool, Tool

logger = logging.getLogger(__name__)


class ToolRegistry:
    """External tools addressable by exact name.

    Usage::

        reg = ToolRegistry()
        reg.register(ProcessTool("javac"))
        result = reg.get("javac").run(["--version"])
    """

    def __init__(self) -> None:
        self._tools: dict[str, Tool] = {}

    # ------------------------------------------------------------------
    # Registration
    # ------------------------------------------------------------------

    def register(self, tool: Tool, *, replace: bool = False) -> None:
        """Register *tool* under its ``name``.

        Raises ``ValueError`` if a tool with the same name is already
        registered and *replace* is false.
        """
        if tool.name in self._tools and not replace:
            raise ValueError(f"Tool '{tool.name}' is already registered")
        self._tools[tool.name] = tool

    def discover(
        self,
        names: Iterable[str],
        *,
        timeout_s: int = DEFAULT_TIMEOUT_S,
    ) -> list[str]:
        """Register a ``ProcessTool`` for every name found on ``PATH``.

        Names already registered are left alone.  Returns the names that
        were added.
        """
        added: list[str] = []
        for name in names:
            if name in self._tools:
                continue
            executable = shutil.which(name)
            if executable is None:
                logger.debug("Tool %s not found on PATH", name)
                continue
            self._tools[name] = ProcessTool(name, executable, timeout_s=timeout_s)
            added.append(name)
        return added

    # ------------------------------------------------------------------
    # Lookup
    # ------------------------------------------------------------------

    def find(self, name: str) -> Tool | None:
        return self._tools.get(name)

    def get(self, name: str) -> Tool:
        tool = self._tools.get(name)
        if tool is None:
            raise ToolNotFound(name, self.tool_names())
        return tool

    def has_tool(self, name: str) -> bool:
        return name in self._tools

    def tool_names(self) -> list[str]:
        return list(self._tools.keys())
