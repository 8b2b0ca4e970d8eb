"""Make: one build run, from settings to an executed plan."""

from __future__ import annotations

import logging
import platform
import sys
import time
from pathlib import Path
from typing import Callable

from modmake.config import VERSION, Settings
from modmake.errors import MakeError
from modmake.executor import Executor
from modmake.folder import Folder
from modmake.layout import Layout
from modmake.planner import Planner
from modmake.project import Project, build_project
from modmake.registry import ToolRegistry
from modmake.tasks import DELETE_TREE, Call, Plan, walk

logger = logging.getLogger(__name__)

_VERBOSE_FORMAT = "%(asctime)s|%(levelname)7s|%(threadName)s| %(message)s"
_PLAIN_FORMAT = "%(message)s"


def configure_logging(settings: Settings, stream=None) -> None:
    """Install a stream handler on the ``modmake`` logger."""
    root = logging.getLogger("modmake")
    for handler in list(root.handlers):
        root.removeHandler(handler)
    handler = logging.StreamHandler(stream or sys.stderr)
    handler.setFormatter(logging.Formatter(_VERBOSE_FORMAT if settings.DEBUG else _PLAIN_FORMAT))
    root.addHandler(handler)
    root.setLevel(settings.effective_log_level)
    root.propagate = False


class Make:
    """One build run over one project directory."""

    def __init__(
        self,
        settings: Settings,
        folder: Folder | None = None,
        *,
        project: Project | None = None,
        layout: Layout | None = None,
        registry: ToolRegistry | None = None,
    ) -> None:
        self.settings = settings
        self.folder = folder if folder is not None else Folder.of(Path(""))
        if project is None:
            project = build_project(self.folder, settings, layout)
        self.project = project
        if registry is None:
            registry = ToolRegistry()
            registry.discover(settings.TOOLS, timeout_s=settings.TOOL_TIMEOUT_S)
        self.registry = registry
        self.executor = Executor(self.folder, self.project, settings, registry=registry)
        self.executor.log("INFO", "%s", self)
        self.executor.log("DEBUG", "Python %s", platform.python_version())
        self.executor.log("DEBUG", "Folder %s", self.folder.base.resolve())
        self.executor.log("DEBUG", "Project %s", self.project)
        self.executor.log("DEBUG", "Tools %s", self.registry.tool_names())

    @property
    def summary(self):
        return self.executor.summary

    def plan(self) -> Plan:
        return Planner(self.folder, self.project).plan()

    def print_plan(self, sink: Callable[[str], None] = print) -> Plan:
        plan = self.plan()
        walk(plan, sink)
        return plan

    def build(self) -> int:
        """Plan and execute the build; returns a process exit status."""
        self.executor.log("INFO", "Make %s %s", self.project.name, self.project.version)
        if self.settings.DRY_RUN:
            self.print_plan()
            return 0
        return self.run(self.plan())

    def clean(self) -> int:
        return self.run(Call.of(DELETE_TREE, self.folder.out))

    def run(self, call: Call) -> int:
        start = time.perf_counter()
        try:
            self.executor.run(call)
        except MakeError as exc:
            logger.error("Build failed: %s", exc)
            return 1
        millis = int((time.perf_counter() - start) * 1000)
        self.executor.log("INFO", "Build successful after %d ms.", millis)
        return 0

    def __str__(self) -> str:
        return f"modmake {VERSION}"
