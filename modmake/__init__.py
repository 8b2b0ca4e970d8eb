"""Convention-driven build tool for modular Java projects.

Public API
----------
Configuration::

    Settings, load_settings, VERSION

Folder & layout::

    Folder, Layout, ModuleInfo, classify, scan

Project model::

    Project, Realm, Version, build_project,
    ModuleDescriptor, parse_source, read_descriptor

Task graph::

    Call, Plan, Args, walk, render, leaves

Planning & execution::

    Planner, Executor, Summary, LogEntry,
    MultiReleaseBuilder, BUILTIN_ACTIONS

Tools::

    ToolRegistry, ProcessTool, ToolResult

Errors::

    MakeError, ToolNotFound, ToolFailure,
    ActionFailure, PlanFailure, BuildFailure

Entry point::

    Make, configure_logging
"""

from modmake.actions import BUILTIN_ACTIONS
from modmake.config import VERSION, Settings, load_settings
from modmake.descriptor import ModuleDescriptor, parse_source, read_descriptor
from modmake.errors import (
    ActionFailure,
    BuildFailure,
    MakeError,
    PlanFailure,
    ToolFailure,
    ToolNotFound,
)
from modmake.executor import Executor
from modmake.folder import Folder
from modmake.layout import Layout, ModuleInfo, classify, scan
from modmake.make import Make, configure_logging
from modmake.multirelease import MultiReleaseBuilder
from modmake.planner import Planner
from modmake.project import Project, Realm, build_project
from modmake.registry import ToolRegistry
from modmake.runner import ProcessTool, ToolResult
from modmake.summary import LogEntry, Summary
from modmake.tasks import Args, Call, Plan, leaves, render, walk
from modmake.version import Version

__version__ = VERSION

__all__ = [
    # Configuration
    "Settings",
    "load_settings",
    "VERSION",
    # Folder & layout
    "Folder",
    "Layout",
    "ModuleInfo",
    "classify",
    "scan",
    # Project model
    "Project",
    "Realm",
    "Version",
    "build_project",
    "ModuleDescriptor",
    "parse_source",
    "read_descriptor",
    # Task graph
    "Call",
    "Plan",
    "Args",
    "walk",
    "render",
    "leaves",
    # Planning & execution
    "Planner",
    "Executor",
    "Summary",
    "LogEntry",
    "MultiReleaseBuilder",
    "BUILTIN_ACTIONS",
    # Tools
    "ToolRegistry",
    "ProcessTool",
    "ToolResult",
    # Errors
    "MakeError",
    "ToolNotFound",
    "ToolFailure",
    "ActionFailure",
    "PlanFailure",
    "BuildFailure",
    # Entry point
    "Make",
    "configure_logging",
]
