"""Shared test fixtures for the modmake test suite.

Provides:
- ``RecordingTool``: in-process stand-in for an external tool
- ``write_module`` / ``write_class``: create source trees below ``tmp_path``
- ``settings``: deterministic ``Settings`` isolated from the environment
- ``registry``: ``ToolRegistry`` pre-filled with recording javac/jar/javadoc
- ``greetings`` / ``astro``: the two reference project trees
"""

import logging
import os
import threading
import time
from pathlib import Path

import pytest

from modmake.config import Settings
from modmake.folder import Folder
from modmake.registry import ToolRegistry
from modmake.runner import ToolResult


# ---------------------------------------------------------------------------
# Marker registration
# ---------------------------------------------------------------------------


def pytest_configure(config):
    """Register custom markers.

    Tests that need a real JDK on ``PATH`` are decorated with
    ``@pytest.mark.integration``.  Run pytest with ``-m 'not integration'``
    to skip them.
    """
    config.addinivalue_line(
        "markers",
        "integration: tests requiring external tools (javac, jar, javadoc)",
    )


# ---------------------------------------------------------------------------
# Environment isolation
# ---------------------------------------------------------------------------


@pytest.fixture(autouse=True)
def isolated_env(monkeypatch, tmp_path):
    """Strip ``MODMAKE_*`` variables and run from an empty directory."""
    for key in list(os.environ):
        if key.startswith("MODMAKE_"):
            monkeypatch.delenv(key)
    monkeypatch.chdir(tmp_path)
    yield
    root = logging.getLogger("modmake")
    for handler in list(root.handlers):
        root.removeHandler(handler)
    root.setLevel(logging.NOTSET)
    root.propagate = True


# ---------------------------------------------------------------------------
# Fake tools
# ---------------------------------------------------------------------------


class RecordingTool:
    """Tool double that records every invocation and returns a fixed result."""

    def __init__(
        self,
        name: str,
        *,
        exit_code: int = 0,
        stdout: str = "",
        stderr: str = "",
        delay: float = 0.0,
        log: list | None = None,
    ) -> None:
        self.name = name
        self.exit_code = exit_code
        self.stdout = stdout
        self.stderr = stderr
        self.delay = delay
        self.calls: list[tuple[str, ...]] = []
        self.log = log if log is not None else []
        self._lock = threading.Lock()

    def run(self, args) -> ToolResult:
        with self._lock:
            self.calls.append(tuple(args))
            self.log.append((self.name, tuple(args)))
        if self.delay:
            time.sleep(self.delay)
        return ToolResult(exit_code=self.exit_code, stdout=self.stdout, stderr=self.stderr)


def make_registry(*tools) -> ToolRegistry:
    registry = ToolRegistry()
    for tool in tools:
        registry.register(tool)
    return registry


# ---------------------------------------------------------------------------
# Source trees
# ---------------------------------------------------------------------------


def write_module(directory: Path, name: str, requires: tuple[str, ...] = (), exports: str = "") -> Path:
    """Write ``module-info.java`` for *name* into *directory*."""
    directory.mkdir(parents=True, exist_ok=True)
    lines = [f"module {name} {{"]
    lines += [f"  requires {r};" for r in requires]
    if exports:
        lines.append(f"  exports {exports};")
    lines.append("}")
    path = directory / "module-info.java"
    path.write_text("\n".join(lines) + "\n", encoding="utf-8")
    return path


def write_class(directory: Path, package: str, name: str = "Main") -> Path:
    """Write a minimal public class into the package folder below *directory*."""
    target = directory.joinpath(*package.split("."))
    target.mkdir(parents=True, exist_ok=True)
    path = target / f"{name}.java"
    path.write_text(
        f"package {package};\n\n"
        f"/** {name} of {package}. */\n"
        f"public class {name} {{\n"
        f"  /** Entry point. @param args ignored */\n"
        f"  public static void main(String... args) {{}}\n"
        f"}}\n",
        encoding="utf-8",
    )
    return path


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def settings() -> Settings:
    """Settings with a fixed project name, version and Java release."""
    return Settings(
        _env_file=None,
        PROJECT_NAME="demo",
        PROJECT_VERSION="1.0",
        RELEASE=17,
    )


@pytest.fixture
def registry() -> ToolRegistry:
    log: list = []
    return make_registry(
        RecordingTool("javac", stdout="javac 17.0.2", log=log),
        RecordingTool("jar", log=log),
        RecordingTool("javadoc", log=log),
    )


@pytest.fixture
def greetings(tmp_path) -> Folder:
    """Single-module project in the flat ``src/<module>`` layout."""
    base = tmp_path / "greetings"
    module = base / "src" / "com.greetings"
    write_module(module, "com.greetings", exports="com.greetings")
    write_class(module, "com.greetings")
    return Folder.of(base)


@pytest.fixture
def astro(tmp_path) -> Folder:
    """Two-realm project in the ``src/<module>/<realm>/java`` layout.

    main: com.greetings, org.astro
    test: integration, org.astro
    """
    base = tmp_path / "astro"
    src = base / "src"
    write_module(src / "com.greetings" / "main" / "java", "com.greetings", ("org.astro",))
    write_class(src / "com.greetings" / "main" / "java", "com.greetings")
    write_module(src / "org.astro" / "main" / "java", "org.astro", exports="org.astro")
    write_class(src / "org.astro" / "main" / "java", "org.astro", "World")
    write_module(src / "org.astro" / "test" / "module", "org.astro")
    write_module(src / "integration" / "test" / "java", "integration", ("org.astro",))
    write_class(src / "integration" / "test" / "java", "integration", "IntegrationTests")
    return Folder.of(base)
