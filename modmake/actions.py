"""Built-in actions: the second dispatch tier of the executor.

Each action is a function ``(executor, args, indent)`` registered under
its exact call name.  Synchronous actions run in the executor's thread
pool; coroutine actions run on the event loop and may execute nested
plans through the executor they receive.
"""

from __future__ import annotations

import shutil
from pathlib import Path
from typing import TYPE_CHECKING

from modmake.multirelease import build_multi_release_module
from modmake.tasks import CREATE_DIRECTORIES, DELETE_TREE, MULTI_RELEASE_MODULE, WRITE_SUMMARY

if TYPE_CHECKING:
    from modmake.executor import Executor


def create_directories(executor: Executor, args: list[str], indent: str = "") -> None:
    for arg in args:
        Path(arg).mkdir(parents=True, exist_ok=True)


def delete_tree(executor: Executor, args: list[str], indent: str = "") -> None:
    """Remove each directory tree named in *args*; missing ones are ignored."""
    for arg in args:
        path = Path(arg)
        if path.is_dir():
            shutil.rmtree(path)
            executor.log("DEBUG", "Deleted %s", path, indent=indent)
        elif path.exists():
            path.unlink()


def write_summary(executor: Executor, args: list[str], indent: str = "") -> None:
    """Write plan tree and run log to the markdown file named by ``args[0]``."""
    path = Path(args[0])
    path.parent.mkdir(parents=True, exist_ok=True)
    project = executor.project
    executor.log("INFO", "Writing summary to %s", path, indent=indent)
    text = executor.summary.to_markdown(
        executor.plan, title=f"Summary of {project.name} {project.version}"
    )
    path.write_text(text, encoding="utf-8")


BUILTIN_ACTIONS = {
    CREATE_DIRECTORIES: create_directories,
    DELETE_TREE: delete_tree,
    WRITE_SUMMARY: write_summary,
    MULTI_RELEASE_MODULE: build_multi_release_module,
}
