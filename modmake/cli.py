"""Command-line entry point.

Usage:
    modmake                 # build the project in the current directory
    modmake plan            # print the build plan
    modmake clean           # delete the output folder
    modmake --base demo/greetings --release 17 build

Exit codes:
    0 -- Success.
    1 -- Build failed.
    2 -- Unsupported action or invalid configuration.
"""

from __future__ import annotations

import argparse
import sys
from pathlib import Path

from pydantic import ValidationError

from modmake.config import VERSION, load_settings
from modmake.errors import MakeError
from modmake.folder import Folder
from modmake.layout import Layout
from modmake.make import Make, configure_logging

ACTIONS = ("build", "plan", "clean")


def _err(msg: str) -> None:
    print(f"[modmake] ERROR: {msg}", file=sys.stderr, flush=True)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="modmake", description="Modular Java build tool")
    parser.add_argument("action", nargs="?", default="build", help="build | plan | clean")
    parser.add_argument("--base", type=Path, default=Path(""), help="project base directory")
    parser.add_argument("--layout", choices=[layout.name for layout in Layout])
    parser.add_argument("--dry-run", action="store_true", default=None)
    parser.add_argument("--debug", action="store_true", default=None)
    parser.add_argument("--release", type=int, help="Java feature release of the runtime")
    parser.add_argument("--project-version", help="version of the built modules")
    parser.add_argument("--version", action="version", version=f"modmake {VERSION}")
    return parser


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    if args.action not in ACTIONS:
        _err(f"Unsupported action: {args.action} (expected one of {', '.join(ACTIONS)})")
        return 2

    overrides: dict = {}
    if args.dry_run is not None:
        overrides["DRY_RUN"] = args.dry_run
    if args.debug is not None:
        overrides["DEBUG"] = args.debug
    if args.release is not None:
        overrides["RELEASE"] = args.release
    if args.project_version:
        overrides["PROJECT_VERSION"] = args.project_version
    try:
        settings = load_settings(**overrides)
    except ValidationError as exc:
        _err(f"Invalid configuration: {exc}")
        return 2
    configure_logging(settings)

    try:
        make = Make(
            settings,
            Folder.of(args.base),
            layout=Layout[args.layout] if args.layout else None,
        )
    except MakeError as exc:
        _err(f"Build failed: {exc}")
        return 1
    except ValueError as exc:
        _err(f"Invalid project: {exc}")
        return 2

    if args.action == "plan":
        make.print_plan()
        return 0
    if args.action == "clean":
        return make.clean()
    return make.build()


if __name__ == "__main__":
    sys.exit(main())
