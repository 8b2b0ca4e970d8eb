"""Directory layout conventions and module discovery.

A ``Layout`` is recognised purely from where ``module-info.java`` files
sit below the source root.  Each descriptor's parent directory, relative
to the root and written with ``/`` separators, must match the variant's
pattern and segment count.  A trailing ``java-<N>`` segment marks a
release overlay of the directory above it and is dropped before matching.

    DEFAULT      src/<module>/<realm>/java/module-info.java
    REALM_FIRST  src/<realm>/<module>/module-info.java
    JIGSAW       src/<module>/module-info.java
"""

from __future__ import annotations

import enum
import logging
import os
import re
from pathlib import Path

from pydantic import BaseModel, ConfigDict

from modmake.descriptor import DESCRIPTOR, read_descriptor
from modmake.errors import BuildFailure
from modmake.folder import Folder

logger = logging.getLogger(__name__)

MAX_DEPTH = 5
OVERLAY = re.compile(r"java-(\d+)")


class ModuleInfo(BaseModel):
    """A discovered module descriptor."""

    model_config = ConfigDict(frozen=True)

    path: Path  # descriptor path relative to the source root
    module: str
    multi_release: bool = False

    @property
    def directory(self) -> str:
        """Module directory relative to the source root, overlay segment dropped."""
        return _parent(self.path.as_posix())


class Layout(enum.Enum):
    """Known source directory conventions."""

    #          pattern                        segments realms            module/realm index  templates
    DEFAULT = (r"[^/]+/[^/]+/(java|module)", 3, ("main", "test"), 0, 1,
               ("src/${MODULE}/${REALM}/java", "src/${MODULE}/${REALM}/module"))
    REALM_FIRST = (r"(main|test)/[^/]+", 2, ("main", "test"), 1, 0,
                   ("src/${REALM}/${MODULE}",))
    JIGSAW = (r"[^/]+", 1, ("main",), 0, None,
              ("src/${MODULE}",))

    def __init__(self, pattern, segments, realms, module_index, realm_index, templates):
        self.pattern = re.compile(pattern)
        self.segments = segments
        self.realms = realms
        self.module_index = module_index
        self.realm_index = realm_index
        self.templates = templates

    def matches(self, path: str) -> bool:
        """True if a normalised descriptor-parent path fits this layout."""
        return (
            len(path.split("/")) == self.segments
            and self.pattern.fullmatch(path) is not None
        )

    def find(self, folder: Folder, realm: str) -> list[ModuleInfo]:
        """Return the modules of *realm* found below ``folder.src``.

        JIGSAW has a single realm and ignores the name.
        """
        infos: list[ModuleInfo] = []
        for relative in scan(folder.src):
            parent = _parent(relative)
            if not self.matches(parent):
                continue
            segments = parent.split("/")
            if self.realm_index is not None and segments[self.realm_index] != realm:
                continue
            module_dir = folder.src.joinpath(*segments)
            infos.append(
                ModuleInfo(
                    path=Path(relative),
                    module=_module_name(folder.src / relative, segments[self.module_index]),
                    multi_release=is_multi_release(module_dir),
                )
            )
        return infos


def scan(root: Path, max_depth: int = MAX_DEPTH) -> list[str]:
    """Return descriptor paths below *root*, relative and ``/``-separated.

    A missing root yields an empty list; any other I/O error while walking
    is fatal.
    """
    if not root.is_dir():
        return []

    def _fail(exc: OSError) -> None:
        raise BuildFailure(f"Scanning source tree failed: {exc}", path=str(root)) from exc

    found: list[str] = []
    base_depth = len(root.parts)
    for dirpath, dirnames, filenames in os.walk(root, onerror=_fail):
        depth = len(Path(dirpath).parts) - base_depth
        if depth + 1 >= max_depth:
            dirnames[:] = []
        if DESCRIPTOR in filenames:
            relative = Path(dirpath, DESCRIPTOR).relative_to(root)
            found.append(relative.as_posix())
    return sorted(found)


def classify(root: Path) -> Layout | None:
    """Determine the layout of the source tree at *root*.

    Returns ``None`` when no descriptor is found or when the paths do not
    fit exactly one layout.
    """
    parents = [_parent(p) for p in scan(root)]
    if not parents:
        logger.debug("No module descriptors below %s", root)
        return None
    candidates = [
        layout for layout in Layout if all(layout.matches(p) for p in parents)
    ]
    if len(candidates) != 1:
        logger.debug(
            "Layout of %s undetermined: %d candidates for %s",
            root, len(candidates), parents,
        )
        return None
    return candidates[0]


def is_multi_release(module_dir: Path) -> bool:
    """True if *module_dir* has release overlays instead of a top-level descriptor."""
    if not module_dir.is_dir() or (module_dir / DESCRIPTOR).is_file():
        return False
    return bool(overlay_releases(module_dir))


def overlay_releases(module_dir: Path) -> list[int]:
    """Feature numbers of the ``java-<N>`` overlay directories, ascending."""
    if not module_dir.is_dir():
        return []
    releases = []
    for child in module_dir.iterdir():
        match = OVERLAY.fullmatch(child.name)
        if match and child.is_dir():
            releases.append(int(match.group(1)))
    return sorted(releases)


def _parent(descriptor: str) -> str:
    segments = descriptor.split("/")[:-1]
    if len(segments) > 1 and OVERLAY.fullmatch(segments[-1]):
        segments = segments[:-1]
    return "/".join(segments)


def _module_name(descriptor: Path, fallback: str) -> str:
    try:
        return read_descriptor(descriptor).name
    except ValueError:
        logger.debug("No module declaration in %s, using %r", descriptor, fallback)
        return fallback
    except OSError as exc:
        raise BuildFailure(f"Reading {descriptor} failed: {exc}", path=str(descriptor)) from exc
