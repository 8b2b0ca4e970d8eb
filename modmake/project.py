"""Project model: realms, their modules and the realms they depend on.

``Project`` and ``Realm`` are frozen once created.  Invariants are checked
at construction time: module names are unique within a realm, realm names
are unique within a project, and a realm only depends on realms declared
before it.  ``build_project`` derives the whole model from the directory
shape below ``folder.src``.
"""

from __future__ import annotations

import logging
import os
from typing import Mapping

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from modmake.config import Settings
from modmake.folder import SRC, Folder
from modmake.layout import Layout, classify
from modmake.version import Version

logger = logging.getLogger(__name__)


class Realm(BaseModel):
    """A named source scope such as ``main`` or ``test``."""

    model_config = ConfigDict(frozen=True)

    name: str = Field(..., min_length=1)
    path: str = ""
    modules: tuple[str, ...] = ()
    module_source_paths: tuple[str, ...] = ()
    # (module, source directories relative to the base) pairs, as found on disk
    source_roots: tuple[tuple[str, tuple[str, ...]], ...] = ()
    dependencies: tuple[Realm, ...] = ()
    multi_release_modules: tuple[str, ...] = ()

    @model_validator(mode="before")
    @classmethod
    def _default_path(cls, data: object) -> object:
        if isinstance(data, dict) and not data.get("path"):
            data = {**data, "path": data.get("name", "")}
        return data

    @field_validator("source_roots", mode="before")
    @classmethod
    def _roots_from_mapping(cls, value: object) -> object:
        if isinstance(value, Mapping):
            return tuple(sorted((m, tuple(r)) for m, r in value.items()))
        return value

    @model_validator(mode="after")
    def _check(self) -> Realm:
        duplicates = sorted({m for m in self.modules if self.modules.count(m) > 1})
        if duplicates:
            raise ValueError(f"Duplicate modules in realm {self.name!r}: {duplicates}")
        unknown = set(self.multi_release_modules) - set(self.modules)
        if unknown:
            raise ValueError(f"Multi-release modules not in realm {self.name!r}: {sorted(unknown)}")
        unknown = {m for m, _ in self.source_roots} - set(self.modules)
        if unknown:
            raise ValueError(f"Source roots for modules not in realm {self.name!r}: {sorted(unknown)}")
        names = [d.name for d in self.dependencies]
        if self.name in names:
            raise ValueError(f"Realm {self.name!r} depends on itself")
        if len(set(names)) != len(names):
            raise ValueError(f"Duplicate dependencies in realm {self.name!r}: {names}")
        return self

    @property
    def regular_modules(self) -> tuple[str, ...]:
        """Modules compiled in one go via the module source path."""
        return tuple(m for m in self.modules if m not in self.multi_release_modules)

    def module_source_path(self, folder: Folder) -> str:
        """Joined module source path with ``*`` in place of the module name."""
        return os.pathsep.join(
            str(folder.base / template.replace("${REALM}", self.path).replace("${MODULE}", "*"))
            for template in self.module_source_paths
        )

    def module_source_dirs(self, folder: Folder, module: str) -> list[str]:
        """Source directories of *module*; discovered roots win over templates."""
        roots = dict(self.source_roots)
        if module in roots:
            return [str(folder.base / root) for root in roots[module]]
        return [
            str(folder.base / template.replace("${REALM}", self.path).replace("${MODULE}", module))
            for template in self.module_source_paths
        ]

    def module_path(self, folder: Folder) -> str:
        """Joined packaged-module directories of all dependency realms."""
        return os.pathsep.join(str(folder.modules(d.path)) for d in self.dependencies)

    def compile_module_path(self, folder: Folder) -> str:
        """Module path for compiling this realm.

        Multi-release modules are packaged before the regular ones, so their
        archive directory joins the dependency realms when there are any.
        """
        paths = [str(folder.modules(d.path)) for d in self.dependencies]
        if self.multi_release_modules:
            paths.append(str(folder.modules(self.path)))
        return os.pathsep.join(paths)

    def __str__(self) -> str:
        return f"Realm{{name={self.name}, modules={list(self.modules)}}}"


class Project(BaseModel):
    """Immutable description of what gets built."""

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    name: str = Field(..., min_length=1)
    version: Version
    layout: Layout | None = None
    realms: tuple[Realm, ...] = ()

    @field_validator("version", mode="before")
    @classmethod
    def _parse_version(cls, value: object) -> Version:
        if isinstance(value, str):
            return Version.parse(value)
        return value

    @model_validator(mode="after")
    def _check(self) -> Project:
        seen: set[str] = set()
        for realm in self.realms:
            if realm.name in seen:
                raise ValueError(f"Duplicate realm {realm.name!r}")
            for dependency in realm.dependencies:
                if dependency.name not in seen:
                    raise ValueError(
                        f"Realm {realm.name!r} depends on {dependency.name!r}, "
                        "which is not declared before it"
                    )
            seen.add(realm.name)
        return self

    def realm(self, name: str) -> Realm:
        for realm in self.realms:
            if realm.name == name:
                return realm
        raise KeyError(name)

    def __str__(self) -> str:
        return f"Project{{name={self.name}, version={self.version}}}"


def project_name(folder: Folder, settings: Settings) -> str:
    if settings.PROJECT_NAME:
        return settings.PROJECT_NAME
    return folder.base.resolve().name or "project"


def build_project(
    folder: Folder,
    settings: Settings,
    layout: Layout | None = None,
) -> Project:
    """Derive a ``Project`` from the directory structure below *folder*.

    *layout* overrides classification.  When the source tree does not
    determine a layout, ``Layout.DEFAULT`` is used.  A missing source root
    is not an error: every realm is then empty.
    """
    name = project_name(folder, settings)
    logger.debug("Parsing directory '%s' for project properties", folder.base.resolve())

    if not folder.src.is_dir():
        logger.warning("Source directory %s not found, project has no modules", folder.src)

    if layout is None:
        layout = classify(folder.src)
        if layout is None:
            logger.info("No layout determined for %s, using %s", folder.src, Layout.DEFAULT.name)
            layout = Layout.DEFAULT
    logger.debug("Layout of %s is %s", name, layout.name)

    realms: list[Realm] = []
    for realm_name in layout.realms:
        infos = layout.find(folder, realm_name)
        modules = sorted({info.module for info in infos})
        multi_release = sorted({info.module for info in infos if info.multi_release})
        roots: dict[str, set[str]] = {}
        for info in infos:
            roots.setdefault(info.module, set()).add(f"{SRC}/{info.directory}")
        realm = Realm(
            name=realm_name,
            modules=tuple(modules),
            module_source_paths=layout.templates,
            source_roots={m: tuple(sorted(r)) for m, r in roots.items()},
            dependencies=tuple(r for r in realms if r.name == "main")
            if realm_name == "test"
            else (),
            multi_release_modules=tuple(multi_release),
        )
        logger.debug("%s", realm)
        realms.append(realm)

    return Project(
        name=name,
        version=Version.parse(settings.PROJECT_VERSION),
        layout=layout,
        realms=tuple(realms),
    )
