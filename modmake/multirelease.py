"""Multi-release modules: per-release source overlays merged into one archive.

A multi-release module has no top-level ``module-info.java``.  Its
directory holds ``java-<N>`` overlays instead, each applying from Java
release ``N`` on.  The lowest ``N`` present is the *base* release; its
classes become the default archive content.  Every higher overlay is
compiled against the base classes and stored as a versioned entry group,
so a release-aware reader picks the most specific match.

Releases below ``MODULARITY_RELEASE`` are compiled as plain source sets;
from that release on, overlays above the base patch the base classes into
the module being compiled.
"""

from __future__ import annotations

import re
from pathlib import Path
from typing import TYPE_CHECKING, Iterable

from modmake.descriptor import DESCRIPTOR
from modmake.errors import BuildFailure
from modmake.folder import Folder
from modmake.layout import OVERLAY, overlay_releases
from modmake.project import Project, Realm
from modmake.tasks import CREATE_DIRECTORIES, Args, Call, Plan

if TYPE_CHECKING:
    from modmake.executor import Executor

MODULARITY_RELEASE = 9

_FEATURE = re.compile(r"(\d+)(?:\.(\d+))?(?:\.\d+)*")


def find_base_release(names: Iterable[str]) -> int:
    """Lowest release number among ``java-<N>`` names, compared numerically.

    Raises ``ValueError`` if no name is an overlay name.
    """
    releases = [int(m.group(1)) for m in (OVERLAY.fullmatch(n) for n in names) if m]
    if not releases:
        raise ValueError("No java-<N> overlay found")
    return min(releases)


def parse_feature(version_output: str) -> int:
    """Feature number from ``javac --version`` output (``javac 17.0.2`` -> 17)."""
    for token in version_output.split():
        match = _FEATURE.fullmatch(token.split("_")[0].split("-")[0].rstrip("."))
        if match is None:
            continue
        major = int(match.group(1))
        if major == 1 and match.group(2):  # 1.8.0 style
            return int(match.group(2))
        return major
    raise ValueError(f"No version number in {version_output!r}")


class MultiReleaseBuilder:
    """Plans the compile-then-merge steps for one multi-release module."""

    def __init__(self, folder: Folder, project: Project, realm: Realm, module: str) -> None:
        self.folder = folder
        self.project = project
        self.realm = realm
        self.module = module
        self.module_dir = Path(realm.module_source_dirs(folder, module)[0])

    def releases(self) -> list[int]:
        """Overlay releases that hold at least one source file."""
        return [r for r in overlay_releases(self.module_dir) if _java_files(self.sources(r))]

    def base(self) -> int:
        releases = self.releases()
        if not releases:
            raise BuildFailure(f"No sources of {self.module} in any overlay", path=str(self.module_dir))
        return find_base_release(f"java-{r}" for r in releases)

    def sources(self, release: int) -> Path:
        return self.module_dir / f"java-{release}"

    def classes(self, release: int) -> Path:
        return self.folder.classes(self.realm.path, "multi-release", self.module, f"java-{release}")

    def compiled_releases(self, feature: int) -> tuple[list[int], list[int]]:
        """Split ``base..feature`` into releases with sources and missing ones."""
        present, missing = [], []
        releases = set(self.releases())
        for release in range(self.base(), feature + 1):
            if release in releases:
                present.append(release)
            else:
                missing.append(release)
        return present, missing

    # ------------------------------------------------------------------
    # Sub-plan
    # ------------------------------------------------------------------

    def plan(self, feature: int) -> Plan:
        present, _ = self.compiled_releases(feature)
        if not present:
            raise BuildFailure(
                f"No release of {self.module} compilable for Java {feature}",
                path=str(self.module_dir),
            )
        base = present[0]
        return Plan.of(
            f"Build multi-release module {self.module}",
            Plan.of(
                f"Compile {self.module} releases",
                *(self.compile(release, base) for release in present),
            ),
            self.package(present),
        )

    def compile(self, release: int, base: int) -> Call:
        source = self.sources(release)
        module_path = self.realm.compile_module_path(self.folder)
        args = Args().add("--release", release).add("-d", self.classes(release))
        if release < MODULARITY_RELEASE:
            args.add_if(release > base, "--class-path", self.classes(base))
        else:
            args.add_if((source / DESCRIPTOR).is_file(), "--module-version", self.project.version)
            args.add_if(module_path, "--module-path", module_path)
            args.add_if(release > base, "--patch-module", f"{self.module}={self.classes(base)}")
        args.add_each(_java_files(source))
        return Call.of("javac", *args)

    def package(self, present: list[int]) -> Plan:
        base, *higher = present
        modules = self.folder.modules(self.realm.path)
        sources = self.folder.sources(self.realm.path)
        version = self.project.version
        archive = Args().add("--create", "--file", modules / f"{self.module}-{version}.jar")
        archive.add("-C", self.classes(base), ".")
        source_archive = Args().add(
            "--create", "--file", sources / f"{self.module}-{version}-sources.jar"
        )
        source_archive.add("-C", self.sources(base), ".")
        for release in higher:
            archive.add("--release", release, "-C", self.classes(release), ".")
            source_archive.add("--release", release, "-C", self.sources(release), ".")
        return Plan.of(
            f"Package {self.module}",
            Call.of(CREATE_DIRECTORIES, modules),
            Call.of(CREATE_DIRECTORIES, sources),
            Plan.of(
                f"Archive {self.module}",
                Call.of("jar", *archive),
                Call.of("jar", *source_archive),
                parallel=True,
            ),
        )


def _java_files(directory: Path) -> list[str]:
    if not directory.is_dir():
        return []
    return sorted(str(p) for p in directory.rglob("*.java"))


async def resolve_feature(executor: Executor) -> int:
    """Java feature release targeted by this run.

    Taken from settings when configured, else parsed once from
    ``javac --version`` and cached on the executor.
    """
    if executor.release is None:
        result = await executor.capture("javac", "--version")
        executor.release = parse_feature(result.stdout + " " + result.stderr)
        executor.log("DEBUG", "Detected Java feature release %d", executor.release)
    return executor.release


async def build_multi_release_module(executor: Executor, args: list[str], indent: str = "") -> None:
    """Built-in action ``multi-release-module <realm> <module>``."""
    realm_name, module = args
    realm = executor.project.realm(realm_name)
    builder = MultiReleaseBuilder(executor.folder, executor.project, realm, module)
    feature = await resolve_feature(executor)
    present, missing = builder.compiled_releases(feature)
    for release in missing:
        executor.log(
            "WARNING",
            "No sources of %s for Java %d in %s, skipped",
            module, release, builder.sources(release),
            indent=indent,
        )
    executor.log(
        "INFO",
        "Building %s from base release %d up to %d: %s",
        module, builder.base(), feature, present,
        indent=indent,
    )
    await executor.execute(builder.plan(feature), indent + "  ")
