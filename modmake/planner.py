"""Planner: turns a project into a plan of tool calls.

``Planner.plan`` is a pure function of its ``Folder`` and ``Project``: it
reads nothing from disk and keeps no state between runs, so planning the
same project twice yields equal plans.

Shape of the root plan::

    Build <project> <version>
      create-directories <out>
      Print version of each provided tool (parallel)
      Compile and document (parallel unless documenting multi-release modules)
        Compile all realms
          Build <realm> realm | No modules in <realm> realm
            javac ...
            multi-release-module <realm> <module>
            Package <realm> realm
              create-directories ...
              Archive <realm> modules (parallel)
        Document <realm> realm
      write-summary <out>/summary.md
"""

from __future__ import annotations

from modmake.folder import Folder
from modmake.project import Project, Realm
from modmake.tasks import (
    CREATE_DIRECTORIES,
    MULTI_RELEASE_MODULE,
    WRITE_SUMMARY,
    Args,
    Call,
    Plan,
)

JAVAC = "javac"
JAR = "jar"
JAVADOC = "javadoc"


def module_archive(project: Project, module: str, classifier: str = "") -> str:
    """File name of a module archive, e.g. ``com.greetings-1.0-sources.jar``."""
    suffix = f"-{classifier}" if classifier else ""
    return f"{module}-{project.version}{suffix}.jar"


class Planner:
    """Plans compilation, packaging, and documentation of a project."""

    def __init__(self, folder: Folder, project: Project) -> None:
        self.folder = folder
        self.project = project

    def plan(self) -> Plan:
        """Create the root build plan."""
        folder = self.folder
        return Plan.of(
            f"Build {self.project.name} {self.project.version}",
            Call.of(CREATE_DIRECTORIES, folder.out),
            self.print_versions(),
            Plan.of(
                "Compile and document",
                self.compile_all(),
                self.document(),
                parallel=not self._documents_multi_release(),
            ),
            Call.of(WRITE_SUMMARY, folder.summary()),
        )

    def _documents_multi_release(self) -> bool:
        # javadoc reads the multi-release archives of the documented realm
        return bool(self.project.realms and self.project.realms[0].multi_release_modules)

    def print_versions(self) -> Plan:
        return Plan.of(
            "Print version of each provided tool",
            Call.of(JAVAC, "--version"),
            Call.of(JAR, "--version"),
            Call.of(JAVADOC, "--version"),
            parallel=True,
        )

    def compile_all(self) -> Plan:
        return Plan.of(
            "Compile all realms",
            *(self.build_realm(realm) for realm in self.project.realms),
        )

    # ------------------------------------------------------------------
    # Realm
    # ------------------------------------------------------------------

    def build_realm(self, realm: Realm) -> Plan:
        if not realm.modules:
            return Plan.of(f"No modules in {realm.name} realm")
        calls: list[Call] = [
            Call.of(MULTI_RELEASE_MODULE, realm.name, module)
            for module in realm.multi_release_modules
        ]
        if realm.regular_modules:
            calls.append(self.compile(realm))
            calls.append(self.package(realm))
        return Plan.of(f"Build {realm.name} realm", *calls)

    def compile(self, realm: Realm) -> Call:
        """``javac`` call compiling all regular modules of *realm*."""
        folder = self.folder
        module_path = realm.compile_module_path(folder)
        args = (
            Args()
            .add("--module", ",".join(realm.regular_modules))
            .add("--module-source-path", realm.module_source_path(folder))
            .add_if(module_path, "--module-path", module_path)
            .add("--module-version", self.project.version)
            .add("-d", folder.classes(realm.path))
        )
        return Call.of(JAVAC, *args)

    def package(self, realm: Realm) -> Plan:
        folder = self.folder
        modules = folder.modules(realm.path)
        sources = folder.sources(realm.path)
        jars: list[Call] = []
        for module in realm.regular_modules:
            jars.append(
                Call.of(
                    JAR,
                    "--create",
                    "--file",
                    modules / module_archive(self.project, module),
                    "-C",
                    folder.classes(realm.path, module),
                    ".",
                )
            )
            source_args = Args().add(
                "--create", "--file", sources / module_archive(self.project, module, "sources")
            )
            for directory in realm.module_source_dirs(folder, module):
                source_args.add("-C", directory, ".")
            jars.append(Call.of(JAR, *source_args))
        return Plan.of(
            f"Package {realm.name} realm",
            Call.of(CREATE_DIRECTORIES, modules),
            Call.of(CREATE_DIRECTORIES, sources),
            Plan.of(f"Archive {realm.name} modules", *jars, parallel=True),
        )

    # ------------------------------------------------------------------
    # Documentation
    # ------------------------------------------------------------------

    def document(self) -> Plan:
        """Document the regular modules of the first realm."""
        if not self.project.realms:
            return Plan.of("No modules to document")
        realm = self.project.realms[0]
        if not realm.regular_modules:
            return Plan.of(f"No modules to document in {realm.name} realm")
        folder = self.folder
        javadoc = folder.documentation("javadoc")
        module_path = realm.compile_module_path(folder)
        args = (
            Args()
            .add("-d", javadoc)
            .add("--module", ",".join(realm.regular_modules))
            .add("--module-source-path", realm.module_source_path(folder))
            .add_if(module_path, "--module-path", module_path)
            .add("-quiet")
        )
        archive = folder.documentation(module_archive(self.project, self.project.name, "javadoc"))
        return Plan.of(
            f"Document {realm.name} realm",
            Call.of(CREATE_DIRECTORIES, javadoc),
            Call.of(JAVADOC, *args),
            Call.of(JAR, "--create", "--file", archive, "-C", javadoc, "."),
        )


def plan(folder: Folder, project: Project) -> Plan:
    return Planner(folder, project).plan()
