"""Tests for modmake.planner -- plan shape for known project trees."""

import os

from modmake.folder import Folder
from modmake.layout import Layout
from modmake.planner import Planner, module_archive, plan
from modmake.project import Project, Realm, build_project
from modmake.tasks import Call, Plan, leaves, render


def _child(plan: Plan, name: str):
    for call in plan.calls:
        if call.name == name:
            return call
    raise AssertionError(f"{name!r} not in {[c.name for c in plan.calls]}")


def _arg(call: Call, option: str) -> str:
    return call.args[call.args.index(option) + 1]


# ---------------------------------------------------------------------------
# Root shape
# ---------------------------------------------------------------------------


class TestRootPlan:
    def test_single_module_project(self, greetings, settings):
        project = build_project(greetings, settings)
        root = Planner(greetings, project).plan()

        assert root.name == "Build demo 1.0"
        assert root.parallel is False
        create, versions, compile_and_document, summary = root.calls

        assert create == Call.of("create-directories", greetings.out)
        assert versions.parallel is True
        assert [str(c) for c in versions.calls] == ["javac --version", "jar --version", "javadoc --version"]
        assert compile_and_document.parallel is True
        assert summary == Call.of("write-summary", greetings.summary())

        build_main = compile_and_document.calls[0].calls[0]
        assert build_main.name == "Build main realm"
        javac, package = build_main.calls
        assert javac.name == "javac"
        assert _arg(javac, "--module") == "com.greetings"
        assert _arg(javac, "--module-source-path") == str(greetings.base / "src" / "*")
        assert _arg(javac, "--module-version") == "1.0"
        assert _arg(javac, "-d") == str(greetings.classes("main"))
        assert "--module-path" not in javac.args

        archive = _child(package, "Archive main modules")
        jars = [_arg(c, "--file") for c in archive.calls]
        assert jars == [
            str(greetings.modules("main") / "com.greetings-1.0.jar"),
            str(greetings.sources("main") / "com.greetings-1.0-sources.jar"),
        ]

    def test_idempotent(self, astro, settings):
        project = build_project(astro, settings)
        planner = Planner(astro, project)
        first, second = planner.plan(), planner.plan()
        assert first == second
        assert render(first) == render(second)
        assert plan(astro, project) == first

    def test_does_not_touch_disk(self, tmp_path):
        project = Project(
            name="ghost",
            version="1",
            realms=(Realm(name="main", modules=("a",), module_source_paths=Layout.JIGSAW.templates),),
        )
        root = Planner(Folder.of(tmp_path / "nowhere"), project).plan()
        assert any(c.name == "javac" for c in leaves(root))
        assert not (tmp_path / "nowhere").exists()


# ---------------------------------------------------------------------------
# Realms
# ---------------------------------------------------------------------------


class TestRealms:
    def test_realm_order_and_module_path(self, astro, settings):
        project = build_project(astro, settings)
        compile_all = Planner(astro, project).compile_all()
        assert [p.name for p in compile_all.calls] == ["Build main realm", "Build test realm"]
        assert compile_all.parallel is False

        main_javac = compile_all.calls[0].calls[0]
        test_javac = compile_all.calls[1].calls[0]
        assert _arg(main_javac, "--module") == "com.greetings,org.astro"
        assert "--module-path" not in main_javac.args
        assert _arg(test_javac, "--module") == "integration,org.astro"
        assert _arg(test_javac, "--module-path") == str(astro.modules("main"))

    def test_default_layout_source_path(self, astro, settings):
        project = build_project(astro, settings)
        javac = Planner(astro, project).compile(project.realm("test"))
        assert _arg(javac, "--module-source-path").split(os.pathsep) == [
            str(astro.base / "src" / "*" / "test" / "java"),
            str(astro.base / "src" / "*" / "test" / "module"),
        ]

    def test_empty_realm_is_no_op(self, settings):
        project = Project(name="p", version="1", realms=(Realm(name="main"),))
        realm_plan = Planner(Folder.of("p"), project).build_realm(project.realms[0])
        assert realm_plan == Plan.of("No modules in main realm")

    def test_multi_release_module_delegated(self):
        realm = Realm(
            name="main",
            modules=("com.a", "com.mr"),
            module_source_paths=Layout.JIGSAW.templates,
            multi_release_modules=("com.mr",),
        )
        project = Project(name="p", version="1", realms=(realm,))
        folder = Folder.of("p")
        realm_plan = Planner(folder, project).build_realm(realm)
        mr, javac, package = realm_plan.calls
        assert mr == Call.of("multi-release-module", "main", "com.mr")
        assert _arg(javac, "--module") == "com.a"
        assert _arg(javac, "--module-path") == str(folder.modules("main"))
        assert all("com.mr" not in c.args[2] for c in leaves(package) if c.name == "jar")

    def test_regular_module_requires_multi_release_sibling(self, tmp_path, settings):
        from tests.conftest import write_class, write_module

        write_module(tmp_path / "src" / "app", "app", ("lib",))
        write_class(tmp_path / "src" / "lib" / "java-8", "lib")
        write_module(tmp_path / "src" / "lib" / "java-9", "lib", exports="lib")
        folder = Folder.of(tmp_path)
        project = build_project(folder, settings)
        planner = Planner(folder, project)

        calls = list(planner.build_realm(project.realm("main")).calls)
        names = [c.name for c in calls]
        assert names.index("multi-release-module") < names.index("javac")
        javac = calls[names.index("javac")]
        assert _arg(javac, "--module") == "app"
        assert _arg(javac, "--module-path") == str(folder.modules("main"))

        doc = planner.document()
        javadoc = _child(doc, "javadoc")
        assert _arg(javadoc, "--module-path") == str(folder.modules("main"))
        assert _child(planner.plan(), "Compile and document").parallel is False

    def test_only_multi_release_modules(self):
        realm = Realm(
            name="main",
            modules=("com.mr",),
            module_source_paths=Layout.JIGSAW.templates,
            multi_release_modules=("com.mr",),
        )
        project = Project(name="p", version="1", realms=(realm,))
        realm_plan = Planner(Folder.of("p"), project).build_realm(realm)
        assert realm_plan.calls == (Call.of("multi-release-module", "main", "com.mr"),)


# ---------------------------------------------------------------------------
# Documentation
# ---------------------------------------------------------------------------


class TestDocument:
    def test_documents_first_realm(self, astro, settings):
        project = build_project(astro, settings)
        doc = Planner(astro, project).document()
        assert doc.name == "Document main realm"
        create, javadoc, jar = doc.calls
        assert create == Call.of("create-directories", astro.documentation("javadoc"))
        assert _arg(javadoc, "--module") == "com.greetings,org.astro"
        assert javadoc.args[-1] == "-quiet"
        assert _arg(jar, "--file") == str(astro.documentation("demo-1.0-javadoc.jar"))

    def test_nothing_to_document(self):
        project = Project(name="p", version="1")
        assert Planner(Folder.of("p"), project).document().calls == ()


class TestModuleArchive:
    def test_names(self):
        project = Project(name="p", version="2.1-ea")
        assert module_archive(project, "com.a") == "com.a-2.1-ea.jar"
        assert module_archive(project, "com.a", "sources") == "com.a-2.1-ea-sources.jar"


class TestPackage:
    def test_sources_from_discovered_roots(self, astro, settings):
        project = build_project(astro, settings)
        package = Planner(astro, project).package(project.realm("test"))
        archive = _child(package, "Archive test modules")
        sources = [c for c in archive.calls if "org.astro-1.0-sources.jar" in _arg(c, "--file")][0]
        assert sources.args[3:] == ("-C", str(astro.base / "src/org.astro/test/module"), ".")

    def test_classes_archived_per_module(self, astro, settings):
        project = build_project(astro, settings)
        package = Planner(astro, project).package(project.realm("main"))
        create_modules, create_sources, archive = package.calls
        assert create_modules == Call.of("create-directories", astro.modules("main"))
        assert create_sources == Call.of("create-directories", astro.sources("main"))
        assert archive.parallel is True
        assert len(archive.calls) == 4
        assert _arg(archive.calls[0], "-C") == str(astro.classes("main", "com.greetings"))
