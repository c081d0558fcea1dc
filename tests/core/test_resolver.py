# SPDX-License-Identifier: MIT
"""Tests for mkgen.core.resolver."""

from mkgen.configure.platform import PlatformContext
from mkgen.core.project import Configuration, Package, Project
from mkgen.core.resolver import (
    link_dependencies,
    link_dependency,
    link_tokens,
    output_dir,
    resolve_link,
    sibling_config,
    target_filename,
    target_path,
)

LINUX = PlatformContext(os="linux")
WINDOWS = PlatformContext(os="windows")
MACOSX = PlatformContext(os="macosx")


def debug_config(**kwargs):
    kwargs.setdefault("bindir", "bin")
    kwargs.setdefault("libdir", "lib")
    return Configuration("Debug", **kwargs)


def make_project():
    """app links core (lib), tests (cxxtestgen), plugin (dll) and m (system)."""
    core = Package("core", language="c", kind="lib", configurations=[debug_config()])
    tests = Package("tests", kind="cxxtestgen", configurations=[debug_config()])
    plugin = Package("plugin", kind="dll", configurations=[debug_config()])
    app = Package(
        "app",
        configurations=[debug_config()],
        links=["core", "tests", "plugin", "m"],
    )
    return Project("demo", [core, tests, plugin, app])


class TestTargetPath:
    def test_static_library(self):
        package = Package("core", kind="lib", configurations=[debug_config()])
        config = package.configurations[0]
        assert target_path(package, config, LINUX) == "lib/libcore.a"
        assert target_path(package, config, WINDOWS) == "lib/libcore.a"

    def test_shared_library(self):
        package = Package("plugin", kind="dll", configurations=[debug_config()])
        config = package.configurations[0]
        assert target_path(package, config, LINUX) == "bin/libplugin.so"
        assert target_path(package, config, WINDOWS) == "bin/plugin.dll"
        assert target_path(package, config, MACOSX) == "bin/libplugin.so"

    def test_dylib_on_macosx(self):
        config = debug_config(flags=["dylib"])
        package = Package("plugin", kind="dll", configurations=[config])
        assert target_filename(package, config, MACOSX) == "libplugin.dylib"

    def test_executables(self):
        package = Package("app", kind="winexe", configurations=[debug_config()])
        config = package.configurations[0]
        assert target_path(package, config, LINUX) == "bin/app"
        assert target_path(package, config, WINDOWS) == "bin/app.exe"

    def test_explicit_target(self):
        config = debug_config(target="tools/mytool")
        package = Package("app", configurations=[config])
        assert target_path(package, config, LINUX) == "bin/tools/mytool"

    def test_current_directory(self):
        config = Configuration("Debug")
        package = Package("app", configurations=[config])
        assert target_path(package, config, LINUX) == "app"
        assert output_dir(package, config, LINUX) == "."

    def test_output_dir(self):
        package = Package("core", kind="lib", configurations=[debug_config()])
        config = package.configurations[0]
        assert output_dir(package, config, LINUX) == "lib"
        config.outdir = "out"
        assert output_dir(package, config, LINUX) == "out"


class TestSiblingConfig:
    def test_same_name(self):
        release = Configuration("Release")
        package = Package("core", configurations=[Configuration("Debug"), release])
        assert sibling_config(package, "Release") is release

    def test_falls_back_to_first(self):
        debug = Configuration("Debug")
        package = Package("core", configurations=[debug])
        assert sibling_config(package, "Profile") is debug


class TestResolveLink:
    def test_sibling_library(self):
        project = make_project()
        assert resolve_link("core", project, "Debug", LINUX) == "lib/libcore.a"

    def test_test_generator_sibling(self):
        project = make_project()
        assert resolve_link("tests", project, "Debug", LINUX) is None
        assert link_dependency("tests", project, "Debug", LINUX) is None

    def test_external_library(self):
        project = make_project()
        assert resolve_link("m", project, "Debug", LINUX) == "-lm"
        assert link_dependency("m", project, "Debug", LINUX) is None

    def test_idempotent(self):
        project = make_project()
        first = resolve_link("core", project, "Debug", LINUX)
        assert resolve_link("core", project, "Debug", LINUX) == first

    def test_uses_sibling_configuration(self):
        core = Package(
            "core",
            kind="lib",
            configurations=[
                Configuration("Debug", libdir="lib/debug"),
                Configuration("Release", libdir="lib/release"),
            ],
        )
        project = Project("demo", [core])
        assert resolve_link("core", project, "Release", LINUX) == (
            "lib/release/libcore.a"
        )


class TestPackageLinks:
    def test_link_tokens_in_order(self):
        project = make_project()
        app = project.find_package("app")
        tokens = link_tokens(app, project, app.configurations[0], LINUX)
        assert list(tokens) == ["lib/libcore.a", "bin/libplugin.so", "-lm"]

    def test_link_dependencies_siblings_only(self):
        project = make_project()
        app = project.find_package("app")
        deps = link_dependencies(app, project, app.configurations[0], LINUX)
        assert list(deps) == ["lib/libcore.a", "bin/libplugin.so"]
        # Iterating again gives the same answer
        assert list(deps) == ["lib/libcore.a", "bin/libplugin.so"]
