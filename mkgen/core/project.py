# SPDX-License-Identifier: MIT
"""Project model for mkgen.

The Project is the top-level container holding every package in
declaration order. Packages own their configurations, source files
and link references. The model is built before generation starts and
is only read by the makefile emitter; there is no "selected
configuration" state, every accessor takes the configuration it
should report on.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING

from mkgen.core.errors import ModelError
from mkgen.core.sources import SourceKind, source_kind

if TYPE_CHECKING:
    from collections.abc import Iterable, Iterator

logger = logging.getLogger(__name__)


class PackageKind(str, Enum):
    """What a package builds."""

    EXE = "exe"
    WINEXE = "winexe"
    DLL = "dll"
    LIB = "lib"
    CXXTESTGEN = "cxxtestgen"
    RUN = "run"

    @property
    def description(self) -> str:
        return _KIND_DESCRIPTIONS[self]


_KIND_DESCRIPTIONS = {
    PackageKind.EXE: "Console Executable",
    PackageKind.WINEXE: "Windowed Executable",
    PackageKind.DLL: "Shared Library",
    PackageKind.LIB: "Static Library",
    PackageKind.CXXTESTGEN: "CxxTest Generator",
    PackageKind.RUN: "Run Target",
}

LANGUAGES = ("c", "c++")

# Boolean switches a configuration may carry
CONFIG_FLAGS: frozenset[str] = frozenset(
    [
        "no-symbols",
        "optimize",
        "optimize-size",
        "optimize-speed",
        "extra-warnings",
        "fatal-warnings",
        "no-frame-pointer",
        "no-exceptions",
        "no-rtti",
        "dylib",
    ]
)


@dataclass
class Configuration:
    """A named set of build settings (e.g. Debug, Release).

    Attributes:
        name: Configuration name, selected at build time with CONFIG=<name>.
        bindir: Directory for executables and shared libraries.
        libdir: Directory for static libraries.
        objdir: Directory for object and dependency files.
        outdir: Directory the target is written to; derived from the
            target path when not given.
        target: Target base name overriding the package name.
        defines: Preprocessor definitions.
        include_paths: Header search directories.
        flags: Boolean switches from CONFIG_FLAGS.
        build_options: Extra compiler options, emitted verbatim.
        link_options: Extra linker options, emitted verbatim.
        lib_paths: Library search directories.
    """

    name: str
    bindir: str = "."
    libdir: str = "."
    objdir: str = "obj"
    outdir: str | None = None
    target: str | None = None
    defines: list[str] = field(default_factory=list)
    include_paths: list[str] = field(default_factory=list)
    flags: list[str] = field(default_factory=list)
    build_options: list[str] = field(default_factory=list)
    link_options: list[str] = field(default_factory=list)
    lib_paths: list[str] = field(default_factory=list)

    def __post_init__(self) -> None:
        if not self.name:
            raise ModelError("configuration name must not be empty")
        unknown = [flag for flag in self.flags if flag not in CONFIG_FLAGS]
        if unknown:
            raise ModelError(
                f"configuration '{self.name}': unknown flag(s): {', '.join(unknown)}"
            )

    def has_flag(self, flag: str) -> bool:
        return flag in self.flags


@dataclass(frozen=True)
class SourceFile:
    """A file listed in a package."""

    path: str

    @property
    def kind(self) -> SourceKind:
        return source_kind(self.path)


@dataclass(frozen=True)
class LinkReference:
    """A library a package links against.

    The name is resolved at generation time, either to a sibling
    package's output or to a system library.
    """

    name: str


@dataclass
class Package:
    """A buildable unit: one makefile, one target.

    Attributes:
        name: Package name, unique within the project.
        language: 'c' or 'c++'; picks the link driver.
        kind: What the package builds (see PackageKind).
        configurations: Build configurations in declaration order.
        files: Source files in declaration order.
        links: Link references in declaration order.
        path: Directory the package makefile is written to.
        cxxtest_path: Test generator executable (cxxtestgen packages).
        cxxtest_options: Options for each generated test part.
        cxxtest_root_options: Options for the generated test runner.
        cxxtest_root_file: Source file the test runner is written to.
    """

    name: str
    language: str = "c++"
    kind: PackageKind = PackageKind.EXE
    configurations: list[Configuration] = field(default_factory=list)
    files: list[SourceFile] = field(default_factory=list)
    links: list[LinkReference] = field(default_factory=list)
    path: str = "."
    cxxtest_path: str = "cxxtestgen"
    cxxtest_options: str = ""
    cxxtest_root_options: str = ""
    cxxtest_root_file: str = "runner.cpp"

    def __post_init__(self) -> None:
        if not self.name:
            raise ModelError("package name must not be empty")
        try:
            self.kind = PackageKind(self.kind)
        except ValueError:
            raise ModelError(
                f"package '{self.name}': unknown kind '{self.kind}'"
            ) from None
        if self.language not in LANGUAGES:
            raise ModelError(
                f"package '{self.name}': unknown language '{self.language}'"
            )
        if not self.configurations:
            raise ModelError(f"package '{self.name}' has no configurations")
        seen: set[str] = set()
        for config in self.configurations:
            if config.name in seen:
                raise ModelError(
                    f"package '{self.name}': duplicate configuration '{config.name}'"
                )
            seen.add(config.name)
        # Plain strings are accepted for convenience
        self.files = [
            f if isinstance(f, SourceFile) else SourceFile(str(f)) for f in self.files
        ]
        self.links = [
            ref if isinstance(ref, LinkReference) else LinkReference(str(ref))
            for ref in self.links
        ]

    @property
    def is_test_generator(self) -> bool:
        return self.kind is PackageKind.CXXTESTGEN

    @property
    def config_names(self) -> list[str]:
        return [config.name for config in self.configurations]

    def get_config(self, name: str) -> Configuration | None:
        """Get a configuration by name, or None if the package lacks it."""
        for config in self.configurations:
            if config.name == name:
                return config
        return None


class Project:
    """Top-level container for the packages of a build.

    Example:
        project = Project("demo")
        project.add_package(
            Package("core", kind="lib", configurations=[Configuration("Debug")])
        )

    Attributes:
        name: Project name.
    """

    __slots__ = ("name", "_packages")

    def __init__(self, name: str, packages: Iterable[Package] = ()) -> None:
        self.name = name
        self._packages: dict[str, Package] = {}
        for package in packages:
            self.add_package(package)

    def add_package(self, package: Package) -> Package:
        """Register a package with the project.

        Raises:
            ModelError: If a package with the same name already exists.
        """
        if package.name in self._packages:
            raise ModelError(f"duplicate package '{package.name}'")
        self._packages[package.name] = package
        logger.debug("Added package %s (%s)", package.name, package.kind.value)
        return package

    def find_package(self, name: str) -> Package | None:
        return self._packages.get(name)

    @property
    def packages(self) -> list[Package]:
        return list(self._packages.values())

    def __iter__(self) -> Iterator[Package]:
        return iter(self._packages.values())

    def __len__(self) -> int:
        return len(self._packages)

    def __repr__(self) -> str:
        return f"Project({self.name!r}, packages={list(self._packages)})"
