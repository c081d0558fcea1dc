# SPDX-License-Identifier: MIT
"""GNU Make generator.

Writes one makefile per package. A makefile holds, in order:

1. a header naming the language and kind of the package,
2. a default CONFIG and one ``ifeq ($(CONFIG),<name>)`` block per
   configuration defining directories, flags, LDDEPS, TARGET and BLDCMD,
3. the OBJECTS list (and RESOURCES on Windows),
4. portable directory-creation commands and the ``.PHONY`` declaration,
5. the main target and the clean target,
6. one static rule per source file,
7. an ``-include`` of the generated dependency files.

Per-file rules are listed explicitly rather than through pattern rules,
which keeps them testable and avoids VPATH. Generation is
deterministic: the same project and platform always give the same bytes.

Usage:
    generator = MakefileGenerator(PlatformContext.create())
    generator.generate(project, Path("."))
"""

from __future__ import annotations

import contextlib
import logging
import posixpath
from pathlib import Path
from typing import TYPE_CHECKING

from mkgen.configure.platform import PlatformContext
from mkgen.core.errors import GenerateError
from mkgen.core.flags import compose_flags
from mkgen.core.project import PackageKind
from mkgen.core.resolver import (
    link_dependencies,
    link_tokens,
    output_dir,
    target_path,
)
from mkgen.core.sources import compile_rule, filter_map, object_name, resource_name

if TYPE_CHECKING:
    from collections.abc import Iterable

    from mkgen.core.project import Configuration, Package, Project

logger = logging.getLogger(__name__)

# Directory-creation commands: POSIX mkdir -p when no Windows command
# interpreter is found, cmd.exe "if not exist" otherwise.
TOOLING_PREAMBLE = r"""CMD := $(subst \,\\,$(ComSpec)$(COMSPEC))
ifeq (,$(CMD))
  CMD_MKBINDIR := mkdir -p $(BINDIR)
  CMD_MKLIBDIR := mkdir -p $(LIBDIR)
  CMD_MKOUTDIR := mkdir -p $(OUTDIR)
  CMD_MKOBJDIR := mkdir -p $(OBJDIR)
else
  CMD_MKBINDIR := $(CMD) /c if not exist $(subst /,\\,$(BINDIR)) mkdir $(subst /,\\,$(BINDIR))
  CMD_MKLIBDIR := $(CMD) /c if not exist $(subst /,\\,$(LIBDIR)) mkdir $(subst /,\\,$(LIBDIR))
  CMD_MKOUTDIR := $(CMD) /c if not exist $(subst /,\\,$(OUTDIR)) mkdir $(subst /,\\,$(OUTDIR))
  CMD_MKOBJDIR := $(CMD) /c if not exist $(subst /,\\,$(OBJDIR)) mkdir $(subst /,\\,$(OBJDIR))
endif

.PHONY: clean

"""


def makefile_name(project: Project, package: Package) -> str:
    """Get the makefile path of a package, relative to the output directory.

    A package alone in its directory gets a plain ``Makefile``; packages
    sharing a directory get ``<name>.make`` each.
    """
    location = posixpath.normpath(package.path)
    shared = any(
        other is not package and posixpath.normpath(other.path) == location
        for other in project
    )
    filename = f"{package.name}.make" if shared else "Makefile"
    return posixpath.normpath(posixpath.join(location, filename))


class _PackageWriter:
    """Renders the makefile of one package into a string."""

    def __init__(
        self, project: Project, package: Package, platform: PlatformContext
    ) -> None:
        self.project = project
        self.package = package
        self.platform = platform
        self.prefix = "" if platform.verbose else "@"
        self.is_bundle = platform.is_macos and package.kind is PackageKind.WINEXE
        self._out: list[str] = []

    def write(self, text: str) -> None:
        self._out.append(text)

    def write_list(
        self, variable: str, entries: Iterable[str], prefix: str = ""
    ) -> None:
        """Write a one-entry-per-line list variable."""
        self.write(f"{variable} := \\\n")
        for entry in entries:
            self.write(f"\t{prefix}{entry} \\\n")
        self.write("\n")

    def render(self) -> str:
        self._write_header()
        self._write_default_config()
        for config in self.package.configurations:
            self._write_config_block(config)
        self._write_objects()
        if self.platform.is_windows:
            self._write_resources()
        self.write(TOOLING_PREAMBLE)
        self._write_main_target()
        self._write_clean_target()
        self._write_file_rules()
        if not self.package.is_test_generator:
            # Missing .d files are normal before the first build
            self.write("-include $(OBJECTS:%.o=%.d)\n\n")
        return "".join(self._out)

    def _write_header(self) -> None:
        language = "C++" if self.package.language == "c++" else "C"
        self.write(
            f"# {language} {self.package.kind.description} "
            "Makefile autogenerated by mkgen\n"
        )
        self.write(
            "# Don't edit this file! Instead edit the project file then rerun mkgen\n\n"
        )

    def _write_default_config(self) -> None:
        self.write("ifndef CONFIG\n")
        self.write(f"  CONFIG={self.package.configurations[0].name}\n")
        self.write("endif\n\n")

    def _write_config_block(self, config: Configuration) -> None:
        package = self.package
        platform = self.platform
        links = link_tokens(package, self.project, config, platform)
        deps = link_dependencies(package, self.project, config, platform)
        flags = compose_flags(package, config, platform, links)
        target = posixpath.basename(target_path(package, config, platform))

        self.write(f"ifeq ($(CONFIG),{config.name})\n")
        self.write(f"  BINDIR := {config.bindir}\n")
        self.write(f"  LIBDIR := {config.libdir}\n")
        self.write(f"  OBJDIR := {config.objdir}\n")
        self.write(f"  OUTDIR := {output_dir(package, config, platform)}\n")
        self.write(_assign("CPPFLAGS", ":=", flags.cppflags))
        self.write(_assign("CFLAGS", "+=", ["$(CPPFLAGS)", *flags.cflags]))
        self.write(_assign("CXXFLAGS", ":=", ["$(CFLAGS)", *flags.cxxflags]))
        self.write(_assign("LDFLAGS", "+=", flags.ldflags))
        self.write(_assign("LDDEPS", ":=", deps))
        if package.is_test_generator:
            self.write("  TARGET := $(OBJECTS)\n")
        else:
            self.write(f"  TARGET := {target}\n")
        if self.is_bundle:
            self.write(f"  MACAPP := {target}.app/Contents\n")
        self.write(f"  BLDCMD = {self._build_command()}\n")
        self.write("endif\n\n")

    def _build_command(self) -> str:
        kind = self.package.kind
        if kind is PackageKind.LIB:
            return "ar -cr $(OUTDIR)/$(TARGET) $(OBJECTS); ranlib $(OUTDIR)/$(TARGET)"
        if kind is PackageKind.CXXTESTGEN:
            return "true"
        if kind is PackageKind.RUN:
            return "for a in $(LDDEPS); do echo Running $$a; $$a; done"
        linker = self.platform.toolchain.linker_for_language(self.package.language)
        output = (
            "$(OUTDIR)/$(MACAPP)/MacOS/$(TARGET)"
            if self.is_bundle
            else "$(OUTDIR)/$(TARGET)"
        )
        return f"{linker} -o {output} $(OBJECTS) $(LDFLAGS) $(RESOURCES)"

    def _write_objects(self) -> None:
        objects = filter_map(
            lambda source: object_name(source, self.package), self.package.files
        )
        prefix = "" if self.package.is_test_generator else "$(OBJDIR)/"
        self.write_list("OBJECTS", objects, prefix)

    def _write_resources(self) -> None:
        resources = filter_map(
            lambda source: resource_name(source, self.platform), self.package.files
        )
        self.write_list("RESOURCES", resources, "$(OBJDIR)/")

    def _write_main_target(self) -> None:
        package = self.package
        prefix = self.prefix

        if self.is_bundle:
            self.write(
                "all: $(OUTDIR)/$(MACAPP)/PkgInfo $(OUTDIR)/$(MACAPP)/Info.plist "
                "$(OUTDIR)/$(MACAPP)/MacOS/$(TARGET)\n\n"
            )
            head = "$(OUTDIR)/$(MACAPP)/MacOS/$(TARGET)"
        elif package.is_test_generator:
            head = "all"
        else:
            head = "$(OUTDIR)/$(TARGET)"
        self.write(f"{head}: $(OBJECTS) $(LDDEPS) $(RESOURCES)\n")

        if package.is_test_generator:
            command = [package.cxxtest_path, "--root"]
            if package.cxxtest_root_options:
                command.append(package.cxxtest_root_options)
            command.extend(["-o", package.cxxtest_root_file])
            self.write(f"\t{prefix}{' '.join(command)}\n\n")
        elif package.kind is PackageKind.RUN:
            self.write(f"\t{prefix}$(BLDCMD)\n\n")
        else:
            if not self.platform.verbose:
                self.write(f"\t@echo Linking {package.name}\n")
            self.write(f"\t-{prefix}$(CMD_MKBINDIR)\n")
            self.write(f"\t-{prefix}$(CMD_MKLIBDIR)\n")
            self.write(f"\t-{prefix}$(CMD_MKOUTDIR)\n")
            if self.is_bundle:
                self.write(
                    f"\t-{prefix}if [ ! -d $(OUTDIR)/$(MACAPP)/MacOS ]; "
                    "then mkdir -p $(OUTDIR)/$(MACAPP)/MacOS; fi\n"
                )
            self.write(f"\t{prefix}$(BLDCMD)\n\n")

        if self.is_bundle:
            self.write("$(OUTDIR)/$(MACAPP)/PkgInfo:\n\n")
            self.write("$(OUTDIR)/$(MACAPP)/Info.plist:\n\n")

    def _write_clean_target(self) -> None:
        self.write("clean:\n")
        self.write(f"\t@echo Cleaning {self.package.name}\n")
        if self.is_bundle:
            self.write(f"\t-{self.prefix}rm -rf $(OUTDIR)/$(TARGET).app $(OBJDIR)\n")
        elif self.package.is_test_generator:
            self.write(f"\t-{self.prefix}rm -f $(OBJECTS)\n")
        else:
            self.write(f"\t-{self.prefix}rm -rf $(OUTDIR)/$(TARGET) $(OBJDIR)\n")
        self.write("\n")

    def _write_file_rules(self) -> None:
        rules = filter_map(
            lambda source: compile_rule(source, self.package, self.platform),
            self.package.files,
        )
        for rule in rules:
            self.write(rule)
            self.write("\n")


def _assign(variable: str, operator: str, tokens: Iterable[str]) -> str:
    """Format an indented variable assignment inside a configuration block."""
    line = f"  {variable} {operator}"
    for token in tokens:
        line += f" {token}"
    return line + "\n"


class MakefileGenerator:
    """Generator that produces GNU makefiles, one per package.

    The generated makefiles select a configuration through the CONFIG
    variable (``make CONFIG=Release``) and track header dependencies
    through .d files written by the compiler.

    Example:
        generator = MakefileGenerator(PlatformContext.create(os_name="linux"))
        written = generator.generate(project, Path("build"))
    """

    def __init__(self, platform: PlatformContext | None = None) -> None:
        """Initialize the generator.

        Args:
            platform: Target OS, toolchain and verbosity. Detected from
                the host when None.
        """
        self.platform = platform if platform is not None else PlatformContext.create()

    @property
    def name(self) -> str:
        return "make"

    def __repr__(self) -> str:
        return f"{type(self).__name__}(platform={self.platform.os!r})"

    def render_package(self, project: Project, package: Package) -> str:
        """Render the makefile of one package without writing it.

        Raises:
            UnsupportedCombinationError: If a source cannot be built with
                the platform's toolchain.
        """
        logger.debug("Rendering makefile for %s", package.name)
        return _PackageWriter(project, package, self.platform).render()

    def generate(self, project: Project, output_dir: Path) -> list[Path]:
        """Write the makefiles of every package in declaration order.

        Each makefile is rendered completely before its file is opened,
        so an error never leaves a half-written makefile behind.

        Args:
            project: Project to generate for.
            output_dir: Directory package paths are relative to.

        Returns:
            Paths of the written makefiles.

        Raises:
            GenerateError: If a makefile cannot be written.
        """
        written: list[Path] = []
        for package in project:
            text = self.render_package(project, package)
            path = Path(output_dir) / makefile_name(project, package)
            self._write_file(path, text)
            logger.info("Generated %s", path)
            written.append(path)
        return written

    def _write_file(self, path: Path, text: str) -> None:
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            with open(path, "w", encoding="utf-8", newline="\n") as f:
                f.write(text)
        except OSError as e:
            with contextlib.suppress(OSError):
                path.unlink()
            raise GenerateError(f"cannot write makefile {path}: {e}") from e
