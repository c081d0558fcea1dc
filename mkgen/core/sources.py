# SPDX-License-Identifier: MIT
"""Source classification and per-file makefile rules.

Every source file is classified by its extension alone. The classifier
then answers three questions for the makefile emitter:

- which object (or generated source) a file contributes to OBJECTS,
- which compiled resource a file contributes to RESOURCES (Windows),
- which static rule builds that output.

Each answer is either a freshly built string or None when the file does
not take part. Files the emitter cannot build (unknown extensions,
headers outside test generators) are filtered out silently.
"""

from __future__ import annotations

import logging
import posixpath
from collections.abc import Callable, Iterable, Iterator
from enum import Enum
from typing import TYPE_CHECKING, Generic, TypeVar

if TYPE_CHECKING:
    from mkgen.configure.platform import PlatformContext
    from mkgen.core.project import Package, SourceFile

logger = logging.getLogger(__name__)

T = TypeVar("T")
R = TypeVar("R")


class SourceKind(Enum):
    C = "c"
    CXX = "c++"
    ASM = "asm"
    NASM = "nasm"
    RESOURCE = "resource"
    HEADER = "header"
    UNKNOWN = "unknown"


# Kinds that end up as an object file in OBJECTS
COMPILED_KINDS = frozenset(
    [SourceKind.C, SourceKind.CXX, SourceKind.ASM, SourceKind.NASM]
)

SOURCE_SUFFIX_MAP: dict[str, SourceKind] = {
    ".c": SourceKind.C,
    ".cpp": SourceKind.CXX,
    ".cxx": SourceKind.CXX,
    ".cc": SourceKind.CXX,
    ".c++": SourceKind.CXX,
    ".s": SourceKind.ASM,
    ".asm": SourceKind.NASM,
    ".rc": SourceKind.RESOURCE,
    ".h": SourceKind.HEADER,
    ".hh": SourceKind.HEADER,
    ".hpp": SourceKind.HEADER,
    ".hxx": SourceKind.HEADER,
}

OBJECT_SUFFIX = ".o"
RESOURCE_SUFFIX = ".res"


def _split(path: str) -> tuple[str, str, str]:
    """Split a path into (directory, stem, suffix), accepting '\\' too."""
    directory, name = posixpath.split(path.replace("\\", "/"))
    stem, suffix = posixpath.splitext(name)
    return directory, stem, suffix


def source_kind(path: str) -> SourceKind:
    """Classify a source file by its extension.

    Uppercase .C is C++ and uppercase .S is preprocessed assembly, as
    with the GNU drivers; every other suffix is matched case-insensitively.
    """
    suffix = _split(path)[2]
    if suffix == ".C":
        return SourceKind.CXX
    return SOURCE_SUFFIX_MAP.get(suffix.lower(), SourceKind.UNKNOWN)


def basename(path: str) -> str:
    """File name of a path without directory or extension."""
    return _split(path)[1]


class FilterMap(Generic[T, R]):
    """Lazy filter-map over a fixed sequence of items.

    Iterating applies ``func`` to each item and yields the results that
    are not None. The items are captured once, so the sequence can be
    iterated any number of times with the same outcome.
    """

    def __init__(self, func: Callable[[T], R | None], items: Iterable[T]) -> None:
        self._func = func
        self._items = tuple(items)

    def results(self) -> Iterator[R | None]:
        """Yield every result, including the absent ones."""
        for item in self._items:
            yield self._func(item)

    def __iter__(self) -> Iterator[R]:
        for result in self.results():
            if result is not None:
                yield result

    def __repr__(self) -> str:
        return f"FilterMap({list(self)!r})"


def filter_map(func: Callable[[T], R | None], items: Iterable[T]) -> FilterMap[T, R]:
    return FilterMap(func, items)


def generated_source_name(path: str) -> str | None:
    """Source file a test generator writes for a header, or None."""
    if source_kind(path) is not SourceKind.HEADER:
        return None
    suffix = _split(path)[2]
    return path[: -len(suffix)] + ".cpp"


def object_name(source: SourceFile, package: Package) -> str | None:
    """Get the OBJECTS entry contributed by a source file.

    For test generator packages the entry is the generated .cpp file;
    for every other package it is the object file name.

    Returns:
        The entry, or None if the file contributes nothing.
    """
    if package.is_test_generator:
        return generated_source_name(source.path)
    if source.kind in COMPILED_KINDS:
        return basename(source.path) + OBJECT_SUFFIX
    return None


def resource_name(source: SourceFile, platform: PlatformContext) -> str | None:
    """Get the RESOURCES entry for a Windows resource script, or None."""
    if platform.is_windows and source.kind is SourceKind.RESOURCE:
        return basename(source.path) + RESOURCE_SUFFIX
    return None


def _rule(
    target: str,
    prerequisite: str,
    commands: list[str],
    platform: PlatformContext,
    *,
    make_objdir: bool = True,
) -> str:
    prefix = "" if platform.verbose else "@"
    lines = [f"{target}: {prerequisite}"]
    if make_objdir:
        # Leading '-' lets the rule continue if the directory already exists
        lines.append(f"\t-{prefix}$(CMD_MKOBJDIR)")
    if not platform.verbose:
        lines.append("\t@echo $(notdir $<)")
    lines.extend(f"\t{prefix}{command}" for command in commands)
    return "\n".join(lines) + "\n"


def _nasm_commands(path: str, platform: PlatformContext) -> list[str]:
    directory, stem, _ = _split(path)
    directory = directory or "."
    opts = "" if platform.is_windows else "-dDONT_USE_UNDERLINE=1 "
    return [
        f"nasm {opts}-i{directory}/ -f elf -o $@ $<",
        f"nasm {opts}-i{directory}/ -M -o $@ $< >$(OBJDIR)/{stem}.d",
    ]


def _test_part_rule(
    source: SourceFile, package: Package, platform: PlatformContext
) -> str | None:
    generated = generated_source_name(source.path)
    if generated is None:
        return None
    command = [package.cxxtest_path, "--part"]
    if package.cxxtest_options:
        command.append(package.cxxtest_options)
    command.extend(["-o", generated, source.path])
    return _rule(
        generated, source.path, [" ".join(command)], platform, make_objdir=False
    )


def compile_rule(
    source: SourceFile, package: Package, platform: PlatformContext
) -> str | None:
    """Build the static makefile rule for one source file.

    Args:
        source: The file to build.
        package: Package owning the file.
        platform: Target OS, toolchain and verbosity.

    Returns:
        The rule text (ending in a newline), or None if the file is not
        built by this package.

    Raises:
        UnsupportedCombinationError: If the toolchain cannot build the file.
    """
    kind = source.kind
    base = basename(source.path)

    # Every package kind lists resources in RESOURCES, test generators too
    if kind is SourceKind.RESOURCE and platform.is_windows:
        return _rule(
            f"$(OBJDIR)/{base}{RESOURCE_SUFFIX}",
            source.path,
            ["windres $< -O coff -o $@"],
            platform,
        )

    if package.is_test_generator:
        return _test_part_rule(source, package, platform)

    toolchain = platform.toolchain

    if kind is SourceKind.C:
        commands = [toolchain.c_command(base)]
    elif kind is SourceKind.CXX:
        commands = [toolchain.cxx_command(base)]
    elif kind is SourceKind.ASM:
        commands = [toolchain.asm_command(source.path)]
    elif kind is SourceKind.NASM:
        commands = _nasm_commands(source.path, platform)
    else:
        logger.debug("No rule for %s in package %s", source.path, package.name)
        return None

    return _rule(f"$(OBJDIR)/{base}{OBJECT_SUFFIX}", source.path, commands, platform)
