# SPDX-License-Identifier: MIT
"""Link reference resolution.

A package names the libraries it links against. Each name is resolved
against the project at generation time:

- a sibling package contributes the path of its build output, both as
  a linker argument and as a prerequisite of the link step (LDDEPS),
  so relinking follows rebuilding;
- a test generator sibling contributes nothing, it has no linkable
  output;
- any other name is a system library and becomes ``-l<name>``. System
  libraries are assumed to be built already, so they never appear in
  LDDEPS.

Resolution reads the model only; resolving the same name twice in one
run always gives the same answer.
"""

from __future__ import annotations

import logging
import posixpath
from typing import TYPE_CHECKING

from mkgen.core.project import LANGUAGES, PackageKind
from mkgen.core.sources import FilterMap, filter_map

if TYPE_CHECKING:
    from mkgen.configure.platform import PlatformContext
    from mkgen.core.project import Configuration, Package, Project

logger = logging.getLogger(__name__)


def sibling_config(package: Package, config_name: str) -> Configuration:
    """Get the configuration of a package matching a configuration name.

    Falls back to the package's first configuration when it has no
    configuration of that name.
    """
    config = package.get_config(config_name)
    if config is None:
        logger.debug(
            "Package %s has no configuration %s, using %s",
            package.name,
            config_name,
            package.configurations[0].name,
        )
        config = package.configurations[0]
    return config


def target_filename(
    package: Package, config: Configuration, platform: PlatformContext
) -> str:
    """Get the decorated file name of a package's output.

    Examples (package 'core'):
        lib        -> libcore.a
        dll        -> core.dll (windows), libcore.dylib (macosx with
                      the dylib flag), libcore.so (otherwise)
        exe/winexe -> core.exe (windows), core (otherwise)
    """
    stem = config.target or package.name
    directory, name = posixpath.split(stem)
    kind = package.kind

    if kind is PackageKind.LIB:
        name = f"lib{name}.a"
    elif kind is PackageKind.DLL:
        if platform.is_windows:
            name = f"{name}.dll"
        elif platform.is_macos and config.has_flag("dylib"):
            name = f"lib{name}.dylib"
        else:
            name = f"lib{name}.so"
    elif kind in (PackageKind.EXE, PackageKind.WINEXE) and platform.is_windows:
        name = f"{name}.exe"

    return posixpath.join(directory, name) if directory else name


def target_path(
    package: Package, config: Configuration, platform: PlatformContext
) -> str:
    """Get the path of a package's output for one configuration.

    Static libraries go to the configuration's libdir, everything else
    to its bindir.
    """
    base_dir = config.libdir if package.kind is PackageKind.LIB else config.bindir
    return posixpath.normpath(
        posixpath.join(base_dir, target_filename(package, config, platform))
    )


def output_dir(
    package: Package, config: Configuration, platform: PlatformContext
) -> str:
    """Get OUTDIR: explicit, or the directory of the target path."""
    if config.outdir is not None:
        return config.outdir
    return posixpath.dirname(target_path(package, config, platform)) or "."


def resolve_link(
    name: str, project: Project, config_name: str, platform: PlatformContext
) -> str | None:
    """Resolve a link reference to a linker argument.

    Args:
        name: The referenced name.
        project: Project to look for sibling packages in.
        config_name: Configuration being generated.
        platform: Target platform.

    Returns:
        The sibling's output path, ``-l<name>`` for a system library,
        or None when the sibling has nothing to link.
    """
    sibling = project.find_package(name)
    if sibling is None:
        return f"-l{name}"
    if sibling.is_test_generator or sibling.language not in LANGUAGES:
        return None
    return target_path(sibling, sibling_config(sibling, config_name), platform)


def link_dependency(
    name: str, project: Project, config_name: str, platform: PlatformContext
) -> str | None:
    """Resolve a link reference to an LDDEPS entry, or None."""
    sibling = project.find_package(name)
    if sibling is None or sibling.is_test_generator:
        return None
    return target_path(sibling, sibling_config(sibling, config_name), platform)


def link_tokens(
    package: Package,
    project: Project,
    config: Configuration,
    platform: PlatformContext,
) -> FilterMap:
    """Linker arguments for all link references of a package."""
    return filter_map(
        lambda ref: resolve_link(ref.name, project, config.name, platform),
        package.links,
    )


def link_dependencies(
    package: Package,
    project: Project,
    config: Configuration,
    platform: PlatformContext,
) -> FilterMap:
    """LDDEPS entries for all link references of a package."""
    return filter_map(
        lambda ref: link_dependency(ref.name, project, config.name, platform),
        package.links,
    )
