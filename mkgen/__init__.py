# SPDX-License-Identifier: MIT
"""
mkgen: GNU makefile generation for C and C++ projects.

mkgen turns a project description (packages, configurations, sources
and link references) into one incrementally-rebuildable makefile per
package.
"""

from __future__ import annotations

import os

__version__ = "0.1.0"

# Variables given on the command line as KEY=value
_cli_vars: dict[str, str] = {}

from mkgen.configure.platform import PlatformContext  # noqa: E402
from mkgen.core.project import (  # noqa: E402
    Configuration,
    LinkReference,
    Package,
    PackageKind,
    Project,
    SourceFile,
)
from mkgen.generators.make import MakefileGenerator  # noqa: E402
from mkgen.toolchains import find_toolchain  # noqa: E402


def set_cli_vars(variables: dict[str, str]) -> None:
    """Replace the command-line variables (called by the CLI)."""
    _cli_vars.clear()
    _cli_vars.update(variables)


def get_var(name: str, default: str | None = None) -> str | None:
    """Get a generation variable set on the command line or from environment.

    Variables can be set when invoking mkgen:
        mkgen generate MKGEN_OS=windows

    Precedence (highest to lowest):
        1. Command line: mkgen generate VAR=value
        2. Environment variable: VAR=value mkgen generate

    Args:
        name: Variable name.
        default: Default value if not set.

    Returns:
        The variable value, or default if not set.
    """
    if name in _cli_vars:
        return _cli_vars[name]
    return os.environ.get(name, default)


__all__ = [
    "__version__",
    "get_var",
    "set_cli_vars",
    "Configuration",
    "LinkReference",
    "MakefileGenerator",
    "Package",
    "PackageKind",
    "PlatformContext",
    "Project",
    "SourceFile",
    "find_toolchain",
]
