# SPDX-License-Identifier: MIT
"""Toolchain definitions (GCC, Digital Mars)."""

from mkgen.toolchains.dmc import DmcToolchain
from mkgen.toolchains.gcc import GccToolchain
from mkgen.tools.toolchain import BaseToolchain, toolchain_registry


def find_toolchain(name: str) -> BaseToolchain:
    """Create the toolchain registered under a name or alias.

    Args:
        name: Toolchain name such as 'gcc', 'clang' or 'dmc'.

    Raises:
        ModelError: If the name is unknown.
    """
    return toolchain_registry.create(name)


__all__ = [
    "DmcToolchain",
    "GccToolchain",
    "find_toolchain",
]
