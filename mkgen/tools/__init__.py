# SPDX-License-Identifier: MIT
"""Toolchain protocol and registry."""

from mkgen.tools.toolchain import (
    BaseToolchain,
    Toolchain,
    ToolchainRegistry,
    toolchain_registry,
)

__all__ = [
    "BaseToolchain",
    "Toolchain",
    "ToolchainRegistry",
    "toolchain_registry",
]
