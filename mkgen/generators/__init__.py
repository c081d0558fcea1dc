# SPDX-License-Identifier: MIT
"""Build file generators for mkgen."""

from mkgen.generators.make import MakefileGenerator, makefile_name

__all__ = [
    "MakefileGenerator",
    "makefile_name",
]
