# SPDX-License-Identifier: MIT
"""Digital Mars toolchain implementation.

The legacy dmc compiler is invoked directly rather than through the
CC/CXX variables. It cannot write GCC-style dependency files, so
packages built with it do not rebuild when only headers change.
"""

from __future__ import annotations

from mkgen.core.errors import UnsupportedCombinationError
from mkgen.tools.toolchain import BaseToolchain


class DmcToolchain(BaseToolchain):
    """Digital Mars C/C++ toolchain."""

    def __init__(self) -> None:
        super().__init__("dmc")

    def c_command(self, basename: str) -> str:
        return "dmc $(CFLAGS) -o $@ -c $<"

    def cxx_command(self, basename: str) -> str:
        # -cpp compiles as C++, -Ae/-Ar enable exceptions and RTTI, -mn is
        # the Win32 memory model
        return "dmc -cpp -Ae -Ar -mn $(CXXFLAGS) -o $@ -c $<"

    def asm_command(self, source: str) -> str:
        raise UnsupportedCombinationError(source, self.name)


from mkgen.tools.toolchain import toolchain_registry  # noqa: E402

toolchain_registry.register(DmcToolchain, aliases=["dmc", "digitalmars"])
