# SPDX-License-Identifier: MIT
"""GCC toolchain implementation.

Drives the GNU compilers through the CC and CXX make variables, with
-MD/-MF dependency files so make can rebuild incrementally.
"""

from __future__ import annotations

from mkgen.tools.toolchain import BaseToolchain


class GccToolchain(BaseToolchain):
    """GCC-family toolchain (gcc, g++, clang and compatible drivers)."""

    def __init__(self) -> None:
        super().__init__("gcc")

    @property
    def is_gcc_family(self) -> bool:
        return True

    def get_depflags(self) -> list[str]:
        return ["-MD"]

    def get_shared_flags(self) -> list[str]:
        return ["-shared"]

    def c_command(self, basename: str) -> str:
        return "$(CC) $(CFLAGS) -MF $(OBJDIR)/$(<F:%.c=%.d) -o $@ -c $<"

    def cxx_command(self, basename: str) -> str:
        return f"$(CXX) $(CXXFLAGS) -MF $(OBJDIR)/{basename}.d -o $@ -c $<"

    def asm_command(self, source: str) -> str:
        # .s and .S both go through the C driver so #include/#define work
        return "$(CC) -x assembler-with-cpp $(CPPFLAGS) -o $@ -c $<"


# =============================================================================
# Registration
# =============================================================================

from mkgen.tools.toolchain import toolchain_registry  # noqa: E402

toolchain_registry.register(GccToolchain, aliases=["gcc", "gnu", "clang", "cc"])
