# SPDX-License-Identifier: MIT
"""Tests for mkgen.toolchains.dmc."""

import pytest

from mkgen.core.errors import GenerateError, UnsupportedCombinationError
from mkgen.toolchains import DmcToolchain, GccToolchain, find_toolchain


class TestDmcToolchain:
    def test_creation(self):
        tc = DmcToolchain()
        assert tc.name == "dmc"
        assert not tc.is_gcc_family
        assert tc != GccToolchain()

    def test_no_dependency_or_shared_flags(self):
        tc = DmcToolchain()
        assert tc.get_depflags() == []
        assert tc.get_shared_flags() == []

    def test_commands(self):
        tc = DmcToolchain()
        assert tc.c_command("a") == "dmc $(CFLAGS) -o $@ -c $<"
        assert tc.cxx_command("b") == "dmc -cpp -Ae -Ar -mn $(CXXFLAGS) -o $@ -c $<"

    def test_assembly_unsupported(self):
        tc = DmcToolchain()
        with pytest.raises(UnsupportedCombinationError) as exc:
            tc.asm_command("src/boot.s")
        assert exc.value.source == "src/boot.s"
        assert exc.value.toolchain == "dmc"
        assert isinstance(exc.value, GenerateError)
        assert str(exc.value) == "toolchain 'dmc' cannot build source file: src/boot.s"

    @pytest.mark.parametrize("name", ["dmc", "digitalmars", "DMC"])
    def test_aliases(self, name):
        assert isinstance(find_toolchain(name), DmcToolchain)
