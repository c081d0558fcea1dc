# SPDX-License-Identifier: MIT
"""Toolchain protocol, base implementation and registry.

A Toolchain describes how one compiler family is driven from a
makefile: which flags enable dependency tracking, which commands
compile each kind of source, and which driver links the result.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Protocol, runtime_checkable

from mkgen.core.errors import ModelError

logger = logging.getLogger(__name__)


@runtime_checkable
class Toolchain(Protocol):
    """Protocol for toolchains."""

    @property
    def name(self) -> str:
        """Toolchain name (e.g., 'gcc', 'dmc')."""
        ...

    @property
    def is_gcc_family(self) -> bool:
        """True for GCC-compatible drivers."""
        ...

    def get_depflags(self) -> list[str]:
        """Preprocessor flags that make the compiler write a .d file."""
        ...

    def c_command(self, basename: str) -> str:
        """Command compiling a C source into $@."""
        ...

    def cxx_command(self, basename: str) -> str:
        """Command compiling a C++ source into $@."""
        ...

    def asm_command(self, source: str) -> str:
        """Command assembling a preprocessed assembly source into $@."""
        ...


class BaseToolchain(ABC):
    """Abstract base class for toolchains.

    Subclasses provide the per-source compile commands; the flag
    tokens shared by every toolchain live here.
    """

    # Flags that switch off C++ language features
    NO_EXCEPTIONS_FLAG = "-fno-exceptions"
    NO_RTTI_FLAG = "-fno-rtti"

    def __init__(self, name: str) -> None:
        self._name = name

    @property
    def name(self) -> str:
        return self._name

    @property
    def is_gcc_family(self) -> bool:
        return False

    def get_depflags(self) -> list[str]:
        return []

    def get_shared_flags(self) -> list[str]:
        """Link flags that turn the output into a shared library."""
        return []

    def linker_for_language(self, language: str) -> str:
        """Get the make variable of the driver that links a package.

        Args:
            language: Package language ('c' or 'c++').

        Returns:
            '$(CC)' for C packages, '$(CXX)' otherwise.
        """
        if language == "c":
            return "$(CC)"
        return "$(CXX)"

    @abstractmethod
    def c_command(self, basename: str) -> str: ...

    @abstractmethod
    def cxx_command(self, basename: str) -> str: ...

    @abstractmethod
    def asm_command(self, source: str) -> str: ...

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, BaseToolchain):
            return NotImplemented
        return type(self) is type(other) and self.name == other.name

    def __hash__(self) -> int:
        return hash((type(self).__name__, self.name))

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}({self.name!r})"


@dataclass
class ToolchainInfo:
    """Registry entry for a toolchain class."""

    toolchain_class: type[BaseToolchain]
    aliases: list[str] = field(default_factory=list)


class ToolchainRegistry:
    """Maps toolchain names and aliases to toolchain classes."""

    def __init__(self) -> None:
        self._entries: dict[str, ToolchainInfo] = {}

    def register(
        self, toolchain_class: type[BaseToolchain], *, aliases: list[str]
    ) -> None:
        info = ToolchainInfo(toolchain_class, list(aliases))
        for alias in aliases:
            self._entries[alias.lower()] = info

    def names(self) -> list[str]:
        return sorted(self._entries)

    def create(self, name: str) -> BaseToolchain:
        """Instantiate the toolchain registered under a name or alias.

        Raises:
            ModelError: If no toolchain is registered under that name.
        """
        info = self._entries.get(name.lower())
        if info is None:
            raise ModelError(
                f"unknown toolchain '{name}' (known: {', '.join(self.names())})"
            )
        logger.debug("Using %s for '%s'", info.toolchain_class.__name__, name)
        return info.toolchain_class()


toolchain_registry = ToolchainRegistry()
