# SPDX-License-Identifier: MIT
"""Platform context for makefile generation.

A PlatformContext bundles what the generated makefiles depend on
besides the project itself: the target operating system, the
toolchain, and whether make should echo full command lines.
"""

from __future__ import annotations

import logging
import sys
from dataclasses import dataclass, field

from mkgen.core.errors import ModelError
from mkgen.toolchains import GccToolchain, find_toolchain
from mkgen.tools.toolchain import BaseToolchain

logger = logging.getLogger(__name__)

WINDOWS = "windows"
MACOSX = "macosx"
OTHER = "other"

_OS_ALIASES: dict[str, str] = {
    "windows": WINDOWS,
    "win32": WINDOWS,
    "cygwin": WINDOWS,
    "macosx": MACOSX,
    "macos": MACOSX,
    "darwin": MACOSX,
    "linux": OTHER,
    "bsd": OTHER,
    "freebsd": OTHER,
    "openbsd": OTHER,
    "netbsd": OTHER,
    "solaris": OTHER,
    "other": OTHER,
}


def normalize_os(name: str) -> str:
    """Map an OS name or alias to 'windows', 'macosx' or 'other'.

    Raises:
        ModelError: If the name is not recognized.
    """
    key = name.lower()
    if key.startswith("linux"):
        key = "linux"
    try:
        return _OS_ALIASES[key]
    except KeyError:
        raise ModelError(f"unknown operating system '{name}'") from None


def detect_os() -> str:
    """Get the OS identity of the host."""
    return normalize_os(sys.platform)


@dataclass(frozen=True)
class PlatformContext:
    """Target OS, toolchain and verbosity for one generation run.

    Attributes:
        os: 'windows', 'macosx' or 'other'.
        toolchain: Toolchain the makefiles drive.
        verbose: If True, make echoes every command instead of short
            progress lines.
    """

    os: str = OTHER
    toolchain: BaseToolchain = field(default_factory=GccToolchain)
    verbose: bool = False

    def __post_init__(self) -> None:
        object.__setattr__(self, "os", normalize_os(self.os))

    @classmethod
    def create(
        cls,
        os_name: str | None = None,
        toolchain: str | None = None,
        verbose: bool = False,
    ) -> PlatformContext:
        """Build a context, filling unset values from the host.

        Args:
            os_name: OS name or alias; the host OS when None.
            toolchain: Toolchain name or alias; 'gcc' when None.
            verbose: Emit full command lines.
        """
        os_id = normalize_os(os_name) if os_name else detect_os()
        tc = find_toolchain(toolchain) if toolchain else GccToolchain()
        logger.debug("Platform: os=%s toolchain=%s verbose=%s", os_id, tc.name, verbose)
        return cls(os=os_id, toolchain=tc, verbose=verbose)

    @property
    def is_windows(self) -> bool:
        return self.os == WINDOWS

    @property
    def is_macos(self) -> bool:
        return self.os == MACOSX
