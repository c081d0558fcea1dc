# SPDX-License-Identifier: MIT
"""Custom exceptions for mkgen.

All mkgen exceptions inherit from MkgenError, which includes an
optional location (usually the project file) for better error messages.
"""

from __future__ import annotations


class MkgenError(Exception):
    """Base class for all mkgen exceptions.

    Attributes:
        message: The error message.
        location: Optional location (file name) where the error originated.
    """

    def __init__(self, message: str, location: str | None = None) -> None:
        self.message = message
        self.location = location
        super().__init__(self._format_message())

    def _format_message(self) -> str:
        if self.location:
            return f"{self.location}: {self.message}"
        return self.message


class ModelError(MkgenError):
    """The project model is inconsistent.

    Raised when a package, configuration or flag is invalid, so that
    the makefile emitter only ever sees a well-formed model.
    """


class ProjectFileError(ModelError):
    """The project file is missing or malformed."""


class GenerateError(MkgenError):
    """Error during the generate phase.

    Raised when a makefile cannot be written.
    """


class UnsupportedCombinationError(GenerateError):
    """A source kind cannot be built with the selected toolchain.

    Attributes:
        source: Path of the offending source file.
        toolchain: Name of the toolchain.
    """

    def __init__(
        self, source: str, toolchain: str, location: str | None = None
    ) -> None:
        self.source = source
        self.toolchain = toolchain
        super().__init__(
            f"toolchain '{toolchain}' cannot build source file: {source}", location
        )
