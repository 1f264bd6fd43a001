"""Error taxonomy shared by the vimmeta parser, assembler and CLI."""

from __future__ import annotations

from pathlib import Path
from typing import Optional


class VimMetaError(RuntimeError):
    """Base class for every error raised by vimmeta."""


class GrammarError(VimMetaError):
    """Raised when the Vim grammar cannot be loaded or does not match the expected vocabulary."""


class ParsingFailure(VimMetaError):
    """Raised when tree-sitter produces no syntax tree for a piece of source."""

    def __init__(self, message: str = "General failure from tree-sitter while parsing syntax") -> None:
        super().__init__(message)


class PluginIOError(VimMetaError):
    """Raised when a plugin file or directory cannot be read."""

    def __init__(self, message: str, path: Optional[Path] = None) -> None:
        super().__init__(message)
        self.path = path


class UnknownError(VimMetaError):
    """Wraps an unexpected failure coming from a collaborator."""


class ConfigError(VimMetaError):
    """Raised when the configuration file cannot be parsed."""


__all__ = [
    "ConfigError",
    "GrammarError",
    "ParsingFailure",
    "PluginIOError",
    "UnknownError",
    "VimMetaError",
]
