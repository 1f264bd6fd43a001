"""Parse and analyze Vim plugins.

The main use case is to instantiate a :class:`VimParser` and point it at a
plugin directory, a module file or a string of Vim script::

    parser = VimParser()
    plugin = parser.parse_plugin_dir("path/to/plugin")
"""

from __future__ import annotations

from .errors import (
    ConfigError,
    GrammarError,
    ParsingFailure,
    PluginIOError,
    UnknownError,
    VimMetaError,
)
from .models import (
    Command,
    Flag,
    Function,
    StandaloneDocComment,
    Variable,
    VimModule,
    VimNode,
    VimPlugin,
)
from .parser import VimParser

__all__ = [
    "Command",
    "ConfigError",
    "Flag",
    "Function",
    "GrammarError",
    "ParsingFailure",
    "PluginIOError",
    "StandaloneDocComment",
    "UnknownError",
    "Variable",
    "VimMetaError",
    "VimModule",
    "VimNode",
    "VimParser",
    "VimPlugin",
]
