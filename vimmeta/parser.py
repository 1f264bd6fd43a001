"""The main entry point for parsing Vim plugins, files and source strings."""

from __future__ import annotations

from pathlib import Path
from typing import List, Optional

from .assembler import AssemblyResult, ModuleAssembler
from .classifier import NodeClassifier
from .config import PluginConfig
from .errors import ParsingFailure, PluginIOError, UnknownError, VimMetaError
from .grammar import Grammar, get_grammar
from .logging import get_logger
from .models import VimModule, VimPlugin
from .plugin_dir import PluginDirAssembler


class VimParser:
    """Parses Vim script into :class:`VimModule` and :class:`VimPlugin` values.

    A parser owns one tree-sitter parser and handles one file at a time; it is
    not safe to share across threads. The grammar handle defaults to the
    process-wide Vim grammar and is checked for compatibility on construction.
    """

    def __init__(
        self,
        grammar: Optional[Grammar] = None,
        *,
        classifier: Optional[NodeClassifier] = None,
    ) -> None:
        self.grammar = grammar if grammar is not None else get_grammar()
        self.grammar.check_vocabulary()
        self._parser = self.grammar.new_parser()
        self._classifier = classifier or NodeClassifier()
        self._assembler = ModuleAssembler(self._classifier)
        self.logger = get_logger("parser")
        self.diagnostics: List[str] = []

    def parse_module_str(self, code: str) -> VimModule:
        """Parse and return metadata for a single module of Vim script."""
        return self.parse_module_with_diagnostics(code).module

    def parse_module_with_diagnostics(self, code: str) -> AssemblyResult:
        source = code.encode("utf-8")
        try:
            tree = self._parser.parse(source)
        except (TypeError, ValueError) as exc:
            raise UnknownError(f"Unknown error: {exc}") from exc
        if tree is None:
            raise ParsingFailure()
        result = self._assembler.assemble(tree.root_node, source)
        self.diagnostics = list(result.diagnostics)
        return result

    def parse_module_file(self, path: Path | str) -> VimModule:
        """Parse a module file; the returned module carries ``path``."""
        file_path = Path(path)
        self.logger.debug("Parsing %s", file_path)
        try:
            code = file_path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as exc:
            raise PluginIOError(f"I/O error: {exc}", path=file_path) from exc
        return self.parse_module_str(code).with_path(file_path)

    def parse_plugin_dir(
        self, path: Path | str, *, config: Optional[PluginConfig] = None
    ) -> VimPlugin:
        """Parse every module of the plugin at ``path`` in canonical load order.

        Module paths are relative to the plugin root.
        """
        settings = config or PluginConfig()
        assembler = PluginDirAssembler(
            self,
            parser_factory=self._spawn,
            follow_links=settings.follow_links,
            exclude_paths=settings.exclude_paths,
            max_workers=settings.max_workers,
        )
        try:
            return assembler.assemble(path)
        except VimMetaError:
            raise
        except Exception as exc:
            raise UnknownError(f"Unknown error: {exc}") from exc

    def _spawn(self) -> "VimParser":
        return VimParser(self.grammar, classifier=self._classifier)


__all__ = ["VimParser"]
