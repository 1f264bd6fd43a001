"""Vim grammar handle and the node-kind vocabulary the extractor depends on."""

from __future__ import annotations

from enum import Enum
from typing import Any, Dict, FrozenSet, List, Optional, Set

from tree_sitter import Language, Parser

from .errors import GrammarError

DEFAULT_LANGUAGE_NAME = "vim"


class NodeKind(Enum):
    """Closed set of tree-sitter-vim node kinds the extractor inspects."""

    COMMENT = "comment"
    FUNCTION_DEFINITION = "function_definition"
    FUNCTION_DECLARATION = "function_declaration"
    FUNCTION_KEYWORD = "function"
    ENDFUNCTION_KEYWORD = "endfunction"
    BODY = "body"
    PARAMETERS = "parameters"
    SPREAD = "spread"
    IDENTIFIER = "identifier"
    SCOPED_IDENTIFIER = "scoped_identifier"
    COMMAND_STATEMENT = "command_statement"
    COMMAND_ATTRIBUTE = "command_attribute"
    LET_STATEMENT = "let_statement"
    LET_KEYWORD = "let"
    LIST_ASSIGNMENT = "list_assignment"
    ASSIGN = "="
    LIST = "list"
    CALL_STATEMENT = "call_statement"
    CALL_EXPRESSION = "call_expression"
    STRING_LITERAL = "string_literal"
    ERROR = "ERROR"
    UNRECOGNIZED = "<unrecognized>"

    @classmethod
    def of(cls, node: Any) -> "NodeKind":
        """Return the kind of a tree-sitter node, or UNRECOGNIZED."""
        return _KINDS_BY_TYPE.get(node.type, cls.UNRECOGNIZED)


_KINDS_BY_TYPE: Dict[str, NodeKind] = {kind.value: kind for kind in NodeKind}

# ERROR is synthesized by tree-sitter and never listed in a grammar's kind table.
# endfunction is only ever seen after the body, where the walk has already stopped.
_UNCHECKED_KINDS: FrozenSet[NodeKind] = frozenset(
    {NodeKind.ERROR, NodeKind.UNRECOGNIZED, NodeKind.ENDFUNCTION_KEYWORD}
)


def required_kinds() -> List[str]:
    """Return the kind names that must exist in a compatible grammar."""
    return [kind.value for kind in NodeKind if kind not in _UNCHECKED_KINDS]


class Grammar:
    """Explicit handle on a tree-sitter language plus its kind vocabulary."""

    def __init__(self, language: Language, name: str = DEFAULT_LANGUAGE_NAME) -> None:
        self.language = language
        self.name = name

    def kinds(self) -> Set[str]:
        kinds: Set[str] = set()
        for kind_id in range(self.language.node_kind_count):
            kind = self.language.node_kind_for_id(kind_id)
            if kind is not None:
                kinds.add(kind)
        return kinds

    def missing_kinds(self) -> List[str]:
        available = self.kinds()
        return [kind for kind in required_kinds() if kind not in available]

    def check_vocabulary(self) -> None:
        """Fail fast when the grammar lacks a node kind the extractor relies on."""
        missing = self.missing_kinds()
        if missing:
            raise GrammarError(
                f"Grammar '{self.name}' is missing node kinds used by vimmeta: {', '.join(missing)}"
            )

    def new_parser(self) -> Parser:
        try:
            return Parser(self.language)
        except (TypeError, ValueError) as exc:
            raise GrammarError(f"Error loading grammar '{self.name}': {exc}") from exc


_GRAMMARS: Dict[str, Grammar] = {}


def load_language(name: str = DEFAULT_LANGUAGE_NAME) -> Language:
    """Load a language from tree-sitter-language-pack, translating failures to GrammarError."""
    try:
        from tree_sitter_language_pack import get_language
    except ImportError as exc:
        raise GrammarError(f"tree-sitter-language-pack is not installed: {exc}") from exc
    try:
        return get_language(name)  # type: ignore[arg-type]
    except Exception as exc:
        # The pack raises its own error types (e.g. DownloadError) as well as builtins.
        raise GrammarError(f"Error loading grammar '{name}': {exc}") from exc


def get_grammar(name: str = DEFAULT_LANGUAGE_NAME) -> Grammar:
    """Return the process-wide grammar handle for ``name``, creating it once."""
    grammar = _GRAMMARS.get(name)
    if grammar is not None:
        return grammar
    grammar = Grammar(load_language(name), name=name)
    _GRAMMARS[name] = grammar
    return grammar


def grammar_available(name: str = DEFAULT_LANGUAGE_NAME) -> bool:
    try:
        get_grammar(name).check_vocabulary()
    except GrammarError:
        return False
    return True


def node_text(node: Any, source: bytes) -> str:
    """Return the source text spanned by ``node``."""
    return source[node.start_byte : node.end_byte].decode("utf-8", errors="ignore")


def node_position(node: Any) -> str:
    row, column = node.start_point
    return f"line {row + 1}, column {column + 1}"


def first_child_of_kind(node: Any, *kinds: NodeKind) -> Optional[Any]:
    for child in node.children:
        if NodeKind.of(child) in kinds:
            return child
    return None


__all__ = [
    "DEFAULT_LANGUAGE_NAME",
    "Grammar",
    "NodeKind",
    "first_child_of_kind",
    "get_grammar",
    "grammar_available",
    "load_language",
    "node_position",
    "node_text",
    "required_kinds",
]
