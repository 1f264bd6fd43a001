"""Classification of top-level tree-sitter-vim nodes into semantic declarations."""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Iterator, List, Optional, Tuple

from .grammar import NodeKind, first_child_of_kind, node_position, node_text
from .models import Command, Flag, Function, Variable, VimNode

FLAG_FUNCTION_NAME = "Flag"

_ESCAPE_PATTERN = re.compile(
    r"\\([xX][0-9a-fA-F]{1,2}|u[0-9a-fA-F]{1,4}|U[0-9a-fA-F]{1,8}|[0-7]{1,3}|.)",
    re.DOTALL,
)

_SIMPLE_ESCAPES = {
    "n": "\n",
    "t": "\t",
    "r": "\r",
    "e": "\x1b",
    "b": "\b",
    "f": "\f",
    '"': '"',
    "\\": "\\",
}

_MAX_ERROR_SNIPPET = 80


def _decode_escape(match: "re.Match[str]") -> str:
    escape = match.group(1)
    head = escape[0]
    if head in "xXuU" and len(escape) > 1:
        codepoint = int(escape[1:], 16)
        if codepoint <= 0x10FFFF:
            return chr(codepoint)
        return escape
    if head in "01234567":
        return chr(int(escape, 8))
    return _SIMPLE_ESCAPES.get(escape, escape)


def unquote_string_literal(literal: str) -> str:
    """Return the value of a Vim string literal.

    Single-quoted literals only lose their quotes. Double-quoted literals also
    have their backslash escapes decoded.
    """
    if len(literal) >= 2 and literal[0] == literal[-1] == "'":
        return literal[1:-1]
    if len(literal) >= 2 and literal[0] == literal[-1] == '"':
        return _ESCAPE_PATTERN.sub(_decode_escape, literal[1:-1])
    return literal


def _walk_preorder(node: Any) -> Iterator[Any]:
    stack = [node]
    while stack:
        current = stack.pop()
        yield current
        stack.extend(reversed(current.children))


@dataclass
class Classification:
    """Nodes produced for one syntax-tree node plus any diagnostics."""

    nodes: List[VimNode] = field(default_factory=list)
    diagnostics: List[str] = field(default_factory=list)

    @classmethod
    def failure(cls, message: str) -> "Classification":
        return cls(diagnostics=[message])


_Handler = Callable[[Any, bytes, Optional[str]], Classification]


class NodeClassifier:
    """Maps a top-level syntax-tree node to zero or more :class:`VimNode` values."""

    def __init__(self) -> None:
        self._handlers: Dict[NodeKind, _Handler] = {
            NodeKind.FUNCTION_DEFINITION: self._classify_function,
            NodeKind.COMMAND_STATEMENT: self._classify_command,
            NodeKind.LET_STATEMENT: self._classify_let,
            NodeKind.CALL_STATEMENT: self._classify_call,
            NodeKind.ERROR: self._classify_error,
            NodeKind.UNRECOGNIZED: self._ignore,
        }

    def is_declaration(self, node: Any, source: bytes) -> bool:
        """Return True when ``node`` is a declaration that may take a doc block."""
        kind = NodeKind.of(node)
        if kind in (NodeKind.FUNCTION_DEFINITION, NodeKind.COMMAND_STATEMENT):
            return True
        if kind is NodeKind.LET_STATEMENT:
            return self._assignment_parts(node, source) is not None
        if kind is NodeKind.CALL_STATEMENT:
            return self._flag_arguments(node, source) is not None
        return False

    def classify(self, node: Any, source: bytes, doc: Optional[str] = None) -> Classification:
        handler = self._handlers.get(NodeKind.of(node), self._ignore)
        return handler(node, source, doc)

    # ------------------------------------------------------------------
    # Handlers

    @staticmethod
    def _ignore(node: Any, source: bytes, doc: Optional[str]) -> Classification:
        return Classification()

    def _classify_function(self, node: Any, source: bytes, doc: Optional[str]) -> Classification:
        declaration = None
        modifiers: List[str] = []
        for child in node.children:
            kind = NodeKind.of(child)
            if kind in (NodeKind.FUNCTION_KEYWORD, NodeKind.ENDFUNCTION_KEYWORD):
                continue
            if kind is NodeKind.FUNCTION_DECLARATION:
                declaration = child
                continue
            if kind is NodeKind.BODY:
                break
            # Everything else before the body is a modifier: !, range, dict, abort, closure.
            modifiers.append(node_text(child, source))

        name_node = self._function_name_node(declaration)
        name = node_text(name_node, source).strip() if name_node is not None else ""
        if not name:
            return Classification.failure(
                f"Failed to find function name for {node.type} at {node_position(node)}"
            )

        args: List[str] = []
        parameters = first_child_of_kind(declaration, NodeKind.PARAMETERS)
        if parameters is not None:
            args = [
                node_text(child, source)
                for child in parameters.children
                if NodeKind.of(child) in (NodeKind.IDENTIFIER, NodeKind.SPREAD)
            ]
        return Classification(
            nodes=[Function(name=name, args=tuple(args), modifiers=tuple(modifiers), doc=doc)]
        )

    @staticmethod
    def _function_name_node(declaration: Optional[Any]) -> Optional[Any]:
        if declaration is None:
            return None
        name_node = declaration.child_by_field_name("name")
        if name_node is not None:
            return name_node
        return first_child_of_kind(declaration, NodeKind.IDENTIFIER, NodeKind.SCOPED_IDENTIFIER)

    def _classify_command(self, node: Any, source: bytes, doc: Optional[str]) -> Classification:
        name_node = node.child_by_field_name("name")
        name = node_text(name_node, source).strip() if name_node is not None else ""
        if not name:
            return Classification.failure(
                f"Failed to find command name for {node.type} at {node_position(node)}"
            )
        modifiers = tuple(
            node_text(child, source)
            for child in node.children
            if NodeKind.of(child) is NodeKind.COMMAND_ATTRIBUTE
        )
        return Classification(nodes=[Command(name=name, modifiers=modifiers, doc=doc)])

    @staticmethod
    def _assignment_parts(node: Any, source: bytes) -> Optional[Tuple[Any, Any]]:
        """Return ``(lhs, rhs)`` when ``node`` is a plain ``let lhs = rhs``."""
        children = node.children
        if len(children) < 4:
            # `let somevar` lists a variable instead of assigning it.
            return None
        command, lhs, operator, rhs = children[:4]
        if NodeKind.of(command) is not NodeKind.LET_KEYWORD:
            return None
        if node_text(operator, source).strip() != NodeKind.ASSIGN.value:
            # Compound assignments (+=, .=, ...) update an existing variable.
            return None
        return lhs, rhs

    def _classify_let(self, node: Any, source: bytes, doc: Optional[str]) -> Classification:
        parts = self._assignment_parts(node, source)
        if parts is None:
            return Classification()
        lhs, rhs = parts

        rhs_text = node_text(rhs, source)
        if NodeKind.of(lhs) is not NodeKind.LIST_ASSIGNMENT:
            name = node_text(lhs, source).strip()
            if not name:
                return Classification.failure(
                    f"Failed to find variable name for {node.type} at {node_position(node)}"
                )
            return Classification(
                nodes=[Variable(name=name, init_value_token=rhs_text, doc=doc)]
            )

        targets = list(lhs.named_children)
        rhs_is_literal = (
            NodeKind.of(rhs) is NodeKind.LIST and rhs.named_child_count == len(targets)
        )
        nodes: List[VimNode] = []
        for index, target in enumerate(targets):
            if rhs_is_literal:
                init_value = node_text(rhs.named_children[index], source)
            else:
                # Approximates destructuring as indexing; the rhs is never evaluated.
                init_value = f"{rhs_text}[{index}]"
            nodes.append(
                Variable(name=node_text(target, source), init_value_token=init_value, doc=doc)
            )
        return Classification(nodes=nodes)

    def _classify_call(self, node: Any, source: bytes, doc: Optional[str]) -> Classification:
        arguments = self._flag_arguments(node, source)
        if arguments is None:
            return Classification()
        name_literal, default_value = arguments
        name = unquote_string_literal(node_text(name_literal, source))
        if not name:
            return Classification.failure(
                f"Empty flag name for {node.type} at {node_position(node)}"
            )
        default_token = node_text(default_value, source) if default_value is not None else None
        return Classification(
            nodes=[Flag(name=name, default_value_token=default_token, doc=doc)]
        )

    @staticmethod
    def _flag_arguments(node: Any, source: bytes) -> Optional[Tuple[Any, Optional[Any]]]:
        """Return ``(name_literal, default_or_None)`` when ``node`` calls Flag('name', ...)."""
        call = first_child_of_kind(node, NodeKind.CALL_EXPRESSION)
        if call is None:
            return None
        callee = call.child_by_field_name("function")
        if callee is None:
            return None
        last_identifier = None
        for descendant in _walk_preorder(callee):
            if NodeKind.of(descendant) is NodeKind.IDENTIFIER:
                last_identifier = descendant
        if last_identifier is None or node_text(last_identifier, source) != FLAG_FUNCTION_NAME:
            return None
        first_argument = callee.next_named_sibling
        if first_argument is None or NodeKind.of(first_argument) is not NodeKind.STRING_LITERAL:
            return None
        return first_argument, first_argument.next_named_sibling

    @staticmethod
    def _classify_error(node: Any, source: bytes, doc: Optional[str]) -> Classification:
        snippet = node_text(node, source)
        if len(snippet) > _MAX_ERROR_SNIPPET:
            snippet = snippet[:_MAX_ERROR_SNIPPET] + "..."
        return Classification.failure(f"Syntax error at {node_position(node)} near {snippet!r}")


__all__ = ["Classification", "NodeClassifier", "unquote_string_literal"]
