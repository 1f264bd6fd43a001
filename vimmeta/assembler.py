"""Single-pass assembly of a :class:`VimModule` from a tree-sitter syntax tree."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Iterator, List, Optional, Sequence, Tuple

from .classifier import NodeClassifier
from .doc_comments import DocCommentAttacher, consume_comment_run
from .grammar import NodeKind
from .logging import get_diagnostics_logger
from .models import StandaloneDocComment, VimModule, VimNode


class SiblingIterator:
    """Iterates over sibling nodes, yielding ``(node, next_node)`` pairs.

    ``next_node`` is a one-token lookahead; ``peek`` and ``advance`` let a
    caller absorb following siblings before the next iteration.
    """

    def __init__(self, siblings: Sequence[Any]) -> None:
        self._siblings = list(siblings)
        self._index = 0

    def __iter__(self) -> Iterator[Tuple[Any, Optional[Any]]]:
        return self

    def __next__(self) -> Tuple[Any, Optional[Any]]:
        node = self.advance()
        if node is None:
            raise StopIteration
        return node, self.peek()

    def peek(self) -> Optional[Any]:
        if self._index < len(self._siblings):
            return self._siblings[self._index]
        return None

    def advance(self) -> Optional[Any]:
        node = self.peek()
        if node is not None:
            self._index += 1
        return node


@dataclass
class AssemblyResult:
    module: VimModule
    diagnostics: List[str] = field(default_factory=list)


class _ModuleBuilder:
    def __init__(self) -> None:
        self.doc: Optional[str] = None
        self.nodes: List[VimNode] = []

    def emit(self, nodes: Sequence[VimNode]) -> None:
        for node in nodes:
            if isinstance(node, StandaloneDocComment) and self.doc is None and not self.nodes:
                # The first standalone doc comment of a module documents the module itself.
                self.doc = node.doc
                continue
            self.nodes.append(node)

    def build(self) -> VimModule:
        return VimModule(path=None, doc=self.doc, nodes=tuple(self.nodes))


class ModuleAssembler:
    """Walks a syntax tree's top-level children and builds the module model."""

    def __init__(self, classifier: Optional[NodeClassifier] = None) -> None:
        self.classifier = classifier or NodeClassifier()
        self.logger = get_diagnostics_logger()

    def assemble(self, root: Any, source: bytes) -> AssemblyResult:
        builder = _ModuleBuilder()
        attacher = DocCommentAttacher()
        diagnostics: List[str] = []
        siblings = SiblingIterator(root.children)

        for node, _ in siblings:
            if NodeKind.of(node) is NodeKind.COMMENT:
                run = consume_comment_run(node, siblings, source)
                builder.emit(attacher.on_comment_run(run, siblings.peek()))
                continue

            if self.classifier.is_declaration(node, source):
                doc = attacher.on_declaration()
            else:
                builder.emit(attacher.on_other())
                doc = None
            classification = self.classifier.classify(node, source, doc)
            for message in classification.diagnostics:
                self.logger.warning(message)
            diagnostics.extend(classification.diagnostics)
            builder.emit(classification.nodes)

        builder.emit(attacher.finish())
        return AssemblyResult(module=builder.build(), diagnostics=diagnostics)


__all__ = ["AssemblyResult", "ModuleAssembler", "SiblingIterator"]
