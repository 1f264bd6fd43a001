"""Doc comment blocks and the state machine that attaches them to declarations.

A doc block is a run of ``"`` comments at the same column on consecutive
lines whose first line starts with the doubled leader ``""``::

    ""
    " Does a thing.
    "
    " Call and enjoy.
    func MyFunc()

A block sitting directly above a declaration becomes that declaration's doc.
Anything else is emitted as a :class:`StandaloneDocComment`; the assembler
decides whether that comment is promoted to the module doc.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, List, Optional, Protocol, Sequence, Tuple

from .grammar import NodeKind, node_text
from .models import StandaloneDocComment, VimNode

COMMENT_MARKER = '"'
DOC_LEADER = '""'

Point = Tuple[int, int]


class Siblings(Protocol):
    def peek(self) -> Optional[Any]: ...

    def advance(self) -> Optional[Any]: ...


def start_point(node: Any) -> Point:
    row, column = node.start_point
    return (row, column)


def _strip_one_space(text: str) -> str:
    return text[1:] if text.startswith(" ") else text


def doc_text_from_comments(comments: Sequence[str]) -> Optional[str]:
    """Return the doc text for a run of raw comment lines.

    Returns None when the run is a normal comment (no ``""`` leader) or when
    the block has no content at all.
    """
    if not comments or not comments[0].startswith(DOC_LEADER):
        return None
    lines: List[str] = []
    leader_content = comments[0][len(DOC_LEADER) :].rstrip("\r")
    if leader_content.strip():
        lines.append(_strip_one_space(leader_content))
    for comment in comments[1:]:
        content = comment.rstrip("\r")
        if content.startswith(COMMENT_MARKER):
            content = content[len(COMMENT_MARKER) :]
        lines.append(_strip_one_space(content))
    text = "\n".join(lines).rstrip()
    return text or None


@dataclass(frozen=True)
class CommentRun:
    """Contiguous same-column comment lines consumed from the sibling walk."""

    comments: Tuple[str, ...]
    next_point: Point

    @property
    def doc_text(self) -> Optional[str]:
        return doc_text_from_comments(self.comments)


def consume_comment_run(first: Any, siblings: Siblings, source: bytes) -> CommentRun:
    """Absorb comment siblings that continue the block started by ``first``.

    A sibling continues the block only when it is a comment starting exactly
    one line below the previous one, at the block's starting column. The
    first sibling that does not is left in ``siblings``.
    """
    row, column = start_point(first)
    comments = [node_text(first, source)]
    next_point = (row + 1, column)
    while True:
        candidate = siblings.peek()
        if candidate is None or NodeKind.of(candidate) is not NodeKind.COMMENT:
            break
        if start_point(candidate) != next_point:
            break
        siblings.advance()
        comments.append(node_text(candidate, source))
        next_point = (next_point[0] + 1, column)
    return CommentRun(comments=tuple(comments), next_point=next_point)


@dataclass(frozen=True)
class PendingBlock:
    text: str
    next_point: Point


class DocCommentAttacher:
    """Two-state machine: idle, or holding a block that may document the next node."""

    def __init__(self) -> None:
        self._pending: Optional[PendingBlock] = None

    @property
    def pending(self) -> Optional[PendingBlock]:
        return self._pending

    def on_comment_run(self, run: CommentRun, next_node: Optional[Any]) -> List[VimNode]:
        """Start a block from ``run`` and return any nodes that became final."""
        emitted = self._demote()
        text = run.doc_text
        if text is None:
            return emitted
        if next_node is not None and start_point(next_node) == run.next_point:
            self._pending = PendingBlock(text=text, next_point=run.next_point)
        else:
            emitted.append(StandaloneDocComment(doc=text))
        return emitted

    def on_declaration(self) -> Optional[str]:
        """Hand the pending block, if any, to the declaration being classified."""
        block, self._pending = self._pending, None
        return block.text if block is not None else None

    def on_other(self) -> List[VimNode]:
        return self._demote()

    def finish(self) -> List[VimNode]:
        return self._demote()

    def _demote(self) -> List[VimNode]:
        block, self._pending = self._pending, None
        if block is None:
            return []
        return [StandaloneDocComment(doc=block.text)]


__all__ = [
    "COMMENT_MARKER",
    "DOC_LEADER",
    "CommentRun",
    "DocCommentAttacher",
    "PendingBlock",
    "consume_comment_run",
    "doc_text_from_comments",
    "start_point",
]
