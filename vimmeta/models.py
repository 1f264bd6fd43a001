"""Core data models produced by the vimmeta extraction engine."""

from __future__ import annotations

from dataclasses import dataclass, field, fields
from pathlib import Path
from typing import Any, ClassVar, Dict, Optional, Sequence, Tuple


def _freeze(instance: object, name: str) -> None:
    value = getattr(instance, name)
    if not isinstance(value, tuple):
        object.__setattr__(instance, name, tuple(value))


class VimNode:
    """Base class for every semantic node extracted from a Vim script module."""

    kind: ClassVar[str] = "node"

    # Variants are attached below so callers can write VimNode.Function(...).
    StandaloneDocComment: ClassVar[type]
    Function: ClassVar[type]
    Command: ClassVar[type]
    Variable: ClassVar[type]
    Flag: ClassVar[type]

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {"kind": self.kind}
        for item in fields(self):  # type: ignore[arg-type]
            value = getattr(self, item.name)
            data[item.name] = list(value) if isinstance(value, tuple) else value
        return data


@dataclass(frozen=True)
class StandaloneDocComment(VimNode):
    """A doc comment block that is not attached to any declaration."""

    kind: ClassVar[str] = "standalone_doc_comment"

    doc: str


@dataclass(frozen=True)
class Function(VimNode):
    """A ``function`` definition with its arguments and modifiers."""

    kind: ClassVar[str] = "function"

    name: str
    args: Tuple[str, ...] = ()
    modifiers: Tuple[str, ...] = ()
    doc: Optional[str] = None

    def __post_init__(self) -> None:
        _freeze(self, "args")
        _freeze(self, "modifiers")


@dataclass(frozen=True)
class Command(VimNode):
    """A user ``command`` definition with its attributes."""

    kind: ClassVar[str] = "command"

    name: str
    modifiers: Tuple[str, ...] = ()
    doc: Optional[str] = None

    def __post_init__(self) -> None:
        _freeze(self, "modifiers")


@dataclass(frozen=True)
class Variable(VimNode):
    """A variable introduced by a ``let`` statement.

    ``init_value_token`` is the raw initializer text. For destructuring
    assignments with a non-literal right-hand side it is the approximation
    ``"<rhs>[<index>]"``; the expression is never evaluated.
    """

    kind: ClassVar[str] = "variable"

    name: str
    init_value_token: str
    doc: Optional[str] = None


@dataclass(frozen=True)
class Flag(VimNode):
    """A plugin flag declared through a ``Flag('name', default)`` call."""

    kind: ClassVar[str] = "flag"

    name: str
    default_value_token: Optional[str] = None
    doc: Optional[str] = None


VimNode.StandaloneDocComment = StandaloneDocComment
VimNode.Function = Function
VimNode.Command = Command
VimNode.Variable = Variable
VimNode.Flag = Flag


@dataclass(frozen=True)
class VimModule:
    """Metadata for a single module (a.k.a. file) of Vim script."""

    path: Optional[Path] = None
    doc: Optional[str] = None
    nodes: Tuple[VimNode, ...] = field(default_factory=tuple)

    def __post_init__(self) -> None:
        if self.path is not None and not isinstance(self.path, Path):
            object.__setattr__(self, "path", Path(self.path))
        _freeze(self, "nodes")

    def with_path(self, path: Optional[Path]) -> "VimModule":
        return VimModule(path=path, doc=self.doc, nodes=self.nodes)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "path": self.path.as_posix() if self.path is not None else None,
            "doc": self.doc,
            "nodes": [node.to_dict() for node in self.nodes],
        }


@dataclass(frozen=True)
class VimPlugin:
    """All modules of a plugin directory, in canonical load order."""

    content: Tuple[VimModule, ...] = field(default_factory=tuple)

    def __post_init__(self) -> None:
        _freeze(self, "content")

    @classmethod
    def from_modules(cls, modules: Sequence[VimModule]) -> "VimPlugin":
        return cls(content=tuple(modules))

    def to_dict(self) -> Dict[str, Any]:
        return {"content": [module.to_dict() for module in self.content]}


__all__ = [
    "Command",
    "Flag",
    "Function",
    "StandaloneDocComment",
    "Variable",
    "VimModule",
    "VimNode",
    "VimPlugin",
]
