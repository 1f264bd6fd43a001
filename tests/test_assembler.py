from __future__ import annotations

import logging

import pytest

from tests._fixtures.fake_tree import FakeTree
from vimmeta.assembler import ModuleAssembler, SiblingIterator
from vimmeta.models import Function, StandaloneDocComment, Variable, VimModule


def _assemble(text: str) -> VimModule:
    tree = FakeTree(text)
    return ModuleAssembler().assemble(tree.root_node, tree.source).module


def test_sibling_iterator_yields_lookahead() -> None:
    siblings = SiblingIterator(["a", "b", "c"])

    assert next(siblings) == ("a", "b")
    assert siblings.advance() == "b"
    assert next(siblings) == ("c", None)
    with pytest.raises(StopIteration):
        next(siblings)


def test_empty_module() -> None:
    assert _assemble("") == VimModule(path=None, doc=None, nodes=())


def test_doc_attaches_to_function_directly_below() -> None:
    module = _assemble('""\n" Does a thing.\n"\n" Call and enjoy.\nfunc MyFunc()')

    assert module.doc is None
    assert module.nodes == (
        Function(name="MyFunc", doc="Does a thing.\n\nCall and enjoy."),
    )


def test_function_arguments_are_collected() -> None:
    module = _assemble("func Foo(a, b, ...)")

    assert module.nodes == (Function(name="Foo", args=("a", "b", "...")),)


def test_first_detached_doc_becomes_module_doc() -> None:
    module = _assemble('"" Module header\n\n"" Function doc\nfunc Foo()')

    assert module.doc == "Module header"
    assert module.nodes == (Function(name="Foo", doc="Function doc"),)


def test_second_detached_doc_stays_standalone() -> None:
    module = _assemble('"" Module doc\n\n"" Another doc\n\nfunc Foo()')

    assert module.doc == "Module doc"
    assert module.nodes == (
        StandaloneDocComment(doc="Another doc"),
        Function(name="Foo"),
    )


def test_doc_above_non_declaration_is_standalone() -> None:
    module = _assemble('func First()\n"" Not a function doc\necho "hi"')

    assert module.doc is None
    assert module.nodes == (
        Function(name="First"),
        StandaloneDocComment(doc="Not a function doc"),
    )


def test_doc_after_declarations_is_not_module_doc() -> None:
    module = _assemble('func First()\n\n"" Trailing')

    assert module.doc is None
    assert module.nodes == (
        Function(name="First"),
        StandaloneDocComment(doc="Trailing"),
    )


def test_indented_comment_does_not_continue_block() -> None:
    module = _assemble('"" Header\n  " indented\nfunc Foo()')

    assert module.doc == "Header"
    assert module.nodes == (Function(name="Foo"),)


def test_normal_comment_is_ignored() -> None:
    module = _assemble('" just a comment\nfunc Foo()')

    assert module == VimModule(doc=None, nodes=(Function(name="Foo"),))


def test_doc_attaches_to_variable() -> None:
    module = _assemble('"" The answer.\nlet g:answer = 42')

    assert module.nodes == (
        Variable(name="g:answer", init_value_token="42", doc="The answer."),
    )


def test_doc_above_compound_assignment_becomes_module_doc() -> None:
    module = _assemble('"" Header.\nlet x += 1\nfunc Foo()')

    assert module.doc == "Header."
    assert module.nodes == (Function(name="Foo"),)


def test_doc_above_compound_assignment_is_standalone_after_nodes() -> None:
    module = _assemble('let a = 1\n"" Doc.\nlet x .= "y"')

    assert module.doc is None
    assert module.nodes == (
        Variable(name="a", init_value_token="1"),
        StandaloneDocComment(doc="Doc."),
    )


def test_missing_function_name_is_reported(caplog: pytest.LogCaptureFixture) -> None:
    tree = FakeTree("func ()\nfunc Named()")

    with caplog.at_level(logging.WARNING, logger="vimmeta.classifier"):
        result = ModuleAssembler().assemble(tree.root_node, tree.source)

    assert result.module.nodes == (Function(name="Named"),)
    assert result.diagnostics == [
        "Failed to find function name for function_definition at line 1, column 1"
    ]
    assert "Failed to find function name" in caplog.text


def test_assembly_is_repeatable() -> None:
    text = '"" Header\n\n"" Doc\nfunc Foo(a)\nlet y = 2'
    tree = FakeTree(text)
    assembler = ModuleAssembler()

    first = assembler.assemble(tree.root_node, tree.source).module
    second = assembler.assemble(tree.root_node, tree.source).module

    assert first == second
    assert first.doc == "Header"
