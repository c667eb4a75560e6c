import ast

import pytest

from astwire._internal.parsing.syntax_tree import SyntaxTreeProvider
from astwire.exceptions import AstWireParseError, AstWireSourceUnavailableError


class Sample:
    def method(self) -> None:
        pass


@pytest.fixture()
def provider() -> SyntaxTreeProvider:
    return SyntaxTreeProvider()


def test_parse_returns_module(provider: SyntaxTreeProvider) -> None:
    tree = provider.parse("def f(a, b=1): pass")

    assert isinstance(tree, ast.Module)
    assert isinstance(tree.body[0], ast.FunctionDef)


def test_parse_is_not_cached(provider: SyntaxTreeProvider) -> None:
    source = "x = 1"

    assert provider.parse(source) is not provider.parse(source)


def test_parse_error_carries_line(provider: SyntaxTreeProvider) -> None:
    with pytest.raises(AstWireParseError) as exc_info:
        provider.parse("x = 1\ndef broken(:\n", filename="broken.py")

    assert exc_info.value.lineno == 2
    assert "broken.py" in str(exc_info.value)
    assert isinstance(exc_info.value.__cause__, SyntaxError)


def test_parse_rejects_null_bytes(provider: SyntaxTreeProvider) -> None:
    with pytest.raises(AstWireParseError):
        provider.parse("x = 1\0")


def test_source_of_method_is_dedented(provider: SyntaxTreeProvider) -> None:
    source = provider.source_of(Sample.method)

    assert source.startswith("def method")


def test_source_of_builtin_is_unavailable(provider: SyntaxTreeProvider) -> None:
    with pytest.raises(AstWireSourceUnavailableError, match=r"No source available for \[len\]"):
        provider.source_of(len)


def test_parse_target(provider: SyntaxTreeProvider) -> None:
    tree = provider.parse_target(Sample)

    assert [type(node) for node in tree.body] == [ast.ClassDef]
