from __future__ import annotations

import ast
from collections.abc import Mapping, Sequence
from typing import Any

from astwire._internal.parsing.parameter_analyser import ParameterAnalyser
from astwire.exceptions import AstWireAnalysisError

FunctionNode = ast.FunctionDef | ast.AsyncFunctionDef | ast.Lambda


class FunctionAnalyser:
    """Answer structural questions about one function, method or lambda node."""

    def __init__(
        self,
        node: ast.AST,
        target: Any,
        *,
        skip_first: bool = False,
        annotations: Mapping[str, Any] | None = None,
        identifiers: Mapping[str | int, Any] | None = None,
        globalns: Mapping[str, Any] | None = None,
    ) -> None:
        if not isinstance(node, FunctionNode):
            msg = f"Expected a function declaration, got [{type(node).__name__}]."
            raise AstWireAnalysisError(msg)

        self._node = node
        self._target = target
        self._parameter_analyser = ParameterAnalyser(
            node.args,
            target,
            skip_first=skip_first,
            annotations=annotations,
            identifiers=identifiers,
            globalns=globalns,
        )

    @property
    def name(self) -> str:
        if isinstance(self._node, ast.Lambda):
            return "<lambda>"
        return self._node.name

    @property
    def node(self) -> FunctionNode:
        return self._node

    def has_parameters(self) -> bool:
        return len(self._parameter_analyser) > 0

    def has_body(self) -> bool:
        if isinstance(self._node, ast.Lambda):
            return not _is_ellipsis(self._node.body)
        return has_executable_statements(self._node.body)

    def get_parameter_analyser(self) -> ParameterAnalyser | None:
        if not self.has_parameters():
            return None
        return self._parameter_analyser


def has_executable_statements(body: Sequence[ast.stmt]) -> bool:
    """Return whether ``body`` does more than a stub.

    Docstrings, ``pass``, ``...`` and ``raise NotImplementedError`` are stub
    statements.
    """
    return any(not _is_stub_statement(statement) for statement in body)


def _is_stub_statement(statement: ast.stmt) -> bool:
    if isinstance(statement, ast.Pass):
        return True
    if isinstance(statement, ast.Expr) and isinstance(statement.value, ast.Constant):
        # docstring or bare ``...``
        return isinstance(statement.value.value, str) or statement.value.value is Ellipsis
    if isinstance(statement, ast.Raise) and statement.exc is not None:
        exc = statement.exc.func if isinstance(statement.exc, ast.Call) else statement.exc
        return isinstance(exc, ast.Name) and exc.id == "NotImplementedError"
    return False


def _is_ellipsis(node: ast.expr) -> bool:
    return isinstance(node, ast.Constant) and node.value is Ellipsis


__all__ = ["FunctionAnalyser", "FunctionNode", "has_executable_statements"]
