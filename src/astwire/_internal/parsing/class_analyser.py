from __future__ import annotations

import ast
from collections.abc import Iterable
from dataclasses import dataclass
from typing import Any, Final

from astwire._internal.parsing.function_analyser import FunctionAnalyser, has_executable_statements
from astwire._internal.parsing.parameter_analyser import ParameterAnalyser
from astwire.exceptions import AstWireAnalysisError, describe

_INTERFACE_BASES: Final = frozenset({"Protocol", "ABC"})
_ABSTRACT_METACLASSES: Final = frozenset({"ABCMeta"})


class ClassAnalyser:
    """Answer structural questions about one parsed class declaration.

    The constructor is analysed by whoever builds this object: it may live in
    this class body, in a base class, or be generated (dataclasses).
    """

    def __init__(
        self,
        node: ast.AST,
        target: type[Any],
        *,
        constructor: FunctionAnalyser | None = None,
        parameters: ParameterAnalyser | None = None,
    ) -> None:
        if not isinstance(node, ast.ClassDef):
            msg = f"Expected a class declaration for [{describe(target)}], got [{type(node).__name__}]."
            raise AstWireAnalysisError(msg)

        self._node = node
        self._target = target
        self._constructor = constructor
        if parameters is None and constructor is not None:
            parameters = constructor.get_parameter_analyser()
        self._parameters = parameters

    @property
    def name(self) -> str:
        return self._node.name

    def has_constructor(self) -> bool:
        return self._constructor is not None

    def get_constructor_analyser(self) -> FunctionAnalyser | None:
        return self._constructor

    def has_parameters(self) -> bool:
        return self._parameters is not None and len(self._parameters) > 0

    def get_parameter_analyser(self) -> ParameterAnalyser | None:
        if not self.has_parameters():
            return None
        return self._parameters

    def has_body(self) -> bool:
        """Return whether the class body holds anything beyond stubs.

        Methods whose own body is a stub and bare attribute annotations do not
        count.
        """
        for statement in self._node.body:
            if isinstance(statement, ast.AnnAssign) and statement.value is None:
                continue
            if isinstance(statement, (ast.FunctionDef, ast.AsyncFunctionDef)):
                if has_executable_statements(statement.body):
                    return True
            elif has_executable_statements([statement]):
                return True
        return False

    def is_interface(self) -> bool:
        """Return whether the declaration is a Protocol/ABC contract with stub methods only."""
        return self._declares_interface_base() and not self.has_body()

    def _declares_interface_base(self) -> bool:
        if any(_base_name(base) in _INTERFACE_BASES for base in self._node.bases):
            return True
        return any(
            keyword.arg == "metaclass" and _base_name(keyword.value) in _ABSTRACT_METACLASSES
            for keyword in self._node.keywords
        )


def find_constructor(node: ast.ClassDef) -> ast.FunctionDef | ast.AsyncFunctionDef | None:
    """Return the ``__init__`` declared directly in ``node``'s body, if any."""
    for statement in node.body:
        if isinstance(statement, (ast.FunctionDef, ast.AsyncFunctionDef)) and statement.name == "__init__":
            return statement
    return None


@dataclass(slots=True)
class _DataclassField:
    name: str
    annotation: ast.expr
    default: ast.expr | None
    kw_only: bool


def dataclass_arguments(nodes: Iterable[ast.ClassDef], target: Any) -> ast.arguments:
    """Build the ``__init__`` arguments a dataclass would generate.

    Args:
        nodes: Class declarations of the dataclass bases, base-most first,
            ending with the dataclass itself.
        target: Class being analysed, used in error messages.

    """
    fields: dict[str, _DataclassField] = {}
    for node in nodes:
        kw_only = _decorator_flag(node, "kw_only", default=False)
        for statement in node.body:
            if not isinstance(statement, ast.AnnAssign) or not isinstance(statement.target, ast.Name):
                continue
            annotation_name = _base_name(statement.annotation)
            if annotation_name == "KW_ONLY":
                kw_only = True
                continue
            if annotation_name == "ClassVar":
                continue
            field_ = _describe_field(statement, kw_only)
            if field_ is None:
                fields.pop(statement.target.id, None)
                continue
            # redeclared fields keep the position of the first declaration
            fields[field_.name] = field_

    positional = [f for f in fields.values() if not f.kw_only]
    keyword_only = [f for f in fields.values() if f.kw_only]

    defaults: list[ast.expr] = []
    for f in positional:
        if f.default is not None:
            defaults.append(f.default)
        elif defaults:
            msg = f"Non-default field [{f.name}] follows a default field in [{describe(target)}]."
            raise AstWireAnalysisError(msg)

    return ast.arguments(
        posonlyargs=[],
        args=[ast.arg(arg=f.name, annotation=f.annotation) for f in positional],
        vararg=None,
        kwonlyargs=[ast.arg(arg=f.name, annotation=f.annotation) for f in keyword_only],
        kw_defaults=[f.default for f in keyword_only],
        kwarg=None,
        defaults=defaults,
    )


def _describe_field(statement: ast.AnnAssign, kw_only: bool) -> _DataclassField | None:
    name = statement.target.id  # type: ignore[union-attr]
    value = statement.value
    default: ast.expr | None = value

    if isinstance(value, ast.Call) and _base_name(value.func) == "field":
        keywords = {keyword.arg: keyword.value for keyword in value.keywords if keyword.arg}
        init = keywords.get("init")
        if isinstance(init, ast.Constant) and init.value is False:
            return None
        if "default" in keywords:
            default = keywords["default"]
        elif "default_factory" in keywords:
            default = value
        else:
            default = None
        field_kw_only = keywords.get("kw_only")
        if isinstance(field_kw_only, ast.Constant) and isinstance(field_kw_only.value, bool):
            kw_only = field_kw_only.value

    return _DataclassField(name=name, annotation=statement.annotation, default=default, kw_only=kw_only)


def _decorator_flag(node: ast.ClassDef, flag: str, *, default: bool) -> bool:
    for decorator in node.decorator_list:
        if not isinstance(decorator, ast.Call) or _base_name(decorator.func) != "dataclass":
            continue
        for keyword in decorator.keywords:
            if keyword.arg == flag and isinstance(keyword.value, ast.Constant):
                return bool(keyword.value.value)
    return default


def _base_name(node: ast.expr) -> str | None:
    """Return the trailing name of ``X``, ``mod.X``, ``X[...]`` or ``"X[...]"``."""
    if isinstance(node, ast.Subscript):
        return _base_name(node.value)
    if isinstance(node, ast.Attribute):
        return node.attr
    if isinstance(node, ast.Name):
        return node.id
    if isinstance(node, ast.Constant) and isinstance(node.value, str):
        head = node.value.split("[", 1)[0].strip()
        return head.rsplit(".", 1)[-1]
    return None


__all__ = ["ClassAnalyser", "dataclass_arguments", "find_constructor"]
