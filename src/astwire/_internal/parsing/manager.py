from __future__ import annotations

import ast
import dataclasses
import inspect
import logging
import sys
from collections.abc import Mapping
from typing import Any

from astwire._internal.parsing.class_analyser import ClassAnalyser, dataclass_arguments, find_constructor
from astwire._internal.parsing.function_analyser import FunctionAnalyser
from astwire._internal.parsing.parameter_analyser import ParameterAnalyser
from astwire._internal.parsing.syntax_tree import SyntaxTreeProvider
from astwire.exceptions import AstWireAnalysisError, describe
from astwire.metadata import MetadataRegistry

logger = logging.getLogger(__name__)


class AnalyserManager:
    """Build class and function analysers from a target's own source text.

    Nothing is cached: every call re-reads and re-parses the source, so a
    regenerated declaration is always seen as it currently is.
    """

    def __init__(
        self,
        metadata: MetadataRegistry,
        provider: SyntaxTreeProvider | None = None,
    ) -> None:
        self._metadata = metadata
        self._provider = provider or SyntaxTreeProvider()

    def analyse(self, target: Any) -> ClassAnalyser | FunctionAnalyser:
        if isinstance(target, type):
            return self.analyse_class(target)
        return self.analyse_function(target)

    def analyse_class(self, cls: type[Any]) -> ClassAnalyser:
        """Analyse ``cls`` and its constructor.

        Raises:
            AstWireParseError: If a source involved does not parse.
            AstWireAnalysisError: If a source is unavailable or is not the
                expected declaration.

        """
        node = self._class_node(cls)
        identifiers = self._identifiers(cls)

        owner = next(
            (
                base
                for base in cls.__mro__
                # Protocol classes carry a placeholder __init__
                if "__init__" in vars(base) and not vars(base).get("_is_protocol", False)
            ),
            object,
        )
        if owner is object:
            logger.debug("Class %s inherits object.__init__", describe(cls))
            return ClassAnalyser(node, cls)

        if _has_generated_init(owner):
            nodes = [
                self._class_node(base) if base is not cls else node
                for base in reversed(owner.__mro__)
                if "__dataclass_params__" in vars(base)
            ]
            parameters = ParameterAnalyser(
                dataclass_arguments(nodes, owner),
                owner,
                annotations=_dataclass_annotations(owner),
                identifiers=identifiers,
                globalns=_module_globals(owner),
            )
            return ClassAnalyser(node, cls, parameters=parameters)

        owner_node = node if owner is cls else self._class_node(owner)
        constructor_node = find_constructor(owner_node)
        if constructor_node is None:
            msg = f"Constructor of [{describe(owner)}] is not declared with def in its class body."
            raise AstWireAnalysisError(msg)

        init = inspect.unwrap(vars(owner)["__init__"])
        constructor = FunctionAnalyser(
            constructor_node,
            owner,
            skip_first=True,
            annotations=_annotations(init),
            identifiers=identifiers,
            globalns=getattr(init, "__globals__", None) or _module_globals(owner),
        )
        return ClassAnalyser(node, cls, constructor=constructor)

    def analyse_function(self, func: Any) -> FunctionAnalyser:
        """Analyse a function, bound method, lambda or callable instance.

        ``self`` is skipped for bound methods and callable instances.
        """
        skip_first = False
        target = inspect.unwrap(func)
        if inspect.ismethod(target):
            target = inspect.unwrap(target.__func__)
            skip_first = True
        elif not inspect.isfunction(target):
            call = inspect.unwrap(getattr(type(target), "__call__", None))
            if inspect.isfunction(call):
                target = call
                skip_first = True

        module = self._provider.parse_target(target)
        node = _function_node(module, target)
        return FunctionAnalyser(
            node,
            target,
            skip_first=skip_first,
            annotations=_annotations(target),
            identifiers=self._identifiers(func),
            globalns=getattr(target, "__globals__", None),
        )

    def _class_node(self, cls: type[Any]) -> ast.ClassDef:
        module = self._provider.parse_target(cls)
        declarations = [statement for statement in module.body if isinstance(statement, ast.ClassDef)]
        if len(declarations) != 1 or declarations[0].name != cls.__name__:
            msg = f"Source of [{describe(cls)}] is not a single class declaration."
            raise AstWireAnalysisError(msg)
        return declarations[0]

    def _identifiers(self, target: Any) -> Mapping[str | int, Any]:
        metadata = self._metadata.get(target)
        if metadata is None and inspect.ismethod(target):
            metadata = self._metadata.get(target.__func__)
        return {} if metadata is None else metadata.parameter_identifiers


def _function_node(module: ast.Module, target: Any) -> ast.AST:
    if getattr(target, "__name__", None) == "<lambda>":
        lambdas = [node for node in ast.walk(module) if isinstance(node, ast.Lambda)]
        if len(lambdas) != 1:
            msg = f"Cannot pick one lambda out of {len(lambdas)} in the source of [{describe(target)}]."
            raise AstWireAnalysisError(msg)
        return lambdas[0]

    declarations = [
        statement
        for statement in module.body
        if isinstance(statement, (ast.FunctionDef, ast.AsyncFunctionDef))
    ]
    if len(declarations) != 1:
        msg = f"Source of [{describe(target)}] is not a single function declaration."
        raise AstWireAnalysisError(msg)
    return declarations[0]


def _has_generated_init(cls: type[Any]) -> bool:
    if not dataclasses.is_dataclass(cls) or "__dataclass_params__" not in vars(cls):
        return False
    return bool(cls.__dataclass_params__.init)  # type: ignore[attr-defined]


def _annotations(obj: Any) -> dict[str, Any]:
    try:
        return dict(inspect.get_annotations(obj))
    except (NameError, TypeError):
        # forward references to names not defined yet leave every type unknown
        return {}


def _dataclass_annotations(cls: type[Any]) -> dict[str, Any]:
    merged: dict[str, Any] = {}
    for base in reversed(cls.__mro__):
        if dataclasses.is_dataclass(base):
            merged.update(_annotations(base))
    # ClassVar, KW_ONLY and init=False names are not constructor parameters
    init_fields = {field_.name for field_ in dataclasses.fields(cls) if field_.init}
    return {name: annotation for name, annotation in merged.items() if name in init_fields}


def _module_globals(cls: type[Any]) -> Mapping[str, Any] | None:
    module = sys.modules.get(cls.__module__)
    return None if module is None else vars(module)


__all__ = ["AnalyserManager"]
