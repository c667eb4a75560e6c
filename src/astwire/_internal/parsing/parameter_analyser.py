from __future__ import annotations

import ast
import inspect
from collections.abc import Iterator, Mapping, Sequence
from dataclasses import dataclass
from types import SimpleNamespace
from typing import Any, Final, get_type_hints

from astwire.exceptions import AstWireAnalysisError, describe
from astwire.markers import annotation_identifier, strip_annotated

MISSING: Final[Any] = inspect.Parameter.empty
"""Marks an absent annotation or a default that is not a literal."""

ParameterKind = inspect._ParameterKind  # noqa: SLF001

_REST_KINDS: Final = (inspect.Parameter.VAR_POSITIONAL, inspect.Parameter.VAR_KEYWORD)


@dataclass(frozen=True, slots=True)
class ParameterDescriptor:
    """Structural description of one declared parameter."""

    name: str
    position: int
    kind: ParameterKind
    has_default: bool
    annotation_source: str | None = None
    default_source: str | None = None
    default_value: Any = MISSING
    type: Any = None
    contextual_identifier: Any = None

    @property
    def is_rest(self) -> bool:
        return self.kind in _REST_KINDS

    @property
    def is_positional(self) -> bool:
        return self.kind in (inspect.Parameter.POSITIONAL_ONLY, inspect.Parameter.POSITIONAL_OR_KEYWORD)

    @property
    def identifier(self) -> Any:
        """Identifier to resolve: contextual identifier first, then the type."""
        if self.contextual_identifier is not None:
            return self.contextual_identifier
        return self.type


@dataclass(frozen=True, slots=True)
class _RawParameter:
    node: ast.arg
    kind: ParameterKind
    default: ast.expr | None


class ParameterAnalyser:
    """Enumerate the parameters of a parsed ``ast.arguments`` node.

    Descriptors come out in declaration order; the container relies on that
    order to map resolved dependencies onto positional arguments.
    """

    def __init__(
        self,
        arguments: ast.arguments,
        target: Any,
        *,
        skip_first: bool = False,
        annotations: Mapping[str, Any] | None = None,
        identifiers: Mapping[str | int, Any] | None = None,
        globalns: Mapping[str, Any] | None = None,
    ) -> None:
        self._target = target
        raw = list(_iter_arguments(arguments))
        declared = {parameter.node.arg for parameter in raw}
        if skip_first and raw and raw[0].kind not in _REST_KINDS:
            raw = raw[1:]

        annotations = dict(annotations or {})
        annotations.pop("return", None)
        identifiers = dict(identifiers or {})
        self._check_names(declared, annotations, identifiers, len(raw))

        self._descriptors = tuple(
            self._describe(parameter, position, annotations, identifiers, globalns)
            for position, parameter in enumerate(raw)
        )

    def all(self) -> tuple[ParameterDescriptor, ...]:
        return self._descriptors

    def at(self, index: int) -> ParameterDescriptor:
        return self._descriptors[index]

    def names(self) -> list[str]:
        return [descriptor.name for descriptor in self._descriptors]

    def __iter__(self) -> Iterator[ParameterDescriptor]:
        return iter(self._descriptors)

    def __len__(self) -> int:
        return len(self._descriptors)

    def _check_names(
        self,
        declared: set[str],
        annotations: Mapping[str, Any],
        identifiers: Mapping[str | int, Any],
        count: int,
    ) -> None:
        unknown = sorted(name for name in annotations if name not in declared)
        if unknown:
            msg = (
                f"Source of [{describe(self._target)}] does not declare annotated parameters "
                f"{unknown}; the source may be stale."
            )
            raise AstWireAnalysisError(msg)

        for key in identifiers:
            if isinstance(key, int):
                if not 0 <= key < count:
                    msg = (
                        f"Injection metadata targets position {key} "
                        f"but [{describe(self._target)}] has {count} parameters."
                    )
                    raise AstWireAnalysisError(msg)
            elif key not in declared:
                msg = f"Injection metadata targets unknown parameter [{key}] of [{describe(self._target)}]."
                raise AstWireAnalysisError(msg)

    def _describe(
        self,
        parameter: _RawParameter,
        position: int,
        annotations: Mapping[str, Any],
        identifiers: Mapping[str | int, Any],
        globalns: Mapping[str, Any] | None,
    ) -> ParameterDescriptor:
        name = parameter.node.arg
        annotation = _evaluate_annotation(name, annotations.get(name, MISSING), globalns, self._target)

        contextual = identifiers.get(name, identifiers.get(position))
        if contextual is None and annotation is not MISSING:
            contextual = annotation_identifier(annotation)

        default = parameter.default
        return ParameterDescriptor(
            name=name,
            position=position,
            kind=parameter.kind,
            has_default=default is not None,
            annotation_source=_unparse(parameter.node.annotation),
            default_source=_unparse(default),
            default_value=_literal(default),
            type=None if annotation is MISSING else strip_annotated(annotation),
            contextual_identifier=contextual,
        )


def _iter_arguments(arguments: ast.arguments) -> Iterator[_RawParameter]:
    positional: Sequence[ast.arg] = [*arguments.posonlyargs, *arguments.args]
    padding: list[ast.expr | None] = [None] * (len(positional) - len(arguments.defaults))
    defaults = [*padding, *arguments.defaults]

    for index, (node, default) in enumerate(zip(positional, defaults)):
        kind = (
            inspect.Parameter.POSITIONAL_ONLY
            if index < len(arguments.posonlyargs)
            else inspect.Parameter.POSITIONAL_OR_KEYWORD
        )
        yield _RawParameter(node=node, kind=kind, default=default)

    if arguments.vararg is not None:
        yield _RawParameter(node=arguments.vararg, kind=inspect.Parameter.VAR_POSITIONAL, default=None)

    for node, kw_default in zip(arguments.kwonlyargs, arguments.kw_defaults):
        yield _RawParameter(node=node, kind=inspect.Parameter.KEYWORD_ONLY, default=kw_default)

    if arguments.kwarg is not None:
        yield _RawParameter(node=arguments.kwarg, kind=inspect.Parameter.VAR_KEYWORD, default=None)


def _evaluate_annotation(
    name: str,
    annotation: Any,
    globalns: Mapping[str, Any] | None,
    target: Any,
) -> Any:
    """Evaluate one string annotation, or return ``MISSING`` if it names something undefined.

    Each annotation is evaluated on its own, so one forward reference that
    cannot be resolved leaves only its own parameter untyped.
    """
    if not isinstance(annotation, str):
        return annotation
    holder = SimpleNamespace(__annotations__={name: annotation})
    try:
        return get_type_hints(holder, globalns=dict(globalns or {}), include_extras=True)[name]
    except (NameError, AttributeError):
        return MISSING
    except Exception as e:
        msg = f"Cannot evaluate annotation {annotation!r} of parameter [{name}] of [{describe(target)}]: {e}"
        raise AstWireAnalysisError(msg) from e


def _unparse(node: ast.AST | None) -> str | None:
    return None if node is None else ast.unparse(node)


def _literal(node: ast.expr | None) -> Any:
    if node is None:
        return MISSING
    try:
        return ast.literal_eval(node)
    except (ValueError, TypeError, SyntaxError, RecursionError):
        return MISSING


__all__ = ["MISSING", "ParameterAnalyser", "ParameterDescriptor", "ParameterKind"]
