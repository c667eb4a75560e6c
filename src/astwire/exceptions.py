from __future__ import annotations

from collections.abc import Sequence
from typing import Any


def describe(identifier: Any) -> str:
    """Return a short human readable name for an identifier."""
    if isinstance(identifier, str):
        return identifier
    name = getattr(identifier, "__qualname__", None) or getattr(identifier, "name", None)
    if isinstance(name, str):
        return name
    return repr(identifier)


def _format_stack(stack: Sequence[Any]) -> str:
    return " -> ".join(describe(entry) for entry in stack)


class AstWireError(Exception):
    """Represent a base class for all astwire-specific failures.

    Catch this type when you want to handle any astwire error path without
    matching each concrete exception class individually.
    """


class AstWireParseError(AstWireError):
    """Signal that source text is not valid Python.

    Raised by the syntax tree provider. ``Container.make`` never lets it escape
    directly: it is chained as the cause of an ``AstWireResolutionError``.
    """

    def __init__(self, message: str, *, lineno: int | None = None) -> None:
        self.lineno = lineno
        super().__init__(message if lineno is None else f"{message} (line {lineno})")


class AstWireAnalysisError(AstWireError):
    """Signal that source parses but is not a recognizable declaration.

    Typical triggers are source that holds several lambdas on one line, a
    constructor assigned instead of declared with ``def``, or runtime
    annotations that name parameters the source does not declare.
    """


class AstWireSourceUnavailableError(AstWireAnalysisError):
    """Signal that no source text can be retrieved for a target.

    Builtins, C extension types, dynamically created classes and code typed in
    a REPL have no retrievable source. The container treats such targets as
    having zero auto-resolvable parameters.
    """


class AstWireMetadataError(AstWireError):
    """Signal conflicting injection metadata on a decorated target."""


class AstWireBindingError(AstWireError):
    """Signal an invalid binding or alias registration.

    Raised by ``bind``/``singleton`` when the concrete is neither a class, a
    callable factory nor an identifier, and by ``alias`` when an identifier is
    aliased to itself.
    """


class AstWireContextualBindingError(AstWireBindingError):
    """Signal ``give`` called on a contextual builder without ``needs``."""


class AstWireResolutionError(AstWireError):
    """Signal that ``make`` could not construct the requested identifier.

    Parse and analysis failures surface as this error with the original
    exception available as ``cause`` (and ``__cause__``).
    """

    def __init__(self, message: str, *, cause: BaseException | None = None) -> None:
        self.cause = cause
        super().__init__(message)


class AstWireCircularDependencyError(AstWireResolutionError):
    """Signal a dependency cycle detected through the build stack.

    The error is fatal for the ``make`` call that raised it; nothing built
    during that call is cached.
    """

    def __init__(self, identifier: Any, stack: Sequence[Any]) -> None:
        self.identifier = identifier
        self.stack = tuple(stack)
        cycle = _format_stack([*self.stack, identifier])
        super().__init__(f"Circular dependency detected while resolving [{describe(identifier)}]: {cycle}")


class AstWireBindingNotFoundError(AstWireResolutionError):
    """Signal an identifier with no binding that cannot build itself.

    Typical fixes include binding the identifier explicitly, marking the class
    ``@injectable`` when ``require_injectable`` is on, or binding a concrete
    class for a Protocol/ABC contract.
    """

    def __init__(self, identifier: Any, stack: Sequence[Any] = (), *, reason: str | None = None) -> None:
        self.identifier = identifier
        self.stack = tuple(stack)
        message = f"Target [{describe(identifier)}] is not bound"
        if reason:
            message += f" and {reason}"
        if self.stack:
            message += f" while building [{_format_stack(self.stack)}]"
        super().__init__(message + ".")
