from __future__ import annotations

from collections.abc import Callable
from typing import Any, TypeVar, overload

from astwire.metadata import MetadataRegistry, default_metadata

T = TypeVar("T")


@overload
def injectable(target: T, /) -> T: ...


@overload
def injectable(*, metadata: MetadataRegistry | None = None) -> Callable[[T], T]: ...


def injectable(
    target: Any = None,
    /,
    *,
    metadata: MetadataRegistry | None = None,
) -> Any:
    """Mark a class (or function) as injectable.

    Marking only matters for containers created with
    ``require_injectable=True``; other containers auto-resolve any concrete
    class.

    Args:
        target: Target in direct form. Omit it to use the decorator with
            arguments.
        metadata: Registry to record into. Defaults to the module registry.

    Returns:
        The target unchanged in direct form, or a decorator.

    Examples:
        .. code-block:: python

            @injectable
            class Service: ...

    """
    registry = default_metadata if metadata is None else metadata

    def decorator(obj: T) -> T:
        registry.mark_injectable(obj)
        return obj

    if target is None:
        return decorator
    return decorator(target)


def inject(
    parameter: str | int,
    identifier: Any,
    *,
    metadata: MetadataRegistry | None = None,
) -> Callable[[T], T]:
    """Attach a contextual identifier to one parameter of a class or function.

    For classes the parameter belongs to the constructor. Positions are
    zero-based and do not count ``self``.

    Args:
        parameter: Parameter name or position.
        identifier: Identifier the container resolves for the parameter.
        metadata: Registry to record into. Defaults to the module registry.

    Raises:
        AstWireMetadataError: If the parameter already carries an identifier or
            the identifier is already attached to another parameter.

    Examples:
        .. code-block:: python

            Cache = create_interface("Cache")


            @inject("cache", Cache)
            class Repository:
                def __init__(self, cache) -> None:
                    self.cache = cache

    """
    registry = default_metadata if metadata is None else metadata

    def decorator(obj: T) -> T:
        registry.set_parameter_identifier(obj, parameter, identifier)
        return obj

    return decorator


__all__ = ["inject", "injectable"]
