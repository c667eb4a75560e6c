from __future__ import annotations

from typing import Annotated, Any, NamedTuple, get_args, get_origin

from astwire.interfaces import Interface

_ANNOTATED_MARKER_MIN_ARGS = 2


class Inject(NamedTuple):
    """Attach a contextual identifier to a parameter through ``Annotated``.

    The container resolves the parameter by ``identifier`` instead of its
    structural type.

    Examples:
        .. code-block:: python

            class Mailer:
                def __init__(self, transport: Annotated[Transport, Inject("smtp")]) -> None:
                    self.transport = transport

    """

    identifier: Any


def annotation_identifier(annotation: Any) -> Any | None:
    """Return the contextual identifier carried by an annotation, if any.

    Recognises a bare ``Interface`` and ``Annotated`` metadata holding an
    ``Inject`` marker or an ``Interface``. The last matching marker wins.
    """
    if isinstance(annotation, Interface):
        return annotation
    if get_origin(annotation) is not Annotated:
        return None

    args = get_args(annotation)
    if len(args) < _ANNOTATED_MARKER_MIN_ARGS:
        return None  # pragma: no cover - Annotated requires at least 2 args

    found: Any | None = None
    for metadata in args[1:]:
        if isinstance(metadata, Inject):
            found = metadata.identifier
        elif isinstance(metadata, Interface):
            found = metadata
    return found


def strip_annotated(annotation: Any) -> Any:
    """Return the base type of an ``Annotated`` annotation."""
    if get_origin(annotation) is Annotated:
        return get_args(annotation)[0]
    return annotation


__all__ = ["Inject", "annotation_identifier", "strip_annotated"]
