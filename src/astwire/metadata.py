from __future__ import annotations

import weakref
from dataclasses import dataclass, field
from typing import Any

from astwire.exceptions import AstWireMetadataError, describe


@dataclass(slots=True)
class InjectableMetadata:
    """Metadata recorded for one class or function.

    Attributes:
        injectable: Whether the target was marked with ``@injectable``.
        parameter_identifiers: Contextual identifiers keyed by parameter name
            or by zero-based position (``self`` excluded).

    """

    injectable: bool = False
    parameter_identifiers: dict[str | int, Any] = field(default_factory=dict)


class MetadataRegistry:
    """Side table mapping decorated targets to their injection metadata.

    Targets are held weakly so locally defined classes are not kept alive by
    the table. Nothing is written onto the targets themselves.
    """

    def __init__(self) -> None:
        self._entries: weakref.WeakKeyDictionary[Any, InjectableMetadata] = weakref.WeakKeyDictionary()

    def get(self, target: Any) -> InjectableMetadata | None:
        try:
            return self._entries.get(target)
        except TypeError:
            # not weak-referenceable, so it can never have been recorded
            return None

    def is_injectable(self, target: Any) -> bool:
        metadata = self.get(target)
        return metadata is not None and metadata.injectable

    def mark_injectable(self, target: Any) -> InjectableMetadata:
        metadata = self._ensure(target)
        metadata.injectable = True
        return metadata

    def set_parameter_identifier(self, target: Any, parameter: str | int, identifier: Any) -> None:
        """Record the contextual identifier for one parameter of ``target``.

        Args:
            target: Class or function owning the parameter.
            parameter: Parameter name, or zero-based position excluding ``self``.
            identifier: Identifier the container resolves for that parameter.

        Raises:
            AstWireMetadataError: If the parameter already has an identifier or
                the identifier is already attached to another parameter.

        """
        metadata = self._ensure(target)
        if parameter in metadata.parameter_identifiers:
            msg = f"Cannot attach two identifiers to parameter [{parameter}] of [{describe(target)}]."
            raise AstWireMetadataError(msg)
        if any(existing is identifier for existing in metadata.parameter_identifiers.values()):
            msg = (
                f"Injecting the same [{describe(identifier)}] identifier "
                f"multiple times into [{describe(target)}] is redundant."
            )
            raise AstWireMetadataError(msg)
        metadata.parameter_identifiers[parameter] = identifier

    def forget(self, target: Any) -> None:
        self._entries.pop(target, None)

    def _ensure(self, target: Any) -> InjectableMetadata:
        try:
            metadata = self._entries.get(target)
        except TypeError as e:
            msg = f"Cannot record injection metadata for [{describe(target)}]."
            raise AstWireMetadataError(msg) from e
        if metadata is None:
            metadata = InjectableMetadata()
            self._entries[target] = metadata
        return metadata

    def __contains__(self, target: object) -> bool:
        return self.get(target) is not None


default_metadata = MetadataRegistry()
"""Registry populated by the decorators when no registry is passed."""


__all__ = ["InjectableMetadata", "MetadataRegistry", "default_metadata"]
