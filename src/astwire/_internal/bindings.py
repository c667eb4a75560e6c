from __future__ import annotations

import logging
from collections.abc import Iterator
from dataclasses import dataclass
from typing import Any

from astwire.exceptions import describe

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class Binding:
    """Registry record: what builds an identifier and whether it is shared."""

    concrete: Any
    shared: bool = False


class BindingRegistry:
    """Map identifiers to binding records and cache shared instances.

    Re-binding an identifier drops its cached instance, so the next
    resolution builds a fresh one.
    """

    def __init__(self) -> None:
        self._bindings: dict[Any, Binding] = {}
        self._instances: dict[Any, Any] = {}

    def bind(self, identifier: Any, concrete: Any, *, shared: bool = False) -> Binding:
        binding = Binding(concrete=concrete, shared=shared)
        self._instances.pop(identifier, None)
        self._bindings[identifier] = binding
        logger.debug("Bound %s to %s (shared=%s)", describe(identifier), describe(concrete), shared)
        return binding

    def resolve_binding_record(self, identifier: Any) -> Binding | None:
        return self._bindings.get(identifier)

    def has_binding(self, identifier: Any) -> bool:
        return identifier in self._bindings

    def forget_binding(self, identifier: Any) -> None:
        self._bindings.pop(identifier, None)

    def has_instance(self, identifier: Any) -> bool:
        return identifier in self._instances

    def get_instance(self, identifier: Any) -> Any:
        return self._instances[identifier]

    def set_instance(self, identifier: Any, instance: Any) -> None:
        self._instances[identifier] = instance

    def forget_instance(self, identifier: Any) -> None:
        self._instances.pop(identifier, None)

    def forget_instances(self) -> None:
        self._instances.clear()

    def clear(self) -> None:
        self._bindings.clear()
        self._instances.clear()

    def __iter__(self) -> Iterator[Any]:
        return iter(self._bindings)

    def __len__(self) -> int:
        return len(self._bindings)


__all__ = ["Binding", "BindingRegistry"]
