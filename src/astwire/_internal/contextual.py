from __future__ import annotations

import logging
from collections.abc import Callable, Iterable
from typing import TYPE_CHECKING, Any, Final

from astwire.exceptions import AstWireContextualBindingError, describe

if TYPE_CHECKING:
    from typing_extensions import Self

logger = logging.getLogger(__name__)

MISSING: Final[Any] = object()


class ContextualBindingManager:
    """Overrides keyed by ``(consumer, dependency)``, looked up by exact match."""

    def __init__(self) -> None:
        self._overrides: dict[tuple[Any, Any], Any] = {}

    def add(self, consumer: Any, dependency: Any, implementation: Any) -> None:
        self._overrides[(consumer, dependency)] = implementation
        logger.debug(
            "When %s needs %s give %s",
            describe(consumer),
            describe(dependency),
            describe(implementation),
        )

    def find(self, consumer: Any, dependency: Any) -> Any:
        """Return the override for ``dependency`` inside ``consumer`` or ``MISSING``."""
        if consumer is None:
            return MISSING
        try:
            return self._overrides.get((consumer, dependency), MISSING)
        except TypeError:
            # unhashable dependency annotations never have overrides
            return MISSING

    def has(self, consumer: Any, dependency: Any) -> bool:
        return self.find(consumer, dependency) is not MISSING

    def clear(self) -> None:
        self._overrides.clear()

    def __len__(self) -> int:
        return len(self._overrides)


class ContextualBindingBuilder:
    """Fluent builder returned by ``Container.when``.

    Examples:
        .. code-block:: python

            container.when(ReportService).needs(Storage).give(S3Storage)
            container.when(Importer).needs("$batch_size").give(500)

    """

    def __init__(
        self,
        manager: ContextualBindingManager,
        consumers: Iterable[Any],
        *,
        normalize: Callable[[Any], Any] = lambda identifier: identifier,
    ) -> None:
        self._manager = manager
        self._consumers = tuple(consumers)
        self._normalize = normalize
        self._needs: Any = MISSING

    def needs(self, dependency: Any) -> Self:
        """Define the dependency whose resolution depends on the consumer.

        Args:
            dependency: Identifier requested by the consumer, or ``"$name"`` for
                an untyped or builtin-typed parameter called ``name``.

        """
        self._needs = dependency
        return self

    def give(self, implementation: Any) -> None:
        """Store the override for every consumer of this builder.

        Args:
            implementation: A class (resolved through the container), a
                factory called with the container, or a plain value.

        Raises:
            AstWireContextualBindingError: If ``needs`` was not called first.

        """
        if self._needs is MISSING:
            msg = "The dependency is undefined; call needs() before give()."
            raise AstWireContextualBindingError(msg)

        dependency = self._normalize(self._needs)
        for consumer in self._consumers:
            self._manager.add(consumer, dependency, implementation)


__all__ = ["MISSING", "ContextualBindingBuilder", "ContextualBindingManager"]
