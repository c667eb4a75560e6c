from __future__ import annotations

import itertools
from typing import Annotated, Any

_interface_counter = itertools.count()


class Interface:
    """Unique identifier for a contract that has no class of its own.

    Instances compare and hash by identity, so two interfaces created with the
    same name stay distinct. Use the interface itself, or ``interface.marker``,
    as a parameter annotation to request whatever the container binds to it.

    Examples:
        .. code-block:: python

            Logger = create_interface("Logger")


            class Service:
                def __init__(self, logger: Logger.marker) -> None:
                    self.logger = logger


            container.bind(Logger, ConsoleLogger)

    """

    __slots__ = ("_key", "name")

    def __init__(self, name: str) -> None:
        self.name = name
        self._key = next(_interface_counter)

    @property
    def key(self) -> str:
        """Stable textual key, unique within the process."""
        return f"{self.name}#{self._key}"

    @property
    def marker(self) -> Any:
        """Type-position placeholder carrying this interface."""
        return Annotated[Any, self]

    def __repr__(self) -> str:
        return f"Interface({self.name!r})"


def create_interface(name: str) -> Interface:
    """Create a new unique interface identifier.

    Args:
        name: Human readable name used in error messages and ``repr``.

    Returns:
        A fresh ``Interface``; every call returns a distinct identifier.

    """
    return Interface(name)


__all__ = ["Interface", "create_interface"]
