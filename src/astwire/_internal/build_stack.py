from __future__ import annotations

from collections.abc import Iterator
from contextlib import contextmanager
from typing import Any

from astwire.exceptions import AstWireCircularDependencyError


class BuildStack:
    """Identifiers currently being resolved, innermost last.

    An identifier may appear only once; a second push means the graph has a
    cycle.
    """

    def __init__(self) -> None:
        self._stack: list[Any] = []

    @contextmanager
    def track(self, identifier: Any) -> Iterator[None]:
        """Keep ``identifier`` on the stack for the duration of the block.

        Raises:
            AstWireCircularDependencyError: If ``identifier`` is already on
                the stack.

        """
        if identifier in self._stack:
            raise AstWireCircularDependencyError(identifier, self._stack)
        self._stack.append(identifier)
        try:
            yield
        finally:
            self._stack.pop()

    def consumer(self) -> Any | None:
        """Return the identifier one level above the innermost one, if any."""
        if len(self._stack) < 2:  # noqa: PLR2004
            return None
        return self._stack[-2]

    def current(self) -> Any | None:
        return self._stack[-1] if self._stack else None

    def snapshot(self) -> tuple[Any, ...]:
        return tuple(self._stack)

    def __contains__(self, identifier: object) -> bool:
        return identifier in self._stack

    def __len__(self) -> int:
        return len(self._stack)


__all__ = ["BuildStack"]
