from __future__ import annotations

import datetime
import decimal
import enum
import pathlib
import uuid
from dataclasses import dataclass
from typing import Any, TypeGuard

from astwire._internal.type_checks import is_abstract_class, is_runtime_class


@dataclass(frozen=True, slots=True)
class ConcreteTypeAutoresolutionPolicy:
    """Decide which unbound classes may build themselves."""

    ignored_base_types: tuple[type[Any], ...] = (
        pathlib.PurePath,
        datetime.datetime,
        datetime.date,
        datetime.time,
        datetime.timedelta,
        uuid.UUID,
        decimal.Decimal,
        enum.Enum,
    )

    def is_value_type(self, candidate: object) -> bool:
        """Return true for builtins and value types that are never auto-resolved.

        Parameters typed with these are treated as primitives.

        Args:
            candidate: Annotation or identifier being checked.

        """
        if not is_runtime_class(candidate):
            return False
        if candidate.__module__ == "builtins":
            return True
        return issubclass(candidate, self.ignored_base_types)

    def is_eligible_concrete(self, candidate: object) -> TypeGuard[type[Any]]:
        """Return true when a candidate can be instantiated without a binding.

        Args:
            candidate: Identifier being checked.

        """
        if not is_runtime_class(candidate):
            return False
        if self.is_value_type(candidate):
            return False
        if is_abstract_class(candidate):
            return False
        return not issubclass(candidate, type)


__all__ = ["ConcreteTypeAutoresolutionPolicy"]
