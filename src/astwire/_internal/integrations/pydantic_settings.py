from __future__ import annotations

import importlib
import warnings
from typing import Any

from astwire._internal.type_checks import is_runtime_class

# pydantic-settings 2.x first, then the settings class bundled with pydantic 2's v1 shim
SETTINGS_MODULES: tuple[str, ...] = ("pydantic_settings", "pydantic.v1")

_PYDANTIC_V1_WARNING_PATTERN = r"Core Pydantic V1 functionality isn't compatible with Python 3\.14 or greater\."


def find_base_settings(module_name: str) -> type[Any] | None:
    """Import ``module_name`` and return its ``BaseSettings`` class, if any."""
    with warnings.catch_warnings():
        warnings.filterwarnings("ignore", message=_PYDANTIC_V1_WARNING_PATTERN, category=UserWarning)
        try:
            module = importlib.import_module(module_name)
        except ImportError:
            return None
    base_settings = getattr(module, "BaseSettings", None)
    return base_settings if isinstance(base_settings, type) else None


def collect_settings_bases(module_names: tuple[str, ...] = SETTINGS_MODULES) -> tuple[type[Any], ...]:
    bases: list[type[Any]] = []
    for module_name in module_names:
        base = find_base_settings(module_name)
        if base is not None and base not in bases:
            bases.append(base)
    return tuple(bases)


SETTINGS_BASES: tuple[type[Any], ...] = collect_settings_bases()


def is_pydantic_settings_subclass(candidate: object) -> bool:
    """Return whether ``candidate`` is a settings model the container loads itself.

    ``Container._build_bound`` calls such a class with only the explicit
    arguments, skipping source analysis, since its fields are read from the
    environment rather than from other bindings. ``Container.is_shared`` then
    reports it as shared, so the first instance is cached like a singleton.
    Always ``False`` when no settings base could be imported.
    """
    if not is_runtime_class(candidate):
        return False
    try:
        return any(issubclass(candidate, base) for base in SETTINGS_BASES)
    except TypeError:
        return False


__all__ = [
    "SETTINGS_BASES",
    "SETTINGS_MODULES",
    "collect_settings_bases",
    "find_base_settings",
    "is_pydantic_settings_subclass",
]
