import importlib
from types import ModuleType
from typing import Any

import astwire._internal.integrations.pydantic_settings as pydantic_settings_integration


def test_find_base_settings_returns_none_for_missing_module(monkeypatch: Any) -> None:
    def _raise_import_error(_module_name: str) -> ModuleType:
        raise ImportError

    monkeypatch.setattr(importlib, "import_module", _raise_import_error)

    assert pydantic_settings_integration.find_base_settings("missing.module") is None


def test_find_base_settings_returns_none_when_base_settings_is_not_a_type(monkeypatch: Any) -> None:
    module = ModuleType("settings_module")
    module.BaseSettings = "not-a-type"  # type: ignore[attr-defined]

    monkeypatch.setattr(importlib, "import_module", lambda _module_name: module)

    assert pydantic_settings_integration.find_base_settings("fake.module") is None


def test_collect_settings_bases_skips_duplicates_and_missing(monkeypatch: Any) -> None:
    class _BaseSettings:
        pass

    found = {"first": _BaseSettings, "second": _BaseSettings, "absent": None}
    monkeypatch.setattr(pydantic_settings_integration, "find_base_settings", found.get)

    assert pydantic_settings_integration.collect_settings_bases(("first", "absent", "second")) == (_BaseSettings,)


def test_subclasses_of_collected_bases_are_settings(monkeypatch: Any) -> None:
    class _BaseSettings:
        pass

    class AppSettings(_BaseSettings):
        pass

    monkeypatch.setattr(pydantic_settings_integration, "SETTINGS_BASES", (_BaseSettings,))

    assert pydantic_settings_integration.is_pydantic_settings_subclass(AppSettings)


def test_plain_classes_are_not_settings() -> None:
    class Plain:
        pass

    assert not pydantic_settings_integration.is_pydantic_settings_subclass(Plain)
    assert not pydantic_settings_integration.is_pydantic_settings_subclass("Plain")
