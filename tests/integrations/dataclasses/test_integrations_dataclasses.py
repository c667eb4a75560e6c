"""Tests for dataclasses integration."""

from dataclasses import KW_ONLY, dataclass, field
from typing import ClassVar

from astwire.container import Container
from astwire.interfaces import create_interface


class DepService:
    pass


Clock = create_interface("Clock")


@dataclass
class DataclassModelWithDep:
    dep: DepService


@dataclass
class NestedDataclassModel:
    model: DataclassModelWithDep


@dataclass
class DataclassModelWithDefault:
    dep: DepService
    name: str = "default"
    tags: list[str] = field(default_factory=list)


@dataclass
class EmptyDataclassModel:
    pass


@dataclass
class DataclassWithKeywordOnly:
    dep: DepService
    _: KW_ONLY
    clock: Clock.marker
    retries: int = 3


@dataclass
class DataclassWithIgnoredFields:
    dep: DepService
    instances: ClassVar[int] = 0
    cache: dict[str, str] = field(init=False, default_factory=dict)


@dataclass
class DataclassChild(DataclassModelWithDep):
    extra: str = "child"


@dataclass(frozen=True)
class FrozenDataclass:
    dep: DepService


class TestDataclassResolution:
    def test_resolve_dataclass_with_dependency(self, container: Container) -> None:
        """Dataclass with a dependency field resolves correctly."""
        result = container.make(DataclassModelWithDep)

        assert isinstance(result, DataclassModelWithDep)
        assert isinstance(result.dep, DepService)

    def test_resolve_empty_dataclass(self, container: Container) -> None:
        """Dataclass with no fields resolves correctly."""
        assert isinstance(container.make(EmptyDataclassModel), EmptyDataclassModel)

    def test_resolve_dataclass_with_default(self, container: Container) -> None:
        """Defaults of primitive fields are left to the generated constructor."""
        result = container.make(DataclassModelWithDefault)

        assert isinstance(result.dep, DepService)
        assert result.name == "default"
        assert result.tags == []

    def test_resolve_nested_dataclasses(self, container: Container) -> None:
        """Nested dataclass dependency chain resolves correctly."""
        result = container.make(NestedDataclassModel)

        assert isinstance(result.model.dep, DepService)

    def test_keyword_only_fields(self, container: Container) -> None:
        container.bind(Clock, lambda: "utc")

        result = container.make(DataclassWithKeywordOnly)

        assert result.clock == "utc"
        assert result.retries == 3

    def test_ignored_fields(self, container: Container) -> None:
        result = container.make(DataclassWithIgnoredFields)

        assert isinstance(result.dep, DepService)
        assert result.cache == {}

    def test_inherited_fields(self, container: Container) -> None:
        result = container.make(DataclassChild)

        assert isinstance(result.dep, DepService)
        assert result.extra == "child"

    def test_frozen_dataclass(self, container: Container) -> None:
        assert isinstance(container.make(FrozenDataclass).dep, DepService)

    def test_contextual_override_for_field(self, container: Container) -> None:
        container.when(DataclassModelWithDefault).needs("$name").give("configured")

        assert container.make(DataclassModelWithDefault).name == "configured"
