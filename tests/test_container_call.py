"""Tests for calling functions with resolved dependencies."""

from typing import Any

import pytest

from astwire.container import Container
from astwire.exceptions import AstWireBindingNotFoundError, AstWireResolutionError


class Repository:
    def latest(self, limit: int) -> list[int]:
        return list(range(limit))


class CachedRepository(Repository):
    pass


def list_rows(repository: Repository, limit: int = 3) -> list[int]:
    return repository.latest(limit)


def repository_of(repository: Repository) -> Repository:
    return repository


def collect(repository: Repository, *extra: Any, **options: Any) -> tuple[Any, ...]:
    return repository, extra, options


class Controller:
    def show(self, repository: Repository, page: int = 1) -> tuple[Repository, int]:
        return repository, page


class Job:
    def __init__(self, name: str) -> None:
        self.name = name

    def __call__(self, repository: Repository) -> str:
        return f"{self.name}:{type(repository).__name__}"


class TestCall:
    def test_function_dependencies_are_resolved(self, container: Container) -> None:
        assert container.call(list_rows) == [0, 1, 2]

    def test_explicit_keyword_arguments(self, container: Container) -> None:
        assert container.call(list_rows, limit=2) == [0, 1]

    def test_explicit_positional_arguments(self, container: Container) -> None:
        repository = Repository()

        assert container.call(repository_of, repository) is repository

    def test_bindings_apply(self, container: Container) -> None:
        container.singleton(Repository, CachedRepository)

        assert container.call(repository_of) is container.make(Repository)

    def test_bound_method(self, container: Container) -> None:
        repository, page = container.call(Controller().show, page=4)

        assert isinstance(repository, Repository)
        assert page == 4

    def test_callable_instance(self, container: Container) -> None:
        assert container.call(Job("nightly")) == "nightly:Repository"

    def test_variadic_parameters_receive_explicit_arguments(self, container: Container) -> None:
        repository, extra, options = container.call(collect, Repository(), 1, 2, flag=True)

        assert isinstance(repository, Repository)
        assert extra == (1, 2)
        assert options == {"flag": True}

    def test_lambda_without_parameters(self, container: Container) -> None:
        assert container.call(lambda: "done") == "done"

    def test_lambda_parameter_default(self, container: Container) -> None:
        assert container.call(lambda retries=3: retries) == 3

    def test_contextual_override_for_function(self, container: Container) -> None:
        cached = CachedRepository()
        container.when(repository_of).needs(Repository).give(cached)

        assert container.call(repository_of) is cached
        assert container.make(Repository) is not cached

    def test_named_override_for_lambda(self, container: Container) -> None:
        factory = lambda retries=3: retries  # noqa: E731
        container.when(factory).needs("$retries").give(7)

        assert container.call(factory) == 7

    def test_callable_without_source(self, container: Container) -> None:
        assert container.call(len, [1, 2, 3]) == 3

    def test_primitive_without_default_fails(self, container: Container) -> None:
        def needs_name(name: str) -> str:
            return name

        with pytest.raises(AstWireResolutionError, match="Unresolvable dependency"):
            container.call(needs_name)
        assert container.call(needs_name, "given") == "given"


class Newsletter:
    def __init__(self) -> None:
        self.repository: Repository | None = None

    def set_repository(self, repository: Repository) -> None:
        self.repository = repository


class TestMethodBindings:
    def test_bound_callback_replaces_method(self, container: Container) -> None:
        controller = Controller()
        container.bind_method("Controller@show", lambda instance, c: (instance, c))

        assert container.call(controller.show) == (controller, container)

    def test_class_and_name_pair(self, container: Container) -> None:
        container.bind_method((Controller, "show"), lambda instance, c: "bound")

        assert container.has_method_binding("Controller@show")
        assert container.has_method_binding((Controller, "show"))
        assert not container.has_method_binding((Controller, "edit"))
        assert container.call(Controller().show) == "bound"

    def test_call_method_binding_directly(self, container: Container) -> None:
        controller = Controller()
        container.bind_method((Controller, "show"), lambda instance, c: instance)

        assert container.call_method_binding("Controller@show", controller) is controller

    def test_missing_method_binding(self, container: Container) -> None:
        with pytest.raises(AstWireBindingNotFoundError, match="has no method binding"):
            container.call_method_binding("Controller@show", Controller())

    def test_unbound_methods_resolve_normally(self, container: Container) -> None:
        container.bind_method((Job, "__call__"), lambda instance, c: "bound")

        repository, page = container.call(Controller().show)

        assert isinstance(repository, Repository)
        assert page == 1

    def test_flush_forgets_method_bindings(self, container: Container) -> None:
        container.bind_method((Controller, "show"), lambda instance, c: "bound")
        container.flush()

        assert not container.has_method_binding((Controller, "show"))


class TestFactoryAndWrap:
    def test_factory_resolves_on_each_call(self, container: Container) -> None:
        make_repository = container.factory(Repository)

        first = make_repository()

        assert isinstance(first, Repository)
        assert make_repository() is not first

    def test_factory_follows_later_bindings(self, container: Container) -> None:
        make_repository = container.factory(Repository)
        container.singleton(Repository, CachedRepository)

        assert make_repository() is container.make(Repository)

    def test_wrap_defers_injection(self, container: Container) -> None:
        handler = container.wrap(list_rows, limit=2)
        container.bind(Repository, CachedRepository)

        assert handler() == [0, 1]

    def test_wrap_passes_later_arguments(self, container: Container) -> None:
        handler = container.wrap(list_rows)

        assert handler(limit=4) == [0, 1, 2, 3]


class TestRefresh:
    def test_refresh_returns_current_instance(self, container: Container) -> None:
        container.singleton(Repository)
        newsletter = Newsletter()

        assert container.refresh(Repository, newsletter, "set_repository") is container.make(Repository)
        assert newsletter.repository is None

    def test_refresh_calls_method_on_rebind(self, container: Container) -> None:
        container.singleton(Repository)
        newsletter = Newsletter()
        container.refresh(Repository, newsletter, "set_repository")

        container.singleton(Repository, CachedRepository)

        assert isinstance(newsletter.repository, CachedRepository)

    def test_refresh_unbound_identifier(self, container: Container) -> None:
        assert container.refresh("repository", Newsletter(), "set_repository") is None
