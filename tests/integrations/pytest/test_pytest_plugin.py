"""Tests for the pytest plugin fixture."""

import pytest

from astwire.container import Container


class Service:
    pass


def test_plugin_is_registered(request: pytest.FixtureRequest) -> None:
    assert request.config.pluginmanager.has_plugin("astwire")


def test_fixture_provides_container(astwire_container: Container) -> None:
    assert isinstance(astwire_container, Container)
    assert isinstance(astwire_container.make(Service), Service)


def test_fixture_is_isolated_per_test_first(astwire_container: Container) -> None:
    astwire_container.singleton(Service)

    assert astwire_container.bound(Service)


def test_fixture_is_isolated_per_test_second(astwire_container: Container) -> None:
    assert not astwire_container.bound(Service)


@pytest.fixture()
def configured_container(astwire_container: Container) -> Container:
    astwire_container.bind("greeting", lambda: "hello")
    return astwire_container


def test_fixture_can_be_extended(configured_container: Container) -> None:
    assert configured_container.make("greeting") == "hello"
