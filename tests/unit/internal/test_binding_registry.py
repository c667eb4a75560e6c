from astwire._internal.bindings import Binding, BindingRegistry


class Service:
    pass


def test_bind_and_resolve_record() -> None:
    registry = BindingRegistry()

    binding = registry.bind(Service, Service, shared=True)

    assert binding == Binding(concrete=Service, shared=True)
    assert registry.resolve_binding_record(Service) is binding
    assert registry.has_binding(Service)
    assert list(registry) == [Service]
    assert len(registry) == 1


def test_missing_record() -> None:
    assert BindingRegistry().resolve_binding_record("missing") is None


def test_rebind_replaces_record_and_drops_instance() -> None:
    registry = BindingRegistry()
    registry.bind(Service, Service, shared=True)
    registry.set_instance(Service, Service())

    registry.bind(Service, "other")

    record = registry.resolve_binding_record(Service)
    assert record is not None
    assert record.concrete == "other"
    assert not record.shared
    assert not registry.has_instance(Service)


def test_instances() -> None:
    registry = BindingRegistry()
    instance = Service()

    registry.set_instance(Service, instance)

    assert registry.has_instance(Service)
    assert registry.get_instance(Service) is instance

    registry.forget_instance(Service)
    assert not registry.has_instance(Service)


def test_forget_and_clear() -> None:
    registry = BindingRegistry()
    registry.bind("a", Service)
    registry.bind("b", Service)
    registry.set_instance("a", Service())

    registry.forget_binding("a")
    registry.forget_instances()

    assert not registry.has_binding("a")
    assert not registry.has_instance("a")

    registry.clear()
    assert len(registry) == 0
