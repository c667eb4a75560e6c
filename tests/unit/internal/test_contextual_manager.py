from astwire._internal.contextual import MISSING, ContextualBindingBuilder, ContextualBindingManager


def test_exact_match_lookup() -> None:
    manager = ContextualBindingManager()
    manager.add("consumer", "dependency", "implementation")

    assert manager.find("consumer", "dependency") == "implementation"
    assert manager.find("other", "dependency") is MISSING
    assert manager.has("consumer", "dependency")
    assert len(manager) == 1


def test_top_level_lookup_never_matches() -> None:
    manager = ContextualBindingManager()
    manager.add("consumer", "dependency", "implementation")

    assert manager.find(None, "dependency") is MISSING


def test_unhashable_dependency_is_a_miss() -> None:
    assert ContextualBindingManager().find("consumer", ["unhashable"]) is MISSING


def test_builder_normalizes_dependency() -> None:
    manager = ContextualBindingManager()
    builder = ContextualBindingBuilder(manager, ["a", "b"], normalize=str.upper)

    builder.needs("dep").give(1)

    assert manager.find("a", "DEP") == 1
    assert manager.find("b", "DEP") == 1

    manager.clear()
    assert len(manager) == 0
