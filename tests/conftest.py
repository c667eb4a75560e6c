"""Shared pytest fixtures for astwire tests."""

import pytest

from astwire.container import Container
from astwire.metadata import MetadataRegistry


@pytest.fixture()
def metadata() -> MetadataRegistry:
    """Isolated decoration side table."""
    return MetadataRegistry()


@pytest.fixture()
def container(metadata: MetadataRegistry) -> Container:
    """Default container with autoresolution and strict analysis."""
    return Container(metadata=metadata)


@pytest.fixture()
def container_no_autoresolve(metadata: MetadataRegistry) -> Container:
    """Container that only builds bound identifiers."""
    return Container(autoresolve=False, metadata=metadata)


@pytest.fixture()
def lenient_container(metadata: MetadataRegistry) -> Container:
    """Container that logs analysis failures instead of raising."""
    return Container(strict_analysis=False, metadata=metadata)
