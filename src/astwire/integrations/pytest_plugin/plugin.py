from __future__ import annotations

import pytest

from astwire.container import Container


@pytest.fixture()
def astwire_container() -> Container:
    """Create a per-test container.

    The fixture is function-scoped, so bindings, contextual overrides and
    shared instances are isolated between tests unless users override fixture
    scope explicitly.

    Returns:
        A new ``Container`` instance.

    """
    return Container()
