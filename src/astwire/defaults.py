DEFAULT_AUTORESOLVE = True
"""Let unbound concrete classes build themselves."""

DEFAULT_REQUIRE_INJECTABLE = False
"""Require ``@injectable`` before an unbound class may build itself."""

DEFAULT_STRICT_ANALYSIS = True
"""Raise on parse/analysis failures instead of building with explicit arguments only."""
