"""Tests for custom exception hierarchy."""

import pytest

from astwire.exceptions import (
    AstWireAnalysisError,
    AstWireBindingError,
    AstWireBindingNotFoundError,
    AstWireCircularDependencyError,
    AstWireContextualBindingError,
    AstWireError,
    AstWireMetadataError,
    AstWireParseError,
    AstWireResolutionError,
    AstWireSourceUnavailableError,
    describe,
)
from astwire.interfaces import create_interface


class Service:
    pass


class TestHierarchy:
    @pytest.mark.parametrize(
        "error_type",
        [
            AstWireAnalysisError,
            AstWireBindingError,
            AstWireMetadataError,
            AstWireParseError,
            AstWireResolutionError,
        ],
    )
    def test_all_errors_share_base(self, error_type: type[Exception]) -> None:
        assert issubclass(error_type, AstWireError)

    def test_resolution_failures_are_resolution_errors(self) -> None:
        assert issubclass(AstWireCircularDependencyError, AstWireResolutionError)
        assert issubclass(AstWireBindingNotFoundError, AstWireResolutionError)

    def test_specialised_errors(self) -> None:
        assert issubclass(AstWireSourceUnavailableError, AstWireAnalysisError)
        assert issubclass(AstWireContextualBindingError, AstWireBindingError)


class TestMessages:
    def test_circular_dependency_message(self) -> None:
        error = AstWireCircularDependencyError(Service, ["root", Service, "leaf"])

        assert error.identifier is Service
        assert error.stack == ("root", Service, "leaf")
        assert str(error) == (
            "Circular dependency detected while resolving [Service]: root -> Service -> leaf -> Service"
        )

    def test_binding_not_found_message(self) -> None:
        error = AstWireBindingNotFoundError("cache", ["app"], reason="is not a class")

        assert str(error) == "Target [cache] is not bound and is not a class while building [app]."

    def test_binding_not_found_without_stack(self) -> None:
        assert str(AstWireBindingNotFoundError("cache")) == "Target [cache] is not bound."

    def test_parse_error_reports_line(self) -> None:
        error = AstWireParseError("Cannot parse", lineno=3)

        assert error.lineno == 3
        assert str(error) == "Cannot parse (line 3)"

    def test_resolution_error_keeps_cause(self) -> None:
        cause = AstWireAnalysisError("bad source")
        error = AstWireResolutionError("failed", cause=cause)

        assert error.cause is cause


class TestDescribe:
    def test_describe_class_uses_qualname(self) -> None:
        assert describe(Service) == "Service"

    def test_describe_string(self) -> None:
        assert describe("mailer") == "mailer"

    def test_describe_interface_uses_name(self) -> None:
        assert describe(create_interface("Logger")) == "Logger"

    def test_describe_falls_back_to_repr(self) -> None:
        assert describe(42) == "42"
