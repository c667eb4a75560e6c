from astwire._internal.contextual import ContextualBindingBuilder
from astwire.container import Container
from astwire.decorators import inject, injectable
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
)
from astwire.interfaces import Interface, create_interface
from astwire.markers import Inject
from astwire.metadata import InjectableMetadata, MetadataRegistry

__all__ = [
    "AstWireAnalysisError",
    "AstWireBindingError",
    "AstWireBindingNotFoundError",
    "AstWireCircularDependencyError",
    "AstWireContextualBindingError",
    "AstWireError",
    "AstWireMetadataError",
    "AstWireParseError",
    "AstWireResolutionError",
    "AstWireSourceUnavailableError",
    "Container",
    "ContextualBindingBuilder",
    "Inject",
    "InjectableMetadata",
    "Interface",
    "MetadataRegistry",
    "create_interface",
    "inject",
    "injectable",
]
