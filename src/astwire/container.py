from __future__ import annotations

import functools
import inspect
import logging
from collections.abc import Callable, Iterable
from typing import Any, TypeVar, overload

from astwire._internal.autoresolution import ConcreteTypeAutoresolutionPolicy
from astwire._internal.bindings import BindingRegistry
from astwire._internal.build_stack import BuildStack
from astwire._internal.contextual import MISSING, ContextualBindingBuilder, ContextualBindingManager
from astwire._internal.integrations.pydantic_settings import is_pydantic_settings_subclass
from astwire._internal.parsing.class_analyser import ClassAnalyser
from astwire._internal.parsing.function_analyser import FunctionAnalyser
from astwire._internal.parsing.manager import AnalyserManager
from astwire._internal.parsing.parameter_analyser import ParameterAnalyser, ParameterDescriptor
from astwire._internal.type_checks import is_abstract_class, is_factory, is_runtime_class
from astwire.defaults import DEFAULT_AUTORESOLVE, DEFAULT_REQUIRE_INJECTABLE, DEFAULT_STRICT_ANALYSIS
from astwire.exceptions import (
    AstWireAnalysisError,
    AstWireBindingError,
    AstWireBindingNotFoundError,
    AstWireParseError,
    AstWireResolutionError,
    AstWireSourceUnavailableError,
    describe,
)
from astwire.interfaces import Interface
from astwire.metadata import MetadataRegistry, default_metadata

T = TypeVar("T")

Extender = Callable[[Any, "Container"], Any]
ResolvingCallback = Callable[[Any, "Container"], None]
ReboundCallback = Callable[["Container", Any], None]
MethodCallback = Callable[[Any, "Container"], Any]

logger = logging.getLogger(__name__)


class Container:
    """Resolve dependency graphs from constructor declarations read as source.

    Parameters of a class constructor (or of a function passed to ``call``) are
    discovered by parsing the target's own source with ``ast``. Each parameter
    is then resolved by its runtime annotation, by an ``Inject``/``Interface``
    marker, or by ``@inject`` metadata. Nothing is cached between resolutions
    except shared instances: a regenerated declaration is always seen as it
    currently is.

    Per parameter, the first available source wins: an explicit keyword
    argument, an explicit positional argument, a contextual override for the
    consumer being built, a binding, self-resolution of a concrete class, and
    finally the parameter default.

    Args:
        autoresolve: Let unbound concrete classes build themselves.
        require_injectable: Only self-resolve classes marked ``@injectable``.
        strict_analysis: Raise ``AstWireResolutionError`` when a target's
            source does not parse or cannot be analysed. When false the failure
            is logged and the target is built with explicit arguments only.
        metadata: Registry read for ``@injectable``/``@inject`` metadata.
            Defaults to the registry the decorators write to.

    Examples:
        .. code-block:: python

            container = Container()
            container.singleton(Storage, DiskStorage)
            container.when(ReportService).needs(Storage).give(S3Storage)

            reports = container.make(ReportService)

    """

    __slots__ = (
        "_abstract_aliases",
        "_after_resolving_callbacks",
        "_aliases",
        "_analysers",
        "_autoresolve",
        "_bindings",
        "_build_stack",
        "_contextual",
        "_extenders",
        "_global_after_resolving_callbacks",
        "_global_resolving_callbacks",
        "_metadata",
        "_method_bindings",
        "_policy",
        "_rebound_callbacks",
        "_require_injectable",
        "_resolved",
        "_resolving_callbacks",
        "_strict_analysis",
        "_tags",
    )

    def __init__(
        self,
        *,
        autoresolve: bool = DEFAULT_AUTORESOLVE,
        require_injectable: bool = DEFAULT_REQUIRE_INJECTABLE,
        strict_analysis: bool = DEFAULT_STRICT_ANALYSIS,
        metadata: MetadataRegistry | None = None,
    ) -> None:
        self._autoresolve = autoresolve
        self._require_injectable = require_injectable
        self._strict_analysis = strict_analysis
        self._metadata = default_metadata if metadata is None else metadata

        self._bindings = BindingRegistry()
        self._contextual = ContextualBindingManager()
        self._build_stack = BuildStack()
        self._analysers = AnalyserManager(self._metadata)
        self._policy = ConcreteTypeAutoresolutionPolicy()

        self._aliases: dict[Any, Any] = {}
        self._abstract_aliases: dict[Any, list[Any]] = {}
        self._resolved: set[Any] = set()
        self._extenders: dict[Any, list[Extender]] = {}
        self._method_bindings: dict[str, MethodCallback] = {}
        self._tags: dict[str, list[Any]] = {}
        self._rebound_callbacks: dict[Any, list[ReboundCallback]] = {}
        self._resolving_callbacks: dict[Any, list[ResolvingCallback]] = {}
        self._after_resolving_callbacks: dict[Any, list[ResolvingCallback]] = {}
        self._global_resolving_callbacks: list[ResolvingCallback] = []
        self._global_after_resolving_callbacks: list[ResolvingCallback] = []

        self._register_self()

    # Registration

    def bind(self, identifier: Any, concrete: Any = None, *, shared: bool = False) -> None:
        """Register how ``identifier`` is built.

        Re-binding drops any cached instance. If ``identifier`` was already
        resolved, ``rebinding`` callbacks fire with a freshly built instance.

        Args:
            identifier: Class, ``Interface`` or string key.
            concrete: Class to build, factory called with the container, or
                another identifier to delegate to. Defaults to ``identifier``
                itself, which must then be a class.
            shared: Cache the first instance and return it from later calls.

        Raises:
            AstWireBindingError: If ``concrete`` is omitted for a non-class
                identifier, or is neither a class, a callable nor an
                identifier.

        """
        if concrete is None:
            if not is_runtime_class(identifier):
                msg = f"Cannot bind [{describe(identifier)}] to itself: it is not a class."
                raise AstWireBindingError(msg)
            concrete = identifier
        elif not (is_runtime_class(concrete) or callable(concrete) or isinstance(concrete, (Interface, str))):
            msg = (
                f"Cannot bind [{describe(identifier)}] to [{concrete!r}]: expected a class, "
                "a factory or an identifier. Use instance() for prebuilt objects."
            )
            raise AstWireBindingError(msg)

        self._forget_alias(identifier)
        self._bindings.bind(identifier, concrete, shared=shared)

        if identifier in self._resolved:
            self._rebound(identifier)

    def bind_if(self, identifier: Any, concrete: Any = None, *, shared: bool = False) -> None:
        """Bind ``identifier`` unless it is already bound."""
        if not self.bound(identifier):
            self.bind(identifier, concrete, shared=shared)

    def singleton(self, identifier: Any, concrete: Any = None) -> None:
        """Bind ``identifier`` as shared: built once, then reused.

        Args:
            identifier: Class, ``Interface`` or string key.
            concrete: Same forms as ``bind``; defaults to ``identifier``.

        """
        self.bind(identifier, concrete, shared=True)

    def singleton_if(self, identifier: Any, concrete: Any = None) -> None:
        if not self.bound(identifier):
            self.singleton(identifier, concrete)

    def instance(self, identifier: Any, value: T) -> T:
        """Register an already built object as the shared instance of ``identifier``.

        Returns:
            ``value``, unchanged.

        """
        self._forget_alias(identifier)
        was_bound = self.bound(identifier)
        self._bindings.set_instance(identifier, value)
        logger.debug("Registered instance for %s", describe(identifier))
        if was_bound:
            self._rebound(identifier)
        return value

    def unbind(self, identifier: Any) -> None:
        """Drop the binding, cached instance and resolved flag of ``identifier``."""
        self._bindings.forget_binding(identifier)
        self._bindings.forget_instance(identifier)
        self._resolved.discard(identifier)

    def alias(self, identifier: Any, alias: Any) -> None:
        """Make ``alias`` resolve exactly like ``identifier``.

        Raises:
            AstWireBindingError: If ``alias`` equals ``identifier``.

        """
        if alias == identifier:
            msg = f"[{describe(identifier)}] is aliased to itself."
            raise AstWireBindingError(msg)
        self._aliases[alias] = identifier
        self._abstract_aliases.setdefault(identifier, []).append(alias)

    def get_alias(self, identifier: Any) -> Any:
        """Follow aliases from ``identifier`` to the identifier they name.

        Raises:
            AstWireBindingError: If the aliases form a loop.

        """
        seen = [identifier]
        while identifier in self._aliases:
            identifier = self._aliases[identifier]
            if identifier in seen:
                msg = f"Aliases form a loop: {' -> '.join(describe(entry) for entry in [*seen, identifier])}."
                raise AstWireBindingError(msg)
            seen.append(identifier)
        return identifier

    def is_alias(self, identifier: Any) -> bool:
        return identifier in self._aliases

    def when(self, consumer: Any | list[Any] | tuple[Any, ...]) -> ContextualBindingBuilder:
        """Start a contextual binding for one or more consumers.

        Args:
            consumer: Identifier (or list of identifiers) whose construction
                receives the override. Aliases are followed.

        Returns:
            A builder; finish it with ``.needs(dependency).give(implementation)``.

        Examples:
            .. code-block:: python

                container.when(PhotoController).needs(Filesystem).give(LocalFilesystem)
                container.when([Importer, Exporter]).needs("$batch_size").give(500)

        """
        consumers = consumer if isinstance(consumer, (list, tuple)) else [consumer]
        return ContextualBindingBuilder(
            self._contextual,
            [self.get_alias(entry) for entry in consumers],
            normalize=self.get_alias,
        )

    def extend(self, identifier: Any, extender: Extender) -> None:
        """Post-process every instance built for ``identifier``.

        ``extender`` receives the instance and the container and returns the
        instance to use. A shared instance that already exists is extended
        immediately.
        """
        identifier = self.get_alias(identifier)
        if self._bindings.has_instance(identifier):
            self._bindings.set_instance(identifier, extender(self._bindings.get_instance(identifier), self))
            self._rebound(identifier)
            return

        self._extenders.setdefault(identifier, []).append(extender)
        if identifier in self._resolved:
            self._rebound(identifier)

    def forget_extenders(self, identifier: Any) -> None:
        self._extenders.pop(self.get_alias(identifier), None)

    def tag(self, identifiers: Any, tags: str | Iterable[str]) -> None:
        """Group identifiers under one or more tag names.

        Args:
            identifiers: One identifier or a list/tuple of identifiers.
            tags: Tag name or iterable of tag names.

        """
        entries = identifiers if isinstance(identifiers, (list, tuple)) else [identifiers]
        names = [tags] if isinstance(tags, str) else list(tags)
        for name in names:
            self._tags.setdefault(name, []).extend(entries)

    def tagged(self, tag: str) -> list[Any]:
        """Resolve every identifier tagged with ``tag``, in tagging order."""
        return [self.make(identifier) for identifier in self._tags.get(tag, [])]

    def rebinding(self, identifier: Any, callback: ReboundCallback) -> Any | None:
        """Call ``callback(container, instance)`` whenever ``identifier`` is re-bound.

        Returns:
            The current instance when ``identifier`` is bound, else ``None``.

        """
        identifier = self.get_alias(identifier)
        self._rebound_callbacks.setdefault(identifier, []).append(callback)
        if self.bound(identifier):
            return self.make(identifier)
        return None

    def refresh(self, identifier: Any, target: object, method: str) -> Any | None:
        """Call ``target.<method>(instance)`` with the new instance whenever ``identifier`` is re-bound.

        Returns:
            The current instance when ``identifier`` is bound, else ``None``.

        Examples:
            .. code-block:: python

                container.refresh(Mailer, newsletter, "set_mailer")
                container.bind(Mailer, QueuedMailer)  # newsletter.set_mailer(<QueuedMailer>)

        """
        return self.rebinding(identifier, lambda _container, instance: getattr(target, method)(instance))

    def bind_method(self, method: str | tuple[type[Any], str], callback: MethodCallback) -> None:
        """Replace ``call`` of one method with ``callback(instance, container)``.

        Args:
            method: ``"ClassName@method"`` or a ``(cls, "method")`` pair.
            callback: Called instead of the method when ``call`` receives it
                bound to an instance of the class.

        """
        self._method_bindings[_method_key(method)] = callback

    def has_method_binding(self, method: str | tuple[type[Any], str]) -> bool:
        return _method_key(method) in self._method_bindings

    def call_method_binding(self, method: str | tuple[type[Any], str], instance: Any) -> Any:
        """Run the callback bound to ``method`` for ``instance``.

        Raises:
            AstWireBindingNotFoundError: If no callback is bound to ``method``.

        """
        key = _method_key(method)
        callback = self._method_bindings.get(key)
        if callback is None:
            raise AstWireBindingNotFoundError(key, reason="has no method binding")
        return callback(instance, self)

    def resolving(self, target: Any, callback: ResolvingCallback | None = None) -> None:
        """Register a callback fired with ``(instance, container)`` after each build.

        Pass a single callable to observe every resolution. With an identifier
        and a callback, the callback fires for that identifier, and for any
        instance of it when the identifier is a class.

        Raises:
            AstWireBindingError: If an identifier is given without a callback.

        """
        self._add_resolving_callback(
            target,
            callback,
            self._resolving_callbacks,
            self._global_resolving_callbacks,
        )

    def after_resolving(self, target: Any, callback: ResolvingCallback | None = None) -> None:
        """Like ``resolving``; these callbacks fire after all ``resolving`` callbacks."""
        self._add_resolving_callback(
            target,
            callback,
            self._after_resolving_callbacks,
            self._global_after_resolving_callbacks,
        )

    # Introspection

    def bound(self, identifier: Any) -> bool:
        """Return whether ``identifier`` has a binding, an instance or is an alias."""
        return (
            self._bindings.has_binding(identifier)
            or self._bindings.has_instance(identifier)
            or self.is_alias(identifier)
        )

    def has(self, identifier: Any) -> bool:
        return self.bound(identifier)

    def resolved(self, identifier: Any) -> bool:
        """Return whether ``identifier`` has been built or holds an instance."""
        identifier = self.get_alias(identifier)
        return identifier in self._resolved or self._bindings.has_instance(identifier)

    def is_shared(self, identifier: Any) -> bool:
        """Return whether ``identifier`` resolves to one cached instance."""
        if self._bindings.has_instance(identifier):
            return True
        binding = self._bindings.resolve_binding_record(identifier)
        if binding is not None:
            return binding.shared
        return is_pydantic_settings_subclass(identifier)

    def get_bindings(self) -> dict[Any, Any]:
        """Return a snapshot of ``identifier -> concrete`` registrations."""
        return {
            identifier: record.concrete
            for identifier in self._bindings
            if (record := self._bindings.resolve_binding_record(identifier)) is not None
        }

    def forget_instance(self, identifier: Any) -> None:
        self._bindings.forget_instance(identifier)

    def forget_instances(self) -> None:
        """Drop every cached shared instance except the container itself."""
        self._bindings.forget_instances()
        self._register_self()

    def flush(self) -> None:
        """Reset the container to its freshly created state."""
        self._bindings.clear()
        self._contextual.clear()
        self._aliases.clear()
        self._abstract_aliases.clear()
        self._resolved.clear()
        self._extenders.clear()
        self._tags.clear()
        self._method_bindings.clear()
        self._rebound_callbacks.clear()
        self._resolving_callbacks.clear()
        self._after_resolving_callbacks.clear()
        self._global_resolving_callbacks.clear()
        self._global_after_resolving_callbacks.clear()
        self._register_self()

    # Resolution

    @overload
    def make(self, identifier: type[T], /, *args: Any, **kwargs: Any) -> T: ...

    @overload
    def make(self, identifier: Any, /, *args: Any, **kwargs: Any) -> Any: ...

    def make(self, identifier: Any, /, *args: Any, **kwargs: Any) -> Any:
        """Resolve ``identifier`` into an instance.

        Args:
            identifier: Class, ``Interface`` or string key.
            *args: Explicit positional arguments; they replace the resolved
                values at the same positions.
            **kwargs: Explicit keyword arguments; they replace the resolved
                values of the parameters they name.

        Returns:
            The built instance, or the cached one for shared identifiers.
            Explicit arguments always build a fresh instance that is not
            cached.

        Raises:
            AstWireBindingNotFoundError: If ``identifier`` is unbound and
                cannot build itself.
            AstWireCircularDependencyError: If ``identifier`` is already being
                built further up the current resolution.
            AstWireResolutionError: If a parameter cannot be resolved, or a
                source fails to parse or be analysed with strict analysis on.

        Examples:
            .. code-block:: python

                service = container.make(Service)
                report = container.make(Report, title="Q3")

        """
        return self._resolve(identifier, args, kwargs)

    def __getitem__(self, identifier: Any) -> Any:
        return self.make(identifier)

    def __contains__(self, identifier: object) -> bool:
        return self.bound(identifier)

    def build(self, concrete: type[T], /, *args: Any, **kwargs: Any) -> T:
        """Build ``concrete`` from its constructor, ignoring bindings for it.

        Dependencies of ``concrete`` still go through bindings and contextual
        overrides. The result is never cached.

        Raises:
            AstWireBindingNotFoundError: If ``concrete`` is abstract or a
                Protocol/ABC contract.

        """
        with self._build_stack.track(concrete):
            return self._build(concrete, args, kwargs)

    def call(self, callback: Callable[..., T], /, *args: Any, **kwargs: Any) -> T:
        """Call a function, bound method or callable instance with its dependencies resolved.

        The callable is on the build stack while its parameters resolve, so
        ``container.when(callback)`` overrides apply to it. A bound method with
        a ``bind_method`` callback runs that callback instead.

        Args:
            callback: Callable to invoke.
            *args: Explicit positional arguments.
            **kwargs: Explicit keyword arguments.

        Returns:
            Whatever ``callback`` returns.

        Examples:
            .. code-block:: python

                def handler(repository: Repository, limit: int = 10) -> list[Row]:
                    return repository.latest(limit)


                rows = container.call(handler, limit=5)

        """
        if inspect.ismethod(callback):
            owner = callback.__self__
            key = _method_key((owner if isinstance(owner, type) else type(owner), callback.__name__))
            if key in self._method_bindings:
                logger.debug("Calling %s through its method binding", key)
                return self.call_method_binding(key, owner)  # type: ignore[no-any-return]

        with self._build_stack.track(callback):
            analyser = self._analyse(callback)
            parameters = None if analyser is None else analyser.get_parameter_analyser()
            if parameters is None:
                return callback(*args, **kwargs)
            call_args, call_kwargs = self._resolve_parameters(parameters, callback, args, kwargs)
            return callback(*call_args, **call_kwargs)

    def factory(self, identifier: Any) -> Callable[..., Any]:
        """Return a callable that resolves ``identifier`` each time it is called.

        Arguments given to the returned callable are passed on to ``make``.
        """
        return functools.partial(self.make, identifier)

    def wrap(self, callback: Callable[..., T], /, *args: Any, **kwargs: Any) -> Callable[..., T]:
        """Return ``callback`` with its dependencies injected on every call.

        ``args`` and ``kwargs`` are bound now; arguments given later are
        appended to them, and the rest are resolved by ``call``.

        Examples:
            .. code-block:: python

                handler = container.wrap(list_rows, limit=5)
                rows = handler()

        """
        return functools.partial(self.call, callback, *args, **kwargs)

    def _resolve(
        self,
        identifier: Any,
        args: tuple[Any, ...],
        kwargs: dict[str, Any],
        *,
        contextual: bool = True,
    ) -> Any:
        identifier = self.get_alias(identifier)
        with self._build_stack.track(identifier):
            override = self._contextual.find(self._build_stack.consumer(), identifier) if contextual else MISSING
            contextual_build = bool(args or kwargs) or override is not MISSING

            if not contextual_build and self._bindings.has_instance(identifier):
                return self._bindings.get_instance(identifier)

            if override is not MISSING:
                logger.debug(
                    "Resolving %s for %s from a contextual override",
                    describe(identifier),
                    describe(self._build_stack.consumer()),
                )
                instance = self._build_override(override, identifier, args, kwargs)
            else:
                instance = self._build_bound(identifier, args, kwargs)

            for extender in self._extenders.get(identifier, ()):
                instance = extender(instance, self)

            if not contextual_build and self.is_shared(identifier):
                self._bindings.set_instance(identifier, instance)

            self._fire_resolving_callbacks(identifier, instance)
            self._resolved.add(identifier)
            return instance

    def _build_bound(self, identifier: Any, args: tuple[Any, ...], kwargs: dict[str, Any]) -> Any:
        binding = self._bindings.resolve_binding_record(identifier)
        if binding is not None:
            concrete = binding.concrete
        else:
            reason = self._self_resolution_refusal(identifier)
            if reason is not None:
                raise AstWireBindingNotFoundError(identifier, self._build_stack.snapshot()[:-1], reason=reason)
            concrete = identifier
            if is_pydantic_settings_subclass(concrete):
                # settings load themselves from the environment
                return concrete(*args, **kwargs)

        if concrete is identifier and is_runtime_class(concrete):
            return self._build(concrete, args, kwargs)
        if is_factory(concrete):
            return self._call_factory(concrete, args, kwargs)
        # the binding's own target is not a dependency of the consumer above it
        return self._resolve(concrete, args, kwargs, contextual=False)

    def _build_override(
        self,
        implementation: Any,
        identifier: Any,
        args: tuple[Any, ...],
        kwargs: dict[str, Any],
    ) -> Any:
        if implementation is identifier and is_runtime_class(implementation):
            return self._build(implementation, args, kwargs)
        if is_runtime_class(implementation) or isinstance(implementation, Interface):
            return self._resolve(implementation, args, kwargs, contextual=False)
        if is_factory(implementation):
            return self._call_factory(implementation, args, kwargs)
        return implementation

    def _self_resolution_refusal(self, identifier: Any) -> str | None:
        """Return why ``identifier`` cannot build itself, or ``None`` if it can."""
        if not is_runtime_class(identifier):
            return "is not a class"
        if is_abstract_class(identifier):
            return "is not instantiable"
        if not self._policy.is_eligible_concrete(identifier):
            return "is a value type"
        if is_pydantic_settings_subclass(identifier):
            return None
        if not self._autoresolve:
            return "autoresolution is disabled"
        if self._require_injectable and not self._metadata.is_injectable(identifier):
            return "is not marked @injectable"
        return None

    def _build(self, concrete: type[Any], args: tuple[Any, ...], kwargs: dict[str, Any]) -> Any:
        if is_abstract_class(concrete):
            raise AstWireBindingNotFoundError(
                concrete,
                self._build_stack.snapshot()[:-1],
                reason="is not instantiable",
            )

        analyser = self._analyse(concrete)
        if isinstance(analyser, ClassAnalyser) and analyser.is_interface():
            raise AstWireBindingNotFoundError(
                concrete,
                self._build_stack.snapshot()[:-1],
                reason="only declares an interface",
            )

        parameters = None if analyser is None else analyser.get_parameter_analyser()
        if parameters is None:
            logger.debug("Building %s without resolved parameters", describe(concrete))
            return concrete(*args, **kwargs)

        call_args, call_kwargs = self._resolve_parameters(parameters, concrete, args, kwargs)
        logger.debug("Building %s with %d resolved parameters", describe(concrete), len(parameters))
        return concrete(*call_args, **call_kwargs)

    def _analyse(self, target: Any) -> ClassAnalyser | FunctionAnalyser | None:
        try:
            return self._analysers.analyse(target)
        except AstWireSourceUnavailableError:
            logger.debug("No source for %s; using explicit arguments only", describe(target))
            return None
        except (AstWireParseError, AstWireAnalysisError) as e:
            if not self._strict_analysis:
                logger.warning("Cannot analyse %s (%s); using explicit arguments only", describe(target), e)
                return None
            stack = self._build_stack.snapshot()
            msg = f"Cannot analyse [{describe(target)}] while building [{' -> '.join(map(describe, stack))}]: {e}"
            raise AstWireResolutionError(msg, cause=e) from e

    def _call_factory(self, factory: Callable[..., Any], args: tuple[Any, ...], kwargs: dict[str, Any]) -> Any:
        """Call ``factory`` with the container first when its signature accepts it."""
        try:
            signature = inspect.signature(factory)
        except (TypeError, ValueError):
            return factory(self, *args, **kwargs)

        try:
            signature.bind(self, *args, **kwargs)
        except TypeError:
            try:
                signature.bind(*args, **kwargs)
            except TypeError:
                pass
            else:
                return factory(*args, **kwargs)
        return factory(self, *args, **kwargs)

    def _resolve_parameters(
        self,
        parameters: ParameterAnalyser,
        owner: Any,
        args: tuple[Any, ...],
        kwargs: dict[str, Any],
    ) -> tuple[list[Any], dict[str, Any]]:
        """Map declared parameters onto call arguments.

        A parameter left to its default opens a gap; every later parameter is
        then passed by keyword.
        """
        call_args: list[Any] = []
        call_kwargs: dict[str, Any] = {}
        remaining_kwargs = dict(kwargs)
        positional_count = sum(1 for descriptor in parameters if descriptor.is_positional)
        by_keyword = False

        for descriptor in parameters:
            # *args and **kwargs take only the explicit leftovers handled below
            if descriptor.is_rest:
                continue

            if descriptor.name in remaining_kwargs:
                value = remaining_kwargs.pop(descriptor.name)
            elif descriptor.is_positional and descriptor.position < len(args):
                value = args[descriptor.position]
            else:
                value = self._resolve_parameter(descriptor, owner)
                if value is MISSING:
                    by_keyword = by_keyword or descriptor.is_positional
                    continue

            if descriptor.is_positional and not by_keyword:
                call_args.append(value)
            elif descriptor.kind is inspect.Parameter.POSITIONAL_ONLY:
                msg = (
                    f"Cannot pass positional-only parameter [{descriptor.name}] of [{describe(owner)}] "
                    "after a parameter left to its default."
                )
                raise AstWireResolutionError(msg)
            else:
                call_kwargs[descriptor.name] = value

        extra = args[positional_count:]
        if extra:
            if by_keyword:
                msg = (
                    f"Cannot pass extra positional arguments to [{describe(owner)}] "
                    "after a parameter left to its default."
                )
                raise AstWireResolutionError(msg)
            call_args.extend(extra)

        call_kwargs.update(remaining_kwargs)
        return call_args, call_kwargs

    def _resolve_parameter(self, descriptor: ParameterDescriptor, owner: Any) -> Any:
        """Resolve one parameter, or return ``MISSING`` to leave it to its default."""
        if descriptor.contextual_identifier is None and not self._is_dependency_type(descriptor.type):
            return self._resolve_primitive(descriptor, owner)

        identifier = descriptor.identifier
        try:
            return self._resolve(identifier, (), {})
        except AstWireBindingNotFoundError as e:
            if descriptor.has_default and e.identifier == self.get_alias(identifier):
                logger.debug(
                    "Leaving %s of %s to its default: %s",
                    descriptor.name,
                    describe(owner),
                    describe(identifier),
                )
                return MISSING
            raise

    def _resolve_primitive(self, descriptor: ParameterDescriptor, owner: Any) -> Any:
        consumer = self._build_stack.current()
        if descriptor.type is not None:
            override = self._contextual.find(consumer, descriptor.type)
            if override is not MISSING:
                return self._materialize(override)

        override = self._contextual.find(consumer, f"${descriptor.name}")
        if override is not MISSING:
            return self._materialize(override)
        if descriptor.has_default:
            return MISSING

        msg = f"Unresolvable dependency resolving parameter [{descriptor.name}] of [{describe(owner)}]."
        raise AstWireResolutionError(msg)

    def _materialize(self, implementation: Any) -> Any:
        if is_runtime_class(implementation) or isinstance(implementation, Interface):
            return self._resolve(implementation, (), {})
        if is_factory(implementation):
            return self._call_factory(implementation, (), {})
        return implementation

    def _is_dependency_type(self, annotation: Any) -> bool:
        if annotation is None or annotation is Any:
            return False
        try:
            hash(annotation)
        except TypeError:
            return False
        if isinstance(annotation, Interface) or self.bound(annotation):
            return True
        return is_runtime_class(annotation) and not self._policy.is_value_type(annotation)

    # Callbacks

    def _add_resolving_callback(
        self,
        target: Any,
        callback: ResolvingCallback | None,
        by_identifier: dict[Any, list[ResolvingCallback]],
        global_callbacks: list[ResolvingCallback],
    ) -> None:
        if callback is None:
            if not is_factory(target):
                msg = f"Missing callback for [{describe(target)}]."
                raise AstWireBindingError(msg)
            global_callbacks.append(target)
            return
        by_identifier.setdefault(self.get_alias(target), []).append(callback)

    def _fire_resolving_callbacks(self, identifier: Any, instance: Any) -> None:
        for callbacks, global_callbacks in (
            (self._resolving_callbacks, self._global_resolving_callbacks),
            (self._after_resolving_callbacks, self._global_after_resolving_callbacks),
        ):
            for callback in global_callbacks:
                callback(instance, self)
            for target, target_callbacks in callbacks.items():
                if target == identifier or _is_instance_of(instance, target):
                    for callback in target_callbacks:
                        callback(instance, self)

    def _rebound(self, identifier: Any) -> None:
        callbacks = self._rebound_callbacks.get(identifier)
        if not callbacks:
            return
        instance = self.make(identifier)
        for callback in callbacks:
            callback(self, instance)

    def _forget_alias(self, identifier: Any) -> None:
        target = self._aliases.pop(identifier, None)
        if target is not None:
            aliases = self._abstract_aliases.get(target, [])
            if identifier in aliases:
                aliases.remove(identifier)

    def _register_self(self) -> None:
        self._bindings.set_instance(Container, self)
        if type(self) is not Container:
            self._bindings.set_instance(type(self), self)


def _method_key(method: str | tuple[type[Any], str]) -> str:
    if isinstance(method, str):
        return method
    cls, name = method
    return f"{cls.__qualname__}@{name}"


def _is_instance_of(instance: Any, target: Any) -> bool:
    if not is_runtime_class(target):
        return False
    try:
        return isinstance(instance, target)
    except TypeError:
        # non runtime-checkable protocols
        return False


__all__ = ["Container"]
