from __future__ import annotations

import inspect
import logging
import threading
from collections.abc import Mapping
from contextlib import contextmanager, nullcontext
from types import MappingProxyType
from typing import (
    TYPE_CHECKING,
    Any,
    Protocol,
    runtime_checkable,
)

from ._errors import (
    ConfigurationError,
    CyclicDependencyError,
    InstantiationError,
    NotFoundError,
    UnresolvableParameterError,
)
from ._introspection import ReflectionIntrospector, TypeKind, qualified_name


logger = logging.getLogger(__name__)

if TYPE_CHECKING:
    from collections.abc import Callable, Iterable, Iterator

    from ._introspection import ParameterInfo, TypeIntrospector

    Factory = Callable[["Container"], object]
    Definitions = Mapping[Any, Factory] | Iterable[tuple[Any, Factory]]

_MISSING = object()


def _format_report(reason: str, trace: tuple[Any, ...]) -> str:
    if not trace:
        return reason
    return f"{reason}\nResolution stack: {' -> '.join(qualified_name(i) for i in trace)}"


def _is_hashable(identifier: object) -> bool:
    try:
        hash(identifier)
    except TypeError:
        return False
    return True


@runtime_checkable
class ContainerInterface(Protocol):
    """What a definition factory receives: something it can pull further entries from."""

    def get(self, identifier: Any) -> Any: ...

    def has(self, identifier: Any) -> bool: ...


class DefinitionRegistry:
    """User-supplied factories, registered once and read-only afterwards."""

    def __init__(self, definitions: Definitions = ()) -> None:
        self._definitions: Mapping[Any, Factory] = MappingProxyType({})
        self._sealed = False
        self.register_all(definitions)

    def register_all(self, definitions: Definitions) -> None:
        """Register every `(identifier, factory)` pair, or none of them.

        Accepts a mapping or an iterable of pairs. A later pair for the same
        identifier replaces an earlier one.
        """
        if self._sealed:
            msg = "Definitions can only be registered once."
            raise ConfigurationError(msg)

        pairs = definitions.items() if isinstance(definitions, Mapping) else definitions
        collected: dict[Any, Factory] = {}
        for identifier, factory in pairs:
            if not callable(factory):
                msg = f"Invalid definition for {qualified_name(identifier)!r}."
                raise ConfigurationError(msg, identifier=identifier)
            collected[identifier] = factory

        self._definitions = MappingProxyType(collected)
        self._sealed = True

    def is_defined(self, identifier: Any) -> bool:
        return identifier in self._definitions

    def invoke(self, identifier: Any, container: Container) -> object:
        return self._definitions[identifier](container)

    def __contains__(self, identifier: object) -> bool:
        return self.is_defined(identifier)

    def __iter__(self) -> Iterator[Any]:
        return iter(self._definitions)

    def __len__(self) -> int:
        return len(self._definitions)


class ResolutionCache:
    """Resolved values per identifier. Entries are never replaced nor evicted."""

    def __init__(self) -> None:
        self._entries: dict[Any, object] = {}

    def has(self, identifier: Any) -> bool:
        # membership, not truthiness: None is a valid resolved value
        return self._entries.get(identifier, _MISSING) is not _MISSING

    def get(self, identifier: Any) -> object:
        return self._entries[identifier]

    def set(self, identifier: Any, value: object) -> object:
        """Store `value` unless `identifier` is already resolved; return the cached value."""
        return self._entries.setdefault(identifier, value)

    def __len__(self) -> int:
        return len(self._entries)


class CycleGuard:
    """Identifiers currently being resolved, in the order resolution entered them."""

    def __init__(self) -> None:
        self._active: dict[Any, None] = {}

    def enter(self, identifier: Any) -> None:
        if identifier in self._active:
            trace = self.trace()
            msg = _format_report(f"Cyclic dependency of {qualified_name(identifier)}.", trace)
            raise CyclicDependencyError(msg, identifier=identifier, trace=trace)
        self._active[identifier] = None

    def exit(self, identifier: Any) -> None:
        self._active.pop(identifier, None)

    @contextmanager
    def resolving(self, identifier: Any) -> Iterator[None]:
        self.enter(identifier)
        try:
            yield
        finally:
            self.exit(identifier)

    def trace(self) -> tuple[Any, ...]:
        return tuple(self._active)

    def __bool__(self) -> bool:
        return bool(self._active)


class Container:
    """Minimal DI container.

    - definitions: factories called with the container, registered once
    - autowiring: classes are built from their constructor annotations
    - every resolved entry is cached for the container's lifetime.
    """

    def __init__(
        self,
        definitions: Definitions = (),
        *,
        introspector: TypeIntrospector | None = None,
    ) -> None:
        self._definitions = DefinitionRegistry(definitions)
        self._introspector: TypeIntrospector = introspector if introspector is not None else ReflectionIntrospector()
        self._cache = ResolutionCache()
        self._guard = CycleGuard()
        self._lock = threading.RLock()

    def get(self, identifier: Any) -> Any:
        """Resolve the identifier to a value.

        - If it has been resolved before: the cached value.
        - If a definition exists: the value returned by the definition.
        - If it names a class: an instance autowired from the constructor annotations.
        """
        if not _is_hashable(identifier):
            msg = f"No entry or class found for {qualified_name(identifier)!r}."
            raise NotFoundError(msg, identifier=identifier)

        with self._lock:
            if self._cache.has(identifier):
                return self._cache.get(identifier)

            if self._definitions.is_defined(identifier):
                logger.debug("Resolving %s from its definition", qualified_name(identifier))
                with self._guard.resolving(identifier):
                    value = self._definitions.invoke(identifier, self)
                return self._cache.set(identifier, value)

            cls = self._introspector.load(identifier)
            if cls is None:
                trace = self._guard.trace()
                msg = _format_report(f"No entry or class found for {qualified_name(identifier)!r}.", trace)
                raise NotFoundError(msg, identifier=identifier, trace=trace)

            if cls is not identifier:
                # import path: go through the class so its definition and cache entry are shared
                return self._cache.set(identifier, self.get(cls))

            return self._cache.set(identifier, self._instantiate(cls))

    def has(self, identifier: Any) -> bool:
        """Whether `get` can find something for the identifier (it may still fail to build it)."""
        if not _is_hashable(identifier):
            return False
        return self._definitions.is_defined(identifier) or self._introspector.exists(identifier)

    def __contains__(self, identifier: object) -> bool:
        return self.has(identifier)

    def _instantiate(self, cls: type) -> object:
        name = qualified_name(cls)
        if not self._introspector.is_instantiable(cls):
            trace = self._guard.trace()
            msg = _format_report(f"{name} is not instantiable.", trace)
            raise InstantiationError(msg, identifier=cls, trace=trace)

        params = self._introspector.constructor_parameters(cls)
        logger.debug("Autowiring %s (%d constructor parameters)", name, len(params))

        # entered outside the try: a cycle surfaces unwrapped to the class that requested it
        with self._guard.resolving(cls) if params else nullcontext():
            try:
                return Constructor(self).construct(cls, params)
            except Exception as exc:
                msg = f"Failed to instantiate {name}."
                raise InstantiationError(msg, identifier=cls, trace=self._guard.trace()) from exc

    def resolve_param(self, cls: type, param: ParameterInfo) -> Any:
        """Resolving param.

        Resolution precedence:
        1. default
        2. class annotation, resolved through `get`
        3. error (union, builtin or missing annotation).
        """
        if param.has_default:
            return param.default

        declared = param.declared_type
        if declared.kind is TypeKind.NAMED:
            return self.get(declared.members[0])

        if declared.kind is TypeKind.UNION:
            reason = (
                f"Unable to resolve {qualified_name(cls)} constructor parameter '{param.name}' "
                f"(position {param.position + 1}): it has union type {declared.describe()}."
            )
        else:
            reason = (
                f"Unable to resolve {qualified_name(cls)} constructor parameter '{param.name}' "
                f"of type {declared.describe()} (position {param.position + 1})."
            )
        trace = self._guard.trace()
        raise UnresolvableParameterError(
            _format_report(reason, trace),
            identifier=cls,
            trace=trace,
            parameter=param,
        )


class Constructor:
    def __init__(self, resolver: Container) -> None:
        self._resolver = resolver

    def construct(self, cls: type[Any], params: list[ParameterInfo]) -> Any:
        # fail fast: the first unresolvable parameter stops the others from being resolved
        values = [self._resolver.resolve_param(cls, p) for p in params]
        args, kwargs = self._materialize_call(params, values)
        return cls(*args, **kwargs)

    def _materialize_call(self, params: list[ParameterInfo], values: list[Any]) -> tuple[list[Any], dict[str, Any]]:
        args, kwargs = [], {}

        for p, value in zip(params, values):
            if p.kind is inspect.Parameter.POSITIONAL_ONLY:
                args.append(value)
            else:
                kwargs[p.name] = value

        return args, kwargs
