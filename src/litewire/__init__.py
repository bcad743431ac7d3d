"""Minimal inversion-of-control container.

This package resolves identifiers to values, either from user-supplied factories
or by autowiring classes from their constructor annotations. Every resolved value
is cached for the lifetime of the container.

Exports:
- `Container`: resolves identifiers with `get` and answers `has`.
- `ContainerInterface`: protocol for the container argument of definition factories.
- `TypeIntrospector` / `ReflectionIntrospector`: how the container inspects classes.
- `ContainerError` and its subclasses: `ConfigurationError`, `NotFoundError`,
  `CyclicDependencyError`, `UnresolvableParameterError`, `InstantiationError`.
"""

from ._container import Container, ContainerInterface, CycleGuard, DefinitionRegistry, ResolutionCache
from ._errors import (
    ConfigurationError,
    ContainerError,
    CyclicDependencyError,
    InstantiationError,
    NotFoundError,
    UnresolvableParameterError,
)
from ._introspection import (
    DeclaredType,
    ParameterInfo,
    ReflectionIntrospector,
    TypeIntrospector,
    TypeKind,
)


__all__ = [
    "ConfigurationError",
    "Container",
    "ContainerError",
    "ContainerInterface",
    "CycleGuard",
    "CyclicDependencyError",
    "DeclaredType",
    "DefinitionRegistry",
    "InstantiationError",
    "NotFoundError",
    "ParameterInfo",
    "ReflectionIntrospector",
    "ResolutionCache",
    "TypeIntrospector",
    "TypeKind",
    "UnresolvableParameterError",
]
