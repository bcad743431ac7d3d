from __future__ import annotations

import importlib
import inspect
import logging
import types
import typing
from dataclasses import dataclass
from enum import Enum
from typing import Any, Protocol, get_args, get_origin, get_type_hints


logger = logging.getLogger(__name__)

_UNION_ORIGINS = (typing.Union, types.UnionType)
_NONE_TYPE = type(None)


class TypeKind(Enum):
    NONE = "none"
    BUILTIN = "builtin"
    NAMED = "named"
    UNION = "union"


@dataclass(frozen=True)
class DeclaredType:
    """Classified constructor parameter annotation.

    `members` holds the class for NAMED and every alternative for UNION
    (`None` excluded); it is empty otherwise.
    """

    kind: TypeKind
    annotation: Any = inspect.Parameter.empty
    members: tuple[Any, ...] = ()

    def describe(self) -> str:
        if self.kind is TypeKind.NONE:
            return "unknown"
        if self.kind is TypeKind.UNION:
            return " | ".join(qualified_name(m) for m in self.members)
        if self.kind is TypeKind.NAMED and self.annotation is self.members[0]:
            return qualified_name(self.members[0])
        return qualified_name(self.annotation)


@dataclass(frozen=True)
class ParameterInfo:
    name: str
    position: int  # 0-based, counted over the whole signature
    kind: inspect._ParameterKind  # noqa: SLF001
    declared_type: DeclaredType
    has_default: bool
    default: Any = None


class TypeIntrospector(Protocol):
    """What the container needs to know about classes in order to autowire them."""

    def load(self, identifier: Any) -> type | None: ...

    def exists(self, identifier: Any) -> bool: ...

    def is_instantiable(self, cls: type) -> bool: ...

    def constructor_parameters(self, cls: type) -> list[ParameterInfo]: ...


class ReflectionIntrospector:
    """Default introspector built on `inspect`, `typing` and `importlib`.

    Class objects are taken as they are; strings are looked up as dotted import
    paths (`"package.module.Outer.Inner"`). Bare names never denote a class.
    """

    def load(self, identifier: Any) -> type | None:
        if inspect.isclass(identifier):
            return identifier
        if not isinstance(identifier, str) or "." not in identifier:
            return None
        return _import_class(identifier)

    def exists(self, identifier: Any) -> bool:
        return self.load(identifier) is not None

    def is_instantiable(self, cls: type) -> bool:
        if not inspect.isclass(cls) or inspect.isabstract(cls):
            return False
        if _is_protocol(cls) or issubclass(cls, Enum):
            return False
        return _signature(cls) is not None

    def constructor_parameters(self, cls: type) -> list[ParameterInfo]:
        sig = _signature(cls)
        if sig is None:
            msg = f"{qualified_name(cls)} has no introspectable constructor"
            raise TypeError(msg)

        hints = _get_init_type_hints(cls)
        params: list[ParameterInfo] = []
        for position, p in enumerate(sig.parameters.values()):
            # never autowired, left empty
            if p.kind in (p.VAR_POSITIONAL, p.VAR_KEYWORD):
                continue

            ann = hints.get(p.name, inspect.Parameter.empty)
            if ann is inspect.Parameter.empty and not isinstance(p.annotation, str):
                ann = p.annotation

            has_default = p.default is not p.empty
            params.append(
                ParameterInfo(
                    name=p.name,
                    position=position,
                    kind=p.kind,
                    declared_type=classify_annotation(ann),
                    has_default=has_default,
                    default=p.default if has_default else None,
                )
            )
        return params


def classify_annotation(ann: Any) -> DeclaredType:
    """Sort an annotation into one of the four kinds the container understands.

    `X | None` and `Optional[X]` classify as X: `None` only marks the parameter
    nullable. Any other union with more than one member is a UNION.
    """
    if ann is inspect.Parameter.empty:
        return DeclaredType(TypeKind.NONE)

    target = ann
    if get_origin(ann) in _UNION_ORIGINS:
        members = tuple(m for m in get_args(ann) if m is not _NONE_TYPE)
        if len(members) > 1:
            return DeclaredType(TypeKind.UNION, ann, members)
        if members:
            target = members[0]

    if inspect.isclass(target) and target is not Any and target.__module__ != "builtins":
        return DeclaredType(TypeKind.NAMED, ann, (target,))
    return DeclaredType(TypeKind.BUILTIN, ann)


def qualified_name(obj: Any) -> str:
    if isinstance(obj, str):
        return obj
    if inspect.isclass(obj):
        if obj.__module__ == "builtins":
            return obj.__qualname__
        return f"{obj.__module__}.{obj.__qualname__}"
    return repr(obj)


def _import_class(path: str) -> type | None:
    parts = path.split(".")
    if not all(parts):
        return None

    # longest importable module prefix wins, the rest is an attribute path
    for split in range(len(parts) - 1, 0, -1):
        module_name = ".".join(parts[:split])
        try:
            target: Any = importlib.import_module(module_name)
        except ImportError:
            continue
        except Exception as exc:  # noqa: BLE001
            logger.debug("Importing module %s failed (%s)", module_name, exc)
            return None

        for attr in parts[split:]:
            target = getattr(target, attr, None)
            if target is None:
                return None
        return target if inspect.isclass(target) else None

    return None


def _signature(cls: type) -> inspect.Signature | None:
    try:
        return inspect.signature(cls)
    except (TypeError, ValueError):
        pass

    # no signature for subclasses of some C builtins (dict, Exception, ...)
    if cls.__module__ == "builtins":
        return None
    init = inspect.getattr_static(cls, "__init__", None)
    if inspect.isfunction(init):
        try:
            sig = inspect.signature(init)
        except (TypeError, ValueError):
            return None
        return sig.replace(parameters=list(sig.parameters.values())[1:])
    # constructor inherited from the builtin base, called without arguments
    return inspect.Signature()


if hasattr(typing, "is_protocol"):
    # https://docs.python.org/3/library/typing.html#typing.is_protocol
    def _is_protocol(tp: type) -> bool:
        return typing.is_protocol(tp)  # type: ignore[attr-defined]

else:

    def _is_protocol(tp: type) -> bool:
        # Same check as typing.is_protocol: true for Protocol definitions, not their implementations.
        return bool(getattr(tp, "_is_protocol", False)) and tp is not Protocol


def _get_init_type_hints(cls: type) -> dict[str, Any]:
    try:
        init = inspect.getattr_static(cls, "__init__")
        hints = get_type_hints(init)
    except TypeError:
        hints = {}
    except NameError as exc:
        logger.warning("'%s' name error retrieving %s (%s) type hints", exc.name, cls.__name__, cls.__qualname__)
        hints = {}

    return hints
