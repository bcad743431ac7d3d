from __future__ import annotations

from typing import TYPE_CHECKING, Any


if TYPE_CHECKING:
    from ._introspection import ParameterInfo


class ContainerError(RuntimeError):
    """Base class for every error raised by the container.

    `identifier` is the entry that failed and `trace` holds the identifiers
    that were mid-resolution when the error was raised, outermost first.
    """

    def __init__(self, msg: str, *, identifier: Any = None, trace: tuple[Any, ...] = ()) -> None:
        super().__init__(msg)
        self.identifier = identifier
        self.trace = trace


class ConfigurationError(ContainerError, TypeError):
    pass


class NotFoundError(ContainerError, LookupError):
    pass


class CyclicDependencyError(ContainerError):
    pass


class UnresolvableParameterError(ContainerError):
    def __init__(
        self,
        msg: str,
        *,
        identifier: Any = None,
        trace: tuple[Any, ...] = (),
        parameter: ParameterInfo | None = None,
    ) -> None:
        super().__init__(msg, identifier=identifier, trace=trace)
        self.parameter = parameter


class InstantiationError(ContainerError):
    @property
    def root_cause(self) -> BaseException:
        """Innermost error of the `__cause__` chain (self when nothing is chained)."""
        error: BaseException = self
        while error.__cause__ is not None:
            error = error.__cause__
        return error
