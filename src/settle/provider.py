"""The provider contract and a function-backed provider.

A provider is a pluggable source of :class:`~settle.value.Value` objects. It
declares the widest type it can produce (its *upper bound*); the resolver only
consults providers whose bound is assignable from the requested type.

Providers must be stateless or internally synchronised: a single instance is
shared by every resolution for the life of the engine.
"""

import inspect
from abc import ABC, abstractmethod
from typing import Any, Callable, Optional

from settle.domain import Request
from settle.path import Path, elements_match
from settle.qualifiers import Qualifiers
from settle.value import Value

__all__ = ["Provider", "FunctionProvider"]


class Provider(ABC):
    """Base class for configuration value providers.

    Subclasses pass their upper bound to the constructor rather than having it
    inferred, and implement :meth:`get`.

    Attributes:
        upper_bound: The widest type descriptor this provider can produce.
    """

    def __init__(self, upper_bound: Any = object):
        self.upper_bound = upper_bound

    def is_selectable(self, request: Request) -> bool:
        """Return False if this provider can prove it cannot answer ``request``.

        Must be free of side effects and idempotent. True is only a hint that
        :meth:`get` is worth calling.
        """
        return True

    @abstractmethod
    def get(self, request: Request) -> Optional[Value]:
        """Return a value for ``request``, or None if there is nothing to offer.

        Unexpected failures should be raised, not turned into None.
        """
        raise NotImplementedError

    def __repr__(self) -> str:
        return f"{type(self).__name__}(upper_bound={self.upper_bound!r})"


class FunctionProvider(Provider):
    """Adapt a plain function into a :class:`Provider`.

    The function is called with the :class:`~settle.domain.Request` when it
    declares a parameter, and with no arguments otherwise. It may return a
    ready-made :class:`~settle.value.Value`, None (nothing to offer), or a plain
    payload, which is wrapped in a value tagged with this provider's
    qualifiers and answering ``path`` (or the request's last element).

    Attributes:
        name: Name used in diagnostics.
        func: The wrapped function.
        qualifiers: Qualifiers attached to wrapped payloads.
        path: If given, only requests ending with this path are served.
    """

    def __init__(
        self,
        func: Callable,
        upper_bound: Any = object,
        qualifiers: Optional[Qualifiers] = None,
        path: Optional[Path] = None,
        name: Optional[str] = None,
    ):
        super().__init__(upper_bound)
        self.func = func
        self.qualifiers = qualifiers or Qualifiers.empty()
        self.path = path
        self.name = name or func.__name__
        self._wants_request = len(inspect.signature(func).parameters) > 0

    def is_selectable(self, request: Request) -> bool:
        if not (
            self.qualifiers.is_empty()
            or request.qualifiers.is_empty()
            or request.qualifiers.intersection_size(self.qualifiers) > 0
        ):
            return False
        return self.path is None or request.path.ends_with(self.path, elements_match)

    def get(self, request: Request) -> Optional[Value]:
        result = self.func(request) if self._wants_request else self.func()
        if result is None or isinstance(result, Value):
            return result
        answered = self.path or Path.of(request.path.last())
        return Value.of(self.qualifiers, answered, result)

    def __repr__(self) -> str:
        return f"FunctionProvider({self.name}, upper_bound={self.upper_bound!r})"
