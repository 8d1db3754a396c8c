"""Lazily evaluated configuration values."""

import threading
from dataclasses import dataclass, field, replace
from typing import Any, Callable, Generic, Optional, TypeVar

from settle.errors import AbsentValueError
from settle.path import Path
from settle.qualifiers import Qualifiers

__all__ = ["Value", "CachingSupplier"]

T = TypeVar("T")

_UNSET = object()


@dataclass(frozen=True, eq=False)
class Value(Generic[T]):
    """A lazily computed result, tagged with the qualifiers and path it applies to.

    The supplier is not called until :meth:`get` is. A supplier that has nothing
    to offer raises :class:`~settle.errors.AbsentValueError`; the value then
    consults its fallback, if it has one, and otherwise lets the error escape.

    Values keep no reference to the provider that made them, so they can be
    cached and shared freely between threads. They compare by identity: the
    resolver relies on this to tell which of two tied candidates a
    disambiguator picked.

    Attributes:
        qualifiers: The qualifiers this value was produced for.
        path: The (usually relative) path this value answers.
        supplier: Zero-argument callable producing the payload.
        fallback: Value consulted when ``supplier`` signals absence.
    """

    qualifiers: Qualifiers
    path: Path
    supplier: Callable[[], T]
    fallback: Optional["Value[T]"] = field(default=None)

    @staticmethod
    def of(qualifiers: Qualifiers, path: Path, payload: T) -> "Value[T]":
        """A value whose payload is already known."""
        return Value(qualifiers, path, lambda: payload)

    @staticmethod
    def absent(qualifiers: Qualifiers, path: Path) -> "Value[Any]":
        """A value that always signals absence unless given a fallback."""
        return Value(qualifiers, path, _raise_absent(path))

    def get(self) -> T:
        try:
            return self.supplier()
        except AbsentValueError:
            if self.fallback is None:
                raise
            return self.fallback.get()

    def type(self) -> Any:
        return self.path.type()

    def with_fallback(self, fallback: "Value[T]") -> "Value[T]":
        """Return a copy that falls back to ``fallback`` (after any existing fallback)."""
        if self.fallback is None:
            return replace(self, fallback=fallback)
        return replace(self, fallback=self.fallback.with_fallback(fallback))

    def memoized(self) -> "Value[T]":
        """Return a copy whose supplier runs at most once per successful result."""
        if isinstance(self.supplier, CachingSupplier):
            return self
        return replace(self, supplier=CachingSupplier(self.supplier))

    def __repr__(self) -> str:
        return f"Value(qualifiers={self.qualifiers!s}, path={self.path!s})"


def _raise_absent(path: Path) -> Callable[[], Any]:
    def supplier():
        raise AbsentValueError(f"No value present for {path}")

    return supplier


class CachingSupplier(Generic[T]):
    """Wrap a supplier so its first result is remembered.

    The delegate runs outside the lock; if two threads race, the first result
    stored wins and the other is discarded. Absence is not remembered.
    """

    def __init__(self, delegate: Callable[[], T]):
        self._delegate = delegate
        self._lock = threading.Lock()
        self._result: Any = _UNSET

    def __call__(self) -> T:
        result = self._result
        if result is _UNSET:
            computed = self._delegate()
            with self._lock:
                if self._result is _UNSET:
                    self._result = computed
                result = self._result
        return result
