"""Attribute access on structural types, resolved through an engine.

Describe a group of settings as a class with annotations and read it through a
:class:`Configured` adapter; each attribute read becomes a lookup of the current
path plus one element named after the attribute and typed by its annotation.

Example:
    >>> class Database:
    ...     host: str
    ...     port: int = 5432
    >>> class App:
    ...     db: Database
    >>> app = engine.configured(App)
    >>> app.db.host     # resolves /db:Database/host:str
    >>> app.db.port     # 5432 unless a provider answers /db:Database/port:int
"""

import inspect
from typing import Any, Optional, get_type_hints

from settle.errors import AbsentValueError, NoDefaultError
from settle.path import Element, Path
from settle.qualifiers import Qualifiers

__all__ = ["Configured", "is_structural"]


def is_structural(candidate: Any) -> bool:
    """True for user-defined classes that declare annotated attributes."""
    return (
        inspect.isclass(candidate)
        and candidate.__module__ != "builtins"
        and bool(get_type_hints(candidate))
    )


class Configured:
    """Read-only view of ``structural_type`` whose attributes resolve lazily.

    Attribute lookups are not memoised here; the engine's resolution cache
    already is. When nothing is resolved for an attribute:

    - if its annotation is itself structural, a nested adapter is returned;
      this also happens when the value resolved for a structural attribute
      is not an instance of it, as with catch-all providers;
    - else if the class defines a default for it, that default is returned;
    - else :class:`~settle.errors.NoDefaultError` is raised.

    Args:
        engine: The :class:`~settle.engine.Engine` to resolve through.
        structural_type: The annotated class describing the available attributes.
        path: Absolute path of this adapter; attributes extend it.
        qualifiers: Requestor qualifiers; the engine's own when None.
    """

    __slots__ = ("_engine", "_type", "_path", "_qualifiers", "_hints")

    def __init__(
        self,
        engine: Any,
        structural_type: type,
        path: Path,
        qualifiers: Optional[Qualifiers] = None,
    ):
        object.__setattr__(self, "_engine", engine)
        object.__setattr__(self, "_type", structural_type)
        object.__setattr__(self, "_path", path)
        object.__setattr__(self, "_qualifiers", qualifiers)
        object.__setattr__(self, "_hints", get_type_hints(structural_type))

    def __getattr__(self, name: str) -> Any:
        if name not in self._hints:
            raise AttributeError(f"{self._type.__name__} has no configured attribute '{name}'")

        member_type = self._hints[name]
        member_path = self._path.plus(Element(name, member_type))
        value = self._engine.resolve(member_path, self._qualifiers)
        if value is not None:
            try:
                payload = value.get()
            except AbsentValueError:
                if not self._has_fallback(name, member_type):
                    raise
            else:
                if not is_structural(member_type) or isinstance(payload, member_type):
                    return payload

        if is_structural(member_type):
            return Configured(self._engine, member_type, member_path, self._qualifiers)
        if hasattr(self._type, name):
            return getattr(self._type, name)
        raise NoDefaultError(f"No value for {member_path} and no default declared on {self._type.__name__}")

    def _has_fallback(self, name: str, member_type: Any) -> bool:
        return is_structural(member_type) or hasattr(self._type, name)

    def __setattr__(self, name: str, value: Any) -> None:
        raise AttributeError(f"{self._type.__name__} configuration is read-only")

    def __dir__(self):
        return sorted(self._hints)

    def __repr__(self) -> str:
        return f"Configured({self._type.__name__} at {self._path})"
