"""Ready-made providers for common configuration sources."""

import logging
import os
from collections.abc import Mapping
from typing import Any, Optional, get_origin

from settle.domain import Request
from settle.errors import AbsentValueError
from settle.path import Element, Path
from settle.provider import Provider
from settle.qualifiers import Qualifiers
from settle.value import Value

__all__ = ["MappingProvider", "EnvironmentVariableProvider", "EnvironmentQualifiersProvider"]

logger = logging.getLogger(__name__)


class MappingProvider(Provider):
    """Serve values from a nested mapping, such as a parsed YAML or TOML document.

    The names of a request's path elements are looked up one level at a time;
    unnamed (type-only) elements are skipped. A payload is only offered when it
    is an instance of the requested type, so no conversion takes place.

    Example:
        >>> provider = MappingProvider({"db": {"port": 5432}}, Qualifiers.of(stage="prod"))
        >>> provider.get(Request(Qualifiers.of(stage="prod"), Path.absolute("db", "port", type=int))).get()
        5432
    """

    def __init__(self, document: Mapping, qualifiers: Optional[Qualifiers] = None):
        super().__init__(object)
        self._document = document
        self.qualifiers = qualifiers or Qualifiers.empty()

    def is_selectable(self, request: Request) -> bool:
        return (
            self.qualifiers.is_empty()
            or request.qualifiers.is_empty()
            or request.qualifiers.intersection_size(self.qualifiers) > 0
        ) and self._lookup(request.path) is not _MISSING

    def get(self, request: Request) -> Optional[Value]:
        payload = self._lookup(request.path)
        if payload is _MISSING or not _is_instance(payload, request.path.type()):
            return None
        return Value.of(self.qualifiers, Path(request.path.elements[1:]), payload)

    def _lookup(self, path: Path) -> Any:
        names = [element.name for element in path.elements[1:] if element.name]
        if not names:
            return _MISSING
        node: Any = self._document
        for name in names:
            if not isinstance(node, Mapping) or name not in node:
                return _MISSING
            node = node[name]
        return node


class EnvironmentVariableProvider(Provider):
    """Serve strings from environment variables.

    The last element's name, optionally prefixed and upper-cased, names the
    variable: with prefix ``"APP_"`` a request for ``/db/host:str`` reads
    ``APP_HOST``. The variable is read when the value is evaluated, so a
    variable removed after resolution makes the value absent.
    """

    def __init__(
        self,
        prefix: str = "",
        uppercase: bool = True,
        environ: Optional[Mapping[str, str]] = None,
    ):
        super().__init__(str)
        self.prefix = prefix
        self.uppercase = uppercase
        self._environ = os.environ if environ is None else environ

    def variable_name(self, element: Element) -> str:
        name = self.prefix + element.name
        return name.upper() if self.uppercase else name

    def is_selectable(self, request: Request) -> bool:
        last = request.path.last()
        return bool(last.name) and not last.parameter_types and self.variable_name(last) in self._environ

    def get(self, request: Request) -> Optional[Value]:
        last = request.path.last()
        variable = self.variable_name(last)
        if variable not in self._environ:
            return None
        environ = self._environ

        def read() -> str:
            if variable not in environ:
                raise AbsentValueError(f"Environment variable {variable} is no longer set")
            return environ[variable]

        return Value(Qualifiers.empty(), Path.of(Element(last.name, str)), read)


class EnvironmentQualifiersProvider(Provider):
    """Supply the engine's own qualifiers from environment variables.

    Every variable starting with ``prefix`` contributes one qualifier, named by
    the lower-cased remainder: ``SETTLE_QUALIFIER_STAGE=prod`` yields
    ``{"stage": "prod"}``. Only requests for :class:`Qualifiers` are served.
    """

    def __init__(self, prefix: str = "SETTLE_QUALIFIER_", environ: Optional[Mapping[str, str]] = None):
        super().__init__(Qualifiers)
        self.prefix = prefix
        self._environ = os.environ if environ is None else environ

    def is_selectable(self, request: Request) -> bool:
        return request.path.type() is Qualifiers

    def get(self, request: Request) -> Optional[Value]:
        pairs = {
            name[len(self.prefix):].lower(): value
            for name, value in self._environ.items()
            if name.startswith(self.prefix) and len(name) > len(self.prefix)
        }
        if not pairs:
            return None
        logger.debug("Qualifiers from environment: %s", pairs)
        return Value.of(Qualifiers.empty(), Path.of_type(Qualifiers), Qualifiers(pairs))


_MISSING = object()


def _is_instance(payload: Any, target_type: Any) -> bool:
    if target_type is None or target_type is object or target_type is Any:
        return True
    origin = get_origin(target_type) or target_type
    if not isinstance(origin, type):
        return True
    return isinstance(payload, origin)
