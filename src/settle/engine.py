"""The root resolution context.

An :class:`Engine` owns everything a resolution needs: the providers, the
resolver and its disambiguation policy, the resolution cache and the engine's
own qualifiers. Create one at startup and share it; clear its cache to force
later lookups to resolve afresh.
"""

import logging
from typing import Any, Callable, Iterable, Optional

from settle.adapter import Configured
from settle.cache import ResolutionCache, ResolutionEntry
from settle.disambiguation import Disambiguator
from settle.domain import Request
from settle.errors import AbsentValueError, NoDefaultError
from settle.listeners import LoggingResolutionListener, ResolutionListener
from settle.path import Element, Path
from settle.provider import FunctionProvider, Provider
from settle.qualifiers import Qualifiers
from settle.resolver import Resolver
from settle.settings import EngineSettings
from settle.value import Value

__all__ = ["Engine", "MISSING", "QUALIFIERS_PATH"]

logger = logging.getLogger(__name__)


class _Missing:
    def __repr__(self) -> str:
        return "MISSING"


MISSING: Any = _Missing()
"""Marks a default that was not supplied."""

QUALIFIERS_PATH = Path.root().plus(Element("", Qualifiers))
"""The path at which an engine looks up its own qualifiers."""


class Engine:
    """Resolve configuration values from a fixed collection of providers.

    The engine's own qualifiers are resolved once, at construction, by asking
    the providers for :data:`QUALIFIERS_PATH` with no qualifiers. They apply to
    every lookup that does not pass qualifiers explicitly. Function providers
    bound to ``object`` with no path are not consulted for them.

    Args:
        providers: Providers, in the order the resolver should consult them.
        disambiguator: Tie-breaking policy; the default never breaks ties.
        listener: Receives rejected providers and values; defaults to logging them.
        settings: Engine settings; read from the environment when omitted.
    """

    def __init__(
        self,
        providers: Iterable[Provider],
        disambiguator: Optional[Disambiguator] = None,
        listener: Optional[ResolutionListener] = None,
        settings: Optional[EngineSettings] = None,
    ):
        self.settings = settings or EngineSettings()
        self._providers = tuple(providers)
        self._resolver = Resolver(
            disambiguator,
            listener or LoggingResolutionListener(self.settings.ambiguity_log_level_number),
            self.settings.ambiguity_policy,
        )
        self._cache = ResolutionCache(self._compute)
        self.qualifiers = self._own_qualifiers()
        logger.debug(
            "Engine created with %d providers and qualifiers {%s}",
            len(self._providers),
            self.qualifiers,
        )

    @property
    def providers(self) -> tuple[Provider, ...]:
        return self._providers

    @property
    def cache(self) -> ResolutionCache:
        return self._cache

    def resolve(self, path: Path, qualifiers: Optional[Qualifiers] = None) -> Optional[Value]:
        """Return the value resolved for ``path``, or None if nothing answers.

        Args:
            path: The path to resolve. Relative paths are taken from the root.
            qualifiers: The requestor's qualifiers; defaults to the engine's.
        """
        return self.entry(path, qualifiers).value

    def entry(self, path: Path, qualifiers: Optional[Qualifiers] = None) -> ResolutionEntry:
        request = self.request(path, qualifiers)
        if not self.settings.cache_enabled:
            return ResolutionEntry(request, self._compute(request))
        return self._cache.get(request)

    def request(self, path: Path, qualifiers: Optional[Qualifiers] = None) -> Request:
        if not path.is_absolute():
            path = Path.root().plus(path)
        return Request(self.qualifiers if qualifiers is None else qualifiers, path)

    def get(
        self,
        path: Path,
        default: Any = MISSING,
        default_factory: Optional[Callable[[], Any]] = None,
        qualifiers: Optional[Qualifiers] = None,
    ) -> Any:
        """Return the payload resolved for ``path``.

        When nothing is resolved, or the resolved value turns out to be absent,
        ``default`` is returned, or else the result of ``default_factory``.

        Raises:
            NoDefaultError: If nothing was resolved and no default was supplied.
        """
        value = self.resolve(path, qualifiers)
        if value is not None:
            try:
                return value.get()
            except AbsentValueError:
                logger.debug("Value resolved for %s is absent; applying default", path)
        if default is not MISSING:
            return default
        if default_factory is not None:
            return default_factory()
        raise NoDefaultError(f"No value for {path} and no default supplied")

    def configured(
        self,
        structural_type: type,
        path: Optional[Path] = None,
        qualifiers: Optional[Qualifiers] = None,
    ) -> Any:
        """Return an adapter resolving ``structural_type``'s annotated attributes.

        See :class:`~settle.adapter.Configured`.
        """
        return Configured(self, structural_type, path or Path.root(), qualifiers)

    def clear_cache(self) -> None:
        """Forget every memoised resolution. The engine remains usable."""
        self._cache.clear()
        logger.debug("Resolution cache cleared")

    def _compute(self, request: Request) -> Optional[Value]:
        return self._resolver.resolve(self._providers, request)

    def _own_qualifiers(self) -> Qualifiers:
        providers = [provider for provider in self._providers if not _is_catch_all(provider)]
        value = self._resolver.resolve(providers, Request(Qualifiers.empty(), QUALIFIERS_PATH))
        if value is None:
            return Qualifiers.empty()
        try:
            qualifiers = value.get()
        except AbsentValueError:
            return Qualifiers.empty()
        if not isinstance(qualifiers, Qualifiers):
            logger.warning("Ignoring %r resolved for %s: not Qualifiers", qualifiers, QUALIFIERS_PATH)
            return Qualifiers.empty()
        return qualifiers


def _is_catch_all(provider: Provider) -> bool:
    # Unannotated functions without a path would be called for every request.
    return isinstance(provider, FunctionProvider) and provider.path is None and provider.upper_bound is object
