"""High level entry points for constructing engines."""

from typing import Optional

from settle.disambiguation import Disambiguator
from settle.engine import Engine
from settle.listeners import ResolutionListener
from settle.providers import EnvironmentQualifiersProvider, EnvironmentVariableProvider
from settle.registry import ProviderRegistry
from settle.settings import EngineSettings

__all__ = ["make_engine", "make_environment_registry"]


def make_engine(
    registry: ProviderRegistry,
    settings: Optional[EngineSettings] = None,
    disambiguator: Optional[Disambiguator] = None,
    listener: Optional[ResolutionListener] = None,
) -> Engine:
    """Construct an :class:`Engine` over the providers of ``registry``.

    Providers are consulted in the registry's priority order.

    Args:
        registry: The registry holding the providers.
        settings: Engine settings; read from ``SETTLE_*`` environment variables
            when omitted.
        disambiguator: Tie-breaking policy; the default never breaks ties.
        listener: Receives rejected providers and values; defaults to logging.

    Returns:
        The constructed engine, with its own qualifiers already resolved.

    Example:
        >>> registry = ProviderRegistry()
        >>>
        >>> @registry.provides(path=Path.named("greeting", type=str))
        >>> def make_greeting() -> str:
        ...     return "hello"
        >>>
        >>> engine = make_engine(registry)
        >>> engine.get(Path.named("greeting", type=str))
        'hello'
    """
    return Engine(
        registry.registered_providers(),
        disambiguator=disambiguator,
        listener=listener,
        settings=settings,
    )


def make_environment_registry(
    settings: Optional[EngineSettings] = None,
    registry: Optional[ProviderRegistry] = None,
) -> ProviderRegistry:
    """Register the environment-backed providers configured by ``settings``.

    Adds an :class:`~settle.providers.EnvironmentVariableProvider` and an
    :class:`~settle.providers.EnvironmentQualifiersProvider` to ``registry``
    (a new one when omitted) at the default priority.
    """
    settings = settings or EngineSettings()
    registry = registry if registry is not None else ProviderRegistry()
    registry.register(EnvironmentVariableProvider(settings.env_prefix, settings.env_uppercase))
    registry.register(EnvironmentQualifiersProvider(settings.qualifier_env_prefix))
    return registry
