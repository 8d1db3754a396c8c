"""Settle: typed configuration resolved from pluggable providers.

Settle resolves configuration values on demand. Each request names an absolute,
typed path (``/db/port:int``) and carries qualifiers describing the requestor
(``stage=prod``). Every registered provider may offer a candidate value tagged
with the qualifiers and path it applies to; the candidate whose qualifiers best
match the request wins, with the more specific path breaking ties and a
pluggable disambiguator deciding genuine ties. Outcomes are memoised per
(qualifiers, path) until the cache is cleared.

Basic Usage:
    >>> from settle.builders import make_engine
    >>> from settle.path import Path
    >>> from settle.qualifiers import Qualifiers
    >>> from settle.registry import ProviderRegistry
    >>>
    >>> registry = ProviderRegistry()
    >>>
    >>> @registry.provides(qualifiers=Qualifiers.of(stage="prod"), path=Path.named("env", type=str))
    >>> def make_prod_env() -> str:
    ...     return "production"
    >>>
    >>> engine = make_engine(registry)
    >>> engine.get(Path.absolute("app", "env", type=str), qualifiers=Qualifiers.of(stage="prod"))
    'production'

The package consists of several modules:
    - path, qualifiers, assignable: addressing, context tags and type bounds
    - value, provider, providers: the provider contract and stock providers
    - resolver, disambiguation, listeners: the selection algorithm
    - cache, engine, builders, settings: the root resolution context
    - registry: provider registration and ordering
    - adapter: attribute access on annotated classes
    - errors: framework-specific exceptions
"""
