"""Diagnostic callbacks reporting what the resolver rejected and why.

Listeners observe resolution; nothing they do affects its outcome.
"""

import logging

from settle.domain import Request
from settle.provider import Provider
from settle.value import Value

__all__ = ["ResolutionListener", "LoggingResolutionListener"]

logger = logging.getLogger(__name__)


class ResolutionListener:
    """Receives rejected providers and values. Every callback is a no-op here."""

    def provider_rejected(self, request: Request, provider: Provider) -> None:
        pass

    def value_rejected(self, request: Request, provider: Provider, value: Value) -> None:
        pass

    def value_ambiguous(self, request: Request, provider: Provider, value: Value) -> None:
        pass


class LoggingResolutionListener(ResolutionListener):
    """Log rejections at DEBUG and ambiguities at ``ambiguity_level``."""

    def __init__(self, ambiguity_level: int = logging.DEBUG):
        self.ambiguity_level = ambiguity_level

    def provider_rejected(self, request: Request, provider: Provider) -> None:
        logger.debug("Provider %r rejected for %s", provider, request)

    def value_rejected(self, request: Request, provider: Provider, value: Value) -> None:
        logger.debug("Value %r from %r rejected for %s", value, provider, request)

    def value_ambiguous(self, request: Request, provider: Provider, value: Value) -> None:
        logger.log(
            self.ambiguity_level,
            "Value %r from %r is ambiguous for %s",
            value,
            provider,
            request,
        )
