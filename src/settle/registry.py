"""Registration of providers, with priority ordering."""

import inspect
from dataclasses import dataclass
from typing import Any, Callable, Optional, get_type_hints

from settle.errors import SettleError
from settle.path import Path
from settle.provider import FunctionProvider, Provider
from settle.qualifiers import Qualifiers

__all__ = ["RegisteredProvider", "ProviderRegistry", "inferred_name"]


@dataclass(frozen=True)
class RegisteredProvider:
    """A provider together with its registration priority.

    Attributes:
        provider: The registered provider.
        priority: Higher priorities are consulted first.
        sequence: Registration order, used to keep equal priorities stable.
    """

    provider: Provider
    priority: int
    sequence: int


def inferred_name(target: Any) -> str:
    """Derive a provider name from a function name, removing any 'make_' prefix.

    Example:
        >>> inferred_name(make_database_url)  # Returns "database_url"
        >>> inferred_name(port)               # Returns "port"
    """
    if target.__name__.startswith("make_"):
        return target.__name__[5:]
    return target.__name__


class ProviderRegistry:
    """Registry of providers, assembled explicitly at startup.

    The resolver consumes providers in the order :meth:`registered_providers`
    returns them: descending priority, then registration order. Ordering only
    matters to disambiguators that prefer one provider over another; the
    default resolution outcome does not depend on it.
    """

    def __init__(self):
        self._providers: list[RegisteredProvider] = []

    def register(self, provider: Provider, priority: int = 0) -> Provider:
        """Register a provider explicitly.

        Args:
            provider: The provider instance to register.
            priority: Higher priorities are consulted first.

        Returns:
            The provider, so registration can be chained.
        """
        if not isinstance(provider, Provider):
            raise SettleError(f"{provider!r} is not a Provider")
        self._providers.append(RegisteredProvider(provider, priority, len(self._providers)))
        return provider

    def registered_providers(self) -> list[Provider]:
        ordered = sorted(self._providers, key=lambda entry: (-entry.priority, entry.sequence))
        return [entry.provider for entry in ordered]

    def __len__(self) -> int:
        return len(self._providers)

    def provides(
        self,
        upper_bound: Any = None,
        qualifiers: Optional[Qualifiers] = None,
        path: Optional[Path] = None,
        priority: int = 0,
        name: Optional[str] = None,
    ) -> Callable:
        """Decorator to register a function as a provider.

        Args:
            upper_bound: The widest type the function produces; defaults to its
                return annotation, or ``object`` when it has none.
            qualifiers: Qualifiers attached to the payloads it returns.
            path: If given, the function only serves requests ending with this path.
            priority: Higher priorities are consulted first.
            name: Name used in diagnostics; defaults to the function name with
                any 'make_' prefix removed.

        Returns:
            A decorator that registers the function and returns it unchanged.

        Example:
            @registry.provides(qualifiers=Qualifiers.of(stage="prod"),
                               path=Path.named("db", "port", type=int))
            def make_prod_port() -> int:
                return 5432
        """

        def decorator(func: Callable) -> Callable:
            if not callable(func) or inspect.isclass(func):
                raise SettleError(f"{func} is not a function")
            parameters = inspect.signature(func).parameters
            if len(parameters) > 1:
                raise SettleError(
                    f"Provider function {func.__name__} must accept at most one argument (the request)"
                )
            self.register(
                FunctionProvider(
                    func,
                    upper_bound if upper_bound is not None else _return_type(func),
                    qualifiers,
                    path,
                    name or inferred_name(func),
                ),
                priority,
            )
            return func

        return decorator


def _return_type(func: Callable) -> Any:
    return_type = get_type_hints(func).get("return", None)
    if return_type is None or return_type is type(None):
        return object
    return return_type
