"""Selecting one value per request from a collection of providers.

Resolution proceeds in three steps:

1. Providers are filtered: a provider's upper bound must be assignable from the
   requested type, and the provider must consider itself selectable.
2. Each remaining provider is asked for a value. A value is only acceptable if its
   path matches a trailing run of the request's path and its qualifiers do not
   contradict the request's.
3. Acceptable values compete. The higher qualifiers score wins; on equal scores
   the more specific path wins; on a full tie the disambiguator decides. The
   winner keeps the losers as fallbacks, consulted when it turns out absent.

Under the default disambiguator, which never breaks ties, the outcome does not
depend on provider order except that genuine ties yield no value at all.
"""

import logging
import sys
from dataclasses import dataclass, replace
from typing import Iterable, Optional

from settle.assignable import is_assignable
from settle.disambiguation import DEFAULT_DISAMBIGUATOR, AmbiguityPolicy, Disambiguator
from settle.domain import Request
from settle.errors import PathError
from settle.listeners import ResolutionListener
from settle.path import Path, elements_match
from settle.provider import Provider
from settle.qualifiers import Qualifiers, score
from settle.value import Value

__all__ = [
    "Resolver",
    "is_provider_selectable",
    "is_value_selectable",
    "qualifiers_selectable",
    "path_score",
    "UNUSABLE_PATH_SCORE",
]

logger = logging.getLogger(__name__)

UNUSABLE_PATH_SCORE = -sys.maxsize
"""Path score of a value whose arguments contradict the request's."""


def is_provider_selectable(provider: Provider, request: Request) -> bool:
    """Cheap type pre-filter followed by the provider's own selectability check."""
    return is_assignable(provider.upper_bound, request.path.type()) and provider.is_selectable(request)


def qualifiers_selectable(reference: Qualifiers, candidate: Qualifiers) -> bool:
    """True when either side is empty or the two share at least one pair."""
    return reference.is_empty() or candidate.is_empty() or reference.intersection_size(candidate) > 0


def is_value_selectable(request: Request, value: Value) -> bool:
    """Decide whether ``value`` may answer ``request`` at all."""
    return qualifiers_selectable(request.qualifiers, value.qualifiers) and request.path.ends_with(
        value.path, elements_match
    )


def path_score(reference: Path, value_path: Path) -> int:
    """Rank how specifically ``value_path`` answers the absolute ``reference`` path.

    The score starts at the number of matched elements. Each element whose
    target type equals the reference's exactly adds one, and each element whose
    arguments equal the reference's adds their count. A value element naming
    arguments the reference does not carry scores :data:`UNUSABLE_PATH_SCORE`.

    Raises:
        PathError: If ``reference`` is not absolute or does not end with ``value_path``.
    """
    if not reference.is_absolute():
        raise PathError(f"Reference path {reference} is not absolute")
    start = reference.last_index_of(value_path, elements_match)
    if start < 0 or start + len(value_path) != len(reference):
        raise PathError(f"{reference} does not end with {value_path}")

    result = len(value_path)
    for offset, value_element in enumerate(value_path):
        reference_element = reference[start + offset]
        if reference_element.target_type is not None and reference_element.target_type == value_element.target_type:
            result += 1
        if value_element.arguments:
            if value_element.arguments != reference_element.arguments:
                return UNUSABLE_PATH_SCORE
            result += len(value_element.arguments)
    return result


@dataclass(frozen=True)
class _Candidate:
    provider: Provider
    value: Value
    qualifiers_score: int
    path_score: int

    def rank(self) -> tuple[int, int]:
        return self.qualifiers_score, self.path_score

    def beating(self, loser: Value) -> "_Candidate":
        return replace(self, value=self.value.with_fallback(loser))


class Resolver:
    """Pick the best value for a request from an ordered collection of providers.

    Args:
        disambiguator: Consulted when two values tie on both scores.
        listener: Told about every rejected provider and value.
        ambiguity_policy: What to keep when the disambiguator cannot break a tie.
    """

    def __init__(
        self,
        disambiguator: Optional[Disambiguator] = None,
        listener: Optional[ResolutionListener] = None,
        ambiguity_policy: AmbiguityPolicy = AmbiguityPolicy.DISCARD,
    ):
        self._disambiguator = disambiguator or DEFAULT_DISAMBIGUATOR
        self._listener = listener or ResolutionListener()
        self._ambiguity_policy = AmbiguityPolicy(ambiguity_policy)

    def resolve(self, providers: Iterable[Provider], request: Request) -> Optional[Value]:
        """Return the winning value for ``request``, or None.

        Exceptions raised by providers propagate to the caller.
        """
        providers = list(providers)
        if not providers:
            return None
        if len(providers) == 1:
            return self._resolve_single(providers[0], request)

        candidate: Optional[_Candidate] = None
        for provider in providers:
            if not is_provider_selectable(provider, request):
                self._listener.provider_rejected(request, provider)
                continue
            value = provider.get(request)
            if value is None:
                self._listener.provider_rejected(request, provider)
                continue
            candidate = self._contend(request, candidate, provider, value)

        if candidate is None:
            logger.debug("No value resolved for %s", request)
            return None
        logger.debug("Resolved %s to %r from %r", request, candidate.value, candidate.provider)
        return candidate.value

    def _resolve_single(self, provider: Provider, request: Request) -> Optional[Value]:
        if not is_provider_selectable(provider, request):
            self._listener.provider_rejected(request, provider)
            return None
        value = provider.get(request)
        if value is None:
            self._listener.provider_rejected(request, provider)
            return None
        if not is_value_selectable(request, value):
            self._listener.value_rejected(request, provider, value)
            return None
        return value

    def _contend(
        self,
        request: Request,
        candidate: Optional[_Candidate],
        provider: Provider,
        value: Value,
    ) -> Optional[_Candidate]:
        """Pit ``value`` against the current candidate and return the new candidate.

        The winner of a contest carries the loser as its fallback. A
        disambiguator returning a third value empties the candidate slot and
        sends that value round again, to be adopted if it can answer at all.
        """
        while True:
            if not is_value_selectable(request, value):
                self._listener.value_rejected(request, provider, value)
                return candidate

            contender = _Candidate(
                provider,
                value,
                score(request.qualifiers, value.qualifiers),
                path_score(request.path, value.path),
            )
            if candidate is None:
                return contender

            if contender.rank() < candidate.rank():
                self._listener.value_rejected(request, provider, value)
                return candidate.beating(value)
            if contender.rank() > candidate.rank():
                self._listener.value_rejected(request, candidate.provider, candidate.value)
                return contender.beating(candidate.value)

            chosen = self._disambiguator.disambiguate(
                request, candidate.provider, candidate.value, provider, value
            )
            if chosen is None:
                self._listener.value_ambiguous(request, candidate.provider, candidate.value)
                self._listener.value_ambiguous(request, provider, value)
                if self._ambiguity_policy is AmbiguityPolicy.KEEP_PREVIOUS:
                    return candidate
                return None
            if chosen is candidate.value:
                self._listener.value_rejected(request, provider, value)
                return candidate.beating(value)
            if chosen is value:
                self._listener.value_rejected(request, candidate.provider, candidate.value)
                return contender.beating(candidate.value)

            self._listener.value_rejected(request, candidate.provider, candidate.value)
            self._listener.value_rejected(request, provider, value)
            candidate = None
            value = chosen
