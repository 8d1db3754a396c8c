"""Context tags describing the scope a request, provider or value applies to.

Qualifiers are an immutable mapping of names to values such as
``{"stage": "prod", "region": "eu"}``. A request carries the qualifiers of the
caller; each candidate value carries the qualifiers it was produced for, and
:func:`score` ranks how well the two agree.
"""

from collections.abc import Mapping
from typing import Iterator, Optional

from settle.errors import QualifiersError

__all__ = ["Qualifiers", "score"]


class Qualifiers(Mapping):
    """An immutable, hashable set of (name, value) pairs.

    Names are unique and insertion order is not significant: two instances with
    the same pairs are equal and hash alike.

    Example:
        >>> prod = Qualifiers.of(stage="prod", region="eu")
        >>> prod.intersection_size(Qualifiers.of(stage="prod"))
        1
        >>> prod.symmetric_difference_size(Qualifiers.of(stage="prod"))
        1
    """

    __slots__ = ("_pairs", "_hash")

    def __init__(self, pairs: Optional[Mapping[str, str]] = None):
        pairs = dict(pairs or {})
        for name, value in pairs.items():
            if not isinstance(name, str) or not name:
                raise QualifiersError(f"Qualifier names must be non-empty strings: {name!r}")
            if not isinstance(value, str):
                raise QualifiersError(f"Qualifier '{name}' must have a string value: {value!r}")
        self._pairs: dict[str, str] = dict(sorted(pairs.items()))
        self._hash = hash(frozenset(self._pairs.items()))

    @staticmethod
    def of(**pairs: str) -> "Qualifiers":
        if not pairs:
            return _EMPTY
        return Qualifiers(pairs)

    @staticmethod
    def of_pairs(*names_and_values: str) -> "Qualifiers":
        """Build qualifiers from alternating names and values.

        Raises:
            QualifiersError: If an odd number of strings is given.
        """
        if len(names_and_values) % 2 != 0:
            raise QualifiersError(f"Expected name/value pairs, got {names_and_values}")
        return Qualifiers(dict(zip(names_and_values[::2], names_and_values[1::2])))

    @staticmethod
    def empty() -> "Qualifiers":
        return _EMPTY

    def __getitem__(self, name: str) -> str:
        return self._pairs[name]

    def __iter__(self) -> Iterator[str]:
        return iter(self._pairs)

    def __len__(self) -> int:
        return len(self._pairs)

    def __hash__(self) -> int:
        return self._hash

    def __eq__(self, other) -> bool:
        if isinstance(other, Qualifiers):
            return self._pairs == other._pairs
        return NotImplemented

    def is_empty(self) -> bool:
        return not self._pairs

    def intersection_size(self, other: "Qualifiers") -> int:
        """Number of (name, value) pairs present in both."""
        return len(self._pairs.items() & other._pairs.items())

    def symmetric_difference_size(self, other: "Qualifiers") -> int:
        """Number of (name, value) pairs present in exactly one of the two."""
        return len(self._pairs.items() ^ other._pairs.items())

    def contains(self, other: "Qualifiers") -> bool:
        """True if every pair of ``other`` is also one of ours."""
        return len(other) <= len(self) and other._pairs.items() <= self._pairs.items()

    def is_subset_of(self, other: "Qualifiers") -> bool:
        return other.contains(self)

    def __repr__(self) -> str:
        return f"Qualifiers({self._pairs!r})"

    def __str__(self) -> str:
        return ";".join(f"{name}={value}" for name, value in self._pairs.items())


_EMPTY = Qualifiers()


def score(reference: Qualifiers, candidate: Qualifiers) -> int:
    """Rank how well ``candidate`` qualifiers suit a request made with ``reference``.

    Larger is better. A candidate with no qualifiers has no opinion and is
    penalised by how specific the request was; a non-empty candidate sharing
    nothing with the request is penalised harder. Otherwise the score is the
    number of shared pairs less the number of unshared ones.

    The score is a ranking heuristic: it is neither transitive nor consistent
    with equality, and equal scores must be broken by the caller.

    Example:
        >>> prod = Qualifiers.of(stage="prod")
        >>> score(prod, prod)
        1
        >>> score(prod, Qualifiers.empty())
        -1
        >>> score(prod, Qualifiers.of(stage="dev"))
        -2
    """
    if candidate.is_empty():
        return -len(reference)
    intersection_size = reference.intersection_size(candidate)
    if intersection_size == 0:
        return -(len(reference) + len(candidate))
    return intersection_size - reference.symmetric_difference_size(candidate)
