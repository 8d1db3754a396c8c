"""Breaking ties between equally specific candidate values."""

from enum import Enum
from typing import Optional

from settle.domain import Request
from settle.provider import Provider
from settle.value import Value

__all__ = ["AmbiguityPolicy", "Disambiguator", "DEFAULT_DISAMBIGUATOR"]


class AmbiguityPolicy(str, Enum):
    """What the resolver keeps when a tie cannot be broken.

    DISCARD drops both tied values, so nobody wins. KEEP_PREVIOUS keeps the
    value that was the candidate before the tie and drops only the newcomer,
    which makes the outcome depend on provider order.
    """

    DISCARD = "discard"
    KEEP_PREVIOUS = "keep_previous"


class Disambiguator:
    """Policy consulted when two values tie on both qualifiers and path score.

    :meth:`disambiguate` may return:

    - None, meaning the tie stands;
    - ``first_value`` or ``second_value`` itself (not a copy), naming the winner;
    - any other value, which replaces both: the resolver empties its candidate
      slot and adopts the new value if it can answer the request at all.

    The resolver places no cap on how often it consults the disambiguator;
    subclasses that keep producing new values are responsible for settling.
    This default never breaks ties.
    """

    def disambiguate(
        self,
        request: Request,
        first_provider: Provider,
        first_value: Value,
        second_provider: Provider,
        second_value: Value,
    ) -> Optional[Value]:
        return None


DEFAULT_DISAMBIGUATOR = Disambiguator()
