"""Memoisation of resolution outcomes.

Resolving one path may require resolving others, so the cache never runs a
resolution while holding its lock: the entry is computed first, then inserted
if no other thread got there in between. In a race both threads compute, the
first insert wins, and the loser adopts the winner's entry.
"""

import logging
import threading
from dataclasses import dataclass
from typing import Callable, Iterator, Optional

from settle.domain import Request
from settle.value import Value

__all__ = ["ResolutionEntry", "ResolutionCache"]

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ResolutionEntry:
    """The outcome of resolving one request.

    Attributes:
        request: The request that was resolved.
        value: The winning value, or None when nothing was resolved.
    """

    request: Request
    value: Optional[Value]

    @property
    def is_resolved(self) -> bool:
        return self.value is not None


class ResolutionCache:
    """Thread-safe memo of :class:`ResolutionEntry` objects keyed by request.

    Args:
        resolve: Computes the value (or None) for a request on a cache miss.
    """

    def __init__(self, resolve: Callable[[Request], Optional[Value]]):
        self._resolve = resolve
        self._entries: dict[Request, ResolutionEntry] = {}
        self._lock = threading.Lock()

    def get(self, request: Request) -> ResolutionEntry:
        """Return the entry for ``request``, resolving it on a miss."""
        entry = self._entries.get(request)
        if entry is not None:
            return entry

        fresh = ResolutionEntry(request, self._resolve(request))
        with self._lock:
            entry = self._entries.setdefault(request, fresh)
        if entry is not fresh:
            logger.debug("Discarding duplicate resolution of %s", request)
        return entry

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, request: Request) -> bool:
        return request in self._entries

    def __iter__(self) -> Iterator[ResolutionEntry]:
        with self._lock:
            entries = list(self._entries.values())
        return iter(entries)
