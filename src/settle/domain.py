"""Domain models used throughout the resolution engine."""

from dataclasses import dataclass
from typing import Any

from settle.errors import PathError
from settle.path import Path
from settle.qualifiers import Qualifiers


@dataclass(frozen=True)
class Request:
    """A request for a configuration value.

    Requests are hashable and double as resolution cache keys.

    Attributes:
        qualifiers: The qualifiers of the requestor.
        path: The absolute path being asked for.

    Raises:
        PathError: If ``path`` is not absolute.
    """

    qualifiers: Qualifiers
    path: Path

    def __post_init__(self):
        if not self.path.is_absolute():
            raise PathError(f"Requests must be made for absolute paths, not {self.path}")

    def type(self) -> Any:
        return self.path.type()

    def __str__(self) -> str:
        if self.qualifiers.is_empty():
            return str(self.path)
        return f"{self.path} [{self.qualifiers}]"
