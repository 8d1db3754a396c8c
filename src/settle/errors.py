__all__ = [
    "SettleError",
    "PathError",
    "QualifiersError",
    "AbsentValueError",
    "NoDefaultError",
]


class SettleError(Exception):
    """Base class for all errors raised by settle."""

    pass


class PathError(SettleError, ValueError):
    """Raised when an element or path is structurally malformed, or a path is not absolute where it must be."""

    pass


class QualifiersError(SettleError, ValueError):
    """Raised when qualifiers are constructed from malformed name/value pairs."""

    pass


class AbsentValueError(SettleError, LookupError):
    """Raised by a value's supplier to signal it has no further information.

    This is not a failure: a :class:`~settle.value.Value` with a fallback
    consults the fallback when its own supplier raises this.
    """

    pass


class NoDefaultError(SettleError, LookupError):
    """Raised when nothing was resolved for a path and no default was supplied."""

    pass
