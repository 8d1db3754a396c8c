"""Covariant assignability over type descriptors.

Providers declare the widest type they can produce (their *upper bound*), and
requests name the type they want. A provider is usable for a request when its
bound is assignable from the requested type under the rules below:

    - ``object`` and ``typing.Any`` accept every descriptor.
    - Plain classes follow ``issubclass``.
    - A union bound accepts a payload assignable to any of its members; a union
      payload is accepted only when every member is.
    - Parameterised generics compare their origins by subclass and their
      arguments pairwise, covariantly. A bare origin bound (``list``) accepts any
      parameterisation (``list[str]``); the reverse does not hold.
    - Anything else (type variables, ``Literal``, forward references) is only
      assignable to an equal descriptor.

Example:
    >>> is_assignable(object, str)
    True
    >>> is_assignable(Sequence[object], list[str])
    True
    >>> is_assignable(list[str], list)
    False
"""

import types
from dataclasses import dataclass
from typing import Any, Union, get_args, get_origin

__all__ = ["NoneType", "is_assignable", "AssignableType", "type_name"]

NoneType = type(None)
"""The "no type" descriptor. Only the root element of a path carries it."""


def is_assignable(bound: Any, payload: Any) -> bool:
    """Return True if something of type ``payload`` may stand in for ``bound``."""
    if bound is payload or bound is Any or bound is object:
        return True
    if payload is Any:
        return False

    if _is_union(payload):
        return all(is_assignable(bound, member) for member in get_args(payload))
    if _is_union(bound):
        return any(is_assignable(member, payload) for member in get_args(bound))

    bound_origin = get_origin(bound)
    payload_origin = get_origin(payload)

    if bound_origin is None:
        if not isinstance(bound, type):
            return bound == payload
        payload_class = payload_origin if payload_origin is not None else payload
        return isinstance(payload_class, type) and issubclass(payload_class, bound)

    if payload_origin is None:
        return False
    if not (isinstance(bound_origin, type) and isinstance(payload_origin, type)):
        return bound == payload
    if not issubclass(payload_origin, bound_origin):
        return False
    return _arguments_assignable(get_args(bound), get_args(payload))


def _arguments_assignable(bound_args: tuple, payload_args: tuple) -> bool:
    if len(bound_args) != len(payload_args):
        return False
    for bound_arg, payload_arg in zip(bound_args, payload_args):
        if isinstance(bound_arg, (list, tuple)) and isinstance(payload_arg, (list, tuple)):
            # Callable parameter lists
            if not _arguments_assignable(tuple(bound_arg), tuple(payload_arg)):
                return False
        elif bound_arg is Ellipsis or payload_arg is Ellipsis:
            if bound_arg is not payload_arg:
                return False
        elif not is_assignable(bound_arg, payload_arg):
            return False
    return True


def _is_union(descriptor: Any) -> bool:
    return get_origin(descriptor) in (Union, types.UnionType)


@dataclass(frozen=True)
class AssignableType:
    """A type descriptor paired with the covariant assignability check.

    Attributes:
        type: The bounding descriptor.
    """

    type: Any

    def is_assignable(self, payload: Any) -> bool:
        if isinstance(payload, AssignableType):
            payload = payload.type
        return is_assignable(self.type, payload)

    @staticmethod
    def of(descriptor: Any) -> "AssignableType":
        if isinstance(descriptor, AssignableType):
            return descriptor
        return AssignableType(descriptor)

    def __str__(self) -> str:
        return type_name(self.type)


def type_name(descriptor: Any) -> str:
    if isinstance(descriptor, type) and get_origin(descriptor) is None:
        return descriptor.__qualname__
    return str(descriptor).replace("typing.", "")
