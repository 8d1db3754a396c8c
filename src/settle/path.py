"""Hierarchical, typed addresses for configuration values.

A :class:`Path` is an immutable, non-empty sequence of :class:`Element` objects.
Each element names a step (an attribute, a key, an accessor method) and may carry
the type expected at that step together with the parameter types and argument
strings of an accessor call.

Absolute paths begin with the root element, the unique element with an empty name
and the :data:`~settle.assignable.NoneType` "no type" sentinel. Requests are
always made for absolute paths; providers answer with (usually relative) paths that
must match a trailing run of the request.

Example:
    >>> request = Path.absolute("app", "env", type=str)
    >>> str(request)
    '/app/env:str'
    >>> request.ends_with(Path.named("env", type=str), elements_match)
    True
"""

import operator
from dataclasses import dataclass, replace
from typing import Any, Callable, Iterator, Optional, Union

from settle.assignable import NoneType, is_assignable, type_name
from settle.errors import PathError

__all__ = ["Element", "Path", "ElementPredicate", "elements_match"]


ElementPredicate = Callable[["Element", "Element"], bool]
"""A binary test applied to (element of the searched path, element of the sub-path)."""


@dataclass(frozen=True)
class Element:
    """One step of a :class:`Path`.

    Attributes:
        name: The step's name. May be empty when ``target_type`` is present,
            in which case the element only marks a type.
        target_type: The type descriptor expected at this step, or None.
        parameter_types: Parameter types of an accessor call, in order.
        arguments: Argument strings for the parameters; either empty or exactly
            as long as ``parameter_types``.
    """

    name: str = ""
    target_type: Any = None
    parameter_types: tuple = ()
    arguments: tuple[str, ...] = ()

    def __post_init__(self):
        object.__setattr__(self, "parameter_types", tuple(self.parameter_types))
        object.__setattr__(self, "arguments", tuple(self.arguments))

        if self.name is None:
            raise PathError("Element name may not be None; use an empty string")
        if not self.name and self.target_type is None:
            raise PathError("An element with an empty name must carry a target type")
        if self.target_type is NoneType and (self.name or self.parameter_types or self.arguments):
            raise PathError(f"Only the root element may carry the no-type sentinel: {self!r}")
        if self.arguments and len(self.arguments) != len(self.parameter_types):
            raise PathError(
                f"Element '{self.name}' has {len(self.arguments)} arguments "
                f"for {len(self.parameter_types)} parameters"
            )
        if any(not isinstance(argument, str) for argument in self.arguments):
            raise PathError(f"Element '{self.name}' arguments must be strings: {self.arguments}")

    @staticmethod
    def root() -> "Element":
        return _ROOT_ELEMENT

    @property
    def is_root(self) -> bool:
        return self.target_type is NoneType and not self.name

    def with_type(self, target_type: Any) -> "Element":
        """Return a copy of this element carrying ``target_type`` instead."""
        if target_type is self.target_type:
            return self
        return replace(self, target_type=target_type)

    def __str__(self) -> str:
        text = self.name
        if self.parameter_types:
            pairs = []
            for index, parameter_type in enumerate(self.parameter_types):
                pair = type_name(parameter_type)
                if self.arguments:
                    pair += f'="{self.arguments[index]}"'
                pairs.append(pair)
            text += "(" + ",".join(pairs) + ")"
        if self.target_type is not None and not self.is_root:
            text += ":" + type_name(self.target_type)
        return text


_ROOT_ELEMENT = Element("", NoneType)


def elements_match(reference: Element, candidate: Element) -> bool:
    """Decide whether ``candidate`` (from a value's path) may stand for ``reference``.

    Empty names are wildcards. Target types are compared covariantly when both
    are present, as are parameter types, pairwise. Argument strings are ignored.
    """
    if reference.name and candidate.name and reference.name != candidate.name:
        return False
    if (
        reference.target_type is not None
        and candidate.target_type is not None
        and not is_assignable(reference.target_type, candidate.target_type)
    ):
        return False
    if len(reference.parameter_types) != len(candidate.parameter_types):
        return False
    return all(
        is_assignable(reference_parameter, candidate_parameter)
        for reference_parameter, candidate_parameter in zip(
            reference.parameter_types, candidate.parameter_types
        )
    )


@dataclass(frozen=True)
class Path:
    """An immutable sequence of elements.

    Paths compare and hash structurally, so they can be used as cache keys.

    Raises:
        PathError: If the path is empty, the root element appears anywhere but
            first, or the last element of a multi-element path is untyped.
    """

    elements: tuple[Element, ...]

    def __post_init__(self):
        elements = tuple(self.elements)
        object.__setattr__(self, "elements", elements)
        if not elements:
            raise PathError("A path must have at least one element")
        for index, element in enumerate(elements):
            if not isinstance(element, Element):
                raise PathError(f"{element!r} is not an Element")
            if index > 0 and element.is_root:
                raise PathError(f"The root element may only start a path: {elements}")
        if len(elements) > 1 and elements[-1].target_type is None:
            raise PathError(f"The last element of a path must carry a type: {elements[-1]}")

    @staticmethod
    def root() -> "Path":
        return _ROOT_PATH

    @staticmethod
    def of(*elements: Element) -> "Path":
        if len(elements) == 1 and elements[0].is_root:
            return _ROOT_PATH
        return Path(elements)

    @staticmethod
    def of_type(target_type: Any) -> "Path":
        """A single-element relative path that only names a type."""
        return Path((Element("", target_type),))

    @staticmethod
    def named(*names: str, type: Any = None) -> "Path":
        """A relative path of named elements, the last of which carries ``type``.

        Example:
            >>> str(Path.named("db", "port", type=int))
            'db/port:int'
        """
        if not names:
            return Path.of_type(type)
        elements = [Element(name) for name in names[:-1]]
        elements.append(Element(names[-1], type))
        return Path(tuple(elements))

    @staticmethod
    def absolute(*names: str, type: Any = object) -> "Path":
        """An absolute path: the root followed by :meth:`named` elements."""
        return _ROOT_PATH.plus(Path.named(*names, type=type))

    def is_absolute(self) -> bool:
        return self.elements[0].is_root

    def is_root(self) -> bool:
        return len(self.elements) == 1 and self.elements[0].is_root

    def size(self) -> int:
        return len(self.elements)

    def __len__(self) -> int:
        return len(self.elements)

    def __iter__(self) -> Iterator[Element]:
        return iter(self.elements)

    def __getitem__(self, index: int) -> Element:
        return self.elements[index]

    def get(self, index: int) -> Element:
        return self.elements[index]

    def first(self) -> Element:
        return self.elements[0]

    def last(self) -> Element:
        return self.elements[-1]

    def type(self) -> Any:
        """The target type of the last element (None if it has none)."""
        return self.elements[-1].target_type

    def is_accessor(self, index: int) -> bool:
        return bool(self.elements[index].name)

    def is_type(self, index: int) -> bool:
        return self.elements[index].target_type is not None

    def plus(self, addition: Union[Element, "Path"]) -> "Path":
        """Return a new path with ``addition`` appended."""
        if isinstance(addition, Path):
            return Path(self.elements + addition.elements)
        return Path(self.elements + (addition,))

    def merge(self, element: Element) -> "Path":
        """Append ``element``, dropping the current last element's target type.

        The current last element becomes an intermediate step, so its type
        marker no longer applies. An element that was only a type marker is
        dropped entirely; the root is always kept.
        """
        last = self.elements[-1]
        if last.is_root:
            return Path(self.elements + (element,))
        head = self.elements[:-1]
        if last.name:
            head = head + (last.with_type(None),)
        return Path(head + (element,))

    def with_type(self, target_type: Any) -> "Path":
        """Return a copy whose last element carries ``target_type``."""
        return Path(self.elements[:-1] + (self.elements[-1].with_type(target_type),))

    def index_of(self, sub_path: "Path", predicate: Optional[ElementPredicate] = None) -> int:
        """Return the first index at which ``sub_path`` occurs, or -1.

        Elements are compared with ``predicate(own_element, sub_path_element)``,
        which defaults to equality. An empty sub-path occurs at index 0.
        """
        test = predicate or operator.eq
        sub_elements = _elements_of(sub_path)
        for start in range(len(self.elements) - len(sub_elements) + 1):
            if _matches_at(self.elements, sub_elements, start, test):
                return start
        return -1

    def last_index_of(self, sub_path: "Path", predicate: Optional[ElementPredicate] = None) -> int:
        """Return the last index at which ``sub_path`` occurs, or -1.

        An empty sub-path occurs at ``len(self)``.
        """
        test = predicate or operator.eq
        sub_elements = _elements_of(sub_path)
        for start in range(len(self.elements) - len(sub_elements), -1, -1):
            if _matches_at(self.elements, sub_elements, start, test):
                return start
        return -1

    def starts_with(self, sub_path: "Path", predicate: Optional[ElementPredicate] = None) -> bool:
        return self.index_of(sub_path, predicate) == 0

    def ends_with(self, sub_path: "Path", predicate: Optional[ElementPredicate] = None) -> bool:
        last_index = self.last_index_of(sub_path, predicate)
        return last_index >= 0 and last_index + len(_elements_of(sub_path)) == len(self.elements)

    def __str__(self) -> str:
        if self.is_root():
            return "/"
        return "/".join(str(element) for element in self.elements)


_ROOT_PATH = Path((_ROOT_ELEMENT,))


def _elements_of(sub_path) -> tuple:
    # Paths are never empty, but callers may search for an empty run of elements.
    if isinstance(sub_path, Path):
        return sub_path.elements
    return tuple(sub_path)


def _matches_at(elements: tuple, sub_elements: tuple, start: int, test: ElementPredicate) -> bool:
    return all(
        test(elements[start + offset], sub_element)
        for offset, sub_element in enumerate(sub_elements)
    )
