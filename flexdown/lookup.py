"""Name lookup helpers shared by the evaluator.

A lookup either finds a value (which may itself be ``None`` or ``UNDEFINED``)
or finds nothing; ``Found`` and ``NOT_FOUND`` keep those apart.
"""

import re
from collections.abc import Mapping
from typing import Any, Callable, Dict, List, NamedTuple, Optional, Union

from .values import IDENT, UNDEFINED

PATH_SEGMENT = re.compile(rf"\.({IDENT})|\[([0-9]+)\]")


class Found(NamedTuple):
    value: Any


class _NotFound:
    def __bool__(self):
        return False

    def __repr__(self):
        return "NOT_FOUND"


NOT_FOUND = _NotFound()

LookupResult = Union[Found, _NotFound]


def lookup(mapping: Any, key: Any) -> LookupResult:
    """Look ``key`` up in ``mapping`` without conflating missing and falsy values."""
    if isinstance(mapping, Mapping) and key in mapping:
        return Found(mapping[key])
    return NOT_FOUND


class ScopeStack:
    """Loop scopes, innermost first."""

    def __init__(self, scopes: Optional[List[Dict[str, Any]]] = None):
        self.scopes: List[Dict[str, Any]] = list(scopes or [])

    def push(self, scope: Dict[str, Any]) -> None:
        self.scopes.insert(0, scope)

    def pop(self) -> Dict[str, Any]:
        return self.scopes.pop(0)

    def lookup(self, key: str) -> LookupResult:
        for scope in self.scopes:
            result = lookup(scope, key)
            if result is not NOT_FOUND:
                return result
        return NOT_FOUND

    def __len__(self):
        return len(self.scopes)


def _step(value: Any, segment: Union[str, int]) -> Any:
    if isinstance(segment, int):
        if isinstance(value, (list, tuple, str)):
            return value[segment] if segment < len(value) else UNDEFINED
        if isinstance(value, Mapping):
            result = lookup(value, segment)
            if result is NOT_FOUND:
                result = lookup(value, str(segment))
            return result.value if result is not NOT_FOUND else UNDEFINED
        return UNDEFINED

    if isinstance(value, Mapping):
        result = lookup(value, segment)
        return result.value if result is not NOT_FOUND else UNDEFINED

    # attributes of plain objects, never private ones
    if segment.startswith("_"):
        return UNDEFINED
    return getattr(value, segment, UNDEFINED)


def resolve_path(value: Any, path: Optional[str], on_missing: Optional[Callable[[str, Any], None]] = None) -> Any:
    """Walk ``.name`` / ``[index]`` segments of ``path`` starting at ``value``.

    Missing keys and out of range indexes give ``UNDEFINED``. Reaching
    ``UNDEFINED`` or ``None`` before the path is exhausted stops the walk and
    returns that value; ``on_missing(segment, parent)`` is told about it.

    Example:
        >>> resolve_path({"users": [{"name": "Ann"}]}, "users[0].name")
        'Ann'
    """
    if not path:
        return value

    if not path.startswith((".", "[")):
        path = "." + path

    for match in PATH_SEGMENT.finditer(path):
        name, index = match.groups()
        segment = name if name is not None else int(index)

        if value is UNDEFINED or value is None:
            if on_missing is not None:
                on_missing(match.group(0).lstrip("."), value)
            return value

        value = _step(value, segment)

    return value
