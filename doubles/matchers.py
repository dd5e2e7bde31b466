from __future__ import annotations

from typing import Any, Iterable, Mapping


def _values_equal(a: Any, b: Any) -> bool:
    if isinstance(a, Mapping) and isinstance(b, Mapping):
        return mappings_equal(a, b)
    if isinstance(a, (list, tuple)) and isinstance(b, (list, tuple)):
        return len(a) == len(b) and all(_values_equal(x, y) for x, y in zip(a, b))
    # True == 1 in Python; a stored flag and a stored count are not the same value
    if isinstance(a, bool) or isinstance(b, bool):
        return type(a) is type(b) and a == b
    return a == b


def mappings_equal(a: Mapping[str, Any], b: Mapping[str, Any]) -> bool:
    """Same keys, structurally equal values, in any key order."""
    if a.keys() != b.keys():
        return False
    return all(_values_equal(a[k], b[k]) for k in a)


def contains_mapping(items: Iterable[Any], expected: Mapping[str, Any]) -> bool:
    """True if any element of `items` is a mapping structurally equal to `expected`."""
    return any(isinstance(item, Mapping) and mappings_equal(item, expected) for item in items)


class ContainsMapping:
    """
    Matcher for "this sequence holds a mapping equal to X".

        assert ContainsMapping({"name": "Bob"}) == service_result
    """

    def __init__(self, expected: Mapping[str, Any]) -> None:
        self.expected = dict(expected)

    def matches(self, items: Iterable[Any]) -> bool:
        return contains_mapping(items, self.expected)

    def __eq__(self, other: object) -> bool:
        if isinstance(other, (str, bytes, Mapping)) or not isinstance(other, Iterable):
            return False
        return self.matches(other)

    __hash__ = None  # type: ignore[assignment]

    def __repr__(self) -> str:
        return f"<sequence containing {self.expected!r}>"
