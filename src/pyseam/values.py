"""Tagged view over the plain Python values that make up a document.

Documents are trees of ``None``, ``bool``, ``int``/``float``, ``str``,
``list`` and ``dict``.  :func:`kind_of` maps each node onto a
:class:`ValueKind` so that code walking two trees can dispatch on the kind
instead of sniffing types inline.
"""
from __future__ import annotations

import math
from enum import Enum
from typing import Any, Union

Value = Union[None, bool, int, float, str, list, dict]


class ValueKind(Enum):
    NULL = "null"
    BOOLEAN = "boolean"
    NUMBER = "number"
    STRING = "string"
    LIST = "list"
    MAP = "map"

    @property
    def is_container(self) -> bool:
        return self in (ValueKind.LIST, ValueKind.MAP)


def kind_of(value: Any) -> ValueKind:
    """Return the :class:`ValueKind` of *value*.

    ``bool`` is checked before numbers because it subclasses ``int``.
    ``TypeError`` is raised for objects that cannot appear in a document.
    """
    if value is None:
        return ValueKind.NULL
    if isinstance(value, bool):
        return ValueKind.BOOLEAN
    if isinstance(value, int | float):
        return ValueKind.NUMBER
    if isinstance(value, str):
        return ValueKind.STRING
    if isinstance(value, list | tuple):
        return ValueKind.LIST
    if isinstance(value, dict):
        return ValueKind.MAP
    raise TypeError(f"unsupported document value: {type(value).__name__}")


def values_equal(left: Any, right: Any) -> bool:
    """Deep equality that keeps kinds apart.

    Unlike ``==`` this treats ``True`` and ``1`` as different values.  Numbers
    compare numerically, NaN equals NaN and maps ignore key order.
    """
    kind = kind_of(left)
    if kind is not kind_of(right):
        return False
    if kind is ValueKind.LIST:
        if len(left) != len(right):
            return False
        return all(values_equal(a, b) for a, b in zip(left, right))
    if kind is ValueKind.MAP:
        if left.keys() != right.keys():
            return False
        return all(values_equal(v, right[k]) for k, v in left.items())
    if kind is ValueKind.NUMBER and isinstance(left, float) and isinstance(right, float):
        if math.isnan(left) and math.isnan(right):
            return True
    return left == right


__all__ = ["Value", "ValueKind", "kind_of", "values_equal"]
