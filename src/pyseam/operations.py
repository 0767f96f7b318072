"""Copy-on-write operations on document values.

None of the functions here mutate their input.  Every container on the way
from the root to the changed location is shallow-copied; everything else is
shared with the original value.
"""
from __future__ import annotations

import logging
from typing import Any

from .errors import NotAListError
from .paths import IndexSegment, Path, PathSegment, PropertySegment, path_to_string

logger = logging.getLogger(__name__)

_MISSING = object()


def _lookup(value: Any, path: Path) -> Any:
    current = value
    for seg in path:
        if isinstance(seg, PropertySegment):
            if not isinstance(current, dict) or seg.key not in current:
                return _MISSING
            current = current[seg.key]
        else:
            if not isinstance(current, list) or seg.index >= len(current):
                return _MISSING
            current = current[seg.index]
    return current


def _empty_for(seg: PathSegment) -> dict | list:
    return [] if isinstance(seg, IndexSegment) else {}


def get_value_at_path(value: Any, path: Path) -> Any:
    """Return the value at *path* or ``None`` when nothing is there."""
    found = _lookup(value, path)
    return None if found is _MISSING else found


def has_path(value: Any, path: Path) -> bool:
    """Return ``True`` if *path* resolves, even to a falsy value."""
    return _lookup(value, path) is not _MISSING


def set_value_at_path(value: Any, path: Path, new: Any) -> Any:
    """Return a copy of *value* with *new* stored at *path*.

    Missing intermediate containers are created: a dict when the next segment
    is a key, a list when it is an index.  An index may address an existing
    element or the position just past the end (append); anything further out
    is ignored and *value* comes back as it was.
    """
    if not path:
        return value
    head, rest = path[0], path[1:]

    if isinstance(head, PropertySegment):
        if rest:
            child = value.get(head.key) if isinstance(value, dict) else None
            if child is None:
                child = _empty_for(rest[0])
            updated = set_value_at_path(child, rest, new)
            if updated is child:
                # the set was ignored further down
                return value
            new = updated
        clone = dict(value) if isinstance(value, dict) else {}
        clone[head.key] = new
        return clone

    items = list(value) if isinstance(value, list) else []
    if head.index > len(items):
        logger.debug("ignoring set past the end of list at index %d", head.index)
        return value
    if rest:
        child = items[head.index] if head.index < len(items) else None
        if child is None:
            child = _empty_for(rest[0])
        updated = set_value_at_path(child, rest, new)
        if updated is child:
            return value
        new = updated
    if head.index == len(items):
        items.append(new)
    else:
        items[head.index] = new
    return items


def _replace(value: Any, path: Path, new: Any) -> Any:
    return new if not path else set_value_at_path(value, path, new)


def delete_at_path(value: Any, path: Path) -> Any:
    """Return a copy of *value* without the entry at *path*.

    Deleting a list element shifts the following elements down.  If *path*
    does not resolve, *value* itself is returned.
    """
    if not path:
        return value
    parent = _lookup(value, path[:-1])
    last = path[-1]
    if isinstance(last, PropertySegment):
        if not isinstance(parent, dict) or last.key not in parent:
            return value
        clone: dict | list = dict(parent)
        del clone[last.key]
    else:
        if not isinstance(parent, list) or last.index >= len(parent):
            return value
        clone = list(parent)
        del clone[last.index]
    return _replace(value, path[:-1], clone)


def move_list_element(value: Any, path: Path, from_index: int, to_index: int) -> Any:
    """Return a copy of *value* with one element of the list at *path* moved."""
    target = _lookup(value, path)
    if not isinstance(target, list):
        raise NotAListError(f"path {path_to_string(path)!r} does not point to a list")
    items = list(target)
    element = items.pop(from_index)
    items.insert(to_index, element)
    return _replace(value, path, items)


__all__ = [
    "get_value_at_path",
    "has_path",
    "set_value_at_path",
    "delete_at_path",
    "move_list_element",
]
