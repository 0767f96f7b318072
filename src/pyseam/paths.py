from __future__ import annotations

import re
from collections.abc import Iterable
from dataclasses import dataclass


@dataclass(frozen=True)
class PropertySegment:
    """Access to a mapping key."""

    key: str

    def __str__(self) -> str:
        return self.key


@dataclass(frozen=True)
class IndexSegment:
    """Access to a list element."""

    index: int

    def __post_init__(self) -> None:
        if isinstance(self.index, bool) or not isinstance(self.index, int):
            raise TypeError(f"list index must be an int, got {self.index!r}")
        if self.index < 0:
            raise ValueError(f"list index must be non-negative, got {self.index}")

    def __str__(self) -> str:
        return f"[{self.index}]"


PathSegment = PropertySegment | IndexSegment
Path = tuple[PathSegment, ...]

ROOT: Path = ()

_PART_RX = re.compile(r"[^.\[\]]+|\[\d+\]")


def prop(key: str) -> PropertySegment:
    return PropertySegment(key)


def index(i: int) -> IndexSegment:
    return IndexSegment(i)


def make_path(segments: Iterable[PathSegment | str | int]) -> Path:
    """Build a :data:`Path` from segments, bare ``str`` keys and ``int`` indexes."""
    out: list[PathSegment] = []
    for seg in segments:
        if isinstance(seg, PropertySegment | IndexSegment):
            out.append(seg)
        elif isinstance(seg, str):
            out.append(PropertySegment(seg))
        else:
            out.append(IndexSegment(seg))
    return tuple(out)


def parse_path(raw: str | Path) -> Path:
    """Parse a dotted path such as ``user.addresses[0].street``.

    Tuples are returned unchanged so callers may pass either form.  The empty
    string is the root path.
    """
    if isinstance(raw, tuple):
        return raw
    if not raw:
        return ROOT
    segments: list[PathSegment] = []
    for part in _PART_RX.findall(raw):
        if part.startswith("[") and part.endswith("]"):
            segments.append(IndexSegment(int(part[1:-1])))
        else:
            segments.append(PropertySegment(part))
    return tuple(segments)


def path_to_string(path: Path) -> str:
    out = ""
    for seg in path:
        if isinstance(seg, IndexSegment):
            out += str(seg)
        else:
            out += f".{seg.key}" if out else seg.key
    return out


def parent_path(path: Path) -> Path:
    return path[:-1]


def ancestors(path: Path) -> list[Path]:
    """Return every prefix of *path*, from the root up to *path* itself."""
    return [path[:i] for i in range(len(path) + 1)]


def is_ancestor(ancestor: Path, descendant: Path) -> bool:
    """Return ``True`` if *ancestor* is a strict prefix of *descendant*."""
    if len(ancestor) >= len(descendant):
        return False
    return descendant[: len(ancestor)] == ancestor


def paths_equal(left: Path, right: Path) -> bool:
    return tuple(left) == tuple(right)


__all__ = [
    "PropertySegment",
    "IndexSegment",
    "PathSegment",
    "Path",
    "ROOT",
    "prop",
    "index",
    "make_path",
    "parse_path",
    "path_to_string",
    "parent_path",
    "ancestors",
    "is_ancestor",
    "paths_equal",
]
