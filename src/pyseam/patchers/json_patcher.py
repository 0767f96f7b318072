"""Comment-preserving updates for JSON and JSONC text.

The patcher compares the old and new values, turns the differences into a
list of :class:`JsonEdit` objects and splices each one into the text.  Every
edit is located by re-parsing the text as it stands after the previous edit,
so no offset is ever reused after the text has moved.
"""
from __future__ import annotations

import json
import logging
import re
from dataclasses import dataclass
from typing import Any

from ..errors import PatchError
from ..paths import ROOT, IndexSegment, Path, PropertySegment, path_to_string
from ..values import ValueKind, kind_of, values_equal
from .json_tree import Node, find_node, parse_tree

logger = logging.getLogger(__name__)

_INDENT_RX = re.compile(r"^([ \t]+)\S", re.MULTILINE)


class _Remove:
    def __repr__(self) -> str:
        return "REMOVE"


REMOVE: Any = _Remove()


@dataclass(frozen=True)
class JsonEdit:
    path: Path
    value: Any

    @property
    def is_removal(self) -> bool:
        return self.value is REMOVE


# ---------------------------------------------------------------------------
# Structural diff
# ---------------------------------------------------------------------------


def _diff_lists(path: Path, old: list, new: list, edits: list[JsonEdit]) -> None:
    if len(old) != len(new):
        edits.append(JsonEdit(path, new))
        return
    for i, (before, after) in enumerate(zip(old, new)):
        _diff(path + (IndexSegment(i),), before, after, edits)


def _diff_maps(path: Path, old: dict, new: dict, edits: list[JsonEdit]) -> None:
    for key in old:
        if key not in new:
            edits.append(JsonEdit(path + (PropertySegment(key),), REMOVE))
    for key, value in new.items():
        child = path + (PropertySegment(key),)
        if key in old:
            _diff(child, old[key], value, edits)
        else:
            edits.append(JsonEdit(child, value))


_CONTAINER_DIFFS = {
    ValueKind.LIST: _diff_lists,
    ValueKind.MAP: _diff_maps,
}


def _diff(path: Path, old: Any, new: Any, edits: list[JsonEdit]) -> None:
    if values_equal(old, new):
        return
    kind = kind_of(new)
    if kind is not kind_of(old) or not kind.is_container:
        edits.append(JsonEdit(path, new))
        return
    _CONTAINER_DIFFS[kind](path, old, new, edits)


def compute_edits(old: Any, new: Any) -> list[JsonEdit]:
    """Return the edits that turn *old* into *new*, depth first.

    Lists are only compared element by element when their lengths match;
    otherwise the whole list is replaced.
    """
    edits: list[JsonEdit] = []
    _diff(ROOT, old, new, edits)
    return edits


# ---------------------------------------------------------------------------
# Text helpers
# ---------------------------------------------------------------------------


def detect_indent(text: str, default: str = "  ") -> str:
    match = _INDENT_RX.search(text)
    if match is None:
        return default
    found = match.group(1)
    return "\t" if found.startswith("\t") else found


def _line_start(text: str, offset: int) -> int:
    return text.rfind("\n", 0, offset) + 1


def _line_indent(text: str, offset: int) -> str:
    start = _line_start(text, offset)
    end = start
    while end < len(text) and text[end] in " \t":
        end += 1
    return text[start:end]


def _line_tail(text: str, pos: int) -> int | None:
    """Return where the line ends if only blanks and comments follow *pos*."""
    i = pos
    while True:
        while i < len(text) and text[i] in " \t":
            i += 1
        if text.startswith("//", i):
            nl = text.find("\n", i)
            if nl < 0:
                return len(text)
            return nl - 1 if text[nl - 1] == "\r" else nl
        if text.startswith("/*", i):
            close = text.find("*/", i + 2)
            if close < 0 or "\n" in text[i:close]:
                return None
            i = close + 2
            continue
        break
    if i == len(text) or text.startswith(("\n", "\r\n"), i):
        return i
    return None


def _after_newline(text: str, eol: int) -> int:
    if text.startswith("\r\n", eol):
        return eol + 2
    if text.startswith("\n", eol):
        return eol + 1
    return eol


def _splice(text: str, start: int, end: int, content: str) -> str:
    return text[:start] + content + text[end:]


def _is_multiline(text: str, node: Node) -> bool:
    return "\n" in text[node.offset : node.end]


# ---------------------------------------------------------------------------
# Patcher
# ---------------------------------------------------------------------------


class JsonPatcher:
    """Apply structural differences to JSON/JSONC source text."""

    def __init__(self, indent: str = "  ") -> None:
        self.default_indent = indent

    def patch(self, original: str, old: Any, new: Any) -> str:
        edits = compute_edits(old, new)
        unit = detect_indent(original, self.default_indent)
        text = original
        for edit in edits:
            logger.debug("json edit %s -> %r", path_to_string(edit.path) or "<root>", edit.value)
            text = self.apply_edit(text, edit, unit)
        return text

    def render(self, value: Any, indent: str, unit: str, multiline: bool) -> str:
        if not multiline or not isinstance(value, dict | list) or not value:
            return json.dumps(value, ensure_ascii=False)
        rendered = json.dumps(value, indent=unit, ensure_ascii=False)
        return rendered.replace("\n", "\n" + indent)

    def apply_edit(self, text: str, edit: JsonEdit, unit: str = "  ") -> str:
        root = parse_tree(text)
        if not edit.path:
            if edit.is_removal:
                raise PatchError("cannot remove the document root")
            content = self.render(edit.value, _line_indent(text, root.offset), unit, _is_multiline(text, root))
            return _splice(text, root.offset, root.end, content)

        parent = find_node(root, edit.path[:-1])
        last = edit.path[-1]
        where = path_to_string(edit.path)
        if parent is None:
            raise PatchError(f"no container for {where!r}")

        if isinstance(last, PropertySegment):
            if parent.type != "object":
                raise PatchError(f"{where!r} is not inside an object")
            prop = parent.find_property(last.key)
            if edit.is_removal:
                return text if prop is None else self._remove_property(text, parent, prop)
            if prop is None:
                return self._insert_property(text, parent, last.key, edit.value, unit)
            return self._replace_value(text, parent, prop.children[1], edit.value, unit)

        if parent.type != "array" or last.index >= len(parent.children):
            raise PatchError(f"no list element at {where!r}")
        if edit.is_removal:
            raise PatchError(f"list elements are replaced, not removed ({where!r})")
        return self._replace_value(text, parent, parent.children[last.index], edit.value, unit)

    def _replace_value(self, text: str, container: Node, node: Node, value: Any, unit: str) -> str:
        # an existing container keeps its own layout, scalars follow their parent
        styled = node if node.type in ("object", "array") and node.children else container
        content = self.render(value, _line_indent(text, node.offset), unit, _is_multiline(text, styled))
        return _splice(text, node.offset, node.end, content)

    def _remove_property(self, text: str, obj: Node, prop: Node) -> str:
        members = obj.children
        i = members.index(prop)
        prev = members[i - 1] if i > 0 else None
        nxt = members[i + 1] if i + 1 < len(members) else None
        end = prop.comma_after + 1 if prop.comma_after is not None else prop.end

        if prev is None and nxt is None:
            inner_start, inner_end = obj.offset + 1, obj.end - 1
            rest = text[inner_start : prop.offset] + text[end:inner_end]
            if not rest.strip():
                return _splice(text, inner_start, inner_end, "")

        start = _line_start(text, prop.offset)
        own_line = not text[start : prop.offset].strip() and (prev is None or prev.end < start)
        tail = _line_tail(text, end)
        if own_line and tail is not None:
            text = _splice(text, start, _after_newline(text, tail), "")
            if prop.comma_after is None and prev is not None and prev.comma_after is not None:
                text = _splice(text, prev.comma_after, prev.comma_after + 1, "")
            return text
        if prev is not None:
            return _splice(text, prev.end, prop.end, "")
        if nxt is not None:
            return _splice(text, prop.offset, nxt.offset, "")
        return _splice(text, prop.offset, end, "")

    def _insert_property(self, text: str, obj: Node, key: str, value: Any, unit: str) -> str:
        member = json.dumps(key, ensure_ascii=False) + ": "
        multiline = _is_multiline(text, obj)

        if not obj.children:
            at = obj.offset + 1
            if multiline:
                indent = _line_indent(text, obj.offset) + unit
                return _splice(text, at, at, f"\n{indent}{member}{self.render(value, indent, unit, True)}")
            return _splice(text, at, at, member + self.render(value, "", unit, False))

        last = obj.children[-1]
        if not multiline:
            rendered = member + self.render(value, "", unit, False)
            if last.comma_after is not None:
                at = last.comma_after + 1
                return _splice(text, at, at, f" {rendered},")
            return _splice(text, last.end, last.end, f", {rendered}")

        indent = _line_indent(text, last.offset)
        rendered = member + self.render(value, indent, unit, True)
        if last.comma_after is not None:
            anchor = last.comma_after + 1
            tail = _line_tail(text, anchor)
            at = anchor if tail is None else tail
            return _splice(text, at, at, f"\n{indent}{rendered},")
        tail = _line_tail(text, last.end)
        if tail is None:
            return _splice(text, last.end, last.end, f",\n{indent}{rendered}")
        text = _splice(text, tail, tail, f"\n{indent}{rendered}")
        return _splice(text, last.end, last.end, ",")


__all__ = ["REMOVE", "JsonEdit", "JsonPatcher", "compute_edits", "detect_indent"]
