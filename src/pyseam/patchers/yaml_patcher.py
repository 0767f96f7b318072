"""Comment-preserving updates for block-style YAML.

YAML is patched line by line.  A :class:`LineIndex` records, for every line,
its indentation, whether it is blank or a comment, and the mapping key it
introduces.  Indentation is the only structural signal: a mapping level is
the run of lines indented at least as deep as its first key, and an entry's
block is its key line plus everything indented deeper below it.

Only what changed is rewritten.  Scalars are replaced in place, keeping the
key token and any trailing ``# comment``; lists and reshaped values are
re-dumped as a whole block; removed keys lose their line and block; new keys
are inserted next to their schema siblings or at the end of their level.
"""
from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

import yaml

from ..errors import PatchError
from ..formats.scalars import format_key, format_scalar
from ..formats.yaml_format import YamlLoader
from ..paths import ROOT, Path, PropertySegment, path_to_string
from ..schema import SchemaResolver
from ..values import ValueKind, kind_of, values_equal

if TYPE_CHECKING:
    from ..formats.yaml_format import YamlFormat

logger = logging.getLogger(__name__)

_KEY_RX = re.compile(
    r"""(?P<key>"(?:[^"\\]|\\.)*"|'(?:[^']|'')*'|[^\s#'"{\[][^#]*?)[ \t]*:(?=[ \t]|$)"""
)
# Value tokens that start a construct spanning more than the token itself.
_COMPLEX_STARTS = ("|", ">", "&", "*", "!", "{", "[")


def _unquote_key(token: str) -> str:
    if token[0] in "\"'":
        return str(yaml.load(token, Loader=YamlLoader))
    return token


def _split_value(text: str, start: int) -> tuple[int, int]:
    """Return the ``(start, end)`` of the value token beginning at *start*.

    The token ends before an inline comment and the blanks preceding it.
    """
    i = start
    while i < len(text) and text[i] in " \t":
        i += 1
    value_start = i
    if i < len(text) and text[i] in "\"'":
        quote = text[i]
        i += 1
        while i < len(text):
            if quote == '"' and text[i] == "\\":
                i += 2
                continue
            if text[i] == quote:
                if quote == "'" and text[i + 1 : i + 2] == "'":
                    i += 2
                    continue
                i += 1
                break
            i += 1
    while i < len(text):
        if text[i] == "#" and (i == value_start or text[i - 1] in " \t"):
            break
        i += 1
    end = len(text[:i].rstrip(" \t"))
    if end <= value_start:
        return start, start
    return value_start, end


@dataclass
class Line:
    text: str
    indent: int
    blank: bool
    comment: bool
    key: str | None = None
    # offset just past the ':' that ends the key
    key_end: int = 0

    @classmethod
    def parse(cls, text: str) -> Line:
        stripped = text.lstrip(" ")
        indent = len(text) - len(stripped)
        if not stripped.strip():
            return cls(text, indent, True, False)
        if stripped.startswith("#"):
            return cls(text, indent, False, True)
        line = cls(text, indent, False, False)
        if stripped.startswith("- ") or stripped.rstrip() == "-":
            return line
        match = _KEY_RX.match(text, indent)
        if match is not None:
            line.key = _unquote_key(match.group("key"))
            line.key_end = match.end()
        return line

    @property
    def content(self) -> bool:
        return not (self.blank or self.comment)

    @property
    def seq_item(self) -> bool:
        stripped = self.text.strip()
        return stripped == "-" or stripped.startswith("- ")

    def value_span(self) -> tuple[int, int]:
        return _split_value(self.text, self.key_end)

    def inline_value(self) -> str:
        start, end = self.value_span()
        return self.text[start:end]

    def inline_comment(self) -> str:
        """Return the blanks and ``# comment`` after the value, if any."""
        _, end = self.value_span()
        tail = self.text[end:]
        return tail if tail.strip().startswith("#") else ""

    def with_value(self, token: str) -> str:
        start, end = self.value_span()
        if start == end:
            tail = self.text[self.key_end :]
            return self.text[: self.key_end] + " " + token + (tail if tail.strip() else "")
        return self.text[:start] + token + self.text[end:]


@dataclass
class Scope:
    """Keys of one mapping level and the line where the level ends."""

    keys: dict[str, int]
    end: int


class LineIndex:
    """Mutable list of parsed lines."""

    def __init__(self, text: str) -> None:
        self.newline = "\r\n" if "\r\n" in text else "\n"
        self.lines = [Line.parse(t) for t in text.split(self.newline)]

    def __len__(self) -> int:
        return len(self.lines)

    def __getitem__(self, i: int) -> Line:
        return self.lines[i]

    def text(self) -> str:
        return self.newline.join(line.text for line in self.lines)

    def first_content(self, start: int = 0) -> int | None:
        for i in range(start, len(self.lines)):
            if self.lines[i].content:
                return i
        return None

    def scope(self, start: int, indent: int) -> Scope:
        keys: dict[str, int] = {}
        i = start
        while i < len(self.lines):
            line = self.lines[i]
            if line.content:
                if line.indent < indent:
                    break
                if line.indent == indent and line.key is not None:
                    keys[line.key] = i
            i += 1
        return Scope(keys, i)

    def block_end(self, i: int) -> int:
        """Return the index after the last content line of entry *i*.

        Trailing blank and comment lines are left to whatever follows.
        """
        head = self.lines[i]
        end = i + 1
        for j in range(i + 1, len(self.lines)):
            line = self.lines[j]
            if not line.content:
                continue
            if line.indent > head.indent or (line.indent == head.indent and line.seq_item):
                end = j + 1
                continue
            break
        return end

    def child_indent(self, i: int, end: int) -> int | None:
        j = self.first_content(i + 1)
        if j is None or j >= end or self.lines[j].indent <= self.lines[i].indent:
            return None
        return self.lines[j].indent

    def scope_tail(self, scope: Scope, start: int) -> int:
        """Return the insertion point at the end of a level.

        New entries land right after the last content line, ahead of any
        trailing run of blank lines and comments.  A level without content
        keeps its leading comments above the new entry.
        """
        pos = scope.end
        while pos > start and not self.lines[pos - 1].content:
            pos -= 1
        if pos > start:
            return pos
        pos = scope.end
        while pos > start and self.lines[pos - 1].blank:
            pos -= 1
        return pos

    def replace(self, start: int, end: int, texts: list[str]) -> None:
        self.lines[start:end] = [Line.parse(t) for t in texts]


class YamlPatcher:
    def __init__(self, fmt: YamlFormat, resolver: SchemaResolver | None = None) -> None:
        self.fmt = fmt
        self.resolver = resolver or SchemaResolver()
        self.unit = fmt.settings.indent

    def patch(self, original: str, old: Any, new: Any) -> str:
        index = LineIndex(original)
        root = index.first_content()
        if old is None and root is None:
            old = {}
        if not isinstance(old, dict) or not isinstance(new, dict):
            raise PatchError("only mapping documents can be patched in place")
        indent = index[root].indent if root is not None else 0
        self._patch_mapping(index, 0, indent, old, new, ROOT)
        return index.text()

    def render_entry(self, key: str, value: Any, indent: int) -> list[str]:
        pad = " " * indent
        if not kind_of(value).is_container or not value:
            return [f"{pad}{format_key(key)}: {format_scalar(value)}"]
        dumped = self.fmt.dump({key: value}).rstrip("\n")
        return [pad + text if text else text for text in dumped.split("\n")]

    def _find(self, index: LineIndex, start: int, indent: int, key: str, path: Path) -> int:
        line = index.scope(start, indent).keys.get(key)
        if line is None:
            where = path_to_string(path + (PropertySegment(key),))
            raise PatchError(f"key {where!r} not found in the text")
        return line

    def _patch_mapping(
        self, index: LineIndex, start: int, indent: int, old: dict, new: dict, path: Path
    ) -> None:
        for key in old:
            if key not in new:
                line = self._find(index, start, indent, key, path)
                logger.debug("yaml remove %s", path_to_string(path + (PropertySegment(key),)))
                index.replace(line, index.block_end(line), [])

        order = self.resolver.property_order_at(path)
        for key, value in new.items():
            if key in old:
                if values_equal(old[key], value):
                    continue
                line = self._find(index, start, indent, key, path)
                self._update_entry(index, line, key, old[key], value, path + (PropertySegment(key),))
            else:
                at = self._insertion_point(index, start, indent, key, order)
                logger.debug("yaml insert %s at line %d", path_to_string(path + (PropertySegment(key),)), at)
                index.replace(at, at, self.render_entry(key, value, indent))

    def _update_entry(
        self, index: LineIndex, i: int, key: str, old: Any, new: Any, path: Path
    ) -> None:
        line = index[i]
        end = index.block_end(i)
        old_kind, new_kind = kind_of(old), kind_of(new)
        inline = line.inline_value()

        if old_kind is ValueKind.MAP and new_kind is ValueKind.MAP and old and new and not inline:
            child = index.child_indent(i, end)
            self._patch_mapping(index, i + 1, child if child is not None else line.indent + self.unit, old, new, path)
            return

        if (
            not old_kind.is_container
            and not new_kind.is_container
            and end == i + 1
            and not inline.startswith(_COMPLEX_STARTS)
        ):
            index.replace(i, i + 1, [line.with_value(format_scalar(new))])
            return

        logger.debug("yaml replace block %s (lines %d-%d)", path_to_string(path), i, end)
        rendered = self.render_entry(key, new, line.indent)
        comment = line.inline_comment()
        if comment:
            rendered[0] += comment
        index.replace(i, end, rendered)

    def _insertion_point(
        self, index: LineIndex, start: int, indent: int, key: str, order: list[str]
    ) -> int:
        scope = index.scope(start, indent)
        if key in order:
            pos = order.index(key)
            for sibling in reversed(order[:pos]):
                if sibling in scope.keys:
                    return index.block_end(scope.keys[sibling])
            for sibling in order[pos + 1 :]:
                if sibling in scope.keys:
                    return scope.keys[sibling]
        return index.scope_tail(scope, start)


__all__ = ["Line", "LineIndex", "Scope", "YamlPatcher"]
