"""Position-tracking parser for JSON with comments.

:func:`parse_tree` turns JSONC text into a tree of :class:`Node` objects that
remember where each value, property and separating comma sits in the source.
The patcher uses these offsets to splice edits into the original text.
"""
from __future__ import annotations

import json
import re
from dataclasses import dataclass, field
from typing import Any

from ..errors import ParseError
from ..paths import IndexSegment, Path, PropertySegment

_NUMBER_RX = re.compile(r"-?(?:0|[1-9]\d*)(?:\.\d+)?(?:[eE][+-]?\d+)?")
_LITERALS = {"true": ("boolean", True), "false": ("boolean", False), "null": ("null", None)}


@dataclass(eq=False)
class Node:
    type: str
    offset: int
    length: int = 0
    value: Any = None
    parent: Node | None = field(default=None, repr=False)
    children: list[Node] = field(default_factory=list)
    # property nodes: offset of ':'; members: offset of the ',' that follows
    colon_offset: int | None = None
    comma_after: int | None = None

    @property
    def end(self) -> int:
        return self.offset + self.length

    @property
    def key(self) -> str | None:
        if self.type == "property":
            return self.children[0].value
        return None

    def find_property(self, key: str) -> Node | None:
        """Return the last property named *key*; later duplicates win."""
        found = None
        for child in self.children:
            if child.key == key:
                found = child
        return found

    def contains(self, offset: int) -> bool:
        return self.offset <= offset <= self.end


def _position(text: str, offset: int) -> str:
    line = text.count("\n", 0, offset) + 1
    col = offset - (text.rfind("\n", 0, offset) + 1) + 1
    return f"line {line} column {col}"


class _Parser:
    def __init__(self, text: str) -> None:
        self.text = text
        self.pos = 0

    def error(self, message: str) -> ParseError:
        return ParseError(f"{message} at {_position(self.text, self.pos)}")

    def skip(self) -> None:
        text = self.text
        while self.pos < len(text):
            ch = text[self.pos]
            if ch in " \t\r\n\ufeff":
                self.pos += 1
            elif text.startswith("//", self.pos):
                nl = text.find("\n", self.pos)
                self.pos = len(text) if nl < 0 else nl + 1
            elif text.startswith("/*", self.pos):
                close = text.find("*/", self.pos + 2)
                if close < 0:
                    raise self.error("Unterminated block comment")
                self.pos = close + 2
            else:
                return

    def peek(self) -> str:
        return self.text[self.pos] if self.pos < len(self.text) else ""

    def parse_value(self, parent: Node | None) -> Node:
        self.skip()
        ch = self.peek()
        if ch == "{":
            return self.parse_object(parent)
        if ch == "[":
            return self.parse_array(parent)
        if ch == '"':
            return self.parse_string(parent)
        match = _NUMBER_RX.match(self.text, self.pos)
        if match:
            start, raw = self.pos, match.group(0)
            self.pos = match.end()
            number = float(raw) if any(c in raw for c in ".eE") else int(raw)
            return Node("number", start, len(raw), number, parent)
        for word, (kind, literal) in _LITERALS.items():
            if self.text.startswith(word, self.pos):
                start = self.pos
                self.pos += len(word)
                return Node(kind, start, len(word), literal, parent)
        raise self.error("Value expected" if ch else "Unexpected end of input")

    def parse_string(self, parent: Node | None) -> Node:
        start = self.pos
        i = start + 1
        text = self.text
        while i < len(text):
            ch = text[i]
            if ch == "\\":
                i += 2
                continue
            if ch == '"':
                raw = text[start : i + 1]
                try:
                    value = json.loads(raw)
                except ValueError as exc:
                    raise self.error(f"Invalid string ({exc})") from exc
                self.pos = i + 1
                return Node("string", start, len(raw), value, parent)
            if ch == "\n":
                break
            i += 1
        raise self.error("Unterminated string")

    def parse_object(self, parent: Node | None) -> Node:
        node = Node("object", self.pos, parent=parent)
        self.pos += 1
        while True:
            self.skip()
            if self.peek() == "}":
                break
            if self.peek() != '"':
                raise self.error("Property name expected")
            prop = Node("property", self.pos, parent=node)
            key = self.parse_string(prop)
            self.skip()
            if self.peek() != ":":
                raise self.error("Colon expected")
            prop.colon_offset = self.pos
            self.pos += 1
            value = self.parse_value(prop)
            prop.children = [key, value]
            prop.length = value.end - prop.offset
            node.children.append(prop)
            self.skip()
            if self.peek() == ",":
                prop.comma_after = self.pos
                self.pos += 1
                continue
            if self.peek() != "}":
                raise self.error("Comma or closing brace expected")
            break
        self.pos += 1
        node.length = self.pos - node.offset
        return node

    def parse_array(self, parent: Node | None) -> Node:
        node = Node("array", self.pos, parent=parent)
        self.pos += 1
        while True:
            self.skip()
            if self.peek() == "]":
                break
            item = self.parse_value(node)
            node.children.append(item)
            self.skip()
            if self.peek() == ",":
                item.comma_after = self.pos
                self.pos += 1
                continue
            if self.peek() != "]":
                raise self.error("Comma or closing bracket expected")
            break
        self.pos += 1
        node.length = self.pos - node.offset
        return node


def parse_tree(text: str) -> Node:
    """Parse JSONC *text* into a :class:`Node` tree.

    Comments and trailing commas are accepted.  ``ParseError`` is raised on
    anything else that is not JSON.
    """
    parser = _Parser(text)
    root = parser.parse_value(None)
    parser.skip()
    if parser.pos != len(text):
        raise parser.error("End of file expected")
    return root


def find_node(root: Node, path: Path) -> Node | None:
    """Return the value node at *path*, or ``None`` when it does not exist."""
    node: Node | None = root
    for seg in path:
        if node is None:
            return None
        if isinstance(seg, PropertySegment):
            if node.type != "object":
                return None
            prop = node.find_property(seg.key)
            node = prop.children[1] if prop is not None else None
        else:
            if node.type != "array" or seg.index >= len(node.children):
                return None
            node = node.children[seg.index]
    return node


def path_at_offset(root: Node, offset: int) -> Path:
    """Return the path of the innermost member whose span covers *offset*."""
    path: list[PropertySegment | IndexSegment] = []
    node = root
    while node.type in ("object", "array"):
        for i, child in enumerate(node.children):
            if not child.contains(offset):
                continue
            if node.type == "object":
                path.append(PropertySegment(child.key))
                value = child.children[1]
                if not (value.contains(offset) and value.type in ("object", "array")):
                    return tuple(path)
                node = value
            else:
                path.append(IndexSegment(i))
                if child.type not in ("object", "array"):
                    return tuple(path)
                node = child
            break
        else:
            return tuple(path)
    return tuple(path)


__all__ = ["Node", "parse_tree", "find_node", "path_at_offset"]
