"""Map a cursor position in source text to the path of the value under it."""
from __future__ import annotations

import logging

import yaml
from yaml.nodes import CollectionNode, MappingNode, Node, SequenceNode

from .errors import ParseError, UnknownFormatError
from .formats.yaml_format import YamlLoader
from .patchers.json_tree import parse_tree, path_at_offset
from .paths import IndexSegment, Path, PathSegment, PropertySegment, path_to_string

logger = logging.getLogger(__name__)


def offset_at(content: str, line: int, column: int) -> int | None:
    """Return the character offset of a 1-based ``(line, column)``.

    Columns past the end of the line are clamped to it.
    """
    lines = content.split("\n")
    if line < 1 or line > len(lines) or column < 1:
        return None
    start = sum(len(text) + 1 for text in lines[: line - 1])
    return start + min(column - 1, len(lines[line - 1]))


def _line_end(content: str, offset: int) -> int:
    nl = content.find("\n", offset)
    return len(content) if nl < 0 else nl


def _line_start(content: str, offset: int) -> int:
    return content.rfind("\n", 0, offset) + 1


def _member_end(content: str, value: Node) -> int:
    if isinstance(value, CollectionNode):
        return value.end_mark.index
    return _line_end(content, value.end_mark.index)


def _members(content: str, node: MappingNode | SequenceNode) -> list[tuple[PathSegment, int, Node]]:
    if isinstance(node, MappingNode):
        return [(PropertySegment(str(key.value)), key.start_mark.index, value) for key, value in node.value]
    block = not node.flow_style
    # block items own their whole line, dash included
    return [
        (IndexSegment(i), _line_start(content, item.start_mark.index) if block else item.start_mark.index, item)
        for i, item in enumerate(node.value)
    ]


def _yaml_path(content: str, node: Node | None, offset: int) -> Path:
    path: list[PathSegment] = []
    while isinstance(node, (MappingNode, SequenceNode)):
        hit = None
        for seg, start, value in _members(content, node):
            if start <= offset:
                hit = seg, value
        if hit is None:
            break
        seg, value = hit
        if offset > _member_end(content, value):
            break
        path.append(seg)
        if not (isinstance(value, CollectionNode) and value.start_mark.index <= offset):
            break
        node = value
    return tuple(path)


def path_at(content: str, offset: int, fmt: str) -> Path:
    if fmt == "yaml":
        return _yaml_path(content, yaml.compose(content, Loader=YamlLoader), offset)
    if fmt in ("json", "jsonc"):
        return path_at_offset(parse_tree(content), offset)
    raise UnknownFormatError(f"Unknown format {fmt!r}")


def get_path_at_position(content: str, line: int, column: int, fmt: str) -> str | None:
    """Return the dotted path under the 1-based ``(line, column)``.

    ``None`` is returned outside of any member and for text that does not
    parse.
    """
    offset = offset_at(content, line, column)
    if offset is None:
        return None
    try:
        path = path_at(content, offset, fmt)
    except (ParseError, yaml.YAMLError) as exc:
        logger.debug("no path at %d:%d: %s", line, column, exc)
        return None
    return path_to_string(path) if path else None


__all__ = ["get_path_at_position", "offset_at", "path_at"]
