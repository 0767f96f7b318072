from __future__ import annotations

import json
from typing import Any

import pyjson5

from ..errors import ParseError
from ..patchers.json_tree import parse_tree
from ..schema import SchemaResolver
from . import register_format
from .base import BaseFormat


def _reject_constant(name: str) -> Any:
    raise ValueError(f"{name} is not valid JSON")


def parse_json(text: str) -> Any:
    """Strict JSON: no comments, no trailing commas, no NaN/Infinity."""
    try:
        return json.loads(text, parse_constant=_reject_constant)
    except ValueError as exc:
        raise ParseError(str(exc)) from exc


def parse_jsonc(text: str) -> Any:
    """JSON with ``//`` and ``/* */`` comments and trailing commas.

    The text is checked against the JSONC grammar first, so JSON5 extras such
    as unquoted keys, single quotes or ``NaN`` raise :class:`ParseError`.
    Falls back to the strict parser when the relaxed decoder rejects the
    text, so the error reported is the plain JSON one.
    """
    parse_tree(text)
    try:
        return pyjson5.decode(text)
    except pyjson5.Json5Exception:
        return parse_json(text)


class _JsonBase(BaseFormat):
    def parse_tolerant(self, text: str) -> Any:
        return parse_jsonc(text)

    def dump(self, value: Any) -> str:
        return json.dumps(value, indent=self.settings.indent, ensure_ascii=False)

    def _apply_patch(
        self, original: str, old: Any, new: Any, resolver: SchemaResolver
    ) -> str:
        from ..patchers.json_patcher import JsonPatcher

        return JsonPatcher(indent=" " * self.settings.indent).patch(original, old, new)


@register_format
class JsonFormat(_JsonBase):
    name = "json"
    suffixes = (".json",)

    def parse(self, text: str) -> Any:
        return parse_json(text)


@register_format
class JsoncFormat(_JsonBase):
    name = "jsonc"
    suffixes = (".jsonc",)

    def parse(self, text: str) -> Any:
        return parse_jsonc(text)
