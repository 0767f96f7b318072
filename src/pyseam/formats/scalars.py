"""Single-line rendering of scalar values for in-place text edits."""
from __future__ import annotations

import json
import math
import re
from typing import Any

import yaml

from ..values import ValueKind, kind_of
from .yaml_format import YamlLoader

_SPECIAL_RX = re.compile(r"[:#\n\r\t]")


def _reads_back(text: str) -> bool:
    try:
        return yaml.load(text, Loader=YamlLoader) == text
    except yaml.YAMLError:
        return False


def _plain_safe(text: str) -> bool:
    if not text or text != text.strip():
        return False
    if _SPECIAL_RX.search(text):
        return False
    return _reads_back(text)


def quote(text: str) -> str:
    """Double-quote *text*; JSON escapes are valid YAML escapes."""
    return json.dumps(text, ensure_ascii=False)


def format_number(value: int | float) -> str:
    if isinstance(value, float):
        if math.isnan(value):
            return ".nan"
        if math.isinf(value):
            return ".inf" if value > 0 else "-.inf"
        text = repr(value)
        # YAML 1.1 floats need a dot in the mantissa.
        if "e" in text and "." not in text:
            mantissa, exponent = text.split("e")
            text = f"{mantissa}.0e{exponent}"
        return text
    return str(value)


def format_scalar(value: Any) -> str:
    """Render a scalar so that it reads back as the same value.

    Strings stay plain unless they contain ``:`` or ``#``, carry leading or
    trailing whitespace, or would otherwise load as something else (``true``,
    ``123``, ``null``, ``- x`` ...).  Those are double quoted.
    """
    kind = kind_of(value)
    if kind is ValueKind.NULL:
        return "null"
    if kind is ValueKind.BOOLEAN:
        return "true" if value else "false"
    if kind is ValueKind.NUMBER:
        return format_number(value)
    if kind is ValueKind.STRING:
        return value if _plain_safe(value) else quote(value)
    if kind is ValueKind.MAP and not value:
        return "{}"
    if kind is ValueKind.LIST and not value:
        return "[]"
    raise TypeError(f"cannot render {kind.value} as a single-line scalar")


def format_key(key: str) -> str:
    return format_scalar(str(key))


__all__ = ["format_scalar", "format_key", "format_number", "quote"]
