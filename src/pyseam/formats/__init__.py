"""Format registry and module level helpers."""
from __future__ import annotations

from pathlib import Path
from typing import Any

from ..errors import ParseError, UnknownFormatError
from ..schema import Schema, SchemaResolver
from ..settings import Settings
from .base import BaseFormat

_REGISTRY: dict[str, type[BaseFormat]] = {}

FORMATS = ("json", "jsonc", "yaml")


def register_format(fmt: type[BaseFormat]) -> type[BaseFormat]:
    """Register a format class and return it for decorator use."""
    _REGISTRY[fmt.name] = fmt
    return fmt


def get_format(name: str, settings: Settings | None = None) -> BaseFormat:
    fmt_cls = _REGISTRY.get(name)
    if fmt_cls is None:
        raise UnknownFormatError(f"Unknown format {name!r}")
    return fmt_cls(settings)


def format_for_path(path: Path | str) -> str | None:
    """Return the format registered for the suffix of *path*, if any."""
    suffix = Path(path).suffix.lower()
    for name, fmt_cls in _REGISTRY.items():
        if suffix in fmt_cls.suffixes:
            return name
    return None


def detect_format(text: str) -> str:
    """Guess the format of *text*.

    Only content starting with ``{`` or ``[`` can be JSON.  It is JSONC when
    it also contains comment markers; a trailing comma alone is not enough.
    Everything else, including empty text, is YAML.
    """
    trimmed = text.strip()
    if trimmed.startswith(("{", "[")):
        try:
            get_format("jsonc").parse(text)
        except ParseError:
            return "yaml"
        if "//" in text or "/*" in text:
            return "jsonc"
        return "json"
    return "yaml"


def parse(text: str, fmt: str) -> Any:
    return get_format(fmt).parse(text)


def serialize(value: Any, fmt: str) -> str:
    return get_format(fmt).dump(value)


def patch_preserving_comments(
    original: str,
    new: Any,
    fmt: str,
    schema: Schema | SchemaResolver | None = None,
) -> str:
    return get_format(fmt).patch(original, new, schema)


# register default formats
from . import json_format, yaml_format  # noqa: F401,E402

__all__ = [
    "BaseFormat",
    "FORMATS",
    "register_format",
    "get_format",
    "format_for_path",
    "detect_format",
    "parse",
    "serialize",
    "patch_preserving_comments",
]
