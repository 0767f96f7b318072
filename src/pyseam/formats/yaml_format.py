from __future__ import annotations

from typing import Any

import yaml

from ..errors import ParseError
from ..schema import SchemaResolver
from ..values import values_equal
from . import register_format
from .base import BaseFormat

_TIMESTAMP_TAG = "tag:yaml.org,2002:timestamp"


class YamlLoader(yaml.SafeLoader):
    """Safe loader that leaves date-like scalars as strings."""


YamlLoader.yaml_implicit_resolvers = {
    first: [(tag, rx) for tag, rx in resolvers if tag != _TIMESTAMP_TAG]
    for first, resolvers in yaml.SafeLoader.yaml_implicit_resolvers.items()
}


class YamlDumper(yaml.SafeDumper):
    """Block style dumper: no anchors, sequences indented under their key."""

    def ignore_aliases(self, data: Any) -> bool:
        return True

    def increase_indent(self, flow: bool = False, indentless: bool = False):
        return super().increase_indent(flow, False)


def _key_text(key: Any) -> str:
    if isinstance(key, bool):
        return "true" if key else "false"
    if key is None:
        return "null"
    return str(key)


def _string_keys(value: Any) -> Any:
    if isinstance(value, dict):
        return {_key_text(k): _string_keys(v) for k, v in value.items()}
    if isinstance(value, list):
        return [_string_keys(v) for v in value]
    return value


def load_yaml(text: str) -> Any:
    try:
        return _string_keys(yaml.load(text, Loader=YamlLoader))
    except yaml.YAMLError as exc:
        raise ParseError(str(exc)) from exc


@register_format
class YamlFormat(BaseFormat):
    name = "yaml"
    suffixes = (".yaml", ".yml")

    def parse(self, text: str) -> Any:
        return load_yaml(text)

    def dump(self, value: Any) -> str:
        return yaml.dump(
            value,
            Dumper=YamlDumper,
            indent=self.settings.indent,
            width=float("inf"),
            sort_keys=False,
            allow_unicode=True,
            default_flow_style=False,
        )

    def _matches(self, parsed: Any, new: Any) -> bool:
        # Text without any mapping entries loads as None.
        if parsed is None and new == {}:
            return True
        return values_equal(parsed, new)

    def _apply_patch(
        self, original: str, old: Any, new: Any, resolver: SchemaResolver
    ) -> str:
        from ..patchers.yaml_patcher import YamlPatcher

        return YamlPatcher(self, resolver).patch(original, old, new)
