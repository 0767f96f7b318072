"""Minimal JSON Schema lookups used to order newly inserted keys.

Nothing here validates documents.  The resolver only follows local ``$ref``
pointers and reports the declared order of object properties.
"""
from __future__ import annotations

import re
from collections.abc import Mapping
from typing import Any

from .errors import SchemaError
from .paths import Path, PropertySegment

Schema = Mapping[str, Any]


class SchemaResolver:
    """Resolve ``$ref`` pointers against a root schema, with caching."""

    def __init__(self, root: Schema | None = None) -> None:
        self._root: Schema = root or {}
        self._cache: dict[str, Schema] = {}

    @property
    def root(self) -> Schema:
        return self._root

    def clear_cache(self) -> None:
        self._cache.clear()

    def resolve(self, schema: Schema) -> Schema:
        ref = schema.get("$ref") if isinstance(schema, Mapping) else None
        if not isinstance(ref, str):
            return schema
        if ref not in self._cache:
            self._cache[ref] = self._lookup(ref)
        return self._cache[ref]

    def _lookup(self, ref: str) -> Schema:
        if not ref.startswith("#"):
            raise SchemaError(f"only local references are supported: {ref}")
        current: Any = self._root
        for part in ref.lstrip("#").strip("/").split("/"):
            if not part:
                continue
            part = part.replace("~1", "/").replace("~0", "~")
            if not isinstance(current, Mapping) or part not in current:
                raise SchemaError(f"Invalid $ref: {ref}")
            current = current[part]
        if not isinstance(current, Mapping):
            raise SchemaError(f"Invalid $ref: {ref}")
        return current

    def get_property_schema(self, parent: Schema, key: str) -> Schema | None:
        """Return the schema governing *key* inside the object *parent*."""
        resolved = self.resolve(parent)
        props = resolved.get("properties")
        if isinstance(props, Mapping) and isinstance(props.get(key), Mapping):
            return self.resolve(props[key])
        patterns = resolved.get("patternProperties")
        if isinstance(patterns, Mapping):
            for pattern, sub in patterns.items():
                if isinstance(sub, Mapping) and re.search(pattern, key):
                    return self.resolve(sub)
        additional = resolved.get("additionalProperties")
        if isinstance(additional, Mapping):
            return self.resolve(additional)
        return None

    def get_property_order(self, schema: Schema | None) -> list[str]:
        """Return declared property names, honouring an ``x-order`` list."""
        if not schema:
            return []
        resolved = self.resolve(schema)
        x_order = resolved.get("x-order")
        if isinstance(x_order, list):
            return [str(k) for k in x_order]
        props = resolved.get("properties")
        if isinstance(props, Mapping):
            return list(props.keys())
        return []

    def schema_at(self, path: Path) -> Schema | None:
        """Walk property segments from the root; ``None`` once the trail is lost."""
        current: Schema | None = self._root
        for seg in path:
            if current is None or not isinstance(seg, PropertySegment):
                return None
            current = self.get_property_schema(current, seg.key)
        return current

    def property_order_at(self, path: Path) -> list[str]:
        return self.get_property_order(self.schema_at(path))


__all__ = ["Schema", "SchemaResolver"]
