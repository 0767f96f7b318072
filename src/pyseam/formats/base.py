from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import Any

from ..schema import Schema, SchemaResolver
from ..settings import DEFAULT_SETTINGS, Settings
from ..values import values_equal

logger = logging.getLogger(__name__)


class BaseFormat(ABC):
    """Abstract text format: parse, dump and comment-preserving patch."""

    name: str = ""
    suffixes: tuple[str, ...] = ()

    def __init__(self, settings: Settings | None = None) -> None:
        self.settings = settings or DEFAULT_SETTINGS

    @abstractmethod
    def parse(self, text: str) -> Any:
        """Parse *text*, raising :class:`~pyseam.errors.ParseError` on failure."""

    def parse_tolerant(self, text: str) -> Any:
        return self.parse(text)

    @abstractmethod
    def dump(self, value: Any) -> str:
        """Serialize *value* without any knowledge of prior formatting."""

    @abstractmethod
    def _apply_patch(
        self, original: str, old: Any, new: Any, resolver: SchemaResolver
    ) -> str:
        pass

    def _matches(self, parsed: Any, new: Any) -> bool:
        return values_equal(parsed, new)

    def patch(
        self,
        original: str,
        new: Any,
        schema: Schema | SchemaResolver | None = None,
    ) -> str:
        """Return *original* rewritten to hold *new*, keeping its formatting.

        Unchanged values give back *original* itself.  If the edit cannot be
        applied the value is dumped from scratch and comments are lost.
        """
        resolver = schema if isinstance(schema, SchemaResolver) else SchemaResolver(schema)
        try:
            old = self.parse_tolerant(original)
            if self._matches(old, new):
                return original
            patched = self._apply_patch(original, old, new, resolver)
            if self.settings.verify_patches and not self._matches(
                self.parse_tolerant(patched), new
            ):
                raise ValueError("patched text does not round-trip to the new value")
        except Exception as exc:
            logger.warning(
                "Failed to preserve %s formatting, falling back to plain serialization: %s",
                self.name,
                exc,
            )
            return self.dump(new)
        logger.debug("patched %s document (%d -> %d chars)", self.name, len(original), len(patched))
        return patched
