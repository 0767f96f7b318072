"""Single source of truth for an edited document.

A :class:`DocumentModel` owns the current value together with the source text
it came from.  Every mutation goes through the copy-on-write helpers in
:mod:`pyseam.operations`, the source text is then patched to match, and the
subscribers are told about it.
"""
from __future__ import annotations

import logging
from collections.abc import Callable
from typing import Any

from .errors import ParseError
from .formats import BaseFormat, get_format
from .operations import delete_at_path, get_value_at_path, set_value_at_path
from .paths import Path, parse_path
from .schema import Schema, SchemaResolver
from .settings import DEFAULT_SETTINGS, Settings

logger = logging.getLogger(__name__)

Listener = Callable[["DocumentModel"], None]


def _as_map(value: Any) -> dict:
    # only mapping roots are supported
    return value if isinstance(value, dict) else {}


class DocumentModel:
    """Value, raw text, format and schema of one document, kept in sync."""

    def __init__(
        self,
        data: dict | None = None,
        schema: Schema | None = None,
        format: str = "json",
        raw_text: str = "",
        *,
        settings: Settings | None = None,
    ) -> None:
        self._settings = settings or DEFAULT_SETTINGS
        self._codec: BaseFormat = get_format(format, self._settings)
        self._data = _as_map(data)
        self._schema = schema
        self._resolver = SchemaResolver(schema)
        self._raw_text = raw_text
        self._listeners: list[Listener] = []
        self._pending = 0
        self._notifying = False

    @classmethod
    def deserialize(
        cls,
        text: str,
        format: str,
        schema: Schema | None = None,
        *,
        settings: Settings | None = None,
    ) -> DocumentModel:
        """Build a document from *text*.

        Text that does not parse, or whose root is not a mapping, yields an
        empty document.  The text itself is kept either way.
        """
        codec = get_format(format, settings)
        try:
            data = _as_map(codec.parse_tolerant(text))
        except ParseError as exc:
            logger.error("Failed to parse document content: %s", exc)
            data = {}
        return cls(data, schema, format, text, settings=settings)

    # ------------------------------------------------------------------ access
    @property
    def data(self) -> dict:
        return self._data

    def get_data(self) -> dict:
        return self._data

    @property
    def schema(self) -> Schema | None:
        return self._schema

    @property
    def format(self) -> str:
        return self._codec.name

    @property
    def resolver(self) -> SchemaResolver:
        return self._resolver

    @property
    def raw_text(self) -> str:
        return self._raw_text

    def get_value(self, path: str | Path) -> Any:
        return get_value_at_path(self._data, parse_path(path))

    def serialize(self) -> str:
        """Return the source text, or a plain serialization if there is none."""
        return self._raw_text or self._codec.dump(self._data)

    # --------------------------------------------------------------- mutation
    def set_value(self, path: str | Path, value: Any) -> None:
        self._data = set_value_at_path(self._data, parse_path(path), value)
        self._resync()
        self._notify()

    def delete_value(self, path: str | Path) -> None:
        self._data = delete_at_path(self._data, parse_path(path))
        self._resync()
        self._notify()

    def set_data(self, data: dict) -> None:
        if not isinstance(data, dict):
            raise TypeError(f"document data must be a dict, got {type(data).__name__}")
        self._data = data
        self._resync()
        self._notify()

    def set_schema(self, schema: Schema | None) -> None:
        self._schema = schema
        self._resolver = SchemaResolver(schema)
        self._resync()
        self._notify()

    def set_format(self, format: str) -> None:
        """Switch to *format*; the text is serialized again and comments are lost."""
        self._codec = get_format(format, self._settings)
        self._raw_text = self._codec.dump(self._data)
        self._notify()

    def update_from_content(self, text: str) -> bool:
        """Replace value and text with *text* parsed in the current format.

        Text that does not parse leaves the document untouched and nobody is
        notified.
        """
        try:
            data = self._codec.parse_tolerant(text)
        except ParseError as exc:
            logger.error("Failed to update from content: %s", exc)
            return False
        self._data = _as_map(data)
        self._raw_text = text
        self._notify()
        return True

    def _resync(self) -> None:
        if not self._raw_text:
            self._raw_text = self._codec.dump(self._data)
            return
        self._raw_text = self._codec.patch(self._raw_text, self._data, self._resolver)

    # ---------------------------------------------------------- notification
    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Register *listener* and return a function that removes it again."""
        if not any(existing is listener for existing in self._listeners):
            self._listeners.append(listener)

        def unsubscribe() -> None:
            self._listeners = [
                existing for existing in self._listeners if existing is not listener
            ]

        return unsubscribe

    def close(self) -> None:
        self._listeners.clear()

    def _notify(self) -> None:
        # A listener that mutates the document queues another round instead
        # of nesting one inside the current round.
        self._pending += 1
        if self._notifying:
            return
        self._notifying = True
        try:
            while self._pending:
                self._pending -= 1
                for listener in list(self._listeners):
                    listener(self)
        finally:
            self._notifying = False
            self._pending = 0


__all__ = ["DocumentModel", "Listener"]
