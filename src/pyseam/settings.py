from __future__ import annotations

import configparser
import logging
import os
from collections.abc import Mapping
from dataclasses import dataclass, fields, replace
from pathlib import Path

from platformdirs import user_config_dir

logger = logging.getLogger(__name__)

SECTION = "pyseam"
ENV_PREFIX = "PYSEAM_"
DEBUG_ENV = "PYSEAM_DEBUG"


@dataclass(frozen=True)
class Settings:
    """Formatting and diagnostics options shared by codecs and documents."""

    # Indentation width used when new structure has to be serialized.
    indent: int = 2
    # Re-parse patched text and fall back to a plain dump on mismatch.
    verify_patches: bool = True
    log_level: str = "WARNING"


DEFAULT_SETTINGS = Settings()


def settings_file() -> Path:
    return Path(user_config_dir("pyseam")) / "settings.ini"


def _cast(name: str, raw: str, current: object) -> object:
    if isinstance(current, bool):
        lower = raw.strip().lower()
        if lower in {"1", "true", "yes", "on"}:
            return True
        if lower in {"0", "false", "no", "off"}:
            return False
        raise ValueError(f"invalid boolean for {name}: {raw!r}")
    if isinstance(current, int):
        return int(raw)
    return raw.strip()


def load_settings(
    path: Path | None = None, env: Mapping[str, str] | None = None
) -> Settings:
    """Load settings from the ``[pyseam]`` INI section, then the environment.

    A missing file is not an error.  Environment variables named
    ``PYSEAM_<FIELD>`` override file values.
    """
    path = settings_file() if path is None else Path(path)
    env = os.environ if env is None else env
    values: dict[str, object] = {}
    defaults = {f.name: getattr(DEFAULT_SETTINGS, f.name) for f in fields(Settings)}

    if path.is_file():
        parser = configparser.ConfigParser()
        try:
            parser.read(path, encoding="utf-8")
        except configparser.Error as exc:
            logger.warning("Failed to read settings %s: %s", path, exc)
        else:
            if parser.has_section(SECTION):
                for key, raw in parser.items(SECTION):
                    if key not in defaults:
                        logger.warning("Unknown setting %r in %s", key, path)
                        continue
                    values[key] = _cast(key, raw, defaults[key])

    for name, default in defaults.items():
        raw = env.get(ENV_PREFIX + name.upper())
        if raw is not None:
            values[name] = _cast(name, raw, default)

    if values.get("indent", 2) < 1:
        raise ValueError("indent must be at least 1")
    return replace(DEFAULT_SETTINGS, **values)


def configure_logging(level: str | int | None = None) -> logging.Logger:
    """Attach a simple stream handler to the ``pyseam`` logger.

    The library never installs handlers on import; the CLI calls this, and so
    does anything that sets ``PYSEAM_DEBUG``.
    """
    root = logging.getLogger("pyseam")
    if os.environ.get(DEBUG_ENV):
        level = logging.DEBUG
    if level is None:
        level = DEFAULT_SETTINGS.log_level
    if not root.handlers:
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter("%(levelname)s:%(message)s"))
        root.addHandler(handler)
    root.setLevel(level.upper() if isinstance(level, str) else level)
    return root


__all__ = [
    "Settings",
    "DEFAULT_SETTINGS",
    "settings_file",
    "load_settings",
    "configure_logging",
]
