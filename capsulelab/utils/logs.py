"""Process-wide logging setup for scripts. Library modules only create loggers."""
from __future__ import annotations

import logging
from typing import Mapping, Optional

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"


def _level(value: str | int) -> int:
    if isinstance(value, int):
        return value
    level = logging.getLevelName(value.strip().upper())
    if not isinstance(level, int):
        raise ValueError(f"Unknown log level: {value!r}")
    return level


def configure_logging(level: str | int = "INFO", overrides: Optional[Mapping[str, str]] = None) -> None:
    """Configure the root logger once, then apply per-logger level overrides."""
    logging.basicConfig(level=_level(level), format=LOG_FORMAT)
    for name, lvl in (overrides or {}).items():
        logging.getLogger(name).setLevel(_level(lvl))
