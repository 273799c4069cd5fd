"""Process-wide logging setup for scripts that embed satpass."""
from __future__ import annotations

import logging
import os

LOG_LEVEL_ENV = "SATPASS_LOG"
LOG_FORMAT = "%(asctime)s | %(levelname)s | %(name)s | %(message)s"

_configured = False


def init_logging(level: str | int | None = None) -> None:
    """Attach a stderr handler to the root logger once.

    The level is taken from ``level``, else the ``SATPASS_LOG`` environment
    variable, else ``INFO``. Unknown level names fall back to ``INFO``.
    Later calls only adjust the level.
    """
    global _configured

    if level is None:
        level = os.environ.get(LOG_LEVEL_ENV, "INFO")
    if isinstance(level, str):
        level = logging.getLevelName(level.strip().upper())
        if not isinstance(level, int):
            level = logging.INFO

    root = logging.getLogger()
    root.setLevel(level)
    if _configured:
        return

    handler = logging.StreamHandler()
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    root.addHandler(handler)
    _configured = True
