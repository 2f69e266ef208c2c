from __future__ import annotations

import logging

LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


def configure_logging(level: str = "INFO") -> None:
    """Install a single stream handler on the root logger.

    Safe to call more than once; the level is updated and no duplicate
    handlers are added.
    """
    root = logging.getLogger()
    root.setLevel(level)
    if any(getattr(handler, "_scheduling_handler", False) for handler in root.handlers):
        return
    handler = logging.StreamHandler()
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    handler._scheduling_handler = True  # type: ignore[attr-defined]
    root.addHandler(handler)
