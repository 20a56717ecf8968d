"""Logging setup shared by the command line and the HTTP server."""

from __future__ import annotations

import logging

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
HANDLER_NAME = "deviceauth"


def configure_logging(level: str | int = logging.WARNING) -> None:
    root = logging.getLogger("deviceauth")
    root.setLevel(level)
    if not any(handler.get_name() == HANDLER_NAME for handler in root.handlers):
        handler = logging.StreamHandler()
        handler.set_name(HANDLER_NAME)
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        root.addHandler(handler)


__all__ = ["HANDLER_NAME", "LOG_FORMAT", "configure_logging"]
