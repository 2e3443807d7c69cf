"""Logging configuration for the application."""

from __future__ import annotations

import logging
import sys

PACKAGE_LOGGER = "anyfind"
_HANDLER_NAME = "anyfind-console"


def init_log() -> logging.Logger:
    """Log the package at DEBUG and everything else at WARNING to stderr."""
    root = logging.getLogger()
    root.setLevel(logging.WARNING)
    if not any(h.get_name() == _HANDLER_NAME for h in root.handlers):
        handler = logging.StreamHandler(sys.stderr)
        handler.set_name(_HANDLER_NAME)
        handler.setFormatter(
            logging.Formatter("%(asctime)s %(levelname)5s %(name)s: %(message)s")
        )
        root.addHandler(handler)

    package = logging.getLogger(PACKAGE_LOGGER)
    package.setLevel(logging.DEBUG)
    package.info("Logger initialized")
    return package