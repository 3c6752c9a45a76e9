"""Logging helper.

Example:
    >>> from offside.log import get_logger
    >>> logger = get_logger(__name__)
    >>> logger.debug("resolving layout")
"""

from __future__ import annotations

import logging


def get_logger(name: str) -> logging.Logger:
    """Return a standard library logger namespaced under ``offside.``."""
    if not (name == "offside" or name.startswith("offside.")):
        name = f"offside.{name}"
    return logging.getLogger(name)
