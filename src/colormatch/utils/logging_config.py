"""Logging configuration for the Color Match host."""

import logging
import sys


def setup_logging(level: str = "INFO", format_style: str = "simple") -> None:
    """Configure the root logger once for the whole application.

    Args:
        level: Logging level name (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        format_style: "simple" or "detailed"
    """
    numeric_level = getattr(logging, level.upper(), logging.INFO)
    formats = {
        "simple": "%(name)s - %(levelname)s - %(message)s",
        "detailed": "%(asctime)s - %(name)s - %(levelname)s - %(filename)s:%(lineno)d - %(message)s",
    }
    logging.basicConfig(
        level=numeric_level,
        format=formats.get(format_style, formats["simple"]),
        handlers=[logging.StreamHandler(sys.stdout)],
    )
    # arcade and pyglet are chatty at INFO.
    logging.getLogger("arcade").setLevel(logging.WARNING)
    logging.getLogger("pyglet").setLevel(logging.WARNING)
