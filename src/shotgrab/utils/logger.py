"""Centralized logger configuration.

Usage:
    from shotgrab.utils.logger import setup_logging
    setup_logging("DEBUG")

Modules themselves only call logging.getLogger(__name__).
"""
import logging
import os

DEFAULT_LEVEL = os.getenv("SHOTGRAB_LOG_LEVEL", "INFO").upper()
LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"


def setup_logging(level: str = DEFAULT_LEVEL) -> None:
    logging.basicConfig(format=LOG_FORMAT)
    set_level(level)


def set_level(level: str) -> None:
    logging.getLogger().setLevel(getattr(logging, level.upper(), logging.INFO))
