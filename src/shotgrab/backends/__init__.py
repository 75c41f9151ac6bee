"""
Backends module - upload service implementations.

Provides a factory function to build a backend by its menu name.
"""

from typing import Dict, Optional, Type

import requests

from .base import UploadBackend
from .imgur import ImgurBackend
from .filedrop import FiledropBackend
from ..core.config import Settings
from ..core.errors import ConfigError

BACKENDS: Dict[str, Type[UploadBackend]] = {
    "imgur": ImgurBackend,
    "gfycat": FiledropBackend,
}


def get_backend(
    name: str,
    settings: Settings,
    session: Optional[requests.Session] = None,
) -> UploadBackend:
    """Build the upload backend registered under ``name``.

    Raises:
        ConfigError: If no backend has that name.
    """
    try:
        backend_cls = BACKENDS[name]
    except KeyError:
        raise ConfigError(f"Unknown upload target: {name}") from None
    return backend_cls(settings, session=session)


__all__ = [
    "UploadBackend",
    "ImgurBackend",
    "FiledropBackend",
    "BACKENDS",
    "get_backend",
]
