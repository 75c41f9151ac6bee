"""
Backend base - interface shared by all upload services.
"""

from abc import ABC, abstractmethod
from pathlib import Path
from typing import Optional

import requests

from ..core.config import Settings


class UploadBackend(ABC):
    """An image-hosting service that turns a local file into a URL."""

    # Files at or above this many bytes are not offered to the service.
    size_limit: Optional[int] = None

    def __init__(self, settings: Settings, session: Optional[requests.Session] = None):
        self.settings = settings
        self.session = session or requests.Session()

    @abstractmethod
    def get_name(self) -> str:
        """Name shown in the upload menu."""

    @abstractmethod
    def upload(self, path: Path) -> str:
        """Upload the file and return its public URL.

        Raises:
            UploadFailed: If the service cannot be reached or rejects the file.
        """

    def accepts(self, file_size: int) -> bool:
        return self.size_limit is None or file_size < self.size_limit
