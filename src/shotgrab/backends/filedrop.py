"""
Filedrop backend - gfycat-style two-step upload, no auth, no size limit.

1. POST to the API creates a placeholder and returns its generated name.
2. The file bytes are PUT to the filedrop endpoint named after it.
"""

import logging
from pathlib import Path

import requests

from .base import UploadBackend
from .models import FiledropCreateResponse
from ..core.errors import UploadFailed

logger = logging.getLogger(__name__)


class FiledropBackend(UploadBackend):
    """Upload backend for gfycat filedrop."""

    def get_name(self) -> str:
        return "gfycat"

    def create_placeholder(self) -> str:
        url = f"{self.settings.gfycat_api_url.rstrip('/')}/v1/gfycats"
        try:
            response = self.session.post(url, json={}, timeout=self.settings.upload_timeout)
            response.raise_for_status()
            payload = FiledropCreateResponse.model_validate(response.json())
        except requests.RequestException as e:
            raise UploadFailed(f"Could not create gfycat placeholder: {e}") from e
        except ValueError as e:
            raise UploadFailed(f"gfycat returned an unexpected response: {e}") from e

        if not payload.isOk:
            raise UploadFailed("gfycat refused to create a placeholder")
        return payload.gfyname

    def upload(self, path: Path) -> str:
        name = self.create_placeholder()
        drop_url = f"{self.settings.gfycat_filedrop_url.rstrip('/')}/{name}"
        logger.info(f"Uploading {path.name} to gfycat as {name}")

        try:
            with open(path, "rb") as f:
                response = self.session.put(
                    drop_url,
                    data=f,
                    timeout=self.settings.upload_timeout,
                )
            response.raise_for_status()
        except requests.RequestException as e:
            raise UploadFailed(f"gfycat upload failed: {e}") from e

        link = f"{self.settings.gfycat_site_url.rstrip('/')}/{name}"
        logger.info(f"Uploaded to {link}")
        return link
