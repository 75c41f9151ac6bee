"""
Imgur backend - authenticated or anonymous image upload.

Uses the stored access token as a bearer credential while it is valid for
longer than the refresh window; otherwise falls back to anonymous upload
with the application's Client-ID.
"""

import logging
from pathlib import Path
from typing import Dict, Optional

import requests

from .base import UploadBackend
from .models import ImgurResponse
from ..core.config import Settings, load_credentials
from ..core.errors import CredentialExpired, UploadFailed
from ..core.types import Credentials

logger = logging.getLogger(__name__)


class ImgurBackend(UploadBackend):
    """Upload backend for api.imgur.com."""

    def __init__(
        self,
        settings: Settings,
        session: Optional[requests.Session] = None,
        credentials: Optional[Credentials] = None,
    ):
        super().__init__(settings, session)
        self.size_limit = settings.imgur_size_limit
        self._credentials = credentials

    def get_name(self) -> str:
        return "imgur"

    @property
    def credentials(self) -> Credentials:
        if self._credentials is None:
            self._credentials = load_credentials(self.settings.credentials_file)
        return self._credentials

    def bearer_token(self, now: Optional[float] = None) -> str:
        """Return the stored token.

        Raises:
            CredentialExpired: If there is no token or it expires within
                the refresh window.
        """
        creds = self.credentials
        if not creds.is_valid(now=now, refresh_window=self.settings.refresh_window):
            raise CredentialExpired("No imgur token valid beyond the refresh window")
        return creds.access_token

    def auth_header(self, now: Optional[float] = None) -> Dict[str, str]:
        try:
            return {"Authorization": f"Bearer {self.bearer_token(now)}"}
        except CredentialExpired as e:
            if self.credentials.access_token:
                logger.info(f"{e}, uploading anonymously")
            return {"Authorization": f"Client-ID {self.settings.imgur_client_id}"}

    def upload(self, path: Path) -> str:
        url = f"{self.settings.imgur_api_url.rstrip('/')}/3/image"
        logger.info(f"Uploading {path.name} to imgur")

        try:
            with open(path, "rb") as f:
                response = self.session.post(
                    url,
                    headers=self.auth_header(),
                    files={"image": (path.name, f)},
                    timeout=self.settings.upload_timeout,
                )
            response.raise_for_status()
            payload = ImgurResponse.model_validate(response.json())
        except requests.RequestException as e:
            raise UploadFailed(f"imgur upload failed: {e}") from e
        except ValueError as e:
            raise UploadFailed(f"imgur returned an unexpected response: {e}") from e

        if not payload.success:
            raise UploadFailed(f"imgur rejected the upload (status {payload.status})")

        logger.info(f"Uploaded to {payload.data.link}")
        return payload.data.link
