"""
Upload tools - pick a destination, upload, copy the link, or discard.
"""

import logging
from pathlib import Path
from typing import Callable, Dict, List, Optional

from ..backends import BACKENDS, UploadBackend, get_backend
from ..core.config import Settings
from ..core.errors import ArtifactMissing
from ..utils.desktop import clear_clipboard, copy_to_clipboard, notify
from ..utils.process import CommandRunner
from .menu import choose

logger = logging.getLogger(__name__)

DELETE_OPTION = "delete"


class Uploader:
    """Post-capture handling of a finished artifact."""

    def __init__(
        self,
        settings: Settings,
        runner: Optional[CommandRunner] = None,
        backends: Optional[Dict[str, UploadBackend]] = None,
        menu: Optional[Callable[[List[str], str], Optional[str]]] = None,
    ):
        self.settings = settings
        self.runner = runner or CommandRunner()
        self._backends = dict(backends or {})
        self._menu = menu or (
            lambda options, prompt: choose(self.runner, settings.menu_command, options, prompt)
        )

    def backend(self, name: str) -> UploadBackend:
        if name not in self._backends:
            self._backends[name] = get_backend(name, self.settings)
        return self._backends[name]

    def destination_options(self, file_size: int) -> List[str]:
        """Services able to take a file of this size, plus delete.

        Only a menu convenience: an explicit --upload-to is not size checked.
        """
        options = [name for name in BACKENDS if self.backend(name).accepts(file_size)]
        options.append(DELETE_OPTION)
        return options

    def choose_destination(self, path: Path) -> Optional[str]:
        options = self.destination_options(path.stat().st_size)
        return self._menu(options, "upload to")

    def upload(self, path: Path, target: str) -> str:
        """Send the file to ``target`` and return the hosted URL.

        Raises:
            ArtifactMissing: If the file is gone.
            UploadFailed: If the service fails.
        """
        if not path.exists():
            raise ArtifactMissing(f"{path} no longer exists, nothing to upload")
        return self.backend(target).upload(path)

    def finish(self, url: str) -> None:
        """Put the URL on the clipboard and tell the user."""
        clear_clipboard(self.runner)
        copy_to_clipboard(self.runner, url)
        notify(self.runner, "Upload complete", url)

    def discard(self, path: Path) -> None:
        try:
            path.unlink()
        except FileNotFoundError:
            logger.warning(f"{path} was already gone")
        else:
            logger.info(f"Deleted {path}")
        notify(self.runner, "Capture deleted", path.name)

    def handle_artifact(self, path: Path, target: Optional[str] = None) -> Optional[str]:
        """Full post-capture flow for a screenshot or gif.

        Returns:
            The hosted URL, or None when nothing was uploaded.
        """
        if not path.exists():
            raise ArtifactMissing(f"{path} no longer exists")

        if self.settings.no_upload:
            notify(self.runner, "Capture saved", str(path))
            return None

        if target is None:
            target = self.choose_destination(path)
            if target is None:
                logger.info(f"No destination chosen, keeping {path}")
                notify(self.runner, "Capture saved", str(path))
                return None

        if target == DELETE_OPTION:
            self.discard(path)
            return None

        url = self.upload(path, target)
        self.finish(url)
        return url
