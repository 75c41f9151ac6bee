"""
Core configuration - config file loading, paths, and defaults.

Settings are read once at startup from a shell-style ``KEY=value`` file
(``$XDG_CONFIG_HOME/shotgrab/config``) and ``SHOTGRAB_<KEY>`` environment
variables, then passed explicitly to every component.
"""

import logging
import os
import tempfile
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, Dict, Mapping, Optional, Tuple, Union

from dotenv import dotenv_values

from .errors import ConfigError
from .types import Credentials

logger = logging.getLogger(__name__)

ENV_PREFIX = "SHOTGRAB_"

DEFAULT_MENU_COMMAND = "dmenu -i"
# Anonymous uploads identify the application instead of the user.
DEFAULT_IMGUR_CLIENT_ID = "ea6c0ef2987808e"
DEFAULT_IMGUR_SIZE_LIMIT = 10 * 1024 * 1024


def _config_home() -> Path:
    return Path(os.environ.get("XDG_CONFIG_HOME") or os.path.expanduser("~/.config"))


def default_config_path() -> Path:
    return _config_home() / "shotgrab" / "config"


def default_credentials_path() -> Path:
    return _config_home() / "shotgrab" / "credentials"


def default_state_path() -> Path:
    """Per-user state file, in the runtime dir when the session has one."""
    runtime_dir = os.environ.get("XDG_RUNTIME_DIR")
    if runtime_dir:
        return Path(runtime_dir) / "shotgrab.state"
    return Path(tempfile.gettempdir()) / f"shotgrab-{os.getuid()}.state"


@dataclass(frozen=True)
class Settings:
    """Immutable runtime settings."""
    image_dir: Path = field(default_factory=lambda: Path.home() / "Pictures" / "shotgrab")
    video_dir: Path = field(default_factory=lambda: Path.home() / "Videos" / "shotgrab")
    credentials_file: Path = field(default_factory=default_credentials_path)
    state_file: Path = field(default_factory=default_state_path)

    # Capture
    gif_scale: int = 640
    gif_fps: int = 15
    video_fps: int = 30
    sound: bool = False
    sound_source: str = "default"
    display: str = field(default_factory=lambda: os.environ.get("DISPLAY", ":0"))
    keep_gif_source: bool = False

    # Upload
    no_upload: bool = False
    imgur_client_id: str = DEFAULT_IMGUR_CLIENT_ID
    imgur_size_limit: int = DEFAULT_IMGUR_SIZE_LIMIT
    imgur_api_url: str = "https://api.imgur.com"
    gfycat_api_url: str = "https://api.gfycat.com"
    gfycat_filedrop_url: str = "https://filedrop.gfycat.com"
    gfycat_site_url: str = "https://gfycat.com"
    refresh_window: int = 600
    upload_timeout: float = 60.0

    # Frontend
    menu_command: str = DEFAULT_MENU_COMMAND
    log_level: str = "INFO"

    # Timing (seconds)
    startup_check: float = 0.5
    stop_timeout: float = 5.0
    settle_delay: float = 1.0

    @property
    def log_file(self) -> Path:
        """Encoder output log, kept next to the state file."""
        return self.state_file.with_suffix(".log")


def _path(raw: str) -> Path:
    return Path(os.path.expanduser(raw))


def _bool(raw: str) -> bool:
    value = raw.strip().lower()
    if value in ("1", "true", "yes", "on"):
        return True
    if value in ("0", "false", "no", "off", ""):
        return False
    raise ValueError(f"not a boolean: {raw}")


def _positive_int(raw: str) -> int:
    value = int(raw)
    if value <= 0:
        raise ValueError(f"must be positive: {raw}")
    return value


def _float(raw: str) -> float:
    value = float(raw)
    if value < 0:
        raise ValueError(f"must not be negative: {raw}")
    return value


def _level(raw: str) -> str:
    value = raw.strip().upper()
    if value not in ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"):
        raise ValueError(f"unknown log level: {raw}")
    return value


# Config key -> (Settings field, converter)
CONFIG_KEYS: Dict[str, Tuple[str, Callable[[str], object]]] = {
    "CREDENTIALS_FILE": ("credentials_file", _path),
    "STATE_FILE": ("state_file", _path),
    "IMAGE_DIR": ("image_dir", _path),
    "VIDEO_DIR": ("video_dir", _path),
    "GIF_SCALE": ("gif_scale", _positive_int),
    "GIF_FPS": ("gif_fps", _positive_int),
    "VIDEO_FPS": ("video_fps", _positive_int),
    "SOUND": ("sound", _bool),
    "SOUND_SOURCE": ("sound_source", str),
    "DISPLAY": ("display", str),
    "KEEP_GIF_SOURCE": ("keep_gif_source", _bool),
    "NO_UPLOAD": ("no_upload", _bool),
    "IMGUR_CLIENT_ID": ("imgur_client_id", str),
    "IMGUR_SIZE_LIMIT": ("imgur_size_limit", _positive_int),
    "MENU_COMMAND": ("menu_command", str),
    "LOG_LEVEL": ("log_level", _level),
    "STOP_TIMEOUT": ("stop_timeout", _float),
    "SETTLE_DELAY": ("settle_delay", _float),
}


def load_settings(
    config_path: Optional[Union[str, Path]] = None,
    environ: Optional[Mapping[str, str]] = None,
) -> Settings:
    """Build Settings from the config file and environment.

    A missing config file is not an error: defaults apply and a warning is
    logged. Environment variables named ``SHOTGRAB_<KEY>`` win over the file.

    Args:
        config_path: Config file to read (defaults to default_config_path()).
        environ: Environment mapping (defaults to os.environ).

    Raises:
        ConfigError: If a value cannot be converted.
    """
    environ = os.environ if environ is None else environ
    path = Path(config_path) if config_path else default_config_path()

    raw: Dict[str, str] = {}
    if path.is_file():
        for key, value in dotenv_values(path).items():
            if value is not None:
                raw[key] = value
        logger.debug(f"Loaded config from {path}")
    else:
        logger.warning(f"Config file {path} not found, using defaults")

    for key in CONFIG_KEYS:
        value = environ.get(ENV_PREFIX + key)
        if value is not None:
            raw[key] = value

    overrides = {}
    for key, value in raw.items():
        if key not in CONFIG_KEYS:
            logger.debug(f"Ignoring unknown config key {key}")
            continue
        name, convert = CONFIG_KEYS[key]
        try:
            overrides[name] = convert(value)
        except ValueError as e:
            raise ConfigError(f"Invalid value for {key}: {value!r} ({e})") from e

    return Settings(**overrides)


def load_credentials(path: Path) -> Credentials:
    """Read the access token file written by the auth flow.

    Absent file, absent token or an unreadable expiry all yield credentials
    that are not valid, which sends uploads down the anonymous path.
    """
    if not path.is_file():
        logger.debug(f"No credentials file at {path}")
        return Credentials()

    values = dotenv_values(path)
    token = values.get("access_token") or None
    raw_expiry = values.get("expiry") or values.get("expires_at")

    expiry = None
    if raw_expiry:
        try:
            expiry = int(float(raw_expiry))
        except (ValueError, OverflowError):
            logger.warning(f"Unreadable expiry {raw_expiry!r} in {path}, treating token as expired")

    return Credentials(access_token=token, expiry=expiry)
