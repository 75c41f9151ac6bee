"""
Core module - shared types, errors, configuration and recording state.
"""

from .types import (
    CaptureKind,
    CaptureRegion,
    RecordingHandle,
    RecordingResult,
    Credentials,
    TIMESTAMP_FORMAT,
)
from .errors import (
    ShotgrabError,
    ConfigError,
    MissingDependency,
    ArtifactMissing,
    ConversionFailed,
    CaptureFailed,
    UploadFailed,
    RecordingInProgress,
    StateCorrupted,
    NoActiveRecording,
    ProcessTerminationFailed,
    CredentialExpired,
)
from .config import (
    Settings,
    load_settings,
    load_credentials,
    default_config_path,
)
from .state import RecordingStateStore

__all__ = [
    # Types
    "CaptureKind",
    "CaptureRegion",
    "RecordingHandle",
    "RecordingResult",
    "Credentials",
    "TIMESTAMP_FORMAT",
    # Errors
    "ShotgrabError",
    "ConfigError",
    "MissingDependency",
    "ArtifactMissing",
    "ConversionFailed",
    "CaptureFailed",
    "UploadFailed",
    "RecordingInProgress",
    "StateCorrupted",
    "NoActiveRecording",
    "ProcessTerminationFailed",
    "CredentialExpired",
    # Config
    "Settings",
    "load_settings",
    "load_credentials",
    "default_config_path",
    # State
    "RecordingStateStore",
]
