"""
Error types. Each carries the process exit code the CLI returns for it.
"""


class ShotgrabError(Exception):
    """Base exception for shotgrab errors."""
    exit_code = 1


class ConfigError(ShotgrabError):
    """Configuration file or command line value is invalid."""
    exit_code = 2


class MissingDependency(ShotgrabError):
    """Required external program is not installed."""
    exit_code = 3


class ArtifactMissing(ShotgrabError):
    """Capture file vanished before it could be processed or uploaded."""
    exit_code = 4


class ConversionFailed(ShotgrabError):
    """One of the two gif encoding passes failed."""
    exit_code = 5


class CaptureFailed(ShotgrabError):
    """Screenshot tool or encoder failed to capture."""
    exit_code = 6


class UploadFailed(ShotgrabError):
    """Hosting service rejected the upload or could not be reached."""
    exit_code = 7


class RecordingInProgress(ShotgrabError):
    """A recording is already running."""
    exit_code = 8


class StateCorrupted(ShotgrabError):
    """State file exists but cannot be parsed."""
    exit_code = 9


class NoActiveRecording(ShotgrabError):
    """Stop requested with nothing recording."""
    exit_code = 0


class ProcessTerminationFailed(ShotgrabError):
    """Recording process could not be signalled. Non-fatal."""
    pass


class CredentialExpired(ShotgrabError):
    """Stored access token is absent or about to expire. Non-fatal."""
    pass
