"""
Core types - shared dataclasses used across the project.
"""

import re
import time
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Optional


# X11 geometry as printed by `slop -f %g`: WxH+X+Y
GEOMETRY_RE = re.compile(r"^(\d+)x(\d+)\+(-?\d+)\+(-?\d+)$")

# Output file timestamp, e.g. img-2024-05-01-134501.png
TIMESTAMP_FORMAT = "%Y-%m-%d-%H%M%S"


class CaptureKind(str, Enum):
    """Long-running capture kinds, valued by their state-file token."""
    VIDEO = "vid"
    GIF = "gif"


@dataclass(frozen=True)
class CaptureRegion:
    """Screen rectangle reported by the region selector."""
    width: int
    height: int
    x_offset: int
    y_offset: int

    @classmethod
    def parse(cls, geometry: str) -> "CaptureRegion":
        """Parse an X11 geometry string such as ``800x600+10+20``.

        Raises:
            ValueError: If the string is not a geometry or has an empty area.
        """
        match = GEOMETRY_RE.match(geometry.strip())
        if not match:
            raise ValueError(f"Invalid geometry '{geometry}', expected WxH+X+Y")

        width, height, x, y = (int(g) for g in match.groups())
        if width <= 0 or height <= 0:
            raise ValueError(f"Geometry '{geometry}' has an empty area")
        return cls(width=width, height=height, x_offset=x, y_offset=y)

    @property
    def geometry(self) -> str:
        return f"{self.width}x{self.height}+{self.x_offset}+{self.y_offset}"

    @property
    def is_landscape(self) -> bool:
        """True when width >= height (gif scales by width)."""
        return self.width >= self.height

    def even(self) -> "CaptureRegion":
        """Round width and height down to even numbers for yuv encoders."""
        return CaptureRegion(
            width=max(2, self.width - self.width % 2),
            height=max(2, self.height - self.height % 2),
            x_offset=self.x_offset,
            y_offset=self.y_offset,
        )


@dataclass(frozen=True)
class RecordingHandle:
    """A running video/gif capture, persisted between invocations."""
    pid: int
    kind: CaptureKind
    temp_path: Path
    final_path: Optional[Path] = None
    landscape: Optional[bool] = None

    @property
    def output_path(self) -> Path:
        return self.final_path or self.temp_path


@dataclass
class RecordingResult:
    """Result of stopping a recording."""
    kind: CaptureKind
    file_path: Path
    duration: Optional[float] = None
    file_size: Optional[float] = None

    @property
    def uploadable(self) -> bool:
        # Plain video goes to disk only.
        return self.kind is CaptureKind.GIF


@dataclass(frozen=True)
class Credentials:
    """Stored imgur access token."""
    access_token: Optional[str] = None
    expiry: Optional[int] = None

    def is_valid(self, now: Optional[float] = None, refresh_window: int = 600) -> bool:
        """Check the token exists and lives longer than the refresh window.

        Args:
            now: Current epoch seconds (defaults to time.time()).
            refresh_window: Seconds before expiry at which the token is
                already treated as expired.
        """
        if not self.access_token or self.expiry is None:
            return False
        if now is None:
            now = time.time()
        return self.expiry - now > refresh_window
