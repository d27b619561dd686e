"""State records exposed to observers."""

from dataclasses import dataclass
from io import BytesIO
from typing import Optional, Protocol

from PIL import Image


@dataclass
class ConnectionState:
    connected: bool = False
    connecting: bool = False
    address: Optional[str] = None
    last_error: Optional[str] = None

    @property
    def idle(self) -> bool:
        return not self.connected and not self.connecting


class ConnectionSource(Protocol):
    def snapshot(self) -> ConnectionState:
        ...


@dataclass
class PreviewFrame:
    """Screen-grab bytes that Pillow decoded successfully."""

    data: bytes
    width: int
    height: int

    def to_image(self) -> Image.Image:
        """Return a Pillow image for the frame."""
        img = Image.open(BytesIO(self.data))
        img.load()
        return img


@dataclass
class PreviewState:
    image: Optional[bytes] = None
    width: int = 0
    height: int = 0
    loading: bool = False
    error: Optional[str] = None
    last_updated: float = 0.0
    high_resolution: bool = False
    interval_s: float = 5.0
    address: Optional[str] = None
    running: bool = False

    @property
    def resolution(self) -> str:
        return "HD" if self.high_resolution else "SD"
