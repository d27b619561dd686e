"""Device HTTP client package."""

from .commands import CommandClient
from .preview import PreviewPoller, decode_frame
from .probe import ConnectivityProbe
from .state import ConnectionState, PreviewFrame, PreviewState

__all__ = [
    "CommandClient",
    "ConnectionState",
    "ConnectivityProbe",
    "PreviewFrame",
    "PreviewPoller",
    "PreviewState",
    "decode_frame",
]
