"""Error taxonomy shared by the command client, probe and preview poller.

Every failure is per-operation and recoverable by retrying the operation.
`str(error)` is a human-readable reason suitable for showing to the user.
"""

from typing import Optional


class RemoteError(Exception):
    """Base class for all device-control failures."""

    code = "remote_error"


class InvalidAddress(RemoteError):
    code = "invalid_address"

    def __init__(self, message: str = "Please enter an IP address") -> None:
        super().__init__(message)


class HostUnreachable(RemoteError):
    code = "host_unreachable"

    def __init__(self, message: str = "Unable to find Enigma2 based set-top box") -> None:
        super().__init__(message)


class TransportError(RemoteError):
    """Network-level failure; `unreachable` marks DNS/refused/timeout class errors."""

    code = "transport_error"

    def __init__(self, detail: str, *, unreachable: bool = False, timed_out: bool = False) -> None:
        self.detail = str(detail or "")
        self.unreachable = bool(unreachable or timed_out)
        self.timed_out = bool(timed_out)
        super().__init__(f"Connection error: {self.detail}")


class ServerError(RemoteError):
    code = "server_error"

    def __init__(self, status_code: int) -> None:
        self.status_code = int(status_code)
        super().__init__(f"Server returned status code {self.status_code}")


class DecodeError(RemoteError):
    code = "decode_error"

    def __init__(self, detail: Optional[str] = None) -> None:
        self.detail = str(detail or "")
        msg = "Invalid response or no data"
        if self.detail:
            msg = f"{msg}: {self.detail}"
        super().__init__(msg)


class NotConnected(RemoteError):
    code = "not_connected"

    def __init__(self, message: str = "Not connected to an Enigma2 box") -> None:
        super().__init__(message)


class ReconnectExhausted(RemoteError):
    code = "reconnect_exhausted"

    def __init__(self, attempts: int) -> None:
        self.attempts = int(attempts)
        super().__init__(f"Reconnection failed after {self.attempts} attempts")


class ConnectionCancelled(RemoteError):
    """A connection attempt finished after a newer attempt or a disconnect took over."""

    code = "connection_cancelled"

    def __init__(self, message: str = "Connection attempt was cancelled") -> None:
        super().__init__(message)
