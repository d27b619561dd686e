"""Fire-and-forget remote-control and power-state commands."""

import threading
from typing import Callable, Optional

from .. import config
from ..diagnostics import RequestLog
from ..errors import NotConnected, RemoteError, TransportError
from ..logging_config import log
from ..protocol import power_state_url, remote_control_url
from .http import logged_get
from .state import ConnectionSource


class CommandClient:
    """Builds and fires single GET requests; one attempt per call, no retry."""

    def __init__(
        self,
        request_log: Optional[RequestLog] = None,
        connection: Optional[ConnectionSource] = None,
        timeout: Optional[float] = None,
    ) -> None:
        """Initialize CommandClient state and collaborator references."""
        self.request_log = request_log
        self.connection = connection
        self.timeout = timeout

    def _timeout(self) -> float:
        return float(config.COMMAND_TIMEOUT_S if self.timeout is None else self.timeout)

    def _require_connected(self) -> None:
        if self.connection is None:
            return
        if not self.connection.snapshot().connected:
            raise NotConnected()

    def send(self, address: str, command_code: int) -> None:
        """Press a remote-control button on the device."""
        url = remote_control_url(address, command_code)
        self._require_connected()
        logged_get(url, timeout=self._timeout(), request_log=self.request_log)
        log.info("Sent command %s to %s", int(command_code), address)

    def send_power_state(self, address: str, state_code: int) -> None:
        """Switch the device power state (0 = standby)."""
        url = power_state_url(address, state_code)
        self._require_connected()
        logged_get(url, timeout=self._timeout(), request_log=self.request_log)
        log.info("Sent power state %s to %s", int(state_code), address)

    def send_async(
        self,
        address: str,
        code: int,
        on_done: Optional[Callable[[Optional[RemoteError]], None]] = None,
        *,
        power_state: bool = False,
    ) -> threading.Thread:
        """Run one send on a background thread and report the outcome once."""

        def _bg() -> None:
            """Execute the request off the caller's thread."""
            err: Optional[RemoteError] = None
            try:
                if power_state:
                    self.send_power_state(address, code)
                else:
                    self.send(address, code)
            except RemoteError as exc:
                log.warning("Command %s to %s failed: %s", code, address, exc)
                err = exc
            except Exception as exc:
                log.exception("Command %s to %s failed unexpectedly", code, address)
                err = TransportError(str(exc) or exc.__class__.__name__)
            if on_done is not None:
                on_done(err)

        t = threading.Thread(target=_bg, daemon=True)
        t.start()
        return t
