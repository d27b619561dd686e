"""Composition root wiring the device client for a front end.

The controller owns one instance of each component and passes references
explicitly. A GUI subscribes through the `on_*` callbacks and calls the
intent methods; it decides itself when preview polling should run.
"""

import threading
from concurrent.futures import Future
from typing import Callable, List, Optional

from .client import CommandClient, ConnectionState, ConnectivityProbe, PreviewPoller, PreviewState
from .diagnostics import RequestLog, RequestLogEntry
from .errors import NotConnected, RemoteError
from .logging_config import log
from .protocol import PowerState, RemoteKey
from .settings import SettingsStore


class RemoteController:
    def __init__(
        self,
        settings: Optional[SettingsStore] = None,
        request_log: Optional[RequestLog] = None,
        on_connection_change: Optional[Callable[[ConnectionState], None]] = None,
        on_preview_change: Optional[Callable[[PreviewState], None]] = None,
    ) -> None:
        """Initialize RemoteController state and collaborator references."""
        self.settings = settings if settings is not None else SettingsStore()
        self.request_log = request_log if request_log is not None else RequestLog()
        self.probe = ConnectivityProbe(self.request_log, on_change=on_connection_change)
        self.commands = CommandClient(self.request_log, connection=self.probe)
        self.preview = PreviewPoller(self.request_log, on_change=on_preview_change)

    @property
    def state(self) -> ConnectionState:
        return self.probe.snapshot()

    @property
    def connected(self) -> bool:
        return self.probe.snapshot().connected

    def _address(self) -> str:
        snap = self.probe.snapshot()
        if not snap.connected or not snap.address:
            raise NotConnected()
        return snap.address

    def connect(self, address: str, timeout: Optional[float] = None) -> None:
        """Probe `address` and remember it after a successful connection."""
        self.probe.probe(address, timeout=timeout)
        snap = self.probe.snapshot()
        if snap.connected and snap.address:
            self.settings.remember_device(snap.address)

    def connect_async(
        self,
        address: str,
        on_done: Optional[Callable[[Optional[RemoteError]], None]] = None,
        timeout: Optional[float] = None,
    ) -> threading.Thread:
        def _done(err: Optional[RemoteError]) -> None:
            """Persist the address before handing the outcome to the caller."""
            if err is None:
                snap = self.probe.snapshot()
                if snap.connected and snap.address:
                    self.settings.remember_device(snap.address)
            if on_done is not None:
                on_done(err)

        return self.probe.probe_async(address, on_done=_done, timeout=timeout)

    def disconnect(self) -> None:
        self.preview.stop()
        self.probe.disconnect()

    def reconnect(self, attempts: Optional[int] = None, delay_s: Optional[float] = None) -> None:
        self.probe.reconnect(attempts=attempts, delay_s=delay_s)

    def send_key(self, code: int) -> None:
        self.commands.send(self._address(), int(code))

    def send_key_async(
        self,
        code: int,
        on_done: Optional[Callable[[Optional[RemoteError]], None]] = None,
    ) -> threading.Thread:
        return self.commands.send_async(self._address(), int(code), on_done)

    def standby(self) -> None:
        self.commands.send_power_state(self._address(), int(PowerState.STANDBY))

    def power_down(self) -> None:
        self.send_key(RemoteKey.POWER)

    def start_preview(
        self,
        interval_s: Optional[float] = None,
        high_resolution: Optional[bool] = None,
    ) -> Future:
        """Start polling the connected box; defaults come from settings."""
        address = self._address()
        if interval_s is None:
            interval_s = float(self.settings.get("preview_refresh_interval_s"))
        if high_resolution is None:
            high_resolution = bool(self.settings.get("preview_high_resolution"))
        self.settings.set("preview_high_resolution", bool(high_resolution))
        return self.preview.start(address, interval_s=interval_s, high_resolution=high_resolution)

    def stop_preview(self) -> None:
        self.preview.stop()

    def set_filter_common_requests(self, enabled: bool) -> None:
        self.settings.set("debug_filter_common_requests", bool(enabled))
        log.info("Filter common requests set to: %s", bool(enabled))

    def log_entries(self) -> List[RequestLogEntry]:
        """Request log entries, honouring the "hide common" preference."""
        return self.request_log.entries(hide_common=bool(self.settings.get("debug_filter_common_requests")))

    def saved_devices(self) -> List[str]:
        return self.settings.saved_devices()

    def forget_device(self, address: str) -> bool:
        return self.settings.forget_device(address)
