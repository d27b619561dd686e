"""Device reachability probe and connection state.

A probe issues one GET against `/web/about` and races it against a timer of
the same duration. Whichever finishes first decides the outcome; the other
result is dropped. Every probe takes a new epoch, and only the current epoch
may write ConnectionState, so a probe superseded by a newer probe or by
`disconnect()` cannot flip the state after the fact. Its blocking caller
gets ConnectionCancelled instead of a result.
"""

import threading
from dataclasses import replace
from typing import Any, Callable, Dict, Optional

from .. import config
from ..diagnostics import RequestLog
from ..errors import (
    ConnectionCancelled,
    HostUnreachable,
    InvalidAddress,
    ReconnectExhausted,
    RemoteError,
    TransportError,
)
from ..logging_config import log
from ..protocol import about_url, normalize_address
from .http import logged_get
from .state import ConnectionState


TIMEOUT_MESSAGE = "Connection timed out - unable to reach the device"


class ConnectivityProbe:
    def __init__(
        self,
        request_log: Optional[RequestLog] = None,
        timeout: Optional[float] = None,
        on_change: Optional[Callable[[ConnectionState], None]] = None,
    ) -> None:
        """Initialize ConnectivityProbe state and collaborator references."""
        self.request_log = request_log
        self.timeout = timeout
        self.on_change = on_change
        self._lock = threading.RLock()
        self._state = ConnectionState()
        self._epoch = 0
        self._last_address: Optional[str] = None
        self._reconnect_cancel = threading.Event()

    def snapshot(self) -> ConnectionState:
        """Return a copy of the current connection state."""
        with self._lock:
            return replace(self._state)

    @property
    def last_address(self) -> Optional[str]:
        with self._lock:
            return self._last_address

    def is_current(self, epoch: int) -> bool:
        with self._lock:
            return epoch == self._epoch

    def _begin(self) -> int:
        with self._lock:
            self._epoch += 1
            return self._epoch

    def _update(self, epoch: Optional[int], **changes: Any) -> bool:
        """Apply state changes if `epoch` is still current (None applies always)."""
        with self._lock:
            if epoch is not None and epoch != self._epoch:
                return False
            for key, value in changes.items():
                setattr(self._state, key, value)
            snap = replace(self._state)
        cb = self.on_change
        if cb is not None:
            try:
                cb(snap)
            except Exception:
                log.exception("Connection state listener failed")
        return True

    def _resolve_timeout(self, timeout: Optional[float]) -> float:
        if timeout is not None:
            return max(0.0, float(timeout))
        if self.timeout is not None:
            return max(0.0, float(self.timeout))
        return float(config.PROBE_TIMEOUT_S)

    def _check(self, url: str, timeout: float) -> None:
        """Run the GET on a worker and wait at most `timeout` for it."""
        done = threading.Event()
        outcome: Dict[str, Optional[RemoteError]] = {}

        def _worker() -> None:
            """Perform the probe request; a result after the deadline is ignored."""
            try:
                logged_get(url, timeout=timeout, request_log=self.request_log)
                outcome["error"] = None
            except RemoteError as exc:
                outcome["error"] = exc
            except Exception as exc:
                outcome["error"] = TransportError(str(exc) or exc.__class__.__name__)
            finally:
                done.set()

        threading.Thread(target=_worker, daemon=True).start()
        if not done.wait(timeout):
            raise HostUnreachable(TIMEOUT_MESSAGE)

        err = outcome.get("error")
        if err is None:
            return
        if isinstance(err, TransportError) and err.unreachable:
            if err.timed_out:
                raise HostUnreachable(TIMEOUT_MESSAGE) from err
            raise HostUnreachable() from err
        raise err

    def _probe(self, epoch: int, address: Optional[str], timeout: Optional[float]) -> None:
        try:
            addr = normalize_address(address)
            url = about_url(addr)
        except InvalidAddress as exc:
            self._update(epoch, connected=False, connecting=False, address=None, last_error=str(exc))
            raise

        self._update(epoch, connected=False, connecting=True, address=None, last_error=None)
        log.info("Probing %s", addr)
        try:
            self._check(url, self._resolve_timeout(timeout))
        except RemoteError as exc:
            log.warning("Probe of %s failed: %s", addr, exc)
            if not self._update(epoch, connected=False, connecting=False, address=None, last_error=str(exc)):
                raise ConnectionCancelled() from exc
            raise

        if not self._update(epoch, connected=True, connecting=False, address=addr, last_error=None):
            log.info("Probe of %s succeeded after being superseded", addr)
            raise ConnectionCancelled()
        with self._lock:
            self._last_address = addr
        log.info("Connected to %s", addr)

    def probe(self, address: Optional[str], timeout: Optional[float] = None) -> None:
        """Check that `address` hosts a reachable box.

        Returns normally when connected; raises InvalidAddress,
        HostUnreachable, TransportError or ServerError otherwise, and
        ConnectionCancelled when a newer probe or `disconnect()` took over.
        """
        self._probe(self._begin(), address, timeout)

    def probe_async(
        self,
        address: Optional[str],
        on_done: Optional[Callable[[Optional[RemoteError]], None]] = None,
        timeout: Optional[float] = None,
    ) -> threading.Thread:
        """Probe on a background thread; `on_done` fires only if not superseded."""
        epoch = self._begin()

        def _bg() -> None:
            """Run the probe and report back unless a newer probe took over."""
            err: Optional[RemoteError] = None
            try:
                self._probe(epoch, address, timeout)
            except RemoteError as exc:
                err = exc
            if on_done is not None and self.is_current(epoch):
                on_done(err)

        t = threading.Thread(target=_bg, daemon=True)
        t.start()
        return t

    def disconnect(self) -> None:
        """Drop the connection and ignore any probe still in flight."""
        with self._lock:
            self._epoch += 1
            self._reconnect_cancel.set()
        self._update(None, connected=False, connecting=False, address=None, last_error=None)
        log.info("Disconnected")

    def reconnect(
        self,
        address: Optional[str] = None,
        attempts: Optional[int] = None,
        delay_s: Optional[float] = None,
        timeout: Optional[float] = None,
    ) -> None:
        """Probe up to `attempts` times with a fixed delay before each try.

        Raises ReconnectExhausted after the cap or when `disconnect()` cancels
        the loop. Nothing calls this automatically.
        """
        target = address or self.last_address
        if not target:
            raise InvalidAddress()
        limit = max(1, int(config.RECONNECT_MAX_ATTEMPTS if attempts is None else attempts))
        delay = max(0.0, float(config.RECONNECT_INTERVAL_S if delay_s is None else delay_s))

        cancel = threading.Event()
        with self._lock:
            self._reconnect_cancel = cancel

        for attempt in range(1, limit + 1):
            if cancel.is_set():
                raise ReconnectExhausted(attempt - 1)
            log.info("Connection lost. Reconnecting to %s (%s/%s)", target, attempt, limit)
            self._update(
                None,
                connected=False,
                connecting=False,
                address=None,
                last_error=f"Connection lost. Attempting to reconnect... ({attempt}/{limit})",
            )
            if cancel.wait(delay):
                raise ReconnectExhausted(attempt - 1)
            try:
                self.probe(target, timeout=timeout)
            except ConnectionCancelled:
                log.info("Reconnect to %s cancelled during attempt %s/%s", target, attempt, limit)
                raise ReconnectExhausted(attempt) from None
            except RemoteError as exc:
                log.warning("Reconnect attempt %s/%s failed: %s", attempt, limit, exc)
                continue
            if cancel.is_set():
                raise ReconnectExhausted(attempt)
            log.info("Reconnected to %s", target)
            return

        err = ReconnectExhausted(limit)
        if not cancel.is_set():
            self._update(None, connected=False, connecting=False, address=None, last_error=str(err))
        raise err
