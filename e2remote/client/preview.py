"""Live preview poller for the `/grab` screen-grab endpoint.

Each `start()` opens a new generation with its own timer thread and stop
event. A fetch result is applied only while its generation is current, so a
late completion from a stopped or restarted session is dropped without
touching PreviewState. `requests` cannot abort a call in flight, which makes
the generation check the cancellation mechanism.
"""

import threading
import time
from concurrent.futures import Future
from dataclasses import replace
from io import BytesIO
from typing import Callable, Optional

from PIL import Image, UnidentifiedImageError

from .. import config
from ..diagnostics import RequestLog
from ..errors import DecodeError, RemoteError, TransportError
from ..logging_config import log
from ..protocol import grab_url, normalize_address
from .http import logged_get
from .state import PreviewFrame, PreviewState


def decode_frame(data: bytes) -> PreviewFrame:
    """Decode screen-grab bytes with Pillow or raise DecodeError."""
    if not data:
        raise DecodeError("empty body")
    try:
        with Image.open(BytesIO(data)) as img:
            img.load()
            width, height = img.size
    except (UnidentifiedImageError, Image.DecompressionBombError, OSError, ValueError) as exc:
        raise DecodeError(str(exc)) from exc
    return PreviewFrame(data=bytes(data), width=int(width), height=int(height))


class PreviewPoller:
    def __init__(
        self,
        request_log: Optional[RequestLog] = None,
        timeout: Optional[float] = None,
        on_change: Optional[Callable[[PreviewState], None]] = None,
    ) -> None:
        """Initialize PreviewPoller state and collaborator references."""
        self.request_log = request_log
        self.timeout = timeout
        self.on_change = on_change
        self._lock = threading.RLock()
        self._state = PreviewState(interval_s=float(config.PREVIEW_INTERVAL_S))
        self._generation = 0
        self._stop_event: Optional[threading.Event] = None
        self._thread: Optional[threading.Thread] = None
        self._first_image: Optional[Future] = None

    def snapshot(self) -> PreviewState:
        with self._lock:
            return replace(self._state)

    @property
    def running(self) -> bool:
        with self._lock:
            return self._thread is not None

    def _notify(self, snap: PreviewState) -> None:
        cb = self.on_change
        if cb is None:
            return
        try:
            cb(snap)
        except Exception:
            log.exception("Preview state listener failed")

    def fetch_once(self, address: str, high_resolution: bool = False) -> PreviewFrame:
        """Fetch and decode a single screen grab."""
        url = grab_url(normalize_address(address), high_resolution)
        timeout = float(config.PREVIEW_TIMEOUT_S if self.timeout is None else self.timeout)
        resp = logged_get(url, timeout=timeout, request_log=self.request_log)
        return decode_frame(resp.content)

    def start(
        self,
        address: str,
        interval_s: Optional[float] = None,
        high_resolution: Optional[bool] = None,
    ) -> Future:
        """Stop any running session and begin polling `address`.

        Returns a future resolved with the first frame of this session.
        """
        self.stop()
        addr = normalize_address(address)
        interval = float(config.PREVIEW_INTERVAL_S if interval_s is None else interval_s)
        if interval <= 0:
            raise ValueError("interval_s must be positive")

        first: Future = Future()
        stop_event = threading.Event()
        with self._lock:
            self._generation += 1
            generation = self._generation
            hd = self._state.high_resolution if high_resolution is None else bool(high_resolution)
            self._state.address = addr
            self._state.interval_s = interval
            self._state.high_resolution = hd
            self._state.running = True
            self._state.loading = False
            self._stop_event = stop_event
            self._first_image = first
            self._thread = threading.Thread(
                target=self._run,
                args=(generation, addr, interval, hd, stop_event),
                name=f"e2remote-preview-{generation}",
                daemon=True,
            )
            thread = self._thread
            snap = replace(self._state)
        log.info("Starting preview @ %s resolution: %s every %.1fs", addr, "HD" if hd else "SD", interval)
        self._notify(snap)
        thread.start()
        return first

    def stop(self) -> None:
        """Stop polling; safe to call when already stopped."""
        with self._lock:
            if self._thread is None:
                return
            self._generation += 1
            if self._stop_event is not None:
                self._stop_event.set()
            first = self._first_image
            self._thread = None
            self._stop_event = None
            self._first_image = None
            self._state.loading = False
            self._state.running = False
            snap = replace(self._state)
        if first is not None and not first.done():
            first.cancel()
        log.info("Preview refresh stopped")
        self._notify(snap)

    def _run(
        self,
        generation: int,
        address: str,
        interval: float,
        high_resolution: bool,
        stop_event: threading.Event,
    ) -> None:
        next_at = time.monotonic()
        while not stop_event.is_set():
            self._tick(generation, address, high_resolution)
            next_at += interval
            now = time.monotonic()
            if next_at < now:
                # Fetch overran the interval; skip missed ticks.
                next_at = now
            stop_event.wait(next_at - now)

    def _tick(self, generation: int, address: str, high_resolution: bool) -> None:
        """Fetch one frame and apply it if `generation` is still current."""
        with self._lock:
            if generation != self._generation:
                return
            self._state.loading = True
            snap = replace(self._state)
        self._notify(snap)

        try:
            frame = self.fetch_once(address, high_resolution)
        except RemoteError as exc:
            self._apply_error(generation, exc)
            return
        except Exception as exc:
            log.exception("Unexpected preview fetch failure")
            self._apply_error(generation, TransportError(str(exc) or exc.__class__.__name__))
            return
        self._apply_frame(generation, frame)

    def _apply_error(self, generation: int, exc: RemoteError) -> None:
        with self._lock:
            if generation != self._generation:
                return
            # Keep the last good image on screen.
            self._state.loading = False
            self._state.error = str(exc)
            snap = replace(self._state)
        log.warning("Preview fetch failed: %s", exc)
        self._notify(snap)

    def _apply_frame(self, generation: int, frame: PreviewFrame) -> None:
        with self._lock:
            if generation != self._generation:
                return
            now = time.time()
            if now <= self._state.last_updated:
                now = self._state.last_updated + 1e-6
            self._state.image = frame.data
            self._state.width = frame.width
            self._state.height = frame.height
            self._state.error = None
            self._state.loading = False
            self._state.last_updated = now
            snap = replace(self._state)
            first = self._first_image
            self._first_image = None
        if first is not None and not first.done():
            first.set_result(frame)
        self._notify(snap)
