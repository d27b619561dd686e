"""Bounded request/response log used by the debug panel.

The log is a diagnostic side-channel: it records every HTTP attempt before it
is issued and fills in the outcome when it completes. All writers funnel
through `RequestLog`, which serializes mutation under one lock.
"""

import itertools
import threading
import time
from collections import deque
from dataclasses import dataclass, replace
from typing import Callable, Deque, List, Optional

from . import config
from .logging_config import log
from .protocol import is_common_request


@dataclass
class RequestLogEntry:
    id: int
    timestamp: float
    url: str
    status_code: Optional[int] = None
    response: Optional[str] = None

    @property
    def pending(self) -> bool:
        return self.response is None


def summarize_response(body: Optional[bytes], error: Optional[BaseException]) -> str:
    """Build the short response text shown next to a log entry."""
    if error is not None:
        return f"Error: {error}"
    if not body:
        return "No data received"
    try:
        text = bytes(body).decode("utf-8")
    except UnicodeDecodeError:
        return f"Binary response ({len(body)} bytes)"
    limit = int(config.RESPONSE_SUMMARY_CHARS)
    out = f"Response: {text[:limit]}"
    if len(text) > limit:
        out += "..."
    return out


class RequestLog:
    def __init__(
        self,
        max_entries: Optional[int] = None,
        on_change: Optional[Callable[[], None]] = None,
    ) -> None:
        """Initialize RequestLog state and collaborator references."""
        size = int(config.REQUEST_LOG_MAX_ENTRIES if max_entries is None else max_entries)
        self.max_entries = max(1, size)
        self.on_change = on_change
        self._lock = threading.Lock()
        self._entries: Deque[RequestLogEntry] = deque(maxlen=self.max_entries)
        self._ids = itertools.count(1)

    def _notify(self) -> None:
        cb = self.on_change
        if cb is None:
            return
        try:
            cb()
        except Exception:
            log.exception("Request log listener failed")

    def log_request(self, url: str) -> int:
        """Record an outgoing request and return its entry id."""
        with self._lock:
            entry = RequestLogEntry(id=next(self._ids), timestamp=time.time(), url=str(url))
            self._entries.append(entry)
        if config.VERBOSE_HTTP_LOG:
            log.debug("HTTP -> %s", url)
        self._notify()
        return entry.id

    def log_response(
        self,
        entry_id: Optional[int],
        url: str,
        status_code: Optional[int] = None,
        body: Optional[bytes] = None,
        error: Optional[BaseException] = None,
    ) -> None:
        """Attach the outcome to its request entry."""
        summary = summarize_response(body, error)
        with self._lock:
            entry = self._find_locked(entry_id, str(url))
            if entry is None:
                # Request entry already evicted or never logged.
                self._entries.append(
                    RequestLogEntry(
                        id=next(self._ids),
                        timestamp=time.time(),
                        url=str(url),
                        status_code=status_code,
                        response=f"No matching request found. {summary}",
                    )
                )
            else:
                entry.status_code = status_code
                entry.response = summary
        if config.VERBOSE_HTTP_LOG:
            log.debug("HTTP <- %s status=%s %s", url, status_code if status_code is not None else "-", summary[:120])
        self._notify()

    def _find_locked(self, entry_id: Optional[int], url: str) -> Optional[RequestLogEntry]:
        if entry_id is not None:
            for entry in reversed(self._entries):
                if entry.id == entry_id:
                    return entry
            # Evicted; another pending entry for the same URL belongs to a different request.
            return None
        for entry in reversed(self._entries):
            if entry.url == url and entry.pending:
                return entry
        return None

    def entries(self, hide_common: bool = False) -> List[RequestLogEntry]:
        """Return copies of log entries, oldest first."""
        with self._lock:
            items = [replace(e) for e in self._entries]
        if hide_common:
            items = [e for e in items if not is_common_request(e.url)]
        return items

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()
        log.info("Request log cleared")
        self._notify()

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)
