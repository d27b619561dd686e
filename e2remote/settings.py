import json
import os
import threading
import uuid
from typing import Any, Dict, List, Optional

from . import config
from .logging_config import log


DEFAULT_SETTINGS: Dict[str, Any] = {
    "saved_devices": [],
    "preview_high_resolution": False,
    "debug_filter_common_requests": True,
    "preview_refresh_interval_s": 5.0,
}

MIN_REFRESH_INTERVAL_S = 0.5


def _clean_devices(raw: Any) -> List[str]:
    """Normalize a persisted device list: strings only, stripped, deduplicated."""
    out: List[str] = []
    if not isinstance(raw, list):
        return out
    for x in raw:
        s = str(x or "").strip()
        if s and s not in out:
            out.append(s)
    return out


def _coerce(key: str, value: Any) -> Any:
    """Normalize one setting to its stored type; bad numbers fall back to the default."""
    if key == "saved_devices":
        return _clean_devices(value)
    if key == "preview_refresh_interval_s":
        try:
            return max(MIN_REFRESH_INTERVAL_S, float(value))
        except (TypeError, ValueError):
            return float(DEFAULT_SETTINGS[key])
    return bool(value)


class SettingsStore:
    """JSON-backed preferences and saved device addresses."""

    def __init__(self, path: Optional[str] = None) -> None:
        """Initialize SettingsStore state and collaborator references."""
        self.path = path or config.SETTINGS_FILE
        self._lock = threading.RLock()
        self._data: Dict[str, Any] = dict(DEFAULT_SETTINGS)
        self._data["saved_devices"] = []
        self.load()

    def load(self) -> None:
        """Read settings from disk, falling back to defaults."""
        loaded: Dict[str, Any] = dict(DEFAULT_SETTINGS)
        loaded["saved_devices"] = []
        try:
            if os.path.exists(self.path):
                with open(self.path, "r", encoding="utf-8") as f:
                    data = json.load(f)
                if isinstance(data, dict):
                    for key in DEFAULT_SETTINGS:
                        if key in data:
                            loaded[key] = data[key]
        except Exception:
            log.exception("Failed to load settings from %s", self.path)
        for key in DEFAULT_SETTINGS:
            loaded[key] = _coerce(key, loaded.get(key))
        with self._lock:
            self._data = loaded

    def _save_locked(self) -> None:
        """Write settings atomically through a temp file."""
        os.makedirs(os.path.dirname(self.path) or ".", exist_ok=True)
        tmp_path = self.path + f".tmp-{uuid.uuid4().hex[:8]}"
        try:
            with open(tmp_path, "w", encoding="utf-8") as f:
                json.dump(self._data, f, ensure_ascii=False, indent=2)
            os.replace(tmp_path, self.path)
        finally:
            try:
                if os.path.exists(tmp_path):
                    os.remove(tmp_path)
            except Exception:
                pass

    def save(self) -> None:
        try:
            with self._lock:
                self._save_locked()
        except Exception:
            log.exception("Failed to save settings")

    def get(self, key: str, default: Any = None) -> Any:
        with self._lock:
            value = self._data.get(key, default)
            return list(value) if isinstance(value, list) else value

    def set(self, key: str, value: Any) -> None:
        if key not in DEFAULT_SETTINGS:
            raise KeyError(key)
        with self._lock:
            self._data[key] = _coerce(key, value)
        self.save()

    def saved_devices(self) -> List[str]:
        with self._lock:
            return list(self._data["saved_devices"])

    def remember_device(self, address: str) -> bool:
        """Append `address` unless already stored; returns True when added."""
        addr = str(address or "").strip()
        if not addr:
            return False
        with self._lock:
            devices = self._data["saved_devices"]
            if addr in devices:
                return False
            devices.append(addr)
        self.save()
        return True

    def forget_device(self, address: str) -> bool:
        addr = str(address or "").strip()
        with self._lock:
            devices = self._data["saved_devices"]
            if addr not in devices:
                return False
            devices.remove(addr)
        self.save()
        return True
