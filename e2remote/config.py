import os
from typing import Union


VERSION = "v1.0.0"


def _env_float(name: str, default: Union[float, str]) -> float:
    """Read a float from the environment, keeping the default on bad input."""
    raw = str(os.environ.get(name, "") or "").strip()
    if not raw:
        return float(default)
    try:
        return float(raw)
    except ValueError:
        return float(default)


def _env_int(name: str, default: Union[int, str]) -> int:
    """Read an int from the environment, keeping the default on bad input."""
    raw = str(os.environ.get(name, "") or "").strip()
    if not raw:
        return int(default)
    try:
        return int(raw)
    except ValueError:
        return int(default)


DEBUG = os.environ.get("E2REMOTE_DEBUG", "0") == "1"
CONSOLE_LOG = os.environ.get("E2REMOTE_CONSOLE", "0") == "1"
LOG_ENABLED = os.environ.get("E2REMOTE_LOG", "0") == "1" or CONSOLE_LOG
VERBOSE_HTTP_LOG = os.environ.get("E2REMOTE_VERBOSE_HTTP_LOG", "1") == "1"

PROBE_TIMEOUT_S = _env_float("E2REMOTE_PROBE_TIMEOUT_S", 15.0)
COMMAND_TIMEOUT_S = _env_float("E2REMOTE_COMMAND_TIMEOUT_S", 10.0)
PREVIEW_TIMEOUT_S = _env_float("E2REMOTE_PREVIEW_TIMEOUT_S", 10.0)
PREVIEW_INTERVAL_S = _env_float("E2REMOTE_PREVIEW_INTERVAL_S", 5.0)
REQUEST_LOG_MAX_ENTRIES = _env_int("E2REMOTE_REQUEST_LOG_MAX_ENTRIES", 100)
RESPONSE_SUMMARY_CHARS = 500
RECONNECT_MAX_ATTEMPTS = _env_int("E2REMOTE_RECONNECT_MAX_ATTEMPTS", 5)
RECONNECT_INTERVAL_S = _env_float("E2REMOTE_RECONNECT_INTERVAL_S", 3.0)

_DEFAULT_DATA_DIR = os.path.join(os.path.expanduser("~"), ".e2remote")
DATA_DIR = os.path.abspath(str(os.environ.get("E2REMOTE_DATA_DIR", _DEFAULT_DATA_DIR) or _DEFAULT_DATA_DIR))
LOG_FILE = os.path.join(DATA_DIR, "e2remote.log")
SETTINGS_FILE = os.path.join(DATA_DIR, "e2remote_settings.json")


def reload_from_env() -> None:
    """Reload runtime configuration from environment variables."""
    global DEBUG, CONSOLE_LOG, LOG_ENABLED, VERBOSE_HTTP_LOG
    global PROBE_TIMEOUT_S, COMMAND_TIMEOUT_S, PREVIEW_TIMEOUT_S, PREVIEW_INTERVAL_S
    global REQUEST_LOG_MAX_ENTRIES, RECONNECT_MAX_ATTEMPTS, RECONNECT_INTERVAL_S
    global DATA_DIR, LOG_FILE, SETTINGS_FILE

    DEBUG = os.environ.get("E2REMOTE_DEBUG", "0") == "1"
    CONSOLE_LOG = os.environ.get("E2REMOTE_CONSOLE", "0") == "1"
    LOG_ENABLED = os.environ.get("E2REMOTE_LOG", "0") == "1" or CONSOLE_LOG
    VERBOSE_HTTP_LOG = os.environ.get("E2REMOTE_VERBOSE_HTTP_LOG", "1") == "1"

    PROBE_TIMEOUT_S = _env_float("E2REMOTE_PROBE_TIMEOUT_S", PROBE_TIMEOUT_S)
    COMMAND_TIMEOUT_S = _env_float("E2REMOTE_COMMAND_TIMEOUT_S", COMMAND_TIMEOUT_S)
    PREVIEW_TIMEOUT_S = _env_float("E2REMOTE_PREVIEW_TIMEOUT_S", PREVIEW_TIMEOUT_S)
    PREVIEW_INTERVAL_S = _env_float("E2REMOTE_PREVIEW_INTERVAL_S", PREVIEW_INTERVAL_S)
    REQUEST_LOG_MAX_ENTRIES = _env_int("E2REMOTE_REQUEST_LOG_MAX_ENTRIES", REQUEST_LOG_MAX_ENTRIES)
    RECONNECT_MAX_ATTEMPTS = _env_int("E2REMOTE_RECONNECT_MAX_ATTEMPTS", RECONNECT_MAX_ATTEMPTS)
    RECONNECT_INTERVAL_S = _env_float("E2REMOTE_RECONNECT_INTERVAL_S", RECONNECT_INTERVAL_S)

    data_dir = str(os.environ.get("E2REMOTE_DATA_DIR", "") or "").strip()
    if data_dir:
        DATA_DIR = os.path.abspath(data_dir)
        LOG_FILE = os.path.join(DATA_DIR, "e2remote.log")
        SETTINGS_FILE = os.path.join(DATA_DIR, "e2remote_settings.json")
