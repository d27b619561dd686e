"""OpenWebif endpoint paths, URL builders and the remote-control code table."""

from enum import IntEnum
from typing import Dict, Optional
from urllib.parse import urlencode, urlsplit

from .errors import InvalidAddress


ABOUT_PATH = "/web/about"
REMOTE_CONTROL_PATH = "/web/remotecontrol"
POWER_STATE_PATH = "/web/powerstate"
GRAB_PATH = "/grab"

# Probe and preview traffic hidden by the "hide common" diagnostic filter.
COMMON_PATHS = (ABOUT_PATH, GRAB_PATH)


class RemoteKey(IntEnum):
    """Remote-control button codes understood by `/web/remotecontrol`."""

    KEY_0 = 100
    KEY_1 = 101
    KEY_2 = 102
    KEY_3 = 103
    KEY_4 = 104
    KEY_5 = 105
    KEY_6 = 106
    KEY_7 = 107
    KEY_8 = 108
    KEY_9 = 109
    # Arrow keys reuse the codes of digits 3, 5, 6 and 8 (enum aliases).
    UP = 103
    LEFT = 105
    RIGHT = 106
    DOWN = 108
    VOLUME_DOWN = 114
    VOLUME_UP = 115
    POWER = 116
    CHANNEL_UP = 402
    CHANNEL_DOWN = 403
    MENU = 139
    HELP = 138
    EXIT = 174
    AV = 227
    OK = 352
    EPG = 358
    SUBTITLE = 370
    TEXT = 388
    PVR = 393
    RED = 398
    GREEN = 399
    YELLOW = 400
    BLUE = 401


class PowerState(IntEnum):
    """Codes accepted by `/web/powerstate?newstate=`."""

    STANDBY = 0


def digit_key(digit: int) -> RemoteKey:
    """Return the key code for a numeric keypad digit 0-9."""
    d = int(digit)
    if d < 0 or d > 9:
        raise ValueError(f"digit out of range: {digit}")
    return RemoteKey(100 + d)


def key_code(name: str) -> int:
    """Resolve a button name (`volume_up`, `red`, `3`, `left`) to its code."""
    text = str(name or "").strip().lower()
    if text.isdigit() and len(text) == 1:
        return int(digit_key(int(text)))
    try:
        return int(RemoteKey[text.upper()])
    except KeyError:
        raise ValueError(f"unknown remote key: {name}") from None


def normalize_address(address: Optional[str]) -> str:
    """Return a stripped device address or raise InvalidAddress."""
    addr = str(address or "").strip()
    if not addr:
        raise InvalidAddress()
    if any(ch.isspace() for ch in addr) or any(ch in addr for ch in "/?#@\\"):
        raise InvalidAddress("Invalid IP address format")
    try:
        parts = urlsplit(f"http://{addr}/")
        host = parts.hostname
        _ = parts.port
    except ValueError:
        raise InvalidAddress("Invalid IP address format") from None
    if not host:
        raise InvalidAddress("Invalid IP address format")
    return addr


def build_url(address: Optional[str], path: str, query: Optional[Dict[str, object]] = None) -> str:
    """Build `http://{address}{path}?{query}` for a validated address."""
    addr = normalize_address(address)
    url = f"http://{addr}{path}"
    if query:
        url = f"{url}?{urlencode([(k, str(v)) for k, v in query.items()])}"
    return url


def about_url(address: Optional[str]) -> str:
    return build_url(address, ABOUT_PATH)


def remote_control_url(address: Optional[str], command: int) -> str:
    return build_url(address, REMOTE_CONTROL_PATH, {"command": int(command)})


def power_state_url(address: Optional[str], new_state: int) -> str:
    return build_url(address, POWER_STATE_PATH, {"newstate": int(new_state)})


def grab_url(address: Optional[str], high_resolution: bool) -> str:
    """Screen-grab URL: full-resolution `mode=all` or 720-line SD."""
    if high_resolution:
        return build_url(address, GRAB_PATH, {"format": "jpg", "mode": "all"})
    return build_url(address, GRAB_PATH, {"format": "jpg", "r": 720})


def is_common_request(url: str) -> bool:
    """Return True for probe and screen-grab traffic."""
    try:
        path = urlsplit(str(url or "")).path
    except ValueError:
        return False
    return any(p in path for p in COMMON_PATHS)
