"""Single logged GET used by every device call."""

from typing import Optional

import requests

from ..diagnostics import RequestLog
from ..errors import ServerError, TransportError


def logged_get(url: str, *, timeout: float, request_log: Optional[RequestLog] = None) -> requests.Response:
    """Issue one GET, log it before and after, and map failures to RemoteError.

    Raises TransportError (with `unreachable` set for connect/DNS/timeout
    failures) or ServerError for non-200 responses.
    """
    entry_id = request_log.log_request(url) if request_log is not None else None
    try:
        resp = requests.get(url, timeout=timeout)
    except requests.exceptions.Timeout as exc:
        if request_log is not None:
            request_log.log_response(entry_id, url, None, None, exc)
        raise TransportError(str(exc) or "timed out", timed_out=True) from exc
    except requests.exceptions.ConnectionError as exc:
        if request_log is not None:
            request_log.log_response(entry_id, url, None, None, exc)
        raise TransportError(str(exc) or "connection failed", unreachable=True) from exc
    except requests.exceptions.RequestException as exc:
        if request_log is not None:
            request_log.log_response(entry_id, url, None, None, exc)
        raise TransportError(str(exc) or exc.__class__.__name__) from exc

    status = int(getattr(resp, "status_code", 0) or 0)
    if request_log is not None:
        request_log.log_response(entry_id, url, status, getattr(resp, "content", None), None)
    if status != 200:
        raise ServerError(status)
    return resp
