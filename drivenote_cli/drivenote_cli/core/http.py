"""Minimal HTTP helpers for the CLI.

The implementation uses :mod:`urllib` from the Python standard library.
Both the identity provider and the Graph drive API are plain REST services
so a couple of small functions cover every call the CLI makes.  HTTP
failures are translated into the exceptions in :mod:`.errors` and left for
the caller to report.
"""

from __future__ import annotations

import json
import logging
from typing import Any, Dict
from urllib.error import HTTPError, URLError
from urllib.parse import urlencode, urljoin, urlsplit
from urllib.request import HTTPRedirectHandler, Request, build_opener, urlopen

from .errors import ApiError, AuthError, DecodeError, NotFoundError

logger = logging.getLogger(__name__)

_REDIRECT_CODES = (301, 302, 303, 307, 308)


def http_json(
    method: str,
    url: str,
    token: str,
    payload: Dict[str, Any] | None = None,
    *,
    data: bytes | None = None,
    content_type: str | None = None,
    timeout: int = 60,
) -> Dict[str, Any] | bytes:
    """Perform an authenticated request and return the parsed JSON body.

    ``payload`` is sent as a JSON body.  ``data`` is sent verbatim with
    ``content_type`` (``application/octet-stream`` by default), which is how
    file content is uploaded.

    A 404 raises :class:`NotFoundError`, any other HTTP or network failure
    raises :class:`ApiError`.
    """

    headers = {"Accept": "application/json", "Authorization": f"Bearer {token}"}
    body = None
    if payload is not None:
        headers["Content-Type"] = "application/json"
        body = json.dumps(payload).encode("utf-8")
    elif data is not None:
        headers["Content-Type"] = content_type or "application/octet-stream"
        body = data
    req = Request(url=url, method=method.upper(), headers=headers, data=body)
    logger.debug("%s %s", method.upper(), url)
    try:
        with urlopen(req, timeout=timeout) as resp:
            return _read_body(resp)
    except HTTPError as e:
        raise _api_error(e, url) from None
    except URLError as e:
        raise ApiError(f"Network error: {e.reason}") from e


class _NoRedirect(HTTPRedirectHandler):
    def redirect_request(self, req, fp, code, msg, hdrs, newurl):
        return None


def http_download(url: str, token: str, *, timeout: int = 60) -> bytes:
    """Fetch file content and return the raw bytes.

    Graph answers content requests with a redirect to a pre-authenticated
    download URL on another host.  The redirect is followed by hand with a
    plain request so the bearer token is only ever sent to ``url``.
    """

    req = Request(url=url, method="GET", headers={"Authorization": f"Bearer {token}"})
    logger.debug("GET %s", url)
    opener = build_opener(_NoRedirect)
    try:
        try:
            resp = opener.open(req, timeout=timeout)
        except HTTPError as e:
            location = e.headers.get("Location") if e.code in _REDIRECT_CODES else None
            if not location:
                raise
        else:
            with resp:
                return resp.read()
        location = urljoin(url, location)
        logger.debug("Following download redirect to %s", urlsplit(location).netloc)
        with urlopen(location, timeout=timeout) as final:
            return final.read()
    except HTTPError as e:
        raise _api_error(e, url) from None
    except URLError as e:
        raise ApiError(f"Network error: {e.reason}") from e


def http_form(url: str, fields: Dict[str, str], *, timeout: int = 60) -> Dict[str, Any]:
    """POST a form-encoded body to the token endpoint and return its JSON.

    Every failure here is an authentication failure from the caller's point
    of view, so HTTP and network errors raise :class:`AuthError`.
    """

    headers = {
        "Accept": "application/json",
        "Content-Type": "application/x-www-form-urlencoded",
    }
    body = urlencode(fields).encode("utf-8")
    req = Request(url=url, method="POST", headers=headers, data=body)
    logger.debug("POST %s grant_type=%s", url, fields.get("grant_type"))
    try:
        with urlopen(req, timeout=timeout) as resp:
            data = _read_body(resp)
    except HTTPError as e:
        raise AuthError(_error_message(e), status=e.code) from None
    except URLError as e:
        raise AuthError(f"Network error: {e.reason}") from e
    if not isinstance(data, dict):
        raise DecodeError("Token endpoint did not return a JSON object")
    return data


def _read_body(resp) -> Dict[str, Any] | bytes:
    ctype = (resp.headers.get("Content-Type") or "").lower()
    raw = resp.read()
    if "application/json" not in ctype:
        return raw
    try:
        return json.loads(raw.decode("utf-8"))
    except ValueError as e:
        raise DecodeError(f"Malformed JSON response: {e}") from e


def _error_message(e: HTTPError) -> str:
    """Return the most useful message found in an error response.

    Graph wraps errors as ``{"error": {"code": ..., "message": ...}}`` while
    the identity provider uses ``{"error": ..., "error_description": ...}``.
    """

    body = e.read().decode("utf-8", errors="ignore")
    message = body or e.reason or f"HTTP {e.code}"
    try:
        data = json.loads(body)
    except ValueError:
        return f"[HTTP {e.code}] {message}"
    if isinstance(data, dict):
        err = data.get("error")
        if isinstance(err, dict):
            message = err.get("message") or err.get("code") or message
        elif err:
            message = data.get("error_description") or err
    return f"[HTTP {e.code}] {message}"


def _api_error(e: HTTPError, url: str) -> ApiError:
    message = _error_message(e)
    logger.debug("HTTP %s from %s: %s", e.code, url, message)
    if e.code == 404:
        return NotFoundError(message, status=404)
    return ApiError(message, status=e.code)
