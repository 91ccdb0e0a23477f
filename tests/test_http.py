import pathlib
import sys
from io import BytesIO
from urllib.error import HTTPError, URLError
from urllib.parse import parse_qs

import pytest

sys.path.insert(0, str(pathlib.Path(__file__).resolve().parents[1] / "drivenote_cli"))
from drivenote_cli.core.http import http_download, http_json, http_form
from drivenote_cli.core.errors import ApiError, AuthError, DecodeError, NotFoundError


class FakeResponse:
    def __init__(self, body, ctype="application/json"):
        self._body = body
        self.headers = {"Content-Type": ctype}

    def read(self):
        return self._body

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        return False


def _raise(code, body):
    def fake_urlopen(req, timeout=60):
        raise HTTPError(req.full_url, code, "Error", None, BytesIO(body))
    return fake_urlopen


def test_http_json_not_found(monkeypatch):
    body = b'{"error":{"code":"itemNotFound","message":"Item does not exist"}}'
    monkeypatch.setattr("drivenote_cli.core.http.urlopen", _raise(404, body))
    with pytest.raises(NotFoundError) as exc:
        http_json("GET", "https://example/drive/root:/missing:/children", "token")
    assert exc.value.status == 404
    assert "Item does not exist" in str(exc.value)


def test_http_json_forbidden(monkeypatch):
    body = b'{"error":{"code":"accessDenied","message":"Access denied"}}'
    monkeypatch.setattr("drivenote_cli.core.http.urlopen", _raise(403, body))
    with pytest.raises(ApiError) as exc:
        http_json("GET", "https://example/drive/items/1", "token")
    assert not isinstance(exc.value, NotFoundError)
    assert exc.value.status == 403
    assert "[HTTP 403] Access denied" == str(exc.value)


def test_http_json_unauthorized_plain_body(monkeypatch):
    monkeypatch.setattr("drivenote_cli.core.http.urlopen", _raise(401, b"expired"))
    with pytest.raises(ApiError) as exc:
        http_json("GET", "https://example/drive/items/1", "token")
    assert exc.value.status == 401
    assert "expired" in str(exc.value)


def test_http_json_network_error(monkeypatch):
    def fake_urlopen(req, timeout=60):
        raise URLError("connection refused")

    monkeypatch.setattr("drivenote_cli.core.http.urlopen", fake_urlopen)
    with pytest.raises(ApiError) as exc:
        http_json("GET", "https://example/drive/items/1", "token")
    assert "Network error" in str(exc.value)
    assert exc.value.status is None


def test_http_json_malformed_body(monkeypatch):
    monkeypatch.setattr(
        "drivenote_cli.core.http.urlopen",
        lambda req, timeout=60: FakeResponse(b"{not json"),
    )
    with pytest.raises(DecodeError):
        http_json("GET", "https://example/drive/items/1", "token")


def test_http_json_keeps_non_json_bytes(monkeypatch):
    monkeypatch.setattr(
        "drivenote_cli.core.http.urlopen",
        lambda req, timeout=60: FakeResponse(b"plain", ctype="text/plain"),
    )
    assert http_json("GET", "https://example/content", "token") == b"plain"


class FakeOpener:
    def __init__(self, result):
        self.result = result
        self.requests = []

    def open(self, req, timeout=60):
        self.requests.append(req)
        if isinstance(self.result, Exception):
            raise self.result
        return self.result


def test_http_download_follows_redirect_without_token(monkeypatch):
    location = {"Location": "https://cdn.example/f?sig=1"}
    redirect = HTTPError("https://graph/items/1/content", 302, "Found", location, None)
    opener = FakeOpener(redirect)
    followed = []

    def fake_urlopen(req, timeout=60):
        followed.append(req)
        return FakeResponse(b'{"a": 1}')

    monkeypatch.setattr("drivenote_cli.core.http.build_opener", lambda *handlers: opener)
    monkeypatch.setattr("drivenote_cli.core.http.urlopen", fake_urlopen)

    assert http_download("https://graph/items/1/content", "tok") == b'{"a": 1}'
    assert opener.requests[0].get_header("Authorization") == "Bearer tok"
    assert followed == ["https://cdn.example/f?sig=1"]


def test_http_download_without_redirect_returns_body(monkeypatch):
    opener = FakeOpener(FakeResponse(b"\x00\x01", ctype="application/octet-stream"))
    monkeypatch.setattr("drivenote_cli.core.http.build_opener", lambda *handlers: opener)
    assert http_download("https://graph/items/1/content", "tok") == b"\x00\x01"


def test_http_download_not_found(monkeypatch):
    body = b'{"error":{"code":"itemNotFound","message":"Item does not exist"}}'
    error = HTTPError("https://graph/items/1/content", 404, "Not Found", {}, BytesIO(body))
    monkeypatch.setattr("drivenote_cli.core.http.build_opener", lambda *handlers: FakeOpener(error))
    with pytest.raises(NotFoundError) as exc:
        http_download("https://graph/items/1/content", "tok")
    assert "Item does not exist" in str(exc.value)


def test_http_json_sends_bytes(monkeypatch):
    seen = {}

    def fake_urlopen(req, timeout=60):
        seen["req"] = req
        return FakeResponse(b'{"id": "x"}')

    monkeypatch.setattr("drivenote_cli.core.http.urlopen", fake_urlopen)
    result = http_json("PUT", "https://example/content", "tok", data=b"hello")
    req = seen["req"]
    assert result == {"id": "x"}
    assert req.get_method() == "PUT"
    assert req.data == b"hello"
    assert req.get_header("Content-type") == "application/octet-stream"
    assert req.get_header("Authorization") == "Bearer tok"


def test_http_form_encodes_fields(monkeypatch):
    seen = {}

    def fake_urlopen(req, timeout=60):
        seen["req"] = req
        return FakeResponse(b'{"access_token": "a", "expires_in": 10}')

    monkeypatch.setattr("drivenote_cli.core.http.urlopen", fake_urlopen)
    data = http_form("https://example/token", {"grant_type": "refresh_token", "refresh_token": "r t"})
    assert data["access_token"] == "a"
    req = seen["req"]
    assert req.get_header("Content-type") == "application/x-www-form-urlencoded"
    assert parse_qs(req.data.decode()) == {"grant_type": ["refresh_token"], "refresh_token": ["r t"]}


def test_http_form_error_is_auth_error(monkeypatch):
    body = b'{"error":"invalid_grant","error_description":"AADSTS70000: refresh token expired"}'
    monkeypatch.setattr("drivenote_cli.core.http.urlopen", _raise(400, body))
    with pytest.raises(AuthError) as exc:
        http_form("https://example/token", {"grant_type": "refresh_token"})
    assert exc.value.status == 400
    assert "refresh token expired" in str(exc.value)


def test_http_form_non_json_body(monkeypatch):
    monkeypatch.setattr(
        "drivenote_cli.core.http.urlopen",
        lambda req, timeout=60: FakeResponse(b"<html>", ctype="text/html"),
    )
    with pytest.raises(DecodeError):
        http_form("https://example/token", {})
