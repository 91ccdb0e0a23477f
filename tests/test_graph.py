import pathlib
import sys
from datetime import datetime, timezone
from types import SimpleNamespace

import pytest

sys.path.insert(0, str(pathlib.Path(__file__).resolve().parents[1] / "drivenote_cli"))
from drivenote_cli.core import graph
from drivenote_cli.core.config import GRAPH_DRIVE_URL, TOKEN_URL, Settings
from drivenote_cli.core.errors import ApiError, AuthError, DecodeError, NotFoundError
from drivenote_cli.core.graph import GraphClient, RemoteEntry, encode_drive_path
from drivenote_cli.core.tokens import Token, TokenStore

NOW = 1_000.0


@pytest.fixture
def api(monkeypatch):
    fake = SimpleNamespace(
        calls=[],
        form={"access_token": "new-access", "expires_in": 3600},
        json={"value": []},
    )

    def fake_form(url, fields, **_):
        fake.calls.append(("POST", url, dict(fields)))
        if isinstance(fake.form, Exception):
            raise fake.form
        return fake.form

    def fake_json(method, url, token, payload=None, **kw):
        fake.calls.append((method, url, token, kw))
        resp = fake.json(url) if callable(fake.json) else fake.json
        if isinstance(resp, Exception):
            raise resp
        return resp

    monkeypatch.setattr(graph, "http_form", fake_form)
    def fake_download(url, token, **kw):
        fake.calls.append(("DOWNLOAD", url, token, kw))
        return b"content"

    monkeypatch.setattr(graph, "http_json", fake_json)
    monkeypatch.setattr(graph, "http_download", fake_download)
    return fake


def make_client(token=None, refresh_token="refresh-1", secret="", on_refresh=None):
    settings = Settings(client_id="cid", client_secret=secret, refresh_token=refresh_token)
    store = TokenStore(refresh_token, token=token)
    return GraphClient(settings, store, clock=lambda: NOW, on_refresh=on_refresh)


def test_expired_token_refreshes_once_before_listing(api):
    client = make_client(Token("old-access", "refresh-1", NOW - 1))
    client.list_children("/Docs")

    assert len(api.calls) == 2
    method, url, fields = api.calls[0]
    assert (method, url) == ("POST", TOKEN_URL)
    assert fields["grant_type"] == "refresh_token"
    assert fields["refresh_token"] == "refresh-1"
    assert fields["scope"] == "Files.ReadWrite.All offline_access"
    assert api.calls[1][0] == "GET"
    assert api.calls[1][2] == "new-access"
    assert client.store.expires_at == NOW + 3600


def test_expiry_boundary_counts_as_expired(api):
    client = make_client(Token("old-access", "refresh-1", NOW))
    client.get_metadata("item")
    assert api.calls[0][0] == "POST"


def test_valid_token_skips_refresh(api):
    client = make_client(Token("live", "refresh-1", NOW + 60))
    client.list_children("/")
    assert [c[0] for c in api.calls] == ["GET"]
    assert api.calls[0][2] == "live"


def test_missing_token_refreshes_then_reuses(api):
    client = make_client()
    client.list_children("/")
    client.download("item")
    assert [c[0] for c in api.calls] == ["POST", "GET", "DOWNLOAD"]
    assert api.calls[2][2] == "new-access"


def test_refresh_failure_leaves_store_unchanged(api):
    client = make_client(Token("old-access", "refresh-1", NOW - 1))
    before = client.store.snapshot()
    api.form = AuthError("[HTTP 400] invalid_grant", status=400)

    with pytest.raises(AuthError):
        client.list_children("/")
    assert client.store.snapshot() == before
    assert len(api.calls) == 1


def test_refresh_with_malformed_response(api):
    client = make_client()
    api.form = {"token_type": "Bearer"}
    with pytest.raises(DecodeError):
        client.ensure_valid()
    assert client.store.access_token is None


def test_missing_refresh_token_fails_without_network(api):
    client = make_client(refresh_token="")
    with pytest.raises(AuthError):
        client.list_children("/")
    assert api.calls == []


@pytest.mark.parametrize(
    "error,expected",
    [
        (NotFoundError("[HTTP 404] missing", status=404), NotFoundError),
        (ApiError("[HTTP 401] unauthenticated", status=401), ApiError),
    ],
)
def test_api_errors_leave_store_unchanged(api, error, expected):
    client = make_client(Token("live", "refresh-1", NOW + 60))
    before = client.store.snapshot()
    api.json = error

    with pytest.raises(expected) as exc:
        client.list_children("/Missing")
    assert exc.value.status == error.status
    assert client.store.snapshot() == before


def test_rotated_refresh_token_is_kept_and_reported(api):
    seen = []
    client = make_client(on_refresh=seen.append)
    api.form = {"access_token": "a", "expires_in": 60, "refresh_token": "refresh-2"}
    client.ensure_valid()
    assert client.store.refresh_token == "refresh-2"
    assert seen[0].refresh_token == "refresh-2"


def test_refresh_without_rotation_keeps_old_refresh_token(api):
    client = make_client()
    client.ensure_valid()
    assert client.store.refresh_token == "refresh-1"


def test_client_secret_sent_only_when_configured(api):
    make_client().ensure_valid()
    make_client(secret="s3cret").ensure_valid()
    assert "client_secret" not in api.calls[0][2]
    assert api.calls[1][2]["client_secret"] == "s3cret"


def test_list_children_urls_and_paging(api):
    pages = {
        f"{GRAPH_DRIVE_URL}/root:/Docs/My%20Notes:/children": {
            "value": [{"id": "1", "name": "a.md", "size": 3}],
            "@odata.nextLink": "https://next/page2",
        },
        "https://next/page2": {"value": [{"id": "2", "name": "Sub", "folder": {"childCount": 4}}]},
    }
    api.json = lambda url: pages.get(url, {"value": []})
    client = make_client(Token("live", "refresh-1", NOW + 60))

    entries = client.list_children("/Docs/My Notes/")
    assert [e.name for e in entries] == ["a.md", "Sub"]
    assert entries[1].is_folder and entries[1].child_count == 4

    client.list_children("/")
    assert api.calls[-1][1] == f"{GRAPH_DRIVE_URL}/root/children"


def test_list_children_without_value_is_decode_error(api):
    api.json = {"unexpected": True}
    client = make_client(Token("live", "refresh-1", NOW + 60))
    with pytest.raises(DecodeError):
        client.list_children("/")


def test_download_upload_and_metadata_endpoints(api):
    client = make_client(Token("live", "refresh-1", NOW + 60))
    api.json = {"id": "new"}

    assert client.download("ABC!12") == b"content"
    client.upload("/Notes/today.md", b"# hi")
    client.get_metadata("ABC!12")

    get_content, put, get_meta = api.calls
    assert get_content[1] == f"{GRAPH_DRIVE_URL}/items/ABC!12/content"
    assert get_content[0] == "DOWNLOAD"
    assert get_content[2] == "live"
    assert put[0] == "PUT"
    assert put[1] == f"{GRAPH_DRIVE_URL}/root:/Notes/today.md:/content"
    assert put[3]["data"] == b"# hi"
    assert put[3]["content_type"] == "application/octet-stream"
    assert get_meta[1] == f"{GRAPH_DRIVE_URL}/items/ABC!12"


def test_upload_to_root_is_rejected(api):
    client = make_client(Token("live", "refresh-1", NOW + 60))
    with pytest.raises(ValueError):
        client.upload("/", b"x")


def test_encode_drive_path():
    assert encode_drive_path("/") == ""
    assert encode_drive_path("") == ""
    assert encode_drive_path("Docs//a#b") == "/Docs/a%23b"


def test_remote_entry_from_item():
    entry = RemoteEntry.from_item(
        {
            "id": "F1",
            "name": "report.txt",
            "size": 1536,
            "file": {"mimeType": "text/plain"},
            "lastModifiedDateTime": "2024-03-05T10:20:30.1234567Z",
        }
    )
    assert not entry.is_folder
    assert entry.size == 1536
    assert entry.modified_at == datetime(2024, 3, 5, 10, 20, 30, 123456, tzinfo=timezone.utc)

    with pytest.raises(DecodeError):
        RemoteEntry.from_item({"name": "no id"})
