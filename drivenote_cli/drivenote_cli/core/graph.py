"""Microsoft Graph drive client.

Every public method first makes sure a non-expired access token is
available, refreshing it with the stored refresh token when needed.  Calls
are fire-once: there is no retry on 401 and no rate limit handling.
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Callable, Dict, List, Optional
from urllib.parse import quote

from .config import GRAPH_DRIVE_URL, OAUTH_SCOPE, TOKEN_URL, Settings
from .errors import AuthError, DecodeError
from .http import http_download, http_form, http_json
from .tokens import Token, TokenStore, token_from_response

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RemoteEntry:
    id: str
    name: str
    is_folder: bool
    child_count: Optional[int] = None
    size: Optional[int] = None
    modified_at: Optional[datetime] = None

    @classmethod
    def from_item(cls, item: Dict[str, Any]) -> "RemoteEntry":
        """Build an entry from a Graph ``driveItem`` resource."""
        if not isinstance(item, dict) or not item.get("id") or item.get("name") is None:
            raise DecodeError(f"Unexpected drive item: {item!r}")
        folder = item.get("folder")
        return cls(
            id=item["id"],
            name=item["name"],
            is_folder=folder is not None,
            child_count=folder.get("childCount") if isinstance(folder, dict) else None,
            size=item.get("size"),
            modified_at=parse_timestamp(item.get("lastModifiedDateTime")),
        )


def parse_timestamp(value: Optional[str]) -> Optional[datetime]:
    if not value:
        return None
    text = value.replace("Z", "+00:00")
    # fromisoformat only accepts 3 or 6 fractional digits before 3.11
    if "." in text:
        head, _, tail = text.partition(".")
        digits = "".join(ch for ch in tail if ch.isdigit())
        rest = tail[len(digits):]
        text = f"{head}.{digits[:6].ljust(6, '0')}{rest}"
    try:
        return datetime.fromisoformat(text)
    except ValueError:
        return None


def encode_drive_path(path: str) -> str:
    """Return ``path`` percent-encoded for a ``root:{path}:`` address.

    The root itself encodes to an empty string.
    """
    parts = [p for p in (path or "").split("/") if p]
    if not parts:
        return ""
    return "/" + "/".join(quote(p, safe="") for p in parts)


class GraphClient:
    """Synchronous client for the ``/me/drive`` endpoints."""

    def __init__(
        self,
        settings: Settings,
        store: TokenStore | None = None,
        *,
        clock: Callable[[], float] = time.time,
        on_refresh: Callable[[Token], None] | None = None,
    ):
        self.settings = settings
        self.store = store if store is not None else TokenStore(settings.refresh_token)
        self._clock = clock
        self._on_refresh = on_refresh

    # ── tokens ─────────────────────────────────────────────────────

    def ensure_valid(self) -> str:
        """Return a usable access token, refreshing it first if expired."""
        if self.store.needs_refresh(self._clock()):
            self.refresh()
        return self.store.access_token

    def refresh(self) -> Token:
        """Exchange the refresh token for a new access token."""
        if not self.settings.client_id:
            raise AuthError("Missing client id. Run: drivenote auth set --client-id <ID>")
        if not self.store.refresh_token:
            raise AuthError("Missing refresh token. Run: drivenote auth login")
        fields = {
            "client_id": self.settings.client_id,
            "refresh_token": self.store.refresh_token,
            "grant_type": "refresh_token",
            "scope": OAUTH_SCOPE,
        }
        if self.settings.client_secret:
            fields["client_secret"] = self.settings.client_secret
        data = http_form(TOKEN_URL, fields)
        token = token_from_response(
            data, self._clock(), previous_refresh_token=self.store.refresh_token
        )
        self.store.replace(token)
        logger.info("Access token refreshed, valid for %ds", int(token.expires_at - self._clock()))
        if self._on_refresh is not None:
            self._on_refresh(token)
        return token

    # ── drive ──────────────────────────────────────────────────────

    def list_children(self, path: str = "/") -> List[RemoteEntry]:
        token = self.ensure_valid()
        encoded = encode_drive_path(path)
        if encoded:
            url = f"{GRAPH_DRIVE_URL}/root:{encoded}:/children"
        else:
            url = f"{GRAPH_DRIVE_URL}/root/children"
        entries: List[RemoteEntry] = []
        while url:
            data = http_json("GET", url, token)
            if not isinstance(data, dict) or not isinstance(data.get("value"), list):
                raise DecodeError(f"Unexpected listing response for {path}")
            entries.extend(RemoteEntry.from_item(item) for item in data["value"])
            url = data.get("@odata.nextLink")
        logger.debug("Listed %d entries in %s", len(entries), path)
        return entries

    def download(self, item_id: str) -> bytes:
        token = self.ensure_valid()
        return http_download(f"{self._item_url(item_id)}/content", token)

    def upload(self, path: str, content: bytes) -> Dict[str, Any]:
        """Upload ``content`` to ``path``, replacing any existing file."""
        token = self.ensure_valid()
        encoded = encode_drive_path(path)
        if not encoded:
            raise ValueError("Upload path must name a file")
        data = http_json(
            "PUT",
            f"{GRAPH_DRIVE_URL}/root:{encoded}:/content",
            token,
            data=content,
            content_type="application/octet-stream",
        )
        if not isinstance(data, dict):
            raise DecodeError(f"Unexpected upload response for {path}")
        logger.debug("Uploaded %d bytes to %s", len(content), path)
        return data

    def get_metadata(self, item_id: str) -> Dict[str, Any]:
        token = self.ensure_valid()
        data = http_json("GET", self._item_url(item_id), token)
        if not isinstance(data, dict):
            raise DecodeError(f"Unexpected metadata response for {item_id}")
        return data

    @staticmethod
    def _item_url(item_id: str) -> str:
        return f"{GRAPH_DRIVE_URL}/items/{quote(item_id, safe='!')}"
