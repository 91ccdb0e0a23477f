"""Configuration helpers for drivenote CLI."""

from __future__ import annotations

import json
import os
from dataclasses import asdict, dataclass, fields
from pathlib import Path
from typing import Any, Dict

CONFIG_PATH = Path(os.path.expanduser("~")) / ".drivenote.json"

AUTHORITY_URL = "https://login.microsoftonline.com/common/oauth2/v2.0"
AUTHORIZE_URL = f"{AUTHORITY_URL}/authorize"
TOKEN_URL = f"{AUTHORITY_URL}/token"
GRAPH_DRIVE_URL = "https://graph.microsoft.com/v1.0/me/drive"
REDIRECT_URI = "drivenote://oauth-callback"
OAUTH_SCOPE = "Files.ReadWrite.All offline_access"

# Seconds between two sync runs when no interval is configured
DEFAULT_SYNC_INTERVAL = 30
DEFAULT_VAULT_DIR = str(Path(os.path.expanduser("~")) / "DriveNotes")
DEFAULT_REMOTE_DIR = "/Notes"

_ENV_OVERRIDES = {
    "client_id": "DRIVENOTE_CLIENT_ID",
    "client_secret": "DRIVENOTE_CLIENT_SECRET",
    "refresh_token": "DRIVENOTE_REFRESH_TOKEN",
}


@dataclass
class Settings:
    """Persisted settings passed explicitly to the clients that need them."""

    client_id: str = ""
    client_secret: str = ""
    refresh_token: str = ""
    sync_interval: int = DEFAULT_SYNC_INTERVAL
    vault_dir: str = DEFAULT_VAULT_DIR
    remote_dir: str = DEFAULT_REMOTE_DIR

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Settings":
        known = {f.name for f in fields(cls)}
        settings = cls(**{k: v for k, v in data.items() if k in known})
        try:
            settings.sync_interval = int(settings.sync_interval)
        except (TypeError, ValueError):
            settings.sync_interval = DEFAULT_SYNC_INTERVAL
        if settings.sync_interval <= 0:
            settings.sync_interval = DEFAULT_SYNC_INTERVAL
        return settings


def _read_file() -> Dict[str, Any]:
    if CONFIG_PATH.exists():
        try:
            data = json.loads(CONFIG_PATH.read_text(encoding="utf-8"))
        except (OSError, ValueError):
            return {}
        return data if isinstance(data, dict) else {}
    return {}


def load_config() -> Settings:
    """Load settings from disk and environment."""
    cfg = _read_file()
    for key, env in _ENV_OVERRIDES.items():
        if os.getenv(env):
            cfg[key] = os.getenv(env)
    return Settings.from_dict(cfg)


def save_config(**changes: Any) -> Path:
    """Merge ``changes`` into the file at CONFIG_PATH.

    Only the file contents are used as the base so that values coming from
    environment overrides are never written to disk by accident.
    """
    cfg = asdict(Settings.from_dict(_read_file()))
    for key, value in changes.items():
        if value is not None:
            cfg[key] = value
    CONFIG_PATH.write_text(json.dumps(cfg, ensure_ascii=False, indent=2), encoding="utf-8")
    return CONFIG_PATH
