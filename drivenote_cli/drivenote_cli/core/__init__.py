"""Core utilities for drivenote CLI."""

from .config import (
    CONFIG_PATH,
    AUTHORIZE_URL,
    TOKEN_URL,
    GRAPH_DRIVE_URL,
    REDIRECT_URI,
    OAUTH_SCOPE,
    DEFAULT_SYNC_INTERVAL,
    Settings,
    load_config,
    save_config,
)
from .errors import DriveError, AuthError, ApiError, NotFoundError, DecodeError
from .http import http_json, http_form
from .tokens import Token, TokenStore, token_from_response
from .graph import GraphClient, RemoteEntry, encode_drive_path
from .oauth import OAuthFlow, parse_callback
from .notes import NoteVault, note_title
from .browser import BrowserState, FolderBrowser, Status, format_size, sort_entries
from .sync import SyncReport, VaultSync, run_periodic
from .utils import format_rows, safe_name, mask_secret
from .interactive import interactive_browse, build_choices

__all__ = [
    "CONFIG_PATH", "AUTHORIZE_URL", "TOKEN_URL", "GRAPH_DRIVE_URL", "REDIRECT_URI",
    "OAUTH_SCOPE", "DEFAULT_SYNC_INTERVAL", "Settings", "load_config", "save_config",
    "DriveError", "AuthError", "ApiError", "NotFoundError", "DecodeError",
    "http_json", "http_form",
    "Token", "TokenStore", "token_from_response",
    "GraphClient", "RemoteEntry", "encode_drive_path",
    "OAuthFlow", "parse_callback",
    "NoteVault", "note_title",
    "BrowserState", "FolderBrowser", "Status", "format_size", "sort_entries",
    "SyncReport", "VaultSync", "run_periodic",
    "format_rows", "safe_name", "mask_secret",
    "interactive_browse", "build_choices",
]
