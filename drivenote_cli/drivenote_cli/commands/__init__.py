"""Command handlers for drivenote CLI."""

from .auth import cmd_auth_set, cmd_auth_url, cmd_auth_login, cmd_auth_info
from .files import cmd_ls, cmd_info, cmd_download, cmd_upload
from .browse import cmd_browse
from .sync import cmd_sync

__all__ = [
    "cmd_auth_set",
    "cmd_auth_url",
    "cmd_auth_login",
    "cmd_auth_info",
    "cmd_ls",
    "cmd_info",
    "cmd_download",
    "cmd_upload",
    "cmd_browse",
    "cmd_sync",
]
