"""Interactive OneDrive browser that imports files as notes."""

from __future__ import annotations

import sys

from ..core import FolderBrowser, NoteVault, interactive_browse, load_config
from .common import get_client


def _notify(message: str, ok: bool) -> None:
    print(message, file=sys.stdout if ok else sys.stderr)


def cmd_browse(args):
    settings = load_config()
    vault = NoteVault(args.vault or settings.vault_dir)
    browser = FolderBrowser(get_client(settings), vault, notify=_notify)
    interactive_browse(browser)
