"""Command line entry point for drivenote CLI."""

from __future__ import annotations

import argparse
import logging
import os
import sys

# Prefer absolute imports so the module works when installed as a package.
# When running directly from a source checkout fall back to relative imports so
# tests can invoke it using ``python -m``. If ``__package__`` is ``None`` we set
# it and add this file's directory to ``sys.path`` before importing.
try:  # pragma: no cover - exercised indirectly in tests
    from drivenote_cli.core import DEFAULT_SYNC_INTERVAL, AuthError, DriveError, NotFoundError
    from drivenote_cli.commands import (
        cmd_auth_set,
        cmd_auth_url,
        cmd_auth_login,
        cmd_auth_info,
        cmd_ls,
        cmd_info,
        cmd_download,
        cmd_upload,
        cmd_browse,
        cmd_sync,
    )
except ModuleNotFoundError:  # pragma: no cover
    if __package__ in (None, ""):
        sys.path.append(os.path.dirname(__file__))
        __package__ = "drivenote_cli"
    from .core import DEFAULT_SYNC_INTERVAL, AuthError, DriveError, NotFoundError
    from .commands import (
        cmd_auth_set,
        cmd_auth_url,
        cmd_auth_login,
        cmd_auth_info,
        cmd_ls,
        cmd_info,
        cmd_download,
        cmd_upload,
        cmd_browse,
        cmd_sync,
    )


def _setup_logging(verbose: bool, quiet: bool) -> None:
    level = logging.DEBUG if verbose else logging.WARNING if quiet else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )


def _report_error(e: DriveError) -> None:
    if isinstance(e, AuthError):
        print(f"Authentication failed: {e}", file=sys.stderr)
    elif isinstance(e, NotFoundError):
        print(f"Not found: {e}", file=sys.stderr)
    else:
        print(f"Error: {e}", file=sys.stderr)


def main(argv=None):
    parser = argparse.ArgumentParser(prog="drivenote", description="OneDrive browser and note sync")
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    parser.add_argument("-q", "--quiet", action="store_true", help="Only log warnings and errors")
    sub = parser.add_subparsers(dest="cmd")

    # auth
    p_auth = sub.add_parser("auth", help="Authentication")
    sub_auth = p_auth.add_subparsers(dest="auth_cmd")

    p_auth_set = sub_auth.add_parser("set", help="Save app credentials and settings to ~/.drivenote.json")
    p_auth_set.add_argument("--client-id", help="Application (client) ID")
    p_auth_set.add_argument("--client-secret", help="Client secret")
    p_auth_set.add_argument("--refresh-token", help="Refresh token")
    p_auth_set.add_argument(
        "--sync-interval", type=int, help=f"Seconds between syncs (default: {DEFAULT_SYNC_INTERVAL})"
    )
    p_auth_set.add_argument("--vault-dir", help="Local notes directory")
    p_auth_set.add_argument("--remote-dir", help="OneDrive folder notes are synced to")
    p_auth_set.set_defaults(func=cmd_auth_set)

    p_auth_url = sub_auth.add_parser("url", help="Print the sign-in URL")
    p_auth_url.add_argument("--open", action="store_true", help="Open it in a web browser")
    p_auth_url.set_defaults(func=cmd_auth_url)

    p_auth_login = sub_auth.add_parser("login", help="Exchange an authorization code for a refresh token")
    p_auth_login.add_argument("--code", help="Authorization code")
    p_auth_login.add_argument("--redirect-url", help="Full redirect URL containing the code")
    p_auth_login.set_defaults(func=cmd_auth_login)

    p_auth_info = sub_auth.add_parser("info", help="Refresh the access token and show auth info")
    p_auth_info.set_defaults(func=cmd_auth_info)

    # files
    p_ls = sub.add_parser("ls", help="List a OneDrive folder")
    p_ls.add_argument("path", nargs="?", default="/", help="Folder path (default: /)")
    p_ls.set_defaults(func=cmd_ls)

    p_info = sub.add_parser("info", help="Show item metadata")
    p_info.add_argument("item_id")
    p_info.set_defaults(func=cmd_info)

    p_dl = sub.add_parser("download", help="Download a file by id")
    p_dl.add_argument("item_id")
    p_dl.add_argument("--out", help="Output file or directory (default: current directory)")
    p_dl.set_defaults(func=cmd_download)

    p_ul = sub.add_parser("upload", help="Upload a file, replacing any existing one")
    p_ul.add_argument("src", help="Local file")
    p_ul.add_argument("dest", nargs="?", help="OneDrive path (default: /<file name>)")
    p_ul.set_defaults(func=cmd_upload)

    # browse
    p_browse = sub.add_parser("browse", help="Browse OneDrive and import files as notes")
    p_browse.add_argument("--vault", help="Notes directory (default: from config)")
    p_browse.set_defaults(func=cmd_browse)

    # sync
    p_sync = sub.add_parser("sync", help="Upload changed notes to OneDrive")
    p_sync.add_argument("--vault", help="Notes directory (default: from config)")
    p_sync.add_argument("--remote-dir", help="OneDrive folder (default: from config)")
    p_sync.add_argument("--watch", action="store_true", help="Keep syncing on an interval")
    p_sync.add_argument("--interval", type=int, help="Seconds between syncs (default: from config)")
    p_sync.set_defaults(func=cmd_sync)

    args = parser.parse_args(argv)
    _setup_logging(args.verbose, args.quiet)

    if not args.cmd:
        parser.print_help()
        return 0
    if args.cmd == "auth" and not getattr(args, "auth_cmd", None):
        p_auth.print_help()
        return 0
    try:
        return args.func(args)
    except DriveError as e:
        logging.getLogger("drivenote_cli").debug("Command failed", exc_info=True)
        _report_error(e)
        return 2


if __name__ == "__main__":
    sys.exit(main())
