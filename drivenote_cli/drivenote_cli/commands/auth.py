"""Authentication related commands."""

from __future__ import annotations

import sys
import time
import webbrowser

from InquirerPy import inquirer

from ..core import OAuthFlow, load_config, mask_secret, parse_callback, save_config
from .common import get_client


def cmd_auth_set(args):
    path = save_config(
        client_id=args.client_id,
        client_secret=args.client_secret,
        refresh_token=args.refresh_token,
        sync_interval=args.sync_interval,
        vault_dir=args.vault_dir,
        remote_dir=args.remote_dir,
    )
    print(f"Saved config to {path}")


def cmd_auth_url(args):
    url = OAuthFlow(load_config()).build_authorization_url()
    print(url)
    if args.open:
        webbrowser.open(url)


def cmd_auth_login(args):
    """Finish the authorization code flow and store the refresh token."""

    settings = load_config()
    flow = OAuthFlow(settings)
    code = args.code
    if not code:
        redirect = args.redirect_url
        if not redirect:
            print("Open this URL and sign in:\n", file=sys.stderr)
            print(flow.build_authorization_url(), file=sys.stderr)
            redirect = _execute(inquirer.text(message="Paste the redirect URL:"))
        code = parse_callback(redirect or "")
    token = flow.exchange_code(code)
    path = save_config(refresh_token=token.refresh_token)
    print(f"Saved refresh token to {path}")


def _execute(prompt):
    """Execute an ``InquirerPy`` prompt and handle Ctrl+C."""

    try:
        return prompt.execute()
    except KeyboardInterrupt:
        print("\nCancelled by user", file=sys.stderr)
        raise SystemExit(1)


def cmd_auth_info(_args):
    settings = load_config()
    client = get_client(settings)
    client.ensure_valid()
    remaining = int(client.store.expires_at - time.time())
    print(f"Client ID:     {settings.client_id}")
    print(f"Client secret: {mask_secret(settings.client_secret)}")
    print(f"Refresh token: {mask_secret(client.store.refresh_token)}")
    print(f"Access token:  valid for {remaining}s")
    print(f"Sync interval: {settings.sync_interval}s")
