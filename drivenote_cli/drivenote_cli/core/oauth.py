"""One-time authorization code login against the Microsoft identity platform."""

from __future__ import annotations

import logging
import time
from typing import Callable
from urllib.parse import parse_qs, urlencode, urlparse

from .config import AUTHORIZE_URL, OAUTH_SCOPE, REDIRECT_URI, TOKEN_URL, Settings
from .errors import AuthError
from .http import http_form
from .tokens import Token, token_from_response

logger = logging.getLogger(__name__)


class OAuthFlow:
    """Builds the consent URL and trades the returned code for tokens.

    Only used while setting up the CLI; afterwards :class:`GraphClient`
    keeps the token fresh with the ``refresh_token`` grant.
    """

    def __init__(self, settings: Settings, *, clock: Callable[[], float] = time.time):
        self.settings = settings
        self._clock = clock

    def build_authorization_url(self) -> str:
        if not self.settings.client_id:
            raise AuthError("Missing client id. Run: drivenote auth set --client-id <ID>")
        params = {
            "client_id": self.settings.client_id,
            "response_type": "code",
            "redirect_uri": REDIRECT_URI,
            "scope": OAUTH_SCOPE,
            "response_mode": "query",
        }
        return f"{AUTHORIZE_URL}?{urlencode(params)}"

    def exchange_code(self, code: str) -> Token:
        if not self.settings.client_id:
            raise AuthError("Missing client id. Run: drivenote auth set --client-id <ID>")
        fields = {
            "client_id": self.settings.client_id,
            "grant_type": "authorization_code",
            "code": code,
            "redirect_uri": REDIRECT_URI,
            "scope": OAUTH_SCOPE,
        }
        if self.settings.client_secret:
            fields["client_secret"] = self.settings.client_secret
        data = http_form(TOKEN_URL, fields)
        token = token_from_response(data, self._clock())
        if not token.refresh_token:
            # offline_access was not granted; nothing could be refreshed later
            raise AuthError("Token response did not include a refresh token")
        logger.info("Authorization code exchanged for tokens")
        return token


def parse_callback(url: str) -> str:
    """Return the ``code`` query parameter of a redirect URL."""
    query = parse_qs(urlparse(url.strip()).query)
    if "error" in query:
        desc = (query.get("error_description") or query["error"])[0]
        raise AuthError(f"Authorization failed: {desc}")
    codes = query.get("code")
    if not codes or not codes[0]:
        raise AuthError("Redirect URL does not contain an authorization code")
    return codes[0]
