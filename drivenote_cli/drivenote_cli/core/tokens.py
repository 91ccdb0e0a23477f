"""Access/refresh token bookkeeping."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Optional

from .errors import DecodeError


@dataclass(frozen=True)
class Token:
    access_token: str
    refresh_token: str
    expires_at: float  # epoch seconds


def token_from_response(
    data: Dict[str, Any],
    now: float,
    *,
    previous_refresh_token: str = "",
) -> Token:
    """Build a :class:`Token` from a token endpoint response.

    The provider only returns ``refresh_token`` when it rotates it, so the
    previous one is kept otherwise.
    """

    try:
        access_token = data["access_token"]
        expires_in = float(data["expires_in"])
    except (KeyError, TypeError, ValueError) as e:
        raise DecodeError(f"Unexpected token response: missing or invalid {e}") from e
    if not isinstance(access_token, str) or not access_token:
        raise DecodeError("Unexpected token response: empty access_token")
    refresh_token = data.get("refresh_token") or previous_refresh_token
    return Token(access_token, refresh_token, now + expires_in)


class TokenStore:
    """Holds the current access token, refresh token and expiry."""

    def __init__(self, refresh_token: str = "", token: Optional[Token] = None):
        self.access_token: Optional[str] = None
        self.refresh_token = refresh_token
        self.expires_at = 0.0
        if token is not None:
            self.replace(token)

    def needs_refresh(self, now: float) -> bool:
        return not self.access_token or now >= self.expires_at

    def replace(self, token: Token) -> None:
        self.access_token = token.access_token
        self.refresh_token = token.refresh_token or self.refresh_token
        self.expires_at = token.expires_at

    def snapshot(self) -> tuple:
        return (self.access_token, self.refresh_token, self.expires_at)
