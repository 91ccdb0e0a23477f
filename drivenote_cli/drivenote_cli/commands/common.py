"""Helpers shared by command handlers."""

from __future__ import annotations

import logging

from ..core import GraphClient, Settings, Token, load_config, save_config

logger = logging.getLogger(__name__)


def get_client(settings: Settings | None = None) -> GraphClient:
    """Return a client that persists rotated refresh tokens to the config file."""

    settings = settings or load_config()

    def _persist(token: Token) -> None:
        if token.refresh_token and token.refresh_token != settings.refresh_token:
            settings.refresh_token = token.refresh_token
            path = save_config(refresh_token=token.refresh_token)
            logger.debug("Saved rotated refresh token to %s", path)

    return GraphClient(settings, on_refresh=_persist)
