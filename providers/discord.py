"""
DiscordProvider — OAuth2 sign-in with a Discord account.

Discord returns a single ``email`` plus a ``verified`` flag, and the avatar
as a bare asset hash rather than a URL.
"""

from __future__ import annotations

import logging
from typing import List

import httpx

from providers.base import BaseProvider
from providers.profile import OAuthProfile

logger = logging.getLogger(__name__)

# Discord OAuth2 endpoints
_DISCORD_AUTH_URL = "https://discord.com/api/oauth2/authorize"
_DISCORD_TOKEN_URL = "https://discord.com/api/oauth2/token"
_DISCORD_API = "https://discord.com/api"


class DiscordProvider(BaseProvider):
    """OAuth2 sign-in provider for Discord."""

    authorize_url = _DISCORD_AUTH_URL
    token_url = _DISCORD_TOKEN_URL

    @property
    def provider_name(self) -> str:
        return "discord"

    @property
    def display_name(self) -> str:
        return "Discord"

    @property
    def scopes(self) -> List[str]:
        return ["identify", "email"]

    async def fetch_profile(self, client: httpx.AsyncClient, access_token: str) -> OAuthProfile:
        resp = await client.get(f"{_DISCORD_API}/users/@me", headers=self._bearer(access_token))
        resp.raise_for_status()
        user = resp.json()

        return OAuthProfile(
            provider=self.provider_name,
            id=str(user["id"]),
            display_name=user.get("global_name"),
            username=user.get("username"),
            email=user.get("email"),
            email_verified=user.get("verified"),
            avatar=user.get("avatar"),
            raw=user,
        )
