"""
GitHubProvider — OAuth2 sign-in with a GitHub account.

``/user`` only exposes a public email, so the address list is read from
``/user/emails`` (needs the ``user:email`` scope), primary address first.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, List

import httpx

from providers.base import BaseProvider
from providers.profile import OAuthProfile, ProfileEmail

logger = logging.getLogger(__name__)

# GitHub OAuth2 endpoints
_GH_AUTH_URL = "https://github.com/login/oauth/authorize"
_GH_TOKEN_URL = "https://github.com/login/oauth/access_token"
_GH_API = "https://api.github.com"


class GitHubProvider(BaseProvider):
    """OAuth2 sign-in provider for GitHub."""

    authorize_url = _GH_AUTH_URL
    token_url = _GH_TOKEN_URL

    @property
    def provider_name(self) -> str:
        return "github"

    @property
    def display_name(self) -> str:
        return "GitHub"

    @property
    def scopes(self) -> List[str]:
        return ["user:email"]

    async def fetch_profile(self, client: httpx.AsyncClient, access_token: str) -> OAuthProfile:
        headers = self._bearer(access_token, Accept="application/vnd.github+json")

        user_resp = await client.get(f"{_GH_API}/user", headers=headers)
        user_resp.raise_for_status()
        user = user_resp.json()

        emails = await self._fetch_emails(client, headers)
        if not emails and user.get("email"):
            emails = [ProfileEmail(value=user["email"])]

        return OAuthProfile(
            provider=self.provider_name,
            id=str(user["id"]),
            display_name=user.get("name"),
            username=user.get("login"),
            emails=emails,
            photos=[user["avatar_url"]] if user.get("avatar_url") else [],
            raw=user,
        )

    async def _fetch_emails(
        self, client: httpx.AsyncClient, headers: Dict[str, Any]
    ) -> List[ProfileEmail]:
        """Address list, primary first. Empty if the endpoint is unavailable."""
        resp = await client.get(f"{_GH_API}/user/emails", headers=headers)
        if resp.status_code != 200:
            logger.warning("GitHub /user/emails returned %s", resp.status_code)
            return []
        entries = [
            ProfileEmail(
                value=e["email"],
                verified=e.get("verified"),
                primary=e.get("primary"),
            )
            for e in resp.json()
            if e.get("email")
        ]
        entries.sort(key=lambda e: not e.primary)
        return entries
