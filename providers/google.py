"""
GoogleProvider — OAuth2 sign-in with a Google account.

Profile comes from the OpenID userinfo endpoint (``sub``, ``name``,
``email``, ``email_verified``, ``picture``).
"""

from __future__ import annotations

import logging
from typing import Dict, List

import httpx

from providers.base import BaseProvider
from providers.profile import OAuthProfile, ProfileEmail

logger = logging.getLogger(__name__)

# Google OAuth2 endpoints
_GOOGLE_AUTH_URL = "https://accounts.google.com/o/oauth2/v2/auth"
_GOOGLE_TOKEN_URL = "https://oauth2.googleapis.com/token"
_GOOGLE_USERINFO_URL = "https://www.googleapis.com/oauth2/v3/userinfo"


class GoogleProvider(BaseProvider):
    """OAuth2 sign-in provider for Google."""

    authorize_url = _GOOGLE_AUTH_URL
    token_url = _GOOGLE_TOKEN_URL

    @property
    def provider_name(self) -> str:
        return "google"

    @property
    def display_name(self) -> str:
        return "Google"

    @property
    def scopes(self) -> List[str]:
        return ["profile", "email"]

    def extra_auth_params(self) -> Dict[str, str]:
        return {"include_granted_scopes": "true"}

    async def fetch_profile(self, client: httpx.AsyncClient, access_token: str) -> OAuthProfile:
        resp = await client.get(_GOOGLE_USERINFO_URL, headers=self._bearer(access_token))
        resp.raise_for_status()
        info = resp.json()

        emails = []
        if info.get("email"):
            emails.append(ProfileEmail(value=info["email"], verified=info.get("email_verified")))

        return OAuthProfile(
            provider=self.provider_name,
            id=str(info["sub"]),
            display_name=info.get("name"),
            emails=emails,
            photos=[info["picture"]] if info.get("picture") else [],
            raw=info,
        )
