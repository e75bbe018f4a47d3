"""
BaseProvider — abstract interface for all identity providers.

Every provider (Google, Discord, GitHub) subclasses this, declares its
endpoints and scopes, and implements ``fetch_profile``.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional
from urllib.parse import urlencode

import httpx

from providers.profile import OAuthProfile

logger = logging.getLogger(__name__)


class BaseProvider(ABC):
    """Abstract base for all OAuth2 sign-in providers."""

    authorize_url: str = ""
    token_url: str = ""

    def __init__(
        self,
        client_id: str,
        client_secret: str,
        callback_url: str,
        *,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self.client_id = client_id
        self.client_secret = client_secret
        self.callback_url = callback_url
        self._transport = transport

    # ── Identity ────────────────────────────────────────────────────────
    @property
    @abstractmethod
    def provider_name(self) -> str:
        """Unique slug: 'google', 'discord', 'github'."""
        ...

    @property
    @abstractmethod
    def display_name(self) -> str:
        """Human-readable: 'Google', 'Discord', 'GitHub'."""
        ...

    @property
    @abstractmethod
    def scopes(self) -> List[str]:
        """OAuth scopes requested at consent time."""
        ...

    # ── OAuth flow ──────────────────────────────────────────────────────

    def get_auth_url(self, state: str) -> str:
        """
        Build the provider's OAuth2 authorization URL.

        Parameters
        ----------
        state : str
            Signed opaque state string, echoed back on the callback.
        """
        params = {
            "client_id": self.client_id,
            "redirect_uri": self.callback_url,
            "response_type": "code",
            "scope": " ".join(self.scopes),
            "state": state,
        }
        params.update(self.extra_auth_params())
        return f"{self.authorize_url}?{urlencode(params)}"

    def extra_auth_params(self) -> Dict[str, str]:
        """Provider-specific query parameters for the consent URL."""
        return {}

    async def handle_callback(self, code: str) -> OAuthProfile:
        """
        Exchange the authorization code and fetch the user's profile.

        Raises ``httpx.HTTPError`` on transport / status failures and
        ``ValueError`` when the provider reports an OAuth error.
        """
        async with self._client() as client:
            access_token = await self.exchange_code(client, code)
            return await self.fetch_profile(client, access_token)

    async def exchange_code(self, client: httpx.AsyncClient, code: str) -> str:
        resp = await client.post(
            self.token_url,
            data={
                "client_id": self.client_id,
                "client_secret": self.client_secret,
                "code": code,
                "redirect_uri": self.callback_url,
                "grant_type": "authorization_code",
            },
            headers={"Accept": "application/json"},
        )
        resp.raise_for_status()
        token_data = resp.json()

        if "error" in token_data:
            raise ValueError(
                f"{self.display_name} OAuth error: "
                f"{token_data.get('error_description', token_data['error'])}"
            )
        if not token_data.get("access_token"):
            raise ValueError(f"{self.display_name} OAuth error: no access_token returned")
        return token_data["access_token"]

    @abstractmethod
    async def fetch_profile(self, client: httpx.AsyncClient, access_token: str) -> OAuthProfile:
        """Fetch the signed-in user's profile with a fresh access token."""
        ...

    # ── Helpers ─────────────────────────────────────────────────────────

    def is_configured(self) -> bool:
        """Return True if client id and secret are both set."""
        return bool(self.client_id and self.client_secret)

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(transport=self._transport, timeout=httpx.Timeout(10.0))

    @staticmethod
    def _bearer(access_token: str, **extra: str) -> Dict[str, Any]:
        return {"Authorization": f"Bearer {access_token}", **extra}
