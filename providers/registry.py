"""
ProviderRegistry — builds and provides access to all sign-in providers.
"""

from __future__ import annotations

import logging
from functools import lru_cache
from typing import Dict, Iterable, List, Optional, Tuple, Type

from fastapi import Depends

from config.settings import Settings, get_settings
from providers.base import BaseProvider
from providers.discord import DiscordProvider
from providers.github import GitHubProvider
from providers.google import GoogleProvider

logger = logging.getLogger(__name__)

# ── All known providers — add new ones here ──────────────────────────────

_ALL_PROVIDERS: Dict[str, Type[BaseProvider]] = {
    "google": GoogleProvider,
    "discord": DiscordProvider,
    "github": GitHubProvider,
}


class ProviderRegistry:
    """Holds the providers that have credentials configured."""

    def __init__(self, providers: Iterable[BaseProvider] = ()) -> None:
        self._providers: Dict[str, BaseProvider] = {}
        for provider in providers:
            self.register(provider)

    @classmethod
    def from_settings(cls, settings: Settings) -> "ProviderRegistry":
        return _build_registry(_credentials_key(settings))

    def register(self, provider: BaseProvider) -> None:
        if provider.is_configured():
            self._providers[provider.provider_name] = provider
            logger.info(
                "Provider registered: %s (%s)",
                provider.display_name,
                provider.provider_name,
            )
        else:
            logger.warning(
                "Provider %s skipped — not configured (missing client_id/secret)",
                provider.provider_name,
            )

    def get(self, provider: str) -> Optional[BaseProvider]:
        """Get a provider by name."""
        return self._providers.get(provider)

    def list_configured(self) -> List[str]:
        """Return names of configured providers."""
        return list(self._providers.keys())


def _credentials_key(settings: Settings) -> Tuple[Tuple[str, str, str, str], ...]:
    key = []
    for name in _ALL_PROVIDERS:
        creds = settings.get_provider_credentials(name)
        key.append((name, creds["client_id"], creds["client_secret"], creds["callback_url"]))
    return tuple(key)


@lru_cache(maxsize=4)
def _build_registry(key: Tuple[Tuple[str, str, str, str], ...]) -> ProviderRegistry:
    return ProviderRegistry(
        _ALL_PROVIDERS[name](client_id, client_secret, callback_url)
        for name, client_id, client_secret, callback_url in key
    )


def get_provider_registry(settings: Settings = Depends(get_settings)) -> ProviderRegistry:
    """Dependency function — use in FastAPI `Depends(get_provider_registry)`."""
    return ProviderRegistry.from_settings(settings)
