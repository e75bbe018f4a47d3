"""
Provider API routes — start an OAuth sign-in and handle its callback.

Route prefix: config.auth_prefix (default /auth), mounted after the auth
router so ``/profile`` and ``/users`` are matched first.

Callbacks never answer with JSON: the browser is mid-redirect, so every
failure sends it to ``config.oauth_failure_redirect`` instead.
"""

from __future__ import annotations

import logging
from typing import Optional
from urllib.parse import urlencode

from fastapi import APIRouter, Depends, Query, status
from fastapi.responses import RedirectResponse

from auth.dependencies import get_token_service, get_user_store
from auth.errors import NotFound
from auth.tokens import TokenService
from config.settings import Settings, get_settings
from database.store import UserStore
from providers.adapter import resolve_user
from providers.registry import ProviderRegistry, get_provider_registry
from providers.state import create_state, verify_state

logger = logging.getLogger(__name__)

router = APIRouter(tags=["providers"])


def _failure_redirect(settings: Settings) -> RedirectResponse:
    return RedirectResponse(settings.oauth_failure_redirect, status_code=status.HTTP_302_FOUND)


def _success_redirect(settings: Settings, token: str) -> RedirectResponse:
    query = urlencode({"token": token})
    url = f"{settings.frontend_url.rstrip('/')}/auth/callback?{query}"
    return RedirectResponse(url, status_code=status.HTTP_302_FOUND)


# ── Routes ─────────────────────────────────────────────────────────────


@router.get("/{provider}")
async def start_sign_in(
    provider: str,
    registry: ProviderRegistry = Depends(get_provider_registry),
    settings: Settings = Depends(get_settings),
) -> RedirectResponse:
    """Redirect the browser to the provider's consent screen."""
    connector = registry.get(provider)
    if not connector:
        raise NotFound(f"Provider '{provider}' not found or not configured")

    state = create_state(provider, settings.oauth_state_secret, settings.oauth_state_ttl_seconds)
    return RedirectResponse(connector.get_auth_url(state), status_code=status.HTTP_302_FOUND)


@router.get("/{provider}/callback")
async def oauth_callback(
    provider: str,
    code: Optional[str] = Query(None),
    state: Optional[str] = Query(None),
    error: Optional[str] = Query(None),
    registry: ProviderRegistry = Depends(get_provider_registry),
    store: UserStore = Depends(get_user_store),
    tokens: TokenService = Depends(get_token_service),
    settings: Settings = Depends(get_settings),
) -> RedirectResponse:
    """
    OAuth callback — the provider redirects here after consent.

    Exchanges the code, resolves (or creates) the local user and hands the
    session token to the front end as ``?token=…``.
    """
    # 1. Provider and query sanity
    connector = registry.get(provider)
    if not connector:
        logger.warning("OAuth callback for unknown provider %s", provider)
        return _failure_redirect(settings)
    if error or not code or not state:
        logger.warning("OAuth callback for %s without code (error=%s)", provider, error)
        return _failure_redirect(settings)

    # 2. Verify state
    try:
        verify_state(state, provider, settings.oauth_state_secret)
    except ValueError as exc:
        logger.warning("OAuth state rejected for %s: %s", provider, exc)
        return _failure_redirect(settings)

    # 3. Exchange code for a profile
    try:
        profile = await connector.handle_callback(code)
    except Exception as exc:
        logger.error("OAuth callback failed for %s: %s", provider, exc)
        return _failure_redirect(settings)

    # 4. Resolve local user + token
    outcome = await resolve_user(profile, store, tokens)
    if not outcome.success:
        logger.error("Sign-in via %s failed: %s", provider, outcome.error.message)
        return _failure_redirect(settings)

    logger.info(
        "OAuth sign-in: provider=%s user=%s new=%s",
        provider,
        outcome.value.user.id,
        outcome.value.created,
    )
    return _success_redirect(settings, outcome.value.token)
