"""
FastAPI dependencies for authentication.

Provides ``get_user_store``, ``get_token_service`` and ``get_current_user``
dependencies that are used across all auth routes.
"""

from __future__ import annotations

from functools import lru_cache
from typing import Optional

from fastapi import Depends, Header
from sqlalchemy.ext.asyncio import AsyncSession

from auth.guard import authenticate
from auth.tokens import TokenService
from config.settings import Settings, get_settings
from database.session import get_db_session
from database.store import UserStore


@lru_cache(maxsize=8)
def _token_service(secret: str, expires_in: str, algorithm: str) -> TokenService:
    return TokenService(secret, expires_in=expires_in, algorithm=algorithm)


def get_token_service(settings: Settings = Depends(get_settings)) -> TokenService:
    """Token service built from the current settings."""
    return _token_service(settings.jwt_secret, settings.jwt_expires_in, settings.jwt_algorithm)


async def get_user_store(
    session: AsyncSession = Depends(get_db_session),
    settings: Settings = Depends(get_settings),
) -> UserStore:
    """Credential store bound to this request's DB session."""
    return UserStore(session, bcrypt_rounds=settings.bcrypt_rounds)


async def get_current_user(
    authorization: Optional[str] = Header(None, alias="Authorization"),
    store: UserStore = Depends(get_user_store),
    tokens: TokenService = Depends(get_token_service),
) -> dict:
    """
    Verify the Bearer token and return the authenticated user's public
    record (no password hash).  Raises a taxonomy error otherwise.
    """
    result = await authenticate(authorization, store, tokens)
    return result.unwrap()
