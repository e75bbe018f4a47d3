"""
Auth API routes — register, login, profile, user listing.

Route prefix: config.auth_prefix (default /auth)
"""

from __future__ import annotations

import logging
from typing import Any, Dict, Optional

from fastapi import APIRouter, Depends, status
from pydantic import BaseModel

from auth.dependencies import get_current_user, get_token_service, get_user_store
from auth.errors import Conflict, InvalidCredentials, InvalidInput, NotFound
from auth.password import password_problem
from auth.tokens import TokenService
from config.settings import Settings, get_settings
from database.models import LOCAL_PROVIDER
from database.store import UserStore

logger = logging.getLogger(__name__)

router = APIRouter(tags=["auth"])


# ── Request schemas ────────────────────────────────────────────────────
# Fields are optional so that missing values surface as ``invalid_input``
# rather than FastAPI's generic 422.


class RegisterRequest(BaseModel):
    email: Optional[str] = None
    password: Optional[str] = None
    name: Optional[str] = None


class LoginRequest(BaseModel):
    email: Optional[str] = None
    password: Optional[str] = None


# ── Endpoints ──────────────────────────────────────────────────────────


@router.post("/register", status_code=status.HTTP_201_CREATED)
async def register(
    req: RegisterRequest,
    store: UserStore = Depends(get_user_store),
    tokens: TokenService = Depends(get_token_service),
) -> Dict[str, Any]:
    """Create a local account and sign it in."""
    if not req.email or not req.password or not req.name:
        raise InvalidInput("Email, password and name are required")

    problem = password_problem(req.password)
    if problem:
        raise InvalidInput(problem)

    existing = (await store.find_by_email(req.email)).unwrap()
    if existing is not None:
        raise Conflict()

    user = (await store.create_local_user(req.email, req.password, req.name)).unwrap()
    token = tokens.issue(user.id)
    logger.info("Registered user %s", user.id)

    return {
        "message": "Account created",
        "user": {
            "id": str(user.id),
            "email": user.email,
            "name": user.name,
            "provider": user.provider,
        },
        "token": token,
        "expiresIn": tokens.expires_in,
    }


@router.post("/login")
async def login(
    req: LoginRequest,
    store: UserStore = Depends(get_user_store),
    tokens: TokenService = Depends(get_token_service),
) -> Dict[str, Any]:
    """Login with email + password."""
    if not req.email or not req.password:
        raise InvalidInput("Email and password are required")

    user = (await store.find_by_email(req.email, provider=LOCAL_PROVIDER)).unwrap()

    # Unknown email and wrong password share one response.
    if not await store.compare_password(user, req.password):
        raise InvalidCredentials()

    token = tokens.issue(user.id)
    logger.info("Login: %s", user.id)

    return {
        "message": "Login successful",
        "user": {
            "id": str(user.id),
            "email": user.email,
            "name": user.name,
            "provider": user.provider,
            "picture": user.picture,
        },
        "token": token,
        "expiresIn": tokens.expires_in,
    }


@router.get("/profile")
async def profile(user: dict = Depends(get_current_user)) -> Dict[str, Any]:
    """Current user's record."""
    return {"message": "User profile", "user": user}


@router.get("/users")
async def list_users(
    store: UserStore = Depends(get_user_store),
    settings: Settings = Depends(get_settings),
) -> Dict[str, Any]:
    """Debug listing of every account. Disabled unless ENABLE_USER_LISTING is set."""
    if not settings.enable_user_listing:
        raise NotFound()

    users = (await store.list_users()).unwrap()
    return {
        "message": "User list",
        "count": len(users),
        "users": [u.to_public() for u in users],
    }
