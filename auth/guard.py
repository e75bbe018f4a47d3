"""
Session guard — turns an ``Authorization`` header into the current user.

Checks run in a fixed order: missing token, expired token, invalid token,
unknown user.  The first failing check decides the error.
"""

from __future__ import annotations

import logging
from typing import Optional

from auth.errors import Forbidden, NotFound, SessionExpired, Unauthenticated
from auth.results import Result
from auth.tokens import TokenService, TokenStatus
from database.store import UserStore

logger = logging.getLogger(__name__)


def extract_bearer_token(authorization: Optional[str]) -> Optional[str]:
    """Return the token from ``Bearer <token>``, or None."""
    if not authorization:
        return None
    scheme, _, token = authorization.strip().partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        return None
    return token.strip()


async def authenticate(
    authorization: Optional[str],
    store: UserStore,
    tokens: TokenService,
) -> Result[dict]:
    """Resolve the request's user, returning its public record."""
    token = extract_bearer_token(authorization)
    if token is None:
        return Result.fail(Unauthenticated("Access token required"))

    check = tokens.verify(token)
    if check.status is TokenStatus.EXPIRED:
        logger.info("Rejected expired session token")
        return Result.fail(SessionExpired())
    if check.status is TokenStatus.INVALID:
        logger.warning("Rejected invalid session token: %s", check.reason)
        return Result.fail(Forbidden())

    found = await store.find_by_id(check.user_id)
    if not found.success:
        return Result.fail(found.error)
    if found.value is None:
        return Result.fail(NotFound("This account no longer exists"))

    return Result.ok(found.value.to_public())
