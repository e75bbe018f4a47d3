"""
UserStore — the credential store behind every auth route.

Wraps one ``AsyncSession``.  Every operation returns a ``Result``; database
failures come back as ``InternalError`` and unique-constraint violations on
insert as ``Conflict``, so callers never have to catch SQLAlchemy errors.
"""

from __future__ import annotations

import logging
import uuid
from typing import Any, Dict, List, Optional

from fastapi.concurrency import run_in_threadpool
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from auth.errors import Conflict, InternalError
from auth.password import dummy_hash, hash_password, verify_password
from auth.results import Result
from database.models import LOCAL_PROVIDER, User

logger = logging.getLogger(__name__)

# provider tag → column holding that provider's external id
PROVIDER_ID_COLUMNS: Dict[str, str] = {
    "google": "google_id",
    "discord": "discord_id",
    "github": "github_id",
}


def _to_uuid(value: str | uuid.UUID) -> Optional[uuid.UUID]:
    if isinstance(value, uuid.UUID):
        return value
    try:
        return uuid.UUID(str(value))
    except ValueError:
        return None


class UserStore:
    """Async data-access layer for ``User`` records."""

    def __init__(self, session: AsyncSession, *, bcrypt_rounds: int = 12) -> None:
        self.session = session
        self.bcrypt_rounds = bcrypt_rounds

    # ── Lookups ─────────────────────────────────────────────────────────

    async def find_by_id(self, user_id: str | uuid.UUID) -> Result[Optional[User]]:
        uid = _to_uuid(user_id)
        if uid is None:
            return Result.ok(None)
        try:
            return Result.ok(await self.session.get(User, uid))
        except SQLAlchemyError as exc:
            return self._failed("find_by_id", exc)

    async def find_by_email(
        self, email: str, *, provider: Optional[str] = None
    ) -> Result[Optional[User]]:
        """First user with ``email``, optionally restricted to one provider."""
        stmt = select(User).where(User.email == email)
        if provider is not None:
            stmt = stmt.where(User.provider == provider)
        stmt = stmt.order_by(User.created_at).limit(1)
        try:
            result = await self.session.execute(stmt)
            return Result.ok(result.scalars().first())
        except SQLAlchemyError as exc:
            return self._failed("find_by_email", exc)

    async def find_by_provider_id(
        self, provider: str, external_id: str
    ) -> Result[Optional[User]]:
        column = getattr(User, PROVIDER_ID_COLUMNS[provider])
        try:
            result = await self.session.execute(
                select(User).where(column == str(external_id))
            )
            return Result.ok(result.scalar_one_or_none())
        except SQLAlchemyError as exc:
            return self._failed("find_by_provider_id", exc)

    async def list_users(self) -> Result[List[User]]:
        try:
            result = await self.session.execute(select(User).order_by(User.created_at))
            return Result.ok(list(result.scalars().all()))
        except SQLAlchemyError as exc:
            return self._failed("list_users", exc)

    # ── Creation ────────────────────────────────────────────────────────

    async def create_local_user(self, email: str, password: str, name: str) -> Result[User]:
        """Insert a password-authenticated user (hash computed here)."""
        user = User(
            id=uuid.uuid4(),
            email=email,
            name=name,
            password_hash=await run_in_threadpool(hash_password, password, self.bcrypt_rounds),
            provider=LOCAL_PROVIDER,
        )
        return await self._insert(user, "create_local_user")

    async def create_from_provider(
        self,
        provider: str,
        external_id: str,
        *,
        email: Optional[str],
        name: Optional[str],
        picture: Optional[str],
    ) -> Result[User]:
        """Insert a user that signs in through ``provider``."""
        fields: Dict[str, Any] = {PROVIDER_ID_COLUMNS[provider]: str(external_id)}
        user = User(
            id=uuid.uuid4(),
            email=email,
            name=name,
            picture=picture,
            provider=provider,
            **fields,
        )
        return await self._insert(user, "create_from_provider")

    # ── Passwords ───────────────────────────────────────────────────────

    async def compare_password(self, user: Optional[User], password: str) -> bool:
        """
        bcrypt check in a worker thread.  ``user=None`` still pays for one
        check against a dummy hash so unknown emails take the same path.
        """
        if user is None:
            password_hash = await run_in_threadpool(dummy_hash, self.bcrypt_rounds)
        else:
            password_hash = user.password_hash
        matched = await run_in_threadpool(verify_password, password, password_hash)
        return matched and user is not None

    # ── Internals ───────────────────────────────────────────────────────

    async def _insert(self, user: User, operation: str) -> Result[User]:
        self.session.add(user)
        try:
            await self.session.commit()
        except IntegrityError:
            await self.session.rollback()
            logger.info("%s rejected by unique constraint (provider=%s)", operation, user.provider)
            return Result.fail(Conflict())
        except SQLAlchemyError as exc:
            await self.session.rollback()
            return self._failed(operation, exc)
        return Result.ok(user)

    def _failed(self, operation: str, exc: Exception) -> Result[Any]:
        logger.error("UserStore.%s failed: %s", operation, exc, exc_info=True)
        return Result.fail(InternalError("Database error"))
