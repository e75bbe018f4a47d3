"""
Provider adapter — maps a provider profile onto a local user and signs it in.

One generic flow driven by ``PROFILE_MAPPINGS``: each provider only differs
in how email, display name and avatar are read from its profile.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Callable, Dict, Optional

from auth.errors import Conflict, InternalError, InvalidInput
from auth.results import Result
from auth.tokens import TokenService
from database.models import User
from database.store import UserStore
from providers.profile import OAuthProfile

logger = logging.getLogger(__name__)

_DISCORD_AVATAR_URL = "https://cdn.discordapp.com/avatars/{id}/{avatar}.png"

ProfileField = Callable[[OAuthProfile], Optional[str]]


# ── Field extraction rules ─────────────────────────────────────────────


def first_verified_email(profile: OAuthProfile) -> Optional[str]:
    """First address not flagged unverified; providers that omit the flag count as verified."""
    for entry in profile.emails:
        if entry.verified is not False and entry.value:
            return entry.value
    return None


def single_verified_email(profile: OAuthProfile) -> Optional[str]:
    if profile.email and profile.email_verified is not False:
        return profile.email
    return None


def display_name_or_username(profile: OAuthProfile) -> Optional[str]:
    return profile.display_name or profile.username


def username(profile: OAuthProfile) -> Optional[str]:
    return profile.username


def first_photo(profile: OAuthProfile) -> Optional[str]:
    return profile.photos[0] if profile.photos else None


def discord_avatar_url(profile: OAuthProfile) -> Optional[str]:
    if not profile.avatar:
        return None
    return _DISCORD_AVATAR_URL.format(id=profile.id, avatar=profile.avatar)


@dataclass(frozen=True)
class ProfileMapping:
    email: ProfileField
    name: ProfileField
    picture: ProfileField


PROFILE_MAPPINGS: Dict[str, ProfileMapping] = {
    "google": ProfileMapping(
        email=first_verified_email,
        name=display_name_or_username,
        picture=first_photo,
    ),
    "discord": ProfileMapping(
        email=single_verified_email,
        name=username,
        picture=discord_avatar_url,
    ),
    "github": ProfileMapping(
        email=first_verified_email,
        name=display_name_or_username,
        picture=first_photo,
    ),
}


@dataclass(frozen=True)
class NormalizedIdentity:
    provider: str
    external_id: str
    email: Optional[str]
    name: Optional[str]
    picture: Optional[str]


def normalize_profile(profile: OAuthProfile) -> NormalizedIdentity:
    """Apply the provider's mapping rules. Raises KeyError for unknown providers."""
    mapping = PROFILE_MAPPINGS[profile.provider]
    return NormalizedIdentity(
        provider=profile.provider,
        external_id=str(profile.id),
        email=mapping.email(profile),
        name=mapping.name(profile),
        picture=mapping.picture(profile),
    )


# ── Resolution ─────────────────────────────────────────────────────────


@dataclass(frozen=True)
class AdapterOutcome:
    user: User
    token: str
    created: bool


async def resolve_user(
    profile: OAuthProfile,
    store: UserStore,
    tokens: TokenService,
) -> Result[AdapterOutcome]:
    """
    Find (or lazily create) the local user for ``profile`` and issue a token.

    Existing users are returned as stored; their profile is not refreshed.
    """
    if profile.provider not in PROFILE_MAPPINGS or not profile.id:
        return Result.fail(InvalidInput(f"Unsupported profile from {profile.provider!r}"))

    found = await store.find_by_provider_id(profile.provider, profile.id)
    if not found.success:
        return Result.fail(found.error)

    user = found.value
    created = False
    if user is None:
        identity = normalize_profile(profile)
        inserted = await store.create_from_provider(
            identity.provider,
            identity.external_id,
            email=identity.email,
            name=identity.name,
            picture=identity.picture,
        )
        if inserted.success:
            user = inserted.value
            created = True
            logger.info("Created %s user %s", identity.provider, user.id)
        elif isinstance(inserted.error, Conflict):
            # Lost an insert race with a concurrent callback for the same account.
            retry = await store.find_by_provider_id(profile.provider, profile.id)
            if not retry.success or retry.value is None:
                return Result.fail(retry.error or inserted.error)
            user = retry.value
        else:
            return Result.fail(inserted.error)

    try:
        token = tokens.issue(user.id)
    except Exception as exc:
        logger.error("Token issuance failed for user %s: %s", user.id, exc, exc_info=True)
        return Result.fail(InternalError("Could not issue session token"))

    return Result.ok(AdapterOutcome(user=user, token=token, created=created))
