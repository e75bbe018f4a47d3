"""
Session token issuance and verification.

Tokens are HS256 JWTs carrying the user id in ``sub`` plus ``iat`` / ``exp``.
Secret and lifetime come from ``config.jwt_secret`` / ``config.jwt_expires_in``
(env vars ``JWT_SECRET`` / ``JWT_EXPIRES_IN``).
"""

from __future__ import annotations

import enum
import logging
import re
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Optional

import jwt

logger = logging.getLogger(__name__)

_DURATION_RE = re.compile(r"^\s*(\d+(?:\.\d+)?)\s*(ms|s|m|h|d|w|y)?\s*$", re.IGNORECASE)
_UNIT_SECONDS = {
    "ms": 0.001,
    "s": 1,
    "m": 60,
    "h": 3600,
    "d": 86400,
    "w": 7 * 86400,
    "y": 365.25 * 86400,
}


def parse_duration(value: str | int) -> timedelta:
    """
    Parse a lifetime such as ``3600``, ``"90s"``, ``"30m"``, ``"1h"`` or ``"7d"``.

    A bare number is seconds. Raises ``ValueError`` for anything else.
    """
    if isinstance(value, int):
        seconds = float(value)
    else:
        match = _DURATION_RE.match(value)
        if not match:
            raise ValueError(f"Invalid duration: {value!r}")
        amount, unit = match.groups()
        seconds = float(amount) * _UNIT_SECONDS[(unit or "s").lower()]
    if seconds <= 0:
        raise ValueError(f"Duration must be positive: {value!r}")
    return timedelta(seconds=seconds)


class TokenStatus(str, enum.Enum):
    VALID = "valid"
    EXPIRED = "expired"
    INVALID = "invalid"


@dataclass(frozen=True)
class TokenVerification:
    status: TokenStatus
    user_id: Optional[str] = None
    reason: str = ""

    @property
    def is_valid(self) -> bool:
        return self.status is TokenStatus.VALID


class TokenService:
    """Signs and verifies stateless session tokens."""

    def __init__(self, secret: str, expires_in: str | int = "1h", algorithm: str = "HS256"):
        if not secret:
            raise ValueError("Token secret must not be empty")
        self.secret = secret
        self.expires_in = expires_in
        self.ttl = parse_duration(expires_in)
        self.algorithm = algorithm

    def issue(self, user_id: object) -> str:
        """Create a signed token whose subject is ``str(user_id)``."""
        now = datetime.now(timezone.utc)
        payload = {"sub": str(user_id), "iat": now, "exp": now + self.ttl}
        return jwt.encode(payload, self.secret, algorithm=self.algorithm)

    def verify(self, token: str) -> TokenVerification:
        """
        Check signature and expiry.

        Never raises for bad input; an expired token and a malformed /
        tampered one are reported with different statuses.
        """
        try:
            claims = jwt.decode(
                token,
                self.secret,
                algorithms=[self.algorithm],
                options={"require": ["exp", "sub"]},
            )
        except jwt.ExpiredSignatureError:
            return TokenVerification(TokenStatus.EXPIRED, reason="token expired")
        except jwt.InvalidTokenError as exc:
            return TokenVerification(TokenStatus.INVALID, reason=str(exc))

        subject = claims.get("sub")
        if not isinstance(subject, str) or not subject:
            return TokenVerification(TokenStatus.INVALID, reason="missing subject")
        return TokenVerification(TokenStatus.VALID, user_id=subject)
