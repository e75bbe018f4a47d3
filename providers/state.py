"""
OAuth ``state`` helpers (CSRF protection).

The state is a signed, short-lived token naming the provider it was issued
for, so a callback cannot be replayed against another provider.
"""

from __future__ import annotations

import hashlib
import hmac
import json
import secrets
import time
from base64 import urlsafe_b64decode, urlsafe_b64encode


def create_state(provider: str, secret: str, ttl_seconds: int = 600) -> str:
    """Create an opaque state string encoding provider + nonce + expiry."""
    payload = json.dumps(
        {
            "provider": provider,
            "nonce": secrets.token_urlsafe(12),
            "exp": int(time.time()) + ttl_seconds,
        }
    )
    raw = payload.encode()
    sig = hmac.new(secret.encode(), raw, hashlib.sha256).hexdigest()[:32]
    return urlsafe_b64encode(raw).decode() + "." + sig


def verify_state(state: str, provider: str, secret: str) -> None:
    """Verify a state token for ``provider``. Raises ValueError on failure."""
    parts = state.split(".", 1)
    if len(parts) != 2:
        raise ValueError("bad format")
    try:
        raw = urlsafe_b64decode(parts[0].encode())
        sig = parts[1].encode("ascii")
    except ValueError as exc:
        # UnicodeError and binascii.Error are both ValueError subclasses
        raise ValueError("bad encoding") from exc
    expected_sig = hmac.new(secret.encode(), raw, hashlib.sha256).hexdigest()[:32]
    if not hmac.compare_digest(sig, expected_sig.encode()):
        raise ValueError("bad signature")
    try:
        payload = json.loads(raw)
    except ValueError as exc:
        raise ValueError("bad payload") from exc
    if not isinstance(payload, dict) or payload.get("provider") != provider:
        raise ValueError("state issued for another provider")
    exp = payload.get("exp")
    if not isinstance(exp, (int, float)) or exp < time.time():
        raise ValueError("state expired")
