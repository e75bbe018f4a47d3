"""
Normalised shape of a user profile returned by an identity provider.
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field


class ProfileEmail(BaseModel):
    value: str
    verified: Optional[bool] = None   # None when the provider does not say
    primary: Optional[bool] = None


class OAuthProfile(BaseModel):
    provider: str
    id: str
    display_name: Optional[str] = None
    username: Optional[str] = None
    emails: List[ProfileEmail] = Field(default_factory=list)
    photos: List[str] = Field(default_factory=list)
    # Discord reports a single address and an avatar hash instead of lists.
    email: Optional[str] = None
    email_verified: Optional[bool] = None
    avatar: Optional[str] = None
    raw: Dict[str, Any] = Field(default_factory=dict)
