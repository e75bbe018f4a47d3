"""
SQLAlchemy ORM models for the credential store.
"""

from __future__ import annotations

import uuid
from datetime import datetime, timezone

from sqlalchemy import Column, DateTime, Index, String, Uuid, text
from sqlalchemy.orm import DeclarativeBase

LOCAL_PROVIDER = "local"


class Base(DeclarativeBase):
    pass


class User(Base):
    __tablename__ = "users"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    email = Column(String(255), nullable=True)
    name = Column(String(128), nullable=True)
    picture = Column(String(1024), nullable=True)
    password_hash = Column(String(255), nullable=True)
    provider = Column(String(16), nullable=False, default=LOCAL_PROVIDER)
    google_id = Column(String(255), unique=True, nullable=True)
    discord_id = Column(String(255), unique=True, nullable=True)
    github_id = Column(String(255), unique=True, nullable=True)
    created_at = Column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc))

    __table_args__ = (
        # One local account per email; provider accounts may share an address.
        Index(
            "uq_users_local_email",
            "email",
            unique=True,
            postgresql_where=text("provider = 'local'"),
            sqlite_where=text("provider = 'local'"),
        ),
        Index("ix_users_email", "email"),
    )

    def to_public(self) -> dict:
        """JSON-safe view of the record without the password hash."""
        return {
            "id": str(self.id),
            "email": self.email,
            "name": self.name,
            "picture": self.picture,
            "provider": self.provider,
            "googleId": self.google_id,
            "discordId": self.discord_id,
            "githubId": self.github_id,
            "createdAt": self.created_at.isoformat() if self.created_at else None,
        }
