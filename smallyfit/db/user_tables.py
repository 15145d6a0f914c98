"""Account tables: identity, credentials, premium flag, per-account settings."""
from __future__ import annotations

import uuid
from datetime import datetime, timezone

from sqlalchemy import Column, String, Boolean, DateTime, ForeignKey

from smallyfit.db.tables import Base


class AccountRow(Base):
    """Registered user. Email is the login identity and must be unique."""
    __tablename__ = "accounts"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    name = Column(String(100), nullable=False)
    email = Column(String(320), nullable=False, unique=True, index=True)
    password_hash = Column(String(256), nullable=False)  # PBKDF2-SHA256

    is_premium = Column(Boolean, nullable=False, default=False)
    is_admin = Column(Boolean, nullable=False, default=False)

    # Start of the free trial window
    created_at = Column(DateTime(timezone=True), nullable=False, default=lambda: datetime.now(timezone.utc))
    updated_at = Column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc))


class SettingsRow(Base):
    """One-to-one account preferences: notification toggles, units, nutrition goal."""
    __tablename__ = "settings"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    account_id = Column(String(36), ForeignKey("accounts.id", ondelete="CASCADE"), nullable=False, unique=True, index=True)

    dark_mode = Column(Boolean, nullable=False, default=False)
    units = Column(String(10), nullable=False, default="metric")  # metric | imperial
    notification_sound = Column(Boolean, nullable=False, default=True)
    water_reminders = Column(Boolean, nullable=False, default=True)
    workout_reminders = Column(Boolean, nullable=False, default=True)
    measurement_reminders = Column(Boolean, nullable=False, default=True)
    motivation_tips = Column(Boolean, nullable=False, default=False)

    goal = Column(String(10), nullable=False, default="maintain")  # lose | maintain | gain

    created_at = Column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc))
    updated_at = Column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc))
