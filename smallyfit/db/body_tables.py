"""Body tracking tables — measurements and water intake."""
from __future__ import annotations

import uuid
from datetime import datetime, timezone

from sqlalchemy import Column, String, Integer, Float, DateTime, ForeignKey, Index

from smallyfit.db.tables import Base


class MeasurementRow(Base):
    """Body measurement snapshot. Rows are append-only; latest = max(created_at)."""
    __tablename__ = "measurements"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    account_id = Column(String(36), ForeignKey("accounts.id", ondelete="CASCADE"), nullable=False)

    weight = Column(Float, nullable=False)  # kg
    height = Column(Float, nullable=False)  # cm
    waist = Column(Float, nullable=True)  # cm
    hip = Column(Float, nullable=True)  # cm
    arms = Column(Float, nullable=True)  # cm

    created_at = Column(DateTime(timezone=True), nullable=False, default=lambda: datetime.now(timezone.utc))

    __table_args__ = (
        Index("ix_measurements_account_created", "account_id", "created_at"),
    )


class WaterLogRow(Base):
    """Signed water intake delta in ml. Daily total = sum of deltas."""
    __tablename__ = "water_logs"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    account_id = Column(String(36), ForeignKey("accounts.id", ondelete="CASCADE"), nullable=False)
    amount = Column(Integer, nullable=False)
    created_at = Column(DateTime(timezone=True), nullable=False, default=lambda: datetime.now(timezone.utc))

    __table_args__ = (
        Index("ix_water_logs_account_created", "account_id", "created_at"),
    )
