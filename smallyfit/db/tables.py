"""SQLAlchemy ORM base + shared reference tables for SmallyFit."""
from __future__ import annotations

import uuid
from datetime import datetime, timezone

from sqlalchemy import Column, String, Float, DateTime, Index
from sqlalchemy.orm import DeclarativeBase


class Base(DeclarativeBase):
    pass


class FoodItemRow(Base):
    """Food reference data — nutrients are normalized per declared serving size.

    Shared across accounts and never edited in place; meal items keep their own
    snapshot of the values they were logged with.
    """
    __tablename__ = "food_items"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    name = Column(String(200), nullable=False, index=True)
    category = Column(String(50), nullable=True)

    calories = Column(Float, nullable=False)
    protein = Column(Float, nullable=False, default=0.0)
    carbs = Column(Float, nullable=False, default=0.0)
    fat = Column(Float, nullable=False, default=0.0)
    fiber = Column(Float, nullable=False, default=0.0)
    sugar = Column(Float, nullable=False, default=0.0)

    serving_size = Column(Float, nullable=False, default=100.0)
    serving_unit = Column(String(10), nullable=False, default="g")  # g | ml

    created_at = Column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc))

    __table_args__ = (
        Index("ix_food_items_category", "category"),
    )
