"""Meal logging tables — meals carry denormalized nutrient totals of their items."""
from __future__ import annotations

import uuid
from datetime import datetime, timezone

from sqlalchemy import Column, String, Integer, Float, DateTime, ForeignKey, Index

from smallyfit.db.tables import Base


class MealRow(Base):
    """A named meal for one account on one date.

    Totals must always equal the sum of the item snapshots. ``version`` is an
    ORM optimistic lock so two writers can't silently overwrite each other's
    totals.
    """
    __tablename__ = "meals"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    account_id = Column(String(36), ForeignKey("accounts.id", ondelete="CASCADE"), nullable=False)
    name = Column(String(200), nullable=False)
    meal_type = Column(String(20), nullable=False, default="snack")  # breakfast, lunch, dinner, snack
    date = Column(DateTime(timezone=True), nullable=False, default=lambda: datetime.now(timezone.utc))

    total_calories = Column(Integer, nullable=False, default=0)
    total_protein = Column(Float, nullable=False, default=0.0)
    total_carbs = Column(Float, nullable=False, default=0.0)
    total_fat = Column(Float, nullable=False, default=0.0)

    version = Column(Integer, nullable=False)
    created_at = Column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc))

    __mapper_args__ = {"version_id_col": version}

    __table_args__ = (
        Index("ix_meals_account_date", "account_id", "date"),
    )


class MealItemRow(Base):
    """Food item logged in a meal, with nutrients snapshotted at add time."""
    __tablename__ = "meal_items"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    meal_id = Column(String(36), ForeignKey("meals.id", ondelete="CASCADE"), nullable=False, index=True)
    food_item_id = Column(String(36), ForeignKey("food_items.id", ondelete="SET NULL"), nullable=True)

    food_name = Column(String(200), nullable=False)  # denormalized for display
    quantity = Column(Float, nullable=False)  # in the food's serving unit (g / ml)
    portions = Column(Integer, nullable=False, default=1)

    # Snapshot of nutrition at time of logging (in case the food changes later)
    calories = Column(Integer, nullable=False, default=0)
    protein = Column(Float, nullable=False, default=0.0)
    carbs = Column(Float, nullable=False, default=0.0)
    fat = Column(Float, nullable=False, default=0.0)

    created_at = Column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc))
