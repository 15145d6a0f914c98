"""Persistence gateway — async CRUD for every SmallyFit table.

Lookups return the row (or a pydantic model) or ``None``; turning ``None``
into a 404 is the caller's job. Nothing here commits: the service or route
that owns the unit of work calls ``session.commit()``.
"""
from __future__ import annotations

from collections import defaultdict
from datetime import date, datetime, time, timedelta, timezone
from typing import Iterable, Optional

from sqlalchemy import delete, func, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from smallyfit.db.body_tables import MeasurementRow, WaterLogRow
from smallyfit.db.meal_tables import MealItemRow, MealRow
from smallyfit.db.notification_tables import NotificationRow
from smallyfit.db.tables import FoodItemRow
from smallyfit.db.user_tables import AccountRow, SettingsRow
from smallyfit.db.workout_tables import ExerciseRow, WorkoutRow
from smallyfit.models import FoodProfile, Nutrients
from smallyfit.services.nutrition import ItemSnapshot, MacroTotals


def _escape_like(value: str) -> str:
    """Escape LIKE wildcard characters in user input."""
    return value.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


def _as_utc(dt: datetime) -> datetime:
    # SQLite hands back naive datetimes; everything is stored in UTC.
    return dt.replace(tzinfo=timezone.utc) if dt.tzinfo is None else dt.astimezone(timezone.utc)


def day_bounds(day: date) -> tuple[datetime, datetime]:
    """[start, end) of a UTC calendar day."""
    start = datetime.combine(day, time.min, tzinfo=timezone.utc)
    return start, start + timedelta(days=1)


def _row_to_food(row: FoodItemRow) -> FoodProfile:
    """Convert a DB row to a pydantic FoodProfile."""
    return FoodProfile(
        id=row.id,
        name=row.name,
        category=row.category,
        nutrients_per_serving=Nutrients(
            calories=row.calories,
            protein=row.protein or 0,
            carbs=row.carbs or 0,
            fat=row.fat or 0,
            fiber=row.fiber or 0,
            sugar=row.sugar or 0,
        ),
        serving_size=row.serving_size or 100,
        serving_unit=row.serving_unit or "g",
    )


def _food_to_row(food: FoodProfile) -> FoodItemRow:
    n = food.nutrients_per_serving
    row = FoodItemRow(
        name=food.name,
        category=food.category,
        calories=n.calories,
        protein=n.protein,
        carbs=n.carbs,
        fat=n.fat,
        fiber=n.fiber,
        sugar=n.sugar,
        serving_size=food.serving_size,
        serving_unit=food.serving_unit.value,
    )
    if food.id:
        row.id = food.id
    return row


def meal_totals(meal: MealRow) -> MacroTotals:
    return MacroTotals(
        calories=meal.total_calories or 0,
        protein=meal.total_protein or 0.0,
        carbs=meal.total_carbs or 0.0,
        fat=meal.total_fat or 0.0,
    )


def item_snapshot(item: MealItemRow) -> ItemSnapshot:
    return ItemSnapshot(
        food_item_id=item.food_item_id,
        food_name=item.food_name,
        quantity=item.quantity,
        calories=item.calories or 0,
        protein=item.protein or 0.0,
        carbs=item.carbs or 0.0,
        fat=item.fat or 0.0,
    )


class Repository:
    """Async CRUD backed by SQLAlchemy, scoped to one session."""

    def __init__(self, session: AsyncSession):
        self.session = session

    # ── Accounts ─────────────────────────────────────────────────────────────

    async def get_account(self, account_id: str) -> Optional[AccountRow]:
        return await self.session.get(AccountRow, account_id)

    async def get_account_by_email(self, email: str) -> Optional[AccountRow]:
        result = await self.session.execute(
            select(AccountRow).where(func.lower(AccountRow.email) == email.lower())
        )
        return result.scalar_one_or_none()

    async def create_account(self, name: str, email: str, password_hash: str) -> AccountRow:
        """Insert an account together with its default settings row."""
        account = AccountRow(name=name, email=email.lower(), password_hash=password_hash)
        self.session.add(account)
        await self.session.flush()
        self.session.add(SettingsRow(account_id=account.id))
        await self.session.flush()
        return account

    async def delete_account(self, account_id: str) -> None:
        """Delete an account and every row it owns."""
        meal_ids = select(MealRow.id).where(MealRow.account_id == account_id)
        workout_ids = select(WorkoutRow.id).where(WorkoutRow.account_id == account_id)
        await self.session.execute(
            delete(MealItemRow).where(MealItemRow.meal_id.in_(meal_ids)).execution_options(synchronize_session=False)
        )
        await self.session.execute(
            delete(ExerciseRow).where(ExerciseRow.workout_id.in_(workout_ids)).execution_options(synchronize_session=False)
        )
        for table in (MealRow, WorkoutRow, MeasurementRow, WaterLogRow, NotificationRow, SettingsRow):
            await self.session.execute(
                delete(table).where(table.account_id == account_id).execution_options(synchronize_session=False)
            )
        await self.session.execute(delete(AccountRow).where(AccountRow.id == account_id))

    # ── Settings ─────────────────────────────────────────────────────────────

    async def get_account_settings(self, account_id: str) -> Optional[SettingsRow]:
        result = await self.session.execute(
            select(SettingsRow).where(SettingsRow.account_id == account_id)
        )
        return result.scalar_one_or_none()

    async def get_or_create_settings(self, account_id: str) -> SettingsRow:
        row = await self.get_account_settings(account_id)
        if row is None:
            row = SettingsRow(account_id=account_id)
            self.session.add(row)
            await self.session.flush()
        return row

    async def update_settings(self, account_id: str, **changes) -> SettingsRow:
        row = await self.get_or_create_settings(account_id)
        for key, value in changes.items():
            setattr(row, key, value)
        row.updated_at = datetime.now(timezone.utc)
        await self.session.flush()
        return row

    # ── Measurements ─────────────────────────────────────────────────────────

    async def get_latest_measurement(self, account_id: str) -> Optional[MeasurementRow]:
        result = await self.session.execute(
            select(MeasurementRow)
            .where(MeasurementRow.account_id == account_id)
            .order_by(MeasurementRow.created_at.desc())
            .limit(1)
        )
        return result.scalar_one_or_none()

    async def get_measurement_history(self, account_id: str, limit: int | None = None) -> list[MeasurementRow]:
        """Measurements newest first."""
        stmt = (
            select(MeasurementRow)
            .where(MeasurementRow.account_id == account_id)
            .order_by(MeasurementRow.created_at.desc())
        )
        if limit is not None:
            stmt = stmt.limit(limit)
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def count_measurements(self, account_id: str) -> int:
        result = await self.session.execute(
            select(func.count(MeasurementRow.id)).where(MeasurementRow.account_id == account_id)
        )
        return result.scalar_one()

    async def create_measurement(
        self,
        account_id: str,
        weight: float,
        height: float,
        waist: float | None = None,
        hip: float | None = None,
        arms: float | None = None,
    ) -> MeasurementRow:
        row = MeasurementRow(
            account_id=account_id, weight=weight, height=height,
            waist=waist, hip=hip, arms=arms,
        )
        self.session.add(row)
        await self.session.flush()
        return row

    # ── Water ────────────────────────────────────────────────────────────────

    async def get_water_total(self, account_id: str, day: date) -> int:
        start, end = day_bounds(day)
        result = await self.session.execute(
            select(func.coalesce(func.sum(WaterLogRow.amount), 0)).where(
                WaterLogRow.account_id == account_id,
                WaterLogRow.created_at >= start,
                WaterLogRow.created_at < end,
            )
        )
        return int(result.scalar_one())

    async def get_today_water_total(self, account_id: str, now: datetime | None = None) -> int:
        now = now or datetime.now(timezone.utc)
        return await self.get_water_total(account_id, _as_utc(now).date())

    async def adjust_water_total(self, account_id: str, amount: int, now: datetime | None = None) -> int:
        """Record a signed delta and return the new total for today.

        Removals are clamped so the day's total never drops below zero.
        """
        now = now or datetime.now(timezone.utc)
        current = await self.get_today_water_total(account_id, now)
        delta = max(amount, -current)
        if delta != 0:
            self.session.add(WaterLogRow(account_id=account_id, amount=delta, created_at=now))
            await self.session.flush()
        return current + delta

    async def get_water_history(self, account_id: str, days: int = 30, now: datetime | None = None) -> list[dict]:
        """Per-day totals, newest first, for days with any log."""
        now = _as_utc(now or datetime.now(timezone.utc))
        since, _ = day_bounds(now.date() - timedelta(days=days - 1))
        result = await self.session.execute(
            select(WaterLogRow.amount, WaterLogRow.created_at).where(
                WaterLogRow.account_id == account_id,
                WaterLogRow.created_at >= since,
            )
        )
        totals: dict[date, int] = defaultdict(int)
        for amount, created_at in result.all():
            totals[_as_utc(created_at).date()] += amount
        return [
            {"date": day.isoformat(), "total": total}
            for day, total in sorted(totals.items(), reverse=True)
        ]

    # ── Workouts ─────────────────────────────────────────────────────────────

    async def list_workouts(self, account_id: str, day: str | None = None) -> list[WorkoutRow]:
        stmt = select(WorkoutRow).where(WorkoutRow.account_id == account_id)
        if day is not None:
            stmt = stmt.where(WorkoutRow.day == day)
        result = await self.session.execute(stmt.order_by(WorkoutRow.created_at))
        return list(result.scalars().all())

    async def get_workout(self, workout_id: str) -> Optional[WorkoutRow]:
        return await self.session.get(WorkoutRow, workout_id)

    async def create_workout(
        self, account_id: str, title: str, type: str, day: str, exercises: Iterable[dict] = ()
    ) -> WorkoutRow:
        workout = WorkoutRow(account_id=account_id, title=title, type=type, day=day)
        self.session.add(workout)
        await self.session.flush()
        for position, ex in enumerate(exercises):
            self.session.add(ExerciseRow(
                workout_id=workout.id, name=ex["name"], sets=ex["sets"],
                reps=ex["reps"], position=position,
            ))
        await self.session.flush()
        return workout

    async def list_exercises(self, workout_ids: list[str]) -> dict[str, list[ExerciseRow]]:
        """Exercises grouped by workout id, in insertion order."""
        grouped: dict[str, list[ExerciseRow]] = {wid: [] for wid in workout_ids}
        if not workout_ids:
            return grouped
        result = await self.session.execute(
            select(ExerciseRow)
            .where(ExerciseRow.workout_id.in_(workout_ids))
            .order_by(ExerciseRow.position)
        )
        for row in result.scalars().all():
            grouped[row.workout_id].append(row)
        return grouped

    async def get_exercise(self, exercise_id: str) -> Optional[ExerciseRow]:
        return await self.session.get(ExerciseRow, exercise_id)

    async def set_workout_completed(self, workout_id: str, completed: bool = True) -> None:
        await self.session.execute(
            update(ExerciseRow).where(ExerciseRow.workout_id == workout_id).values(completed=completed)
            .execution_options(synchronize_session=False)
        )

    async def delete_workout(self, workout_id: str) -> None:
        await self.session.execute(delete(ExerciseRow).where(ExerciseRow.workout_id == workout_id))
        await self.session.execute(delete(WorkoutRow).where(WorkoutRow.id == workout_id))

    # ── Notifications ────────────────────────────────────────────────────────

    async def list_notifications(self, account_id: str, limit: int = 50) -> list[NotificationRow]:
        result = await self.session.execute(
            select(NotificationRow)
            .where(NotificationRow.account_id == account_id)
            .order_by(NotificationRow.created_at.desc())
            .limit(limit)
        )
        return list(result.scalars().all())

    async def get_notification(self, notification_id: str) -> Optional[NotificationRow]:
        return await self.session.get(NotificationRow, notification_id)

    async def create_notification(self, account_id: str, title: str, message: str, icon: str) -> NotificationRow:
        row = NotificationRow(account_id=account_id, title=title, message=message, icon=icon)
        self.session.add(row)
        await self.session.flush()
        return row

    async def mark_all_notifications_read(self, account_id: str) -> int:
        result = await self.session.execute(
            update(NotificationRow)
            .where(NotificationRow.account_id == account_id, NotificationRow.read.is_(False))
            .values(read=True)
            .execution_options(synchronize_session=False)
        )
        return result.rowcount or 0

    # ── Food items ───────────────────────────────────────────────────────────

    async def get_food_item_by_id(self, food_id: str) -> Optional[FoodProfile]:
        row = await self.session.get(FoodItemRow, food_id)
        return _row_to_food(row) if row else None

    async def search_food_items(self, query: str = "", limit: int = 20) -> list[FoodProfile]:
        stmt = select(FoodItemRow)
        if query:
            stmt = stmt.where(FoodItemRow.name.ilike(f"%{_escape_like(query)}%", escape="\\"))
        result = await self.session.execute(stmt.order_by(FoodItemRow.name).limit(limit))
        return [_row_to_food(r) for r in result.scalars().all()]

    async def create_food_item(self, food: FoodProfile) -> FoodProfile:
        row = _food_to_row(food)
        self.session.add(row)
        await self.session.flush()
        return _row_to_food(row)

    async def count_food_items(self) -> int:
        result = await self.session.execute(select(func.count(FoodItemRow.id)))
        return result.scalar_one()

    # ── Meals ────────────────────────────────────────────────────────────────

    async def create_meal(self, account_id: str, name: str, meal_type: str, day: date | datetime) -> MealRow:
        when = day if isinstance(day, datetime) else datetime.combine(day, time.min, tzinfo=timezone.utc)
        meal = MealRow(account_id=account_id, name=name, meal_type=meal_type, date=when)
        self.session.add(meal)
        await self.session.flush()
        return meal

    async def get_meal_by_id(self, meal_id: str) -> Optional[MealRow]:
        return await self.session.get(MealRow, meal_id)

    async def list_meals_by_date(self, account_id: str, day: date) -> list[MealRow]:
        start, end = day_bounds(day)
        result = await self.session.execute(
            select(MealRow)
            .where(MealRow.account_id == account_id, MealRow.date >= start, MealRow.date < end)
            .order_by(MealRow.date, MealRow.created_at)
        )
        return list(result.scalars().all())

    async def update_meal_totals(self, meal: MealRow, totals: MacroTotals) -> MealRow:
        """Write new totals; the flush bumps ``version`` or raises StaleDataError."""
        meal.total_calories = totals.calories
        meal.total_protein = totals.protein
        meal.total_carbs = totals.carbs
        meal.total_fat = totals.fat
        await self.session.flush()
        return meal

    async def delete_meal(self, meal: MealRow) -> None:
        await self.session.execute(delete(MealItemRow).where(MealItemRow.meal_id == meal.id))
        await self.session.delete(meal)
        await self.session.flush()

    async def create_meal_item(
        self, meal_id: str, snapshot: ItemSnapshot, quantity: float, portions: int = 1
    ) -> MealItemRow:
        """Store an item; the snapshot already covers quantity x portions."""
        row = MealItemRow(
            meal_id=meal_id,
            food_item_id=snapshot.food_item_id,
            food_name=snapshot.food_name,
            quantity=quantity,
            portions=portions,
            calories=snapshot.calories,
            protein=snapshot.protein,
            carbs=snapshot.carbs,
            fat=snapshot.fat,
        )
        self.session.add(row)
        await self.session.flush()
        return row

    async def get_meal_item(self, item_id: str) -> Optional[MealItemRow]:
        return await self.session.get(MealItemRow, item_id)

    async def list_meal_items(self, meal_id: str) -> list[MealItemRow]:
        result = await self.session.execute(
            select(MealItemRow).where(MealItemRow.meal_id == meal_id).order_by(MealItemRow.created_at)
        )
        return list(result.scalars().all())

    async def count_meal_items(self, meal_id: str) -> int:
        result = await self.session.execute(
            select(func.count(MealItemRow.id)).where(MealItemRow.meal_id == meal_id)
        )
        return result.scalar_one()

    async def delete_meal_item(self, item: MealItemRow) -> None:
        await self.session.delete(item)
        await self.session.flush()
