"""Initial SmallyFit schema.

Revision ID: 5f1c2a9e7b30
Revises:
Create Date: 2026-10-19
"""
from alembic import op
import sqlalchemy as sa

revision = "5f1c2a9e7b30"
down_revision = None
branch_labels = None
depends_on = None


def _id() -> sa.Column:
    return sa.Column("id", sa.String(36), primary_key=True)


def _owner() -> sa.Column:
    return sa.Column("account_id", sa.String(36), sa.ForeignKey("accounts.id", ondelete="CASCADE"), nullable=False)


def upgrade() -> None:
    op.create_table(
        "accounts",
        _id(),
        sa.Column("name", sa.String(100), nullable=False),
        sa.Column("email", sa.String(320), nullable=False),
        sa.Column("password_hash", sa.String(256), nullable=False),
        sa.Column("is_premium", sa.Boolean, nullable=False, server_default=sa.false()),
        sa.Column("is_admin", sa.Boolean, nullable=False, server_default=sa.false()),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True)),
    )
    op.create_index("ix_accounts_email", "accounts", ["email"], unique=True)

    op.create_table(
        "settings",
        _id(),
        sa.Column("account_id", sa.String(36), sa.ForeignKey("accounts.id", ondelete="CASCADE"), nullable=False),
        sa.Column("dark_mode", sa.Boolean, nullable=False, server_default=sa.false()),
        sa.Column("units", sa.String(10), nullable=False, server_default="metric"),
        sa.Column("notification_sound", sa.Boolean, nullable=False, server_default=sa.true()),
        sa.Column("water_reminders", sa.Boolean, nullable=False, server_default=sa.true()),
        sa.Column("workout_reminders", sa.Boolean, nullable=False, server_default=sa.true()),
        sa.Column("measurement_reminders", sa.Boolean, nullable=False, server_default=sa.true()),
        sa.Column("motivation_tips", sa.Boolean, nullable=False, server_default=sa.false()),
        sa.Column("goal", sa.String(10), nullable=False, server_default="maintain"),
        sa.Column("created_at", sa.DateTime(timezone=True)),
        sa.Column("updated_at", sa.DateTime(timezone=True)),
    )
    op.create_index("ix_settings_account_id", "settings", ["account_id"], unique=True)

    op.create_table(
        "food_items",
        _id(),
        sa.Column("name", sa.String(200), nullable=False),
        sa.Column("category", sa.String(50)),
        sa.Column("calories", sa.Float, nullable=False),
        sa.Column("protein", sa.Float, nullable=False, server_default="0"),
        sa.Column("carbs", sa.Float, nullable=False, server_default="0"),
        sa.Column("fat", sa.Float, nullable=False, server_default="0"),
        sa.Column("fiber", sa.Float, nullable=False, server_default="0"),
        sa.Column("sugar", sa.Float, nullable=False, server_default="0"),
        sa.Column("serving_size", sa.Float, nullable=False, server_default="100"),
        sa.Column("serving_unit", sa.String(10), nullable=False, server_default="g"),
        sa.Column("created_at", sa.DateTime(timezone=True)),
    )
    op.create_index("ix_food_items_name", "food_items", ["name"])
    op.create_index("ix_food_items_category", "food_items", ["category"])

    op.create_table(
        "measurements",
        _id(),
        _owner(),
        sa.Column("weight", sa.Float, nullable=False),
        sa.Column("height", sa.Float, nullable=False),
        sa.Column("waist", sa.Float),
        sa.Column("hip", sa.Float),
        sa.Column("arms", sa.Float),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
    )
    op.create_index("ix_measurements_account_created", "measurements", ["account_id", "created_at"])

    op.create_table(
        "water_logs",
        _id(),
        _owner(),
        sa.Column("amount", sa.Integer, nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
    )
    op.create_index("ix_water_logs_account_created", "water_logs", ["account_id", "created_at"])

    op.create_table(
        "workouts",
        _id(),
        _owner(),
        sa.Column("title", sa.String(200), nullable=False),
        sa.Column("type", sa.String(50), nullable=False),
        sa.Column("day", sa.String(10), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True)),
    )
    op.create_index("ix_workouts_account_day", "workouts", ["account_id", "day"])

    op.create_table(
        "exercises",
        _id(),
        sa.Column("workout_id", sa.String(36), sa.ForeignKey("workouts.id", ondelete="CASCADE"), nullable=False),
        sa.Column("name", sa.String(200), nullable=False),
        sa.Column("sets", sa.Integer, nullable=False),
        sa.Column("reps", sa.Integer, nullable=False),
        sa.Column("position", sa.Integer, nullable=False, server_default="0"),
        sa.Column("completed", sa.Boolean, nullable=False, server_default=sa.false()),
        sa.Column("created_at", sa.DateTime(timezone=True)),
    )
    op.create_index("ix_exercises_workout_id", "exercises", ["workout_id"])

    op.create_table(
        "notifications",
        _id(),
        _owner(),
        sa.Column("title", sa.String(200), nullable=False),
        sa.Column("message", sa.Text, nullable=False),
        sa.Column("icon", sa.String(20), nullable=False),
        sa.Column("read", sa.Boolean, nullable=False, server_default=sa.false()),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
    )
    op.create_index("ix_notifications_account_created", "notifications", ["account_id", "created_at"])

    op.create_table(
        "meals",
        _id(),
        _owner(),
        sa.Column("name", sa.String(200), nullable=False),
        sa.Column("meal_type", sa.String(20), nullable=False, server_default="snack"),
        sa.Column("date", sa.DateTime(timezone=True), nullable=False),
        sa.Column("total_calories", sa.Integer, nullable=False, server_default="0"),
        sa.Column("total_protein", sa.Float, nullable=False, server_default="0"),
        sa.Column("total_carbs", sa.Float, nullable=False, server_default="0"),
        sa.Column("total_fat", sa.Float, nullable=False, server_default="0"),
        sa.Column("version", sa.Integer, nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True)),
    )
    op.create_index("ix_meals_account_date", "meals", ["account_id", "date"])

    op.create_table(
        "meal_items",
        _id(),
        sa.Column("meal_id", sa.String(36), sa.ForeignKey("meals.id", ondelete="CASCADE"), nullable=False),
        sa.Column("food_item_id", sa.String(36), sa.ForeignKey("food_items.id", ondelete="SET NULL")),
        sa.Column("food_name", sa.String(200), nullable=False),
        sa.Column("quantity", sa.Float, nullable=False),
        sa.Column("portions", sa.Integer, nullable=False, server_default="1"),
        sa.Column("calories", sa.Integer, nullable=False, server_default="0"),
        sa.Column("protein", sa.Float, nullable=False, server_default="0"),
        sa.Column("carbs", sa.Float, nullable=False, server_default="0"),
        sa.Column("fat", sa.Float, nullable=False, server_default="0"),
        sa.Column("created_at", sa.DateTime(timezone=True)),
    )
    op.create_index("ix_meal_items_meal_id", "meal_items", ["meal_id"])


def downgrade() -> None:
    for table in (
        "meal_items", "meals", "notifications", "exercises", "workouts",
        "water_logs", "measurements", "food_items", "settings", "accounts",
    ):
        op.drop_table(table)
