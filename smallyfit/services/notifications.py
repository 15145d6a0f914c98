"""In-app notification content builders.

Pure functions: each returns ``(title, message, icon)`` or ``None`` when no
notification is due. Persisting them is the route's job.
"""
from __future__ import annotations

from typing import NamedTuple, Optional

from smallyfit.services.rounding import round_half_up


class NotificationDraft(NamedTuple):
    title: str
    message: str
    icon: str


# Toggle id -> (settings column, display name, description)
NOTIFICATION_TOGGLES: dict[str, tuple[str, str, str]] = {
    "water_reminders": ("water_reminders", "Water reminders", "Get alerts to stay hydrated"),
    "workout_reminders": ("workout_reminders", "Workout reminders", "Be notified about your workouts"),
    "measurement_reminders": ("measurement_reminders", "Measurement updates", "Reminders to log your measurements"),
    "motivation_tips": ("motivation_tips", "Tips and motivation", "Receive motivational tips"),
}


def measurement_progress(previous_weight: Optional[float], current_weight: float) -> Optional[NotificationDraft]:
    """Weight change since the previous measurement, or None for the first one."""
    if previous_weight is None:
        return None
    diff = round_half_up(current_weight - previous_weight, 1)
    if diff < 0:
        message = f"You lost {abs(diff)} kg since your last measurement. Keep it up!"
    elif diff > 0:
        message = f"You gained {diff} kg since your last measurement."
    else:
        message = "Your weight is unchanged since your last measurement."
    return NotificationDraft("Measurement recorded", message, "measurement")


def water_goal_reached(previous_total: int, new_total: int, goal: int) -> Optional[NotificationDraft]:
    """Fires only on the delta that first crosses the goal."""
    if goal <= 0 or previous_total >= goal or new_total < goal:
        return None
    return NotificationDraft(
        "Water goal reached",
        f"You drank {new_total} ml today and hit your {goal} ml goal.",
        "water",
    )


def workout_completed(title: str) -> NotificationDraft:
    return NotificationDraft("Workout complete", f"Nice work finishing {title}!", "workout")
