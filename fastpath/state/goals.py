"""
Goal definitions and countdown arithmetic.

Selecting, clearing or defining a goal only ever replaces the selected goal;
the helpers here never touch records or history.
"""

from typing import Optional

from ..config.defaults import GoalParams
from ..errors import InvalidGoalError
from .models import FastingGoal

HOUR = 3600

PREDEFINED_GOALS: tuple[FastingGoal, ...] = (
    FastingGoal(
        target_duration=14 * HOUR,
        name="14-Hour Fast",
        description="A gentle start to time-restricted eating."
    ),
    FastingGoal(
        target_duration=16 * HOUR,
        name="16-Hour Fast",
        description="A popular choice, may aid weight management and blood sugar control."
    ),
    FastingGoal(
        target_duration=18 * HOUR,
        name="18-Hour Fast",
        description="A longer fast, potentially enhancing fat burning and focus."
    ),
    FastingGoal(
        target_duration=20 * HOUR,
        name="20-Hour Fast",
        description="An extended daily fast."
    ),
)


def validate_goal(goal: FastingGoal) -> FastingGoal:
    """
    Check a goal definition before it is selected or persisted.

    Raises:
        InvalidGoalError: If the name is blank or the duration is not positive
    """
    if not goal.name or not goal.name.strip():
        raise InvalidGoalError(
            "Goal name must not be empty",
            goal_name=goal.name,
            target_duration=goal.target_duration
        )
    if goal.target_duration <= 0:
        raise InvalidGoalError(
            f"Goal duration must be positive, got {goal.target_duration}",
            goal_name=goal.name,
            target_duration=goal.target_duration
        )
    return goal


def custom_goal_name(target_duration: float) -> str:
    """Derive the upsert name of a custom goal from its duration."""
    total = int(target_duration)
    hours, minutes = total // HOUR, (total % HOUR) // 60
    if minutes == 0:
        return f"Custom {hours}-Hour Fast"
    return f"Custom {hours}h {minutes}m Fast"


def build_custom_goal(target_duration: float, params: Optional[GoalParams] = None) -> FastingGoal:
    """
    Build a custom goal from a duration in seconds.

    Raises:
        InvalidGoalError: If the duration is outside the configured custom range
    """
    params = params or GoalParams()
    low = params.min_custom_hours * HOUR
    high = params.max_custom_hours * HOUR

    if not low <= target_duration <= high:
        raise InvalidGoalError(
            f"Custom goal must be between {params.min_custom_hours}h and "
            f"{params.max_custom_hours}h",
            target_duration=target_duration,
            context={"min_seconds": low, "max_seconds": high}
        )

    return FastingGoal(
        target_duration=float(target_duration),
        name=custom_goal_name(target_duration),
        description="A custom fasting goal."
    )
