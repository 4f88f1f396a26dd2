from __future__ import annotations

from .types import FatigueUpdate, MonitorConfig, MonitorState

# A window with at least this many active seconds counts as a working minute
ACTIVE_MINUTE_SECONDS = 10


def is_at_limit(state: MonitorState, config: MonitorConfig) -> bool:
    return state.fatigue >= config.work_limit


def fatigue_percent(state: MonitorState, config: MonitorConfig) -> float:
    """Fatigue relative to the work limit. Not clamped; may exceed 100."""
    return 100.0 * state.fatigue / config.work_limit


def apply_minute_update(state: MonitorState, config: MonitorConfig, minute_active_seconds: int) -> FatigueUpdate:
    """
    Apply one closed window to fatigue and the rest streak.

    An active minute adds one fatigue point and breaks the rest streak; any
    other minute removes a point (floored at 0) and extends the streak. Once
    the streak reaches the break limit fatigue drops straight to 0.
    """
    was_at_limit = is_at_limit(state, config)

    if minute_active_seconds >= ACTIVE_MINUTE_SECONDS:
        state.fatigue += 1
        state.rest_streak = 0
    else:
        if state.fatigue > 0:
            state.fatigue -= 1
        state.rest_streak += 1

    if state.rest_streak >= config.break_limit:
        state.fatigue = 0

    return FatigueUpdate(
        fatigue=state.fatigue,
        rest_streak=state.rest_streak,
        was_at_limit=was_at_limit,
        is_at_limit=is_at_limit(state, config),
    )
