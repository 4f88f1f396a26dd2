"""
Minute accumulator: folds per-tick seconds into 60-second windows.

Windows are filled second by second from the accumulated counts, never from
wall-clock modulo arithmetic, so a long gap (sleep, a stalled tick) closes
exactly as many windows as it spans and leaves the remainder in the next one.
"""

from __future__ import annotations

from typing import List

from .types import SECONDS_PER_WINDOW, MinuteUpdate, MonitorState


def fold_sample(state: MonitorState, active_seconds: int, inactive_seconds: int) -> List[MinuteUpdate]:
    """
    Add one tick's worth of seconds to the current window.

    Returns one MinuteUpdate per window closed by this call, oldest first.
    Active seconds are credited to the window that is open when the call
    starts; windows closed later in the same call carry no active seconds.
    """
    if active_seconds < 0 or inactive_seconds < 0:
        raise ValueError(f"negative sample: active={active_seconds} inactive={inactive_seconds}")

    total = active_seconds + inactive_seconds
    if total == 0:
        return []

    state.active_seconds_in_window += active_seconds

    updates: List[MinuteUpdate] = []
    remaining = total
    while remaining > 0:
        step = min(remaining, SECONDS_PER_WINDOW - state.seconds_in_window)
        state.seconds_in_window += step
        remaining -= step

        if state.seconds_in_window >= SECONDS_PER_WINDOW:
            updates.append(MinuteUpdate(active_seconds=state.active_seconds_in_window))
            state.clear_window()

    return updates
