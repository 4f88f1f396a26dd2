from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from packages.shared.config import DEFAULT_BREAK_LIMIT_MINUTES, DEFAULT_WORK_LIMIT_MINUTES

SECONDS_PER_WINDOW = 60


@dataclass(frozen=True)
class MonitorConfig:
    work_limit_minutes: int = DEFAULT_WORK_LIMIT_MINUTES
    break_limit_minutes: int = DEFAULT_BREAK_LIMIT_MINUTES
    sample_interval_ms: int = 1000

    @property
    def work_limit(self) -> int:
        # 0 can show up while the user is mid-edit
        return max(1, self.work_limit_minutes or DEFAULT_WORK_LIMIT_MINUTES)

    @property
    def break_limit(self) -> int:
        return max(1, self.break_limit_minutes or DEFAULT_BREAK_LIMIT_MINUTES)


@dataclass
class MonitorState:
    """
    Fatigue accounting state.

    Window counters satisfy 0 <= active_seconds_in_window <= seconds_in_window < 60
    between minute updates.
    """
    fatigue: int = 0
    rest_streak: int = 0
    active_seconds_in_window: int = 0
    seconds_in_window: int = 0
    last_alert_at_ms: Optional[int] = None  # None: never alerted
    monitoring: bool = False
    api_key_invalid: bool = False

    def reset(self) -> None:
        """Back to the zero state; monitoring and the credential flag survive."""
        self.fatigue = 0
        self.rest_streak = 0
        self.clear_window()
        self.last_alert_at_ms = None

    def clear_window(self) -> None:
        self.active_seconds_in_window = 0
        self.seconds_in_window = 0


@dataclass(frozen=True)
class MinuteUpdate:
    """One closed 60-second window."""
    active_seconds: int


@dataclass(frozen=True)
class FatigueUpdate:
    fatigue: int
    rest_streak: int
    was_at_limit: bool
    is_at_limit: bool
