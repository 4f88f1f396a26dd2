from __future__ import annotations

import re
from typing import Literal
from pydantic import BaseModel, field_validator

LIMIT_MIN = 1
LIMIT_MAX = 99
DEFAULT_WORK_LIMIT_MINUTES = 45
DEFAULT_BREAK_LIMIT_MINUTES = 5

StimulusMode = Literal["beep", "vibro", "zap"]

_LEADING_INT = re.compile(r"\s*([+-]?\d+)")


def parse_limit_input(text: object, force_clamp: bool = True) -> int:
    """
    Parse a user-entered minute limit.

    Non-numeric input counts as 0. While the user is still typing
    (force_clamp=False) the raw value is returned so the field is not
    fought over; on commit it is clamped to [1, 99].
    """
    # Leading integer only, so "12 min" and "12.5" both read as 12
    m = _LEADING_INT.match(str(text))
    value = int(m.group(1)) if m else 0
    if force_clamp:
        value = max(LIMIT_MIN, min(LIMIT_MAX, value))
    return value


class AppConfig(BaseModel):
    work_limit_minutes: int = DEFAULT_WORK_LIMIT_MINUTES
    break_limit_minutes: int = DEFAULT_BREAK_LIMIT_MINUTES
    api_token: str = ""
    stimulus_mode: StimulusMode = "beep"
    sample_interval_ms: int = 1000

    @field_validator("work_limit_minutes", "break_limit_minutes", mode="before")
    @classmethod
    def _clamp_limit(cls, v: object) -> int:
        return parse_limit_input(v, force_clamp=True)

    def to_monitor_config(self) -> dict:
        return {
            "work_limit_minutes": self.work_limit_minutes,
            "break_limit_minutes": self.break_limit_minutes,
            "sample_interval_ms": self.sample_interval_ms,
        }
