"""
Alert eligibility, throttling, and delivery outcome handling.

An alert is due when a closed minute leaves fatigue at the work limit and
either (a) that minute is the one that crossed the limit, or (b) fatigue was
already at the limit and the minute was active for all 60 seconds. Either way
at most one alert goes out per ALERT_THROTTLE_MS.
"""

from __future__ import annotations

import logging
from typing import Optional

from packages.core.monitor.fatigue import is_at_limit
from packages.core.monitor.types import SECONDS_PER_WINDOW, MonitorConfig, MonitorState

from .channel import AlertResult

log = logging.getLogger(__name__)

ALERT_THROTTLE_MS = 60_000


def should_alert(
    was_at_limit: bool,
    is_at_limit: bool,
    minute_active_seconds: int,
    now_ms: int,
    last_alert_at_ms: Optional[int],
) -> bool:
    if not is_at_limit:
        return False

    crossed_limit_now = not was_at_limit
    # Idle padding from missed ticks must not re-arm the alert
    repeat_at_limit = was_at_limit and minute_active_seconds >= SECONDS_PER_WINDOW
    if not (crossed_limit_now or repeat_at_limit):
        return False

    if last_alert_at_ms is None:
        return True
    return now_ms - last_alert_at_ms > ALERT_THROTTLE_MS


def record_alert(state: MonitorState, now_ms: int) -> None:
    """Consume the throttle budget. Called before the delivery is attempted."""
    state.last_alert_at_ms = now_ms


def mark_missing_credential(state: MonitorState) -> None:
    state.api_key_invalid = True


def on_credential_edited(state: MonitorState) -> None:
    state.api_key_invalid = False


def apply_dispatch_result(state: MonitorState, result: AlertResult) -> None:
    if result.status == "SENT":
        state.api_key_invalid = False
    elif result.is_auth_rejected:
        log.warning("Alert credential rejected (%s)", result)
        state.api_key_invalid = True
    else:
        log.error("Alert delivery failed: %s", result)


def api_warning(state: MonitorState, config: MonitorConfig) -> bool:
    """True when the user should be told the credential is why no alert arrived."""
    return state.api_key_invalid and is_at_limit(state, config)
