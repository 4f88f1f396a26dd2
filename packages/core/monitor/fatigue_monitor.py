"""
Fatigue monitor: samples idle time once per tick and turns closed minutes
into fatigue updates and (throttled) alerts.

Ticks run one at a time on a single worker thread. UI actions (start/stop,
reset, config and credential edits) come from other threads and go through
the same lock.
"""

from __future__ import annotations

import dataclasses
import logging
import threading
import time
from typing import Callable, Optional

from packages.core.alerts.channel import STIMULUS_MODES, AlertChannel, PavlokAlertChannel
from packages.core.alerts.policy import (
    api_warning,
    apply_dispatch_result,
    mark_missing_credential,
    on_credential_edited,
    record_alert,
    should_alert,
)

from .accumulator import fold_sample
from .detector import IdleDetector
from .fatigue import apply_minute_update, fatigue_percent, is_at_limit
from .types import MinuteUpdate, MonitorConfig, MonitorState

log = logging.getLogger(__name__)

# Idle below this many seconds means the user was active during the tick
ACTIVE_IDLE_THRESHOLD_SECONDS = 2.0


def _now_iso() -> str:
    return time.strftime("%Y-%m-%dT%H:%M:%S", time.localtime())


def _wall_clock_ms() -> int:
    return int(time.time() * 1000)


class FatigueSessionMonitor:
    """
    Background monitor that emits MINUTE_CLOSED and ALERT_* events while
    monitoring is on.
    """

    def __init__(
        self,
        config: dict,
        detector: Optional[IdleDetector] = None,
        channel: Optional[AlertChannel] = None,
        clock: Optional[Callable[[], int]] = None,
    ) -> None:
        self._cfg = self._parse_config(config)
        self._detector = detector
        self._channel: AlertChannel = channel or PavlokAlertChannel()
        self._clock = clock or _wall_clock_ms
        self._state = MonitorState()
        self._lock = threading.Lock()

        self._api_token = ""
        self._stimulus_mode = STIMULUS_MODES[0]
        self._last_tick_ms: Optional[int] = None

        self._event_cb: Optional[Callable[[dict], None]] = None
        self._error_cb: Optional[Callable[[str], None]] = None

        self._thread: Optional[threading.Thread] = None
        self._stop_evt = threading.Event()

    @staticmethod
    def _parse_config(config: dict) -> MonitorConfig:
        return MonitorConfig(
            work_limit_minutes=config.get("work_limit_minutes", 45),
            break_limit_minutes=config.get("break_limit_minutes", 5),
            sample_interval_ms=config.get("sample_interval_ms", 1000),
        )

    def on_event(self, cb: Callable[[dict], None]) -> None:
        self._event_cb = cb

    def on_error(self, cb: Callable[[str], None]) -> None:
        self._error_cb = cb

    def update_config(self, config: dict) -> None:
        """Takes effect at the next minute update; the open window is kept."""
        with self._lock:
            self._cfg = self._parse_config(config)

    def set_api_token(self, token: str) -> None:
        with self._lock:
            self._api_token = token
            on_credential_edited(self._state)

    def set_stimulus_mode(self, mode: str) -> None:
        if mode not in STIMULUS_MODES:
            raise ValueError(f"Unknown stimulus mode: {mode!r}")
        with self._lock:
            self._stimulus_mode = mode

    def get_state(self) -> MonitorState:
        with self._lock:
            return dataclasses.replace(self._state)

    def fatigue_percent(self) -> float:
        with self._lock:
            return fatigue_percent(self._state, self._cfg)

    def is_at_limit(self) -> bool:
        with self._lock:
            return is_at_limit(self._state, self._cfg)

    def api_warning(self) -> bool:
        with self._lock:
            return api_warning(self._state, self._cfg)

    def is_running(self) -> bool:
        with self._lock:
            return self._state.monitoring

    def start(self, spawn_worker: bool = True) -> None:
        """
        Turn monitoring on. Each run starts a fresh minute window; fatigue
        carries over. With spawn_worker=False the caller drives tick() itself.

        Refuses to start when the detector has no real idle timer.
        """
        if self._detector is None:
            self._emit_error("No idle detector provided")
            return
        if not self._detector.is_available():
            log.error("Idle timer unavailable, monitoring not started")
            self._emit_error("Idle time can't be read on this system; monitoring not started")
            return

        with self._lock:
            if self._state.monitoring:
                return
            self._state.monitoring = True
            self._state.clear_window()
            self._last_tick_ms = self._clock()

        if not spawn_worker:
            return

        # A fresh event per run so a worker still finishing its last tick
        # exits instead of picking up the new run.
        self._stop_evt = threading.Event()
        self._thread = threading.Thread(
            target=self._run, args=(self._stop_evt,), name="FatigueSessionMonitor", daemon=True
        )
        self._thread.start()

    def stop(self) -> None:
        """Turn monitoring off. A tick already in progress still completes."""
        self._stop_evt.set()
        with self._lock:
            self._state.monitoring = False
            self._last_tick_ms = None

    def toggle(self) -> bool:
        if self.is_running():
            self.stop()
        else:
            self.start()
        return self.is_running()

    def reset_fatigue(self) -> None:
        with self._lock:
            self._state.reset()
            self._last_tick_ms = self._clock()
        log.info("Fatigue reset")

    def _emit(self, evt: dict) -> None:
        if self._event_cb:
            self._event_cb(evt)

    def _emit_error(self, msg: str) -> None:
        if self._error_cb:
            self._error_cb(msg)

    def tick(self) -> None:
        """Sample once and fold the elapsed seconds into the current window."""
        with self._lock:
            if not self._state.monitoring:
                return
            now_ms = self._clock()
            if self._last_tick_ms is None:
                self._last_tick_ms = now_ms
            elapsed_seconds = max(1, (now_ms - self._last_tick_ms) // 1000)
            self._last_tick_ms = now_ms

        try:
            idle = self._detector.idle_seconds()
        except Exception as e:
            log.exception("Idle sampling failed")
            self._emit_error(f"Idle sampling failed: {e}")
            return

        active_now = idle < ACTIVE_IDLE_THRESHOLD_SECONDS
        # Seconds missed between ticks can't be shown to be active
        missed_seconds = elapsed_seconds - 1
        if missed_seconds:
            log.debug("Tick gap of %ss, crediting %ss as inactive", elapsed_seconds, missed_seconds)

        # Folding and the minute updates share one critical section with
        # reset_fatigue(): a reset sees either none of them or all of them.
        with self._lock:
            updates = fold_sample(
                self._state,
                1 if active_now else 0,
                (0 if active_now else 1) + missed_seconds,
            )
            events = []
            alert_due = False
            for update in updates:
                evt, due = self._apply_minute(update, now_ms)
                events.append(evt)
                alert_due = alert_due or due
            token = self._api_token
            mode = self._stimulus_mode

        for evt in events:
            self._emit(evt)

        if alert_due:
            self._dispatch_alert(token, mode)

    def _apply_minute(self, update: MinuteUpdate, now_ms: int) -> tuple[dict, bool]:
        """Caller holds the lock. Returns the MINUTE_CLOSED event and whether an alert is due."""
        cfg = self._cfg
        result = apply_minute_update(self._state, cfg, update.active_seconds)
        due = should_alert(
            result.was_at_limit,
            result.is_at_limit,
            update.active_seconds,
            now_ms,
            self._state.last_alert_at_ms,
        )
        if due:
            record_alert(self._state, now_ms)
        percent = fatigue_percent(self._state, cfg)

        log.debug(
            "Minute closed: active=%ss fatigue=%s rest_streak=%s (%.0f%%)",
            update.active_seconds, result.fatigue, result.rest_streak, percent,
        )
        evt = {
            "type": "MINUTE_CLOSED",
            "at": _now_iso(),
            "active_seconds": update.active_seconds,
            "fatigue": result.fatigue,
            "rest_streak": result.rest_streak,
            "percent": percent,
            "at_limit": result.is_at_limit,
        }
        return evt, due

    def _dispatch_alert(self, token: str, mode: str) -> None:
        if not token or not token.strip():
            log.warning("Fatigue limit reached but no API token is set")
            with self._lock:
                mark_missing_credential(self._state)
            self._emit({"type": "ALERT_SKIPPED", "at": _now_iso(), "mode": mode, "reason": "NO_TOKEN"})
            return

        log.info("Sending alert: %s", mode)
        try:
            result = self._channel.send(token, mode)
        except Exception as e:
            log.exception("Alert channel raised")
            self._emit_error(f"Alert failed: {e}")
            return

        with self._lock:
            apply_dispatch_result(self._state, result)

        evt_type = "ALERT_SENT" if result.status == "SENT" else "ALERT_FAILED"
        self._emit({"type": evt_type, "at": _now_iso(), "mode": mode, "reason": str(result)})

    def _run(self, stop_evt: threading.Event) -> None:
        """Main monitoring loop: one tick per sample interval."""
        while not stop_evt.is_set():
            try:
                self.tick()
            except Exception as e:
                log.exception("Monitor loop error")
                self._emit_error(str(e))

            with self._lock:
                interval_ms = self._cfg.sample_interval_ms
            stop_evt.wait(interval_ms / 1000.0)
