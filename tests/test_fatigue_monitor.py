import pytest

from packages.core.alerts.channel import AlertResult
from packages.core.monitor.detector import IdleDetector
from packages.core.monitor.fatigue_monitor import FatigueSessionMonitor
from packages.core.monitor.idle_detector import UnsupportedIdleDetector


class FakeClock:
    def __init__(self, now: int = 1_700_000_000_000) -> None:
        self.now = now

    def __call__(self) -> int:
        return self.now


class FakeChannel:
    def __init__(self, result: AlertResult = AlertResult(status="SENT", status_code=200)) -> None:
        self.result = result
        self.calls = []

    def send(self, token: str, stimulus_kind: str) -> AlertResult:
        self.calls.append((token, stimulus_kind))
        return self.result


class FakeDetector(IdleDetector):
    """Reports whatever idle time the test sets."""

    def __init__(self, idle: float = 0.0) -> None:
        self.idle = idle

    def idle_seconds(self) -> float:
        return self.idle

    def is_available(self) -> bool:
        return True


class FailingDetector(FakeDetector):
    def idle_seconds(self) -> float:
        raise OSError("input timer unavailable")


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def channel():
    return FakeChannel()


@pytest.fixture
def detector():
    return FakeDetector(0.0)


def make_monitor(clock, channel, detector, work=2, brk=5, token="tok"):
    monitor = FatigueSessionMonitor(
        config={"work_limit_minutes": work, "break_limit_minutes": brk},
        detector=detector,
        channel=channel,
        clock=clock,
    )
    monitor.set_api_token(token)
    events = []
    errors = []
    monitor.on_event(events.append)
    monitor.on_error(errors.append)
    monitor.start(spawn_worker=False)
    return monitor, events, errors


def run_ticks(monitor, clock, n: int, step_ms: int = 1000) -> None:
    for _ in range(n):
        clock.now += step_ms
        monitor.tick()


def test_one_minute_of_activity_adds_one_fatigue_point(clock, channel, detector) -> None:
    monitor, events, _ = make_monitor(clock, channel, detector, work=5)

    run_ticks(monitor, clock, 59)
    assert monitor.get_state().fatigue == 0
    assert monitor.get_state().seconds_in_window == 59

    run_ticks(monitor, clock, 1)
    state = monitor.get_state()
    assert state.fatigue == 1
    assert state.seconds_in_window == 0
    assert events[-1]["type"] == "MINUTE_CLOSED"
    assert events[-1]["active_seconds"] == 60
    assert monitor.fatigue_percent() == 20.0


def test_alert_on_crossing_then_throttled_repeat(clock, channel, detector) -> None:
    monitor, events, _ = make_monitor(clock, channel, detector, work=2)
    monitor.set_stimulus_mode("zap")

    run_ticks(monitor, clock, 120)
    assert channel.calls == [("tok", "zap")]
    assert events[-1]["type"] == "ALERT_SENT"

    # Next fully active minute lands exactly 60000 ms later: still throttled
    run_ticks(monitor, clock, 60)
    assert len(channel.calls) == 1

    run_ticks(monitor, clock, 60)
    assert len(channel.calls) == 2
    assert monitor.get_state().fatigue == 4


def test_partially_active_minute_at_limit_does_not_repeat(clock, channel, detector) -> None:
    monitor, _, _ = make_monitor(clock, channel, detector, work=2)

    run_ticks(monitor, clock, 180)
    assert len(channel.calls) == 1
    assert monitor.get_state().fatigue == 3

    # Throttle has elapsed by the end of this minute, but only 45s were active
    run_ticks(monitor, clock, 45)
    detector.idle = 30.0
    run_ticks(monitor, clock, 15)
    assert monitor.get_state().fatigue == 4
    assert monitor.is_at_limit()
    assert len(channel.calls) == 1

    detector.idle = 0.0
    run_ticks(monitor, clock, 60)
    assert len(channel.calls) == 2


def test_missing_token_skips_delivery_but_consumes_throttle(clock, channel, detector) -> None:
    monitor, events, _ = make_monitor(clock, channel, detector, work=1, token="  ")

    run_ticks(monitor, clock, 60)

    state = monitor.get_state()
    assert channel.calls == []
    assert state.api_key_invalid
    assert state.last_alert_at_ms == clock.now
    assert events[-1] == {"type": "ALERT_SKIPPED", "at": events[-1]["at"], "mode": "beep", "reason": "NO_TOKEN"}
    assert monitor.api_warning()


def test_auth_rejection_sets_warning_until_token_edited(clock, detector) -> None:
    channel = FakeChannel(AlertResult(status="ERROR", status_code=403, detail="Forbidden"))
    monitor, events, _ = make_monitor(clock, channel, detector, work=1)

    run_ticks(monitor, clock, 60)

    assert events[-1]["type"] == "ALERT_FAILED"
    assert events[-1]["reason"] == "Error: 403"
    assert monitor.api_warning()

    monitor.set_api_token("new-token")
    assert not monitor.api_warning()


def test_sampler_failure_skips_tick_without_state_change(clock, channel) -> None:
    monitor, _, errors = make_monitor(clock, channel, FailingDetector())

    run_ticks(monitor, clock, 5)

    state = monitor.get_state()
    assert state.seconds_in_window == 0
    assert state.fatigue == 0
    assert len(errors) == 5
    assert "input timer unavailable" in errors[0]


def test_gap_is_credited_as_inactive(clock, channel, detector) -> None:
    monitor, events, _ = make_monitor(clock, channel, detector, work=5)
    run_ticks(monitor, clock, 60)
    assert monitor.get_state().fatigue == 1

    clock.now += 185_000
    monitor.tick()

    closed = [e for e in events if e["type"] == "MINUTE_CLOSED"]
    assert [e["active_seconds"] for e in closed[-3:]] == [1, 0, 0]
    state = monitor.get_state()
    assert state.seconds_in_window == 5
    assert state.fatigue == 0
    assert state.rest_streak == 3


def test_idle_user_ticks_count_inactive(clock, channel) -> None:
    monitor, _, _ = make_monitor(clock, channel, FakeDetector(2.0))

    run_ticks(monitor, clock, 30)

    state = monitor.get_state()
    assert state.seconds_in_window == 30
    assert state.active_seconds_in_window == 0


def test_stopped_monitor_ignores_ticks_and_restart_opens_fresh_window(clock, channel, detector) -> None:
    monitor, _, _ = make_monitor(clock, channel, detector, work=5)
    run_ticks(monitor, clock, 90)
    assert monitor.get_state().seconds_in_window == 30

    monitor.stop()
    run_ticks(monitor, clock, 10)
    assert not monitor.is_running()
    assert monitor.get_state().seconds_in_window == 30

    # An hour away must not count as idle time
    clock.now += 3_600_000
    monitor.start(spawn_worker=False)
    state = monitor.get_state()
    assert state.monitoring
    assert state.seconds_in_window == 0
    assert state.fatigue == 1

    run_ticks(monitor, clock, 1)
    assert monitor.get_state().seconds_in_window == 1


def test_reset_keeps_monitoring_and_is_idempotent(clock, channel, detector) -> None:
    monitor, _, _ = make_monitor(clock, channel, detector, work=1)
    run_ticks(monitor, clock, 75)

    monitor.reset_fatigue()
    once = monitor.get_state()
    monitor.reset_fatigue()
    twice = monitor.get_state()

    assert once == twice
    assert once.fatigue == 0
    assert once.rest_streak == 0
    assert once.seconds_in_window == 0
    assert once.last_alert_at_ms is None
    assert once.monitoring


def test_config_change_applies_at_next_minute(clock, channel, detector) -> None:
    monitor, _, _ = make_monitor(clock, channel, detector, work=10)
    run_ticks(monitor, clock, 150)
    assert monitor.get_state().fatigue == 2
    assert channel.calls == []

    monitor.update_config({"work_limit_minutes": 3, "break_limit_minutes": 5})
    assert monitor.fatigue_percent() == pytest.approx(200 / 3)

    run_ticks(monitor, clock, 30)
    assert monitor.get_state().fatigue == 3
    assert len(channel.calls) == 1


def test_unknown_stimulus_mode_rejected(clock, channel, detector) -> None:
    monitor, _, _ = make_monitor(clock, channel, detector)

    with pytest.raises(ValueError):
        monitor.set_stimulus_mode("shock")


def test_unavailable_idle_timer_refuses_to_start(clock, channel) -> None:
    monitor, events, errors = make_monitor(clock, channel, UnsupportedIdleDetector("linux"), work=2)

    assert not monitor.is_running()
    assert "monitoring not started" in errors[0]

    run_ticks(monitor, clock, 120)

    state = monitor.get_state()
    assert state.fatigue == 0
    assert state.seconds_in_window == 0
    assert channel.calls == []
    assert events == []


def test_unsupported_detector_cannot_be_sampled() -> None:
    detector = UnsupportedIdleDetector("linux")

    assert not detector.is_available()
    with pytest.raises(RuntimeError):
        detector.idle_seconds()


def test_missing_detector_leaves_monitor_stopped(clock, channel) -> None:
    monitor = FatigueSessionMonitor(config={}, detector=None, channel=channel, clock=clock)
    errors = []
    monitor.on_error(errors.append)

    monitor.start(spawn_worker=False)

    assert not monitor.is_running()
    assert not monitor.get_state().monitoring
    assert errors == ["No idle detector provided"]


def test_reset_from_event_handler_sees_all_minutes_of_the_tick(clock, channel, detector) -> None:
    monitor, events, _ = make_monitor(clock, channel, detector, work=5)
    run_ticks(monitor, clock, 60)
    assert monitor.get_state().fatigue == 1

    def reset_on_minute(evt: dict) -> None:
        events.append(evt)
        if evt["type"] == "MINUTE_CLOSED":
            monitor.reset_fatigue()

    monitor.on_event(reset_on_minute)

    # 125s gap closes two windows in one tick
    clock.now += 125_000
    monitor.tick()

    state = monitor.get_state()
    assert [e["rest_streak"] for e in events if e["type"] == "MINUTE_CLOSED"][-2:] == [1, 2]
    assert state.fatigue == 0
    assert state.rest_streak == 0
    assert state.seconds_in_window == 0
    assert state.monitoring
