import pytest

from packages.core.monitor.accumulator import fold_sample
from packages.core.monitor.types import MinuteUpdate, MonitorState


def test_single_seconds_fill_one_window() -> None:
    state = MonitorState()
    updates = []
    for i in range(59):
        updates += fold_sample(state, 1 if i % 2 == 0 else 0, 0 if i % 2 == 0 else 1)

    assert updates == []
    assert state.seconds_in_window == 59
    assert state.active_seconds_in_window == 30

    updates = fold_sample(state, 1, 0)

    assert updates == [MinuteUpdate(active_seconds=31)]
    assert state.seconds_in_window == 0
    assert state.active_seconds_in_window == 0


def test_large_gap_closes_every_spanned_window() -> None:
    state = MonitorState()

    updates = fold_sample(state, 1, 184)

    assert [u.active_seconds for u in updates] == [1, 0, 0]
    assert state.seconds_in_window == 5
    assert state.active_seconds_in_window == 0


def test_gap_completes_partially_filled_window_first() -> None:
    state = MonitorState(seconds_in_window=50, active_seconds_in_window=40)

    updates = fold_sample(state, 0, 125)

    # 10s finish the open window, then 60 + 55
    assert [u.active_seconds for u in updates] == [40, 0]
    assert state.seconds_in_window == 55


def test_zero_seconds_is_noop() -> None:
    state = MonitorState(seconds_in_window=12, active_seconds_in_window=3)

    assert fold_sample(state, 0, 0) == []
    assert state.seconds_in_window == 12
    assert state.active_seconds_in_window == 3


def test_inactive_seconds_never_count_as_active() -> None:
    state = MonitorState()

    fold_sample(state, 0, 30)

    assert state.active_seconds_in_window == 0
    assert state.seconds_in_window == 30


def test_negative_sample_rejected() -> None:
    with pytest.raises(ValueError):
        fold_sample(MonitorState(), -1, 2)
