import datetime as dt

import pytest

from services.nextup import POMODORO_MODES, PomodoroClock, exam_countdown, format_clock, next_task


def _task(start, subject="Termodinámica"):
    return {"start": start, "end": "23:00", "subject": subject, "task": "Study", "hours": 1}


def test_next_task_picks_earliest_future_start():
    schedule = {
        "2025-01-01": [_task("08:00"), _task("10:00", "Electrotecnia")],
        "2025-01-02": [_task("07:00")],
    }
    result = next_task(schedule, dt.datetime(2025, 1, 1, 9, 0))
    assert result["task"]["subject"] == "Electrotecnia"
    assert result["date"] == dt.date(2025, 1, 1)
    assert result["starts_at"] == dt.datetime(2025, 1, 1, 10, 0)


def test_next_task_global_minimum_not_list_order():
    schedule = {"2025-01-02": [_task("15:00", "Late"), _task("07:30", "Early")]}
    result = next_task(schedule, dt.datetime(2025, 1, 1, 23, 0))
    assert result["task"]["subject"] == "Early"


def test_next_task_strictly_after_now():
    schedule = {"2025-01-01": [_task("09:00")]}
    assert next_task(schedule, dt.datetime(2025, 1, 1, 9, 0)) is None


def test_next_task_lookahead_window():
    now = dt.datetime(2025, 1, 1, 9, 0)
    assert next_task({"2025-01-08": [_task("08:00")]}, now)["date"] == dt.date(2025, 1, 8)
    assert next_task({"2025-01-09": [_task("08:00")]}, now) is None
    assert next_task({"2024-12-31": [_task("23:00")]}, now) is None
    assert next_task({}, now) is None


def test_exam_countdown():
    exam = {"name": "Termo", "date": "2025-01-03T12:00:00", "subject": "Termodinámica", "priority": 1}
    assert exam_countdown(exam, dt.datetime(2025, 1, 1, 9, 30)) == (2, 2, 30)
    assert exam_countdown(exam, dt.datetime(2025, 1, 4, 9, 30)) == (0, 0, 0)


def test_format_clock():
    assert format_clock(25 * 60) == "25:00"
    assert format_clock(61) == "01:01"
    assert format_clock(-5) == "00:00"


def test_pomodoro_counts_down_only_while_running():
    clock = PomodoroClock()
    assert clock.display == "25:00"
    assert not clock.tick()
    assert clock.remaining == POMODORO_MODES["work"]
    assert clock.toggle()
    clock.tick()
    assert clock.display == "24:59"
    assert not clock.toggle()
    clock.tick()
    assert clock.display == "24:59"


def test_pomodoro_finishes_and_resets():
    clock = PomodoroClock("short")
    clock.toggle()
    finished = [clock.tick() for _ in range(POMODORO_MODES["short"])]
    assert finished[-1] and not any(finished[:-1])
    assert clock.remaining == 0 and not clock.running
    assert not clock.toggle()
    clock.reset()
    assert clock.display == "05:00"
    clock.toggle()
    clock.set_mode("long")
    assert clock.display == "15:00" and not clock.running
    with pytest.raises(ValueError):
        clock.set_mode("nap")
