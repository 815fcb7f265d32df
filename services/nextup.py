from __future__ import annotations

import datetime as dt
from typing import Optional

from services.datekeys import format_date_key

LOOKAHEAD_DAYS = 7


def task_start(day: dt.date, hhmm: str) -> dt.datetime:
    hour, minute = (int(p) for p in hhmm.split(":")[:2])
    return dt.datetime(day.year, day.month, day.day, hour, minute)


def next_task(schedule: dict, now: dt.datetime | None = None) -> Optional[dict]:
    """Earliest task starting strictly after `now`, looking from today through
    today + 7 days. Returns {"task", "date", "starts_at"} or None."""
    now = now or dt.datetime.now()
    best = None
    for offset in range(LOOKAHEAD_DAYS + 1):
        day = now.date() + dt.timedelta(days=offset)
        for t in schedule.get(format_date_key(day)) or []:
            starts_at = task_start(day, t["start"])
            if starts_at > now and (best is None or starts_at < best["starts_at"]):
                best = {"task": t, "date": day, "starts_at": starts_at}
    return best


def parse_exam_datetime(value: str) -> dt.datetime:
    """ISO datetime string -> naive local datetime."""
    parsed = dt.datetime.fromisoformat(str(value).replace("Z", "+00:00"))
    if parsed.tzinfo is not None:
        parsed = parsed.astimezone().replace(tzinfo=None)
    return parsed


def exam_countdown(exam: dict, now: dt.datetime | None = None) -> tuple[int, int, int]:
    """(days, hours, minutes) until the exam; zeros once it has started."""
    now = now or dt.datetime.now()
    remaining = (parse_exam_datetime(exam["date"]) - now).total_seconds()
    if remaining <= 0:
        return 0, 0, 0
    days = int(remaining // 86400)
    hours = int((remaining % 86400) // 3600)
    minutes = int((remaining % 3600) // 60)
    return days, hours, minutes


POMODORO_MODES = {"work": 25 * 60, "short": 5 * 60, "long": 15 * 60}


def format_clock(seconds: int) -> str:
    seconds = max(0, int(seconds))
    return f"{seconds // 60:02d}:{seconds % 60:02d}"


class PomodoroClock:
    """Countdown state behind the dashboard timer. The widget calls tick()
    once per second while running."""

    def __init__(self, mode: str = "work"):
        self.set_mode(mode)

    def set_mode(self, mode: str) -> None:
        if mode not in POMODORO_MODES:
            raise ValueError(f"Unknown pomodoro mode: {mode}")
        self.mode = mode
        self.remaining = POMODORO_MODES[mode]
        self.running = False

    def toggle(self) -> bool:
        self.running = not self.running and self.remaining > 0
        return self.running

    def reset(self) -> None:
        self.set_mode(self.mode)

    def tick(self) -> bool:
        """Advance one second. Returns True when the countdown just hit zero."""
        if not self.running:
            return False
        self.remaining = max(0, self.remaining - 1)
        if self.remaining == 0:
            self.running = False
            return True
        return False

    @property
    def display(self) -> str:
        return format_clock(self.remaining)
