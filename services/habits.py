"""
Habit streaks and consistency, measured against the schedule's date horizon.
"""

from __future__ import annotations

import datetime as dt
from typing import Optional, Sequence

from services.datekeys import current_calendar_week, daterange, format_date_key, parse_date_key
from services.metrics import percentage


def _as_date(value: dt.date | None) -> dt.date:
    if value is None:
        return dt.date.today()
    if isinstance(value, dt.datetime):
        return value.date()
    return value


def _schedule_start(schedule: dict) -> Optional[dt.date]:
    if not schedule:
        return None
    return parse_date_key(min(schedule.keys()))


def is_done(completed_habits: dict, date_key: str, habit_id: str) -> bool:
    return bool((completed_habits.get(date_key) or {}).get(habit_id))


def habit_streaks(habit_id: str, completed_habits: dict, schedule: dict, today: dt.date | None = None) -> tuple[int, int]:
    """Return (current_streak, best_streak) over [schedule start, today].

    Days without a record break a run. For the current streak, today not yet
    being marked does not break it; only a gap before today does.
    """
    start = _schedule_start(schedule)
    if start is None:
        return 0, 0
    today = _as_date(today)

    best = 0
    run = 0
    for d in daterange(start, today):
        if is_done(completed_habits, format_date_key(d), habit_id):
            run += 1
        else:
            best = max(best, run)
            run = 0
    best = max(best, run)

    current = 0
    i = 0
    while True:
        d = today - dt.timedelta(days=i)
        if d < start:
            break
        done = is_done(completed_habits, format_date_key(d), habit_id)
        if i > 0 and not done:
            break
        if done:
            current += 1
        i += 1
    return current, best


def today_habit_completion(habits: Sequence[dict], completed_habits: dict, now: dt.datetime | None = None) -> dict:
    """Completed counts every True entry recorded today, even for habits
    no longer in the roster; total is the roster size. The percentage is
    capped at 100."""
    today_entries = completed_habits.get(format_date_key(_as_date(now))) or {}
    completed = sum(1 for v in today_entries.values() if v)
    total = len(habits)
    return {"completed": completed, "total": total, "percentage": min(100, percentage(completed, total))}


def weekly_habit_stats(habits: Sequence[dict], completed_habits: dict, now: dt.datetime | None = None) -> list[dict]:
    week = current_calendar_week(_as_date(now))
    out = []
    for habit in habits:
        done_days = sum(1 for key in week if is_done(completed_habits, key, habit["id"]))
        out.append({**habit, "completed_this_week": done_days})
    return out


def weekly_habit_consistency(habits: Sequence[dict], completed_habits: dict, now: dt.datetime | None = None) -> dict:
    completed = sum(h["completed_this_week"] for h in weekly_habit_stats(habits, completed_habits, now))
    total = len(habits) * 7
    return {"completed": completed, "total": total, "percentage": percentage(completed, total)}


def habit_completion_rate(habit_id: str, schedule: dict, completed_habits: dict) -> dict:
    """Days marked done across the whole schedule horizon (first to last day)."""
    if not schedule:
        return {"total_days": 0, "completed_days": 0, "percentage": 0}
    keys = sorted(schedule.keys())
    days = daterange(parse_date_key(keys[0]), parse_date_key(keys[-1]))
    done = sum(1 for d in days if is_done(completed_habits, format_date_key(d), habit_id))
    return {"total_days": len(days), "completed_days": done, "percentage": percentage(done, len(days))}
