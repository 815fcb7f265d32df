from __future__ import annotations

import datetime as dt
from typing import Optional

DAY_NAMES = ["Dom", "Lun", "Mar", "Mié", "Jue", "Vie", "Sáb"]  # Sunday=0


def format_date_key(date: dt.date) -> str:
    return f"{date.year}-{date.month:02d}-{date.day:02d}"


def parse_date_key(key: str) -> dt.date:
    """Inverse of format_date_key. The key must be well-formed YYYY-MM-DD."""
    year, month, day = (int(p) for p in key.split("-"))
    return dt.date(year, month, day)


def day_name(weekday_index: int) -> str:
    return DAY_NAMES[weekday_index]


def js_weekday(date: dt.date) -> int:
    # date.weekday() is Monday=0; shift so Sunday=0
    return (date.weekday() + 1) % 7


def task_id(date_key: str, index: int) -> str:
    return f"{date_key}-{index}"


def split_task_id(tid: str) -> Optional[tuple[str, int]]:
    """Return (date_key, index) or None when the id does not carry both."""
    parts = str(tid).split("-")
    if len(parts) < 4:
        return None
    try:
        index = int(parts[3])
    except ValueError:
        return None
    return f"{parts[0]}-{parts[1]}-{parts[2]}", index


def daterange(start: dt.date, end: dt.date) -> list[dt.date]:
    """Inclusive date range."""
    days = []
    cur = start
    while cur <= end:
        days.append(cur)
        cur += dt.timedelta(days=1)
    return days


def week_bounds_for(date: dt.date) -> tuple[dt.date, dt.date]:
    if isinstance(date, dt.datetime):
        date = date.date()
    start = date - dt.timedelta(days=date.weekday())  # Monday; Sunday goes back 6 days
    end = start + dt.timedelta(days=6)
    return start, end


def current_calendar_week(now: dt.date | None = None, offset: int = 0) -> list[str]:
    """Date-keys of the Monday-start week containing `now`, shifted by `offset` weeks."""
    ref = now or dt.datetime.now()
    start, _ = week_bounds_for(ref)
    start += dt.timedelta(days=7 * offset)
    return [format_date_key(start + dt.timedelta(days=i)) for i in range(7)]


def days_of_current_week(now: dt.date | None = None) -> list[dict]:
    out = []
    for key in current_calendar_week(now):
        out.append({
            "date_key": key,
            "day_initial": day_name(js_weekday(parse_date_key(key)))[0],
        })
    return out
