from __future__ import annotations

import datetime as dt
import math
from typing import Iterable, Optional

import pandas as pd

from services.datekeys import (
    current_calendar_week,
    format_date_key,
    js_weekday,
    parse_date_key,
    split_task_id,
    task_id,
)
from services.defaults import EXCLUDED_SUBJECTS, EXCLUDED_SUBJECT_MARKERS


FRAME_COLUMNS = ["date", "index", "task_id", "start", "end", "subject", "task", "hours", "completed"]


def percentage(part: float, total: float) -> int:
    """Rounded share in percent (halves round up); 0 when total is 0."""
    if not total or total <= 0:
        return 0
    return int(math.floor(part / total * 100 + 0.5))


def schedule_frame(schedule: dict, completed: Optional[dict] = None) -> pd.DataFrame:
    """One row per scheduled task, with its derived task id and completion flag."""
    completed = completed or {}
    rows = []
    for date_key, tasks in schedule.items():
        for idx, t in enumerate(tasks or []):
            tid = task_id(date_key, idx)
            rows.append({
                "date": date_key,
                "index": idx,
                "task_id": tid,
                "start": t.get("start", ""),
                "end": t.get("end", ""),
                "subject": t.get("subject", ""),
                "task": t.get("task", ""),
                "hours": t.get("hours", 0),
                "completed": bool(completed.get(tid)),
            })
    if not rows:
        return pd.DataFrame(columns=FRAME_COLUMNS)
    return pd.DataFrame(rows, columns=FRAME_COLUMNS)


def _hours_stats(df: pd.DataFrame) -> dict:
    if df.empty:
        return {"total_hours": 0, "completed_hours": 0, "percentage": 0}
    total = float(df["hours"].sum())
    done = float(df.loc[df["completed"].astype(bool), "hours"].sum())
    return {"total_hours": total, "completed_hours": done, "percentage": percentage(done, total)}


def _window_stats(df: pd.DataFrame, date_keys: Iterable[str]) -> dict:
    if df.empty:
        return _hours_stats(df)
    return _hours_stats(df[df["date"].isin(list(date_keys))])


def subject_stats(subject_name: str, schedule: dict, completed: dict) -> dict:
    """Hours for tasks whose subject equals `subject_name` exactly."""
    df = schedule_frame(schedule, completed)
    if df.empty:
        return _hours_stats(df)
    return _hours_stats(df[df["subject"] == subject_name])


def current_week_stats(schedule: dict, completed: dict, now: dt.datetime | None = None) -> dict:
    """Stats for the Monday-start calendar week containing `now`.
    Hours come back as one-decimal strings for display.
    """
    stats = _window_stats(schedule_frame(schedule, completed), current_calendar_week(now))
    return {
        "total_hours": f"{stats['total_hours']:.1f}",
        "completed_hours": f"{stats['completed_hours']:.1f}",
        "percentage": stats["percentage"],
    }


def subjects_from_schedule(
    schedule: dict,
    denylist: Iterable[str] = EXCLUDED_SUBJECTS,
    markers: Iterable[str] = EXCLUDED_SUBJECT_MARKERS,
) -> list[str]:
    """Distinct study subjects in first-seen order, minus non-academic labels."""
    denied = set(denylist)
    markers = tuple(markers)
    seen = set()
    out = []
    for tasks in schedule.values():
        for t in tasks or []:
            subj = t.get("subject", "")
            if subj in seen:
                continue
            seen.add(subj)
            if subj in denied or any(m in subj for m in markers):
                continue
            out.append(subj)
    return out


def _schedule_bounds(schedule: dict) -> Optional[tuple[dt.date, dt.date]]:
    keys = sorted(schedule.keys())
    if not keys:
        return None
    return parse_date_key(keys[0]), parse_date_key(keys[-1])


def schedule_week_count(schedule: dict) -> int:
    bounds = _schedule_bounds(schedule)
    if bounds is None:
        return 0
    start, end = bounds
    return math.ceil(((end - start).days + 1) / 7)


def compute_week_index(date: dt.date, start_date: dt.date) -> int:
    """Week index since start_date (0-based), 7-day windows.
    Example: start_date=2025-01-01, date=2025-01-07 -> 0, 2025-01-08 -> 1.
    """
    delta = (date - start_date).days
    return max(0, delta // 7)


def schedule_relative_week(week_index: int, schedule: dict) -> list[str]:
    """Date-keys of week `week_index`, counted in 7-day blocks from the earliest
    scheduled day (not aligned to Monday)."""
    bounds = _schedule_bounds(schedule)
    if bounds is None:
        return []
    start = bounds[0] + dt.timedelta(days=7 * week_index)
    return [format_date_key(start + dt.timedelta(days=i)) for i in range(7)]


def weekly_stats(week_index: int, schedule: dict, completed: dict) -> dict:
    if not schedule:
        return {"total_hours": 0, "completed_hours": 0, "percentage": 0}
    return _window_stats(schedule_frame(schedule, completed), schedule_relative_week(week_index, schedule))


def weekly_progress_data(schedule: dict, completed: dict, total_weeks: int) -> list[float]:
    """Completed hours per schedule-relative week, weeks 0..total_weeks-1."""
    if total_weeks <= 0:
        return []
    if not schedule:
        return [0] * total_weeks
    df = schedule_frame(schedule, completed)
    return [
        _window_stats(df, schedule_relative_week(i, schedule))["completed_hours"]
        for i in range(total_weeks)
    ]


def _minutes_of(hhmm: str) -> Optional[tuple[int, int]]:
    try:
        h, m = str(hhmm).split(":")[:2]
        return int(h), int(m)
    except ValueError:
        return None


def productivity_heatmap(schedule: dict, completed: dict) -> dict[str, float]:
    """Completed hours bucketed by "{weekday}-{hour}" (Sunday=0, hour 0-23)."""
    data: dict[str, float] = {}
    for tid, done in completed.items():
        if not done:
            continue
        parsed = split_task_id(tid)
        if parsed is None:
            continue
        date_key, idx = parsed
        tasks = schedule.get(date_key) or []
        if idx < 0 or idx >= len(tasks):
            continue
        t = tasks[idx]
        start, end = _minutes_of(t.get("start", "")), _minutes_of(t.get("end", ""))
        if start is None or end is None:
            continue
        weekday = js_weekday(parse_date_key(date_key))
        (start_h, start_m), (end_h, end_m) = start, end
        for h in range(start_h, end_h + 1):
            if h > 23:
                break
            if h == start_h and h == end_h:
                share = (end_m - start_m) / 60
            elif h == start_h:
                share = (60 - start_m) / 60
            elif h == end_h:
                share = end_m / 60
            else:
                share = 1
            if share > 0:
                key = f"{weekday}-{h}"
                data[key] = data.get(key, 0) + share
    return data


def week_subset(schedule: dict, completed: dict, now: dt.datetime | None = None, offset: int = 0) -> tuple[dict, dict]:
    """Schedule and completion entries restricted to one calendar week."""
    week_schedule = {}
    week_completed = {}
    for key in current_calendar_week(now, offset):
        if key not in schedule:
            continue
        week_schedule[key] = schedule[key]
        for idx in range(len(schedule[key])):
            tid = task_id(key, idx)
            if completed.get(tid):
                week_completed[tid] = True
    return week_schedule, week_completed
