import datetime as dt
import math
import re
from typing import Tuple, List, Optional

MAX_SUBJECT_LEN = 80
MAX_TEXT_LEN = 500
MAX_NAME_LEN = 120
DEFAULT_HABIT_ICON = "✅"

TIME_RE = re.compile(r"^([01]\d|2[0-3]):[0-5]\d$")
DATE_KEY_RE = re.compile(r"^\d{4}-\d{2}-\d{2}$")
# Prefixes of messages about the schedule; positions there are task identities.
SCHEDULE_MESSAGE_PREFIXES = ("Schedule", "Day ", "Task ")


def _truncate(text: str, max_len: int) -> Tuple[str, bool]:
    if text is None:
        return "", False
    s = str(text)
    if len(s) > max_len:
        return s[:max_len], True
    return s, False


def is_date_key(value: str) -> bool:
    if not DATE_KEY_RE.match(str(value or "")):
        return False
    try:
        dt.date.fromisoformat(value)
    except ValueError:
        return False
    return True


def hours_between(start: str, end: str) -> float:
    """Duration implied by two HH:MM times, used to prefill new tasks."""
    sh, sm = (int(p) for p in start.split(":"))
    eh, em = (int(p) for p in end.split(":"))
    return ((eh * 60 + em) - (sh * 60 + sm)) / 60


def validate_task_fields(*, start: str, end: str, subject: str, task: str, hours: Optional[float] = None) -> Tuple[dict, List[str]]:
    errors: List[str] = []
    warnings: List[str] = []

    start_s = str(start or "").strip()
    end_s = str(end or "").strip()
    times_ok = bool(TIME_RE.match(start_s)) and bool(TIME_RE.match(end_s))
    if not TIME_RE.match(start_s):
        errors.append("Start time is required as HH:MM.")
    if not TIME_RE.match(end_s):
        errors.append("End time is required as HH:MM.")

    subject_s, subj_trunc = _truncate(subject or "", MAX_SUBJECT_LEN)
    if not subject_s.strip():
        errors.append("Subject is required.")
    if subj_trunc:
        warnings.append(f"Subject truncated to {MAX_SUBJECT_LEN} characters")

    task_s, task_trunc = _truncate(task or "", MAX_TEXT_LEN)
    if task_trunc:
        warnings.append(f"Description truncated to {MAX_TEXT_LEN} characters")

    if hours is None or hours == "":
        hours_f = hours_between(start_s, end_s) if times_ok else 0.0
        if hours_f < 0:
            warnings.append("End time is before start time; hours set to 0")
            hours_f = 0.0
    else:
        try:
            hours_f = float(hours)
        except (TypeError, ValueError):
            errors.append("Hours must be a number.")
            hours_f = 0.0
        if not math.isfinite(hours_f):
            errors.append("Hours must be a finite number.")
            hours_f = 0.0
        if hours_f < 0:
            errors.append("Hours must be zero or more.")
            hours_f = 0.0
    if hours_f == int(hours_f):
        hours_f = int(hours_f)

    sanitized = {
        "start": start_s,
        "end": end_s,
        "subject": subject_s.strip(),
        "task": task_s.strip(),
        "hours": hours_f,
    }
    return sanitized, errors + warnings


def validate_habit_fields(*, habit_id: str, name: str, icon: str = "", critical: bool = False) -> Tuple[dict, List[str]]:
    errors: List[str] = []
    warnings: List[str] = []
    hid = str(habit_id or "").strip()
    if not hid:
        errors.append("Habit id is required.")
    name_s, name_trunc = _truncate(name or "", MAX_NAME_LEN)
    if not name_s.strip():
        errors.append("Habit name is required.")
    if name_trunc:
        warnings.append(f"Habit name truncated to {MAX_NAME_LEN} characters")
    sanitized = {
        "id": hid,
        "name": name_s.strip(),
        "icon": str(icon or "").strip() or DEFAULT_HABIT_ICON,
        "critical": bool(critical),
    }
    return sanitized, errors + warnings


def validate_exam_fields(*, name: str, date: str, subject: str, priority: int = 1) -> Tuple[dict, List[str]]:
    errors: List[str] = []
    warnings: List[str] = []
    name_s, name_trunc = _truncate(name or "", MAX_NAME_LEN)
    if not name_s.strip():
        errors.append("Exam name is required.")
    if name_trunc:
        warnings.append(f"Exam name truncated to {MAX_NAME_LEN} characters")

    date_s = str(date or "").strip()
    try:
        dt.datetime.fromisoformat(date_s.replace("Z", "+00:00"))
    except ValueError:
        errors.append("Exam date is required as an ISO datetime (YYYY-MM-DDTHH:MM:SS).")

    subject_s, _ = _truncate(subject or "", MAX_SUBJECT_LEN)
    try:
        priority_i = int(priority)
    except (TypeError, ValueError, OverflowError):
        priority_i = 1
    if priority_i < 1 or priority_i > 3:
        errors.append("Priority must be between 1 and 3.")
        priority_i = max(1, min(3, priority_i))

    sanitized = {
        "name": name_s.strip(),
        "date": date_s,
        "subject": subject_s.strip(),
        "priority": priority_i,
    }
    return sanitized, errors + warnings


def validate_config(data) -> Tuple[dict, List[str]]:
    """Sanitize a whole configuration object (exams, habits, schedule).
    Accepts the schedule under either "scheduleByDate" or "schedule".
    Invalid habits and exams are dropped and reported. Invalid schedule
    entries are reported too; see schedule_errors.
    """
    messages: List[str] = []
    config = {"exams": [], "habits": [], "schedule": {}}
    if not isinstance(data, dict):
        return config, ["Configuration must be a JSON object."]

    raw_schedule = data.get("scheduleByDate", data.get("schedule", {})) or {}
    if not isinstance(raw_schedule, dict):
        messages.append("Schedule must be a mapping of YYYY-MM-DD to task lists.")
        raw_schedule = {}
    for date_key, tasks in raw_schedule.items():
        if not is_date_key(date_key):
            messages.append(f"Day '{date_key}': date must be YYYY-MM-DD")
            continue
        if tasks is None:
            tasks = []
        if not isinstance(tasks, list):
            messages.append(f"Day '{date_key}': tasks must be a list")
            continue
        day = []
        for idx, t in enumerate(tasks):
            if not isinstance(t, dict):
                messages.append(f"Task {date_key}-{idx}: must be an object")
                continue
            sanitized, msgs = validate_task_fields(
                start=t.get("start"),
                end=t.get("end"),
                subject=t.get("subject"),
                task=t.get("task"),
                hours=t.get("hours", 0),
            )
            for m in msgs:
                messages.append(f"Task {date_key}-{idx}: {m}")
            if not any("required" in m or "must be" in m for m in msgs):
                day.append(sanitized)
        config["schedule"][date_key] = day

    seen_ids = set()
    for idx, h in enumerate(data.get("habits") or []):
        if not isinstance(h, dict):
            messages.append(f"Habit {idx}: must be an object")
            continue
        sanitized, msgs = validate_habit_fields(
            habit_id=h.get("id"),
            name=h.get("name"),
            icon=h.get("icon"),
            critical=h.get("critical", False),
        )
        for m in msgs:
            messages.append(f"Habit {idx}: {m}")
        if any("required" in m for m in msgs):
            continue
        if sanitized["id"] in seen_ids:
            messages.append(f"Habit {idx}: id '{sanitized['id']}' must be unique")
            continue
        seen_ids.add(sanitized["id"])
        config["habits"].append(sanitized)

    for idx, e in enumerate(data.get("exams") or []):
        if not isinstance(e, dict):
            messages.append(f"Exam {idx}: must be an object")
            continue
        sanitized, msgs = validate_exam_fields(
            name=e.get("name"),
            date=e.get("date"),
            subject=e.get("subject"),
            priority=e.get("priority", 1),
        )
        for m in msgs:
            messages.append(f"Exam {idx}: {m}")
        if any("required" in m for m in msgs):
            continue
        config["exams"].append(sanitized)

    return config, messages


def schedule_errors(messages: List[str]) -> List[str]:
    """Blocking messages about the schedule. Dropping a task would shift the
    positions of the ones after it, so callers reject the whole import.
    """
    return [
        m for m in messages
        if m.startswith(SCHEDULE_MESSAGE_PREFIXES) and ("required" in m or "must be" in m)
    ]
