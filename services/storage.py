import logging
import os
import sqlite3
from contextlib import contextmanager
from typing import Optional
import datetime as dt

import pandas as pd
from services.defaults import get_default_config
from services.metrics import schedule_frame
from services.validation import (
    is_date_key,
    validate_exam_fields,
    validate_habit_fields,
    validate_task_fields,
)


DB_PATH = os.path.join("data", "planner.db")

logger = logging.getLogger(__name__)


@contextmanager
def conn_ctx():
    os.makedirs(os.path.dirname(DB_PATH), exist_ok=True)
    conn = sqlite3.connect(DB_PATH)
    try:
        yield conn
        conn.commit()
    finally:
        conn.close()


def _blocking(messages: list[str]) -> list[str]:
    return [m for m in messages if "required" in m or "must be" in m]


def _raise_on_errors(messages: list[str]) -> None:
    errors = _blocking(messages)
    if errors:
        raise ValueError("\n".join(errors))


def _num(value):
    f = float(value or 0)
    return int(f) if f.is_integer() else f


def init_db() -> None:
    with conn_ctx() as conn:
        conn.execute("CREATE TABLE IF NOT EXISTS schedule_days (date TEXT PRIMARY KEY)")
        conn.execute(
            """
            CREATE TABLE IF NOT EXISTS schedule_tasks (
                id INTEGER PRIMARY KEY,
                date TEXT NOT NULL,
                position INTEGER NOT NULL,
                start TEXT,
                "end" TEXT,
                subject TEXT,
                task TEXT,
                hours REAL DEFAULT 0
            )
            """
        )
        conn.execute("CREATE INDEX IF NOT EXISTS idx_tasks_date ON schedule_tasks(date, position)")
        conn.execute(
            """
            CREATE TABLE IF NOT EXISTS habits (
                id TEXT PRIMARY KEY,
                position INTEGER NOT NULL,
                name TEXT,
                icon TEXT,
                critical INTEGER DEFAULT 0
            )
            """
        )
        conn.execute(
            """
            CREATE TABLE IF NOT EXISTS exams (
                id INTEGER PRIMARY KEY,
                name TEXT,
                date TEXT,
                subject TEXT,
                priority INTEGER DEFAULT 1
            )
            """
        )
        conn.execute("CREATE TABLE IF NOT EXISTS completed_tasks (task_id TEXT PRIMARY KEY, done INTEGER)")
        conn.execute(
            """
            CREATE TABLE IF NOT EXISTS completed_habits (
                date TEXT NOT NULL,
                habit_id TEXT NOT NULL,
                done INTEGER,
                PRIMARY KEY (date, habit_id)
            )
            """
        )
        # Key/value settings (e.g., selected exam on the dashboard)
        conn.execute(
            """
            CREATE TABLE IF NOT EXISTS settings (
                key TEXT PRIMARY KEY,
                value TEXT
            )
            """
        )
    if get_setting("seeded") is None:
        logger.info("Seeding %s with the default configuration", DB_PATH)
        save_config(get_default_config())
        set_setting("seeded", "1")
    try:
        backup_db_daily()
    except OSError as ex:
        logger.warning("Daily backup skipped: %s", ex)


# Configuration

def load_config() -> dict:
    with conn_ctx() as conn:
        conn.row_factory = sqlite3.Row
        schedule = {r["date"]: [] for r in conn.execute("SELECT date FROM schedule_days ORDER BY date")}
        cur = conn.execute(
            'SELECT date, start, "end", subject, task, hours FROM schedule_tasks ORDER BY date, position'
        )
        for r in cur.fetchall():
            schedule.setdefault(r["date"], []).append({
                "start": r["start"],
                "end": r["end"],
                "subject": r["subject"],
                "task": r["task"],
                "hours": _num(r["hours"]),
            })
        habits = [
            {"id": r["id"], "name": r["name"], "icon": r["icon"], "critical": bool(r["critical"])}
            for r in conn.execute("SELECT id, name, icon, critical FROM habits ORDER BY position")
        ]
        exams = [
            {"name": r["name"], "date": r["date"], "subject": r["subject"], "priority": int(r["priority"])}
            for r in conn.execute("SELECT name, date, subject, priority FROM exams ORDER BY id")
        ]
    return {"exams": exams, "habits": habits, "schedule": schedule}


def save_config(config: dict) -> None:
    """Replace the stored configuration wholesale. Progress is untouched."""
    with conn_ctx() as conn:
        conn.execute("DELETE FROM schedule_tasks")
        conn.execute("DELETE FROM schedule_days")
        conn.execute("DELETE FROM habits")
        conn.execute("DELETE FROM exams")
        for date_key, tasks in (config.get("schedule") or {}).items():
            conn.execute("INSERT INTO schedule_days (date) VALUES (?)", (date_key,))
            for pos, t in enumerate(tasks or []):
                conn.execute(
                    'INSERT INTO schedule_tasks (date, position, start, "end", subject, task, hours) VALUES (?, ?, ?, ?, ?, ?, ?)',
                    (date_key, pos, t["start"], t["end"], t["subject"], t.get("task", ""), float(t.get("hours", 0))),
                )
        for pos, h in enumerate(config.get("habits") or []):
            conn.execute(
                "INSERT INTO habits (id, position, name, icon, critical) VALUES (?, ?, ?, ?, ?)",
                (h["id"], pos, h["name"], h.get("icon", ""), int(bool(h.get("critical")))),
            )
        for e in config.get("exams") or []:
            conn.execute(
                "INSERT INTO exams (name, date, subject, priority) VALUES (?, ?, ?, ?)",
                (e["name"], e["date"], e.get("subject", ""), int(e.get("priority", 1))),
            )


def reset_config() -> None:
    save_config(get_default_config())


# Schedule editing

def add_schedule_date(date_key: str) -> None:
    if not is_date_key(date_key):
        raise ValueError("Date must be YYYY-MM-DD.")
    with conn_ctx() as conn:
        cur = conn.execute("SELECT 1 FROM schedule_days WHERE date=?", (date_key,))
        if cur.fetchone():
            raise ValueError(f"Date {date_key} is already scheduled.")
        conn.execute("INSERT INTO schedule_days (date) VALUES (?)", (date_key,))


def delete_schedule_date(date_key: str) -> None:
    with conn_ctx() as conn:
        conn.execute("DELETE FROM schedule_tasks WHERE date=?", (date_key,))
        conn.execute("DELETE FROM schedule_days WHERE date=?", (date_key,))


def add_task(date_key: str, *, start: str, end: str, subject: str, task: str, hours: Optional[float] = None) -> int:
    """Append a task to a day (creating the day if needed); returns its index."""
    if not is_date_key(date_key):
        raise ValueError("Date must be YYYY-MM-DD.")
    sanitized, messages = validate_task_fields(start=start, end=end, subject=subject, task=task, hours=hours)
    _raise_on_errors(messages)
    with conn_ctx() as conn:
        conn.execute("INSERT OR IGNORE INTO schedule_days (date) VALUES (?)", (date_key,))
        cur = conn.execute("SELECT COUNT(*) FROM schedule_tasks WHERE date=?", (date_key,))
        position = cur.fetchone()[0]
        conn.execute(
            'INSERT INTO schedule_tasks (date, position, start, "end", subject, task, hours) VALUES (?, ?, ?, ?, ?, ?, ?)',
            (date_key, position, sanitized["start"], sanitized["end"], sanitized["subject"], sanitized["task"], sanitized["hours"]),
        )
    return position


def _task_row(conn, date_key: str, index: int):
    conn.row_factory = sqlite3.Row
    cur = conn.execute(
        'SELECT id, start, "end", subject, task, hours FROM schedule_tasks WHERE date=? AND position=?',
        (date_key, index),
    )
    row = cur.fetchone()
    if row is None:
        raise IndexError(f"No task {index} on {date_key}")
    return row


def update_task(date_key: str, index: int, *, start: str = "", end: str = "", subject: str = "", task: str = "", hours: Optional[float] = None) -> None:
    """Edit a task in place; blank fields keep their current value."""
    with conn_ctx() as conn:
        row = _task_row(conn, date_key, index)
        sanitized, messages = validate_task_fields(
            start=start or row["start"],
            end=end or row["end"],
            subject=subject or row["subject"],
            task=task or row["task"],
            hours=hours,
        )
        _raise_on_errors(messages)
        conn.execute(
            'UPDATE schedule_tasks SET start=?, "end"=?, subject=?, task=?, hours=? WHERE id=?',
            (sanitized["start"], sanitized["end"], sanitized["subject"], sanitized["task"], sanitized["hours"], row["id"]),
        )


def delete_task(date_key: str, index: int) -> None:
    """Remove a task and shift later tasks of the day up by one position.
    Completion records keyed by position are left as they are.
    """
    with conn_ctx() as conn:
        row = _task_row(conn, date_key, index)
        conn.execute("DELETE FROM schedule_tasks WHERE id=?", (row["id"],))
        conn.execute(
            "UPDATE schedule_tasks SET position = position - 1 WHERE date=? AND position > ?",
            (date_key, index),
        )


# Habits and exams

def upsert_habit(*, habit_id: str, name: str, icon: str = "", critical: bool = False) -> None:
    sanitized, messages = validate_habit_fields(habit_id=habit_id, name=name, icon=icon, critical=critical)
    _raise_on_errors(messages)
    with conn_ctx() as conn:
        cur = conn.execute("SELECT 1 FROM habits WHERE id=?", (sanitized["id"],))
        if cur.fetchone():
            conn.execute(
                "UPDATE habits SET name=?, icon=?, critical=? WHERE id=?",
                (sanitized["name"], sanitized["icon"], int(sanitized["critical"]), sanitized["id"]),
            )
        else:
            cur = conn.execute("SELECT COALESCE(MAX(position) + 1, 0) FROM habits")
            position = cur.fetchone()[0]
            conn.execute(
                "INSERT INTO habits (id, position, name, icon, critical) VALUES (?, ?, ?, ?, ?)",
                (sanitized["id"], position, sanitized["name"], sanitized["icon"], int(sanitized["critical"])),
            )


def delete_habit(habit_id: str) -> None:
    with conn_ctx() as conn:
        conn.execute("DELETE FROM habits WHERE id=?", (habit_id,))


def add_exam(*, name: str, date: str, subject: str, priority: int = 1) -> None:
    sanitized, messages = validate_exam_fields(name=name, date=date, subject=subject, priority=priority)
    _raise_on_errors(messages)
    with conn_ctx() as conn:
        conn.execute(
            "INSERT INTO exams (name, date, subject, priority) VALUES (?, ?, ?, ?)",
            (sanitized["name"], sanitized["date"], sanitized["subject"], sanitized["priority"]),
        )


def _exam_id(conn, index: int) -> int:
    ids = [r[0] for r in conn.execute("SELECT id FROM exams ORDER BY id")]
    if index < 0 or index >= len(ids):
        raise IndexError(f"No exam at position {index}")
    return ids[index]


def update_exam(index: int, *, name: str, date: str, subject: str, priority: int = 1) -> None:
    sanitized, messages = validate_exam_fields(name=name, date=date, subject=subject, priority=priority)
    _raise_on_errors(messages)
    with conn_ctx() as conn:
        conn.execute(
            "UPDATE exams SET name=?, date=?, subject=?, priority=? WHERE id=?",
            (sanitized["name"], sanitized["date"], sanitized["subject"], sanitized["priority"], _exam_id(conn, index)),
        )


def delete_exam(index: int) -> None:
    with conn_ctx() as conn:
        conn.execute("DELETE FROM exams WHERE id=?", (_exam_id(conn, index),))


# Progress

def load_completed_tasks() -> dict:
    with conn_ctx() as conn:
        return {r[0]: bool(r[1]) for r in conn.execute("SELECT task_id, done FROM completed_tasks")}


def set_task_done(task_id: str, done: bool) -> None:
    with conn_ctx() as conn:
        conn.execute(
            "INSERT INTO completed_tasks(task_id, done) VALUES(?, ?) ON CONFLICT(task_id) DO UPDATE SET done=excluded.done",
            (task_id, int(bool(done))),
        )


def toggle_task(task_id: str) -> bool:
    done = not load_completed_tasks().get(task_id, False)
    set_task_done(task_id, done)
    return done


def load_completed_habits() -> dict:
    out: dict = {}
    with conn_ctx() as conn:
        for date_key, habit_id, done in conn.execute("SELECT date, habit_id, done FROM completed_habits"):
            out.setdefault(date_key, {})[habit_id] = bool(done)
    return out


def toggle_habit(habit_id: str, date_key: str) -> bool:
    with conn_ctx() as conn:
        cur = conn.execute("SELECT done FROM completed_habits WHERE date=? AND habit_id=?", (date_key, habit_id))
        row = cur.fetchone()
        done = not (row and row[0])
        conn.execute(
            "INSERT INTO completed_habits(date, habit_id, done) VALUES(?, ?, ?) "
            "ON CONFLICT(date, habit_id) DO UPDATE SET done=excluded.done",
            (date_key, habit_id, int(done)),
        )
    return done


def clear_progress() -> None:
    with conn_ctx() as conn:
        conn.execute("DELETE FROM completed_tasks")
        conn.execute("DELETE FROM completed_habits")


def load_state() -> tuple[dict, dict, dict]:
    """(config, completed_tasks, completed_habits) snapshot."""
    return load_config(), load_completed_tasks(), load_completed_habits()


# Tabular exports

def get_schedule_df() -> pd.DataFrame:
    return schedule_frame(load_config()["schedule"], load_completed_tasks())


def export_csv_bytes(df: pd.DataFrame) -> bytes:
    return df.to_csv(index=False).encode("utf-8")


def export_excel_bytes(df: pd.DataFrame) -> bytes:
    import io
    bio = io.BytesIO()
    with pd.ExcelWriter(bio, engine="openpyxl") as writer:
        df.to_excel(writer, index=False, sheet_name="Schedule")
    bio.seek(0)
    return bio.read()


def backup_db_daily() -> None:
    """Create a once-per-day backup copy of the SQLite DB.
    Stored next to the DB under backups/planner-YYYYMMDD.db
    """
    if not os.path.exists(DB_PATH):
        return
    backups_dir = os.path.join(os.path.dirname(DB_PATH), "backups")
    os.makedirs(backups_dir, exist_ok=True)
    today_tag = dt.date.today().strftime("%Y%m%d")
    backup_path = os.path.join(backups_dir, f"planner-{today_tag}.db")
    if not os.path.exists(backup_path):
        with open(DB_PATH, "rb") as src, open(backup_path, "wb") as dst:
            dst.write(src.read())


# Simple settings helpers
def set_setting(key: str, value: str) -> None:
    with conn_ctx() as conn:
        conn.execute("INSERT INTO settings(key, value) VALUES(?, ?) ON CONFLICT(key) DO UPDATE SET value=excluded.value", (key, value))


def get_setting(key: str, default: Optional[str] = None) -> Optional[str]:
    with conn_ctx() as conn:
        cur = conn.execute("SELECT value FROM settings WHERE key=?", (key,))
        row = cur.fetchone()
        if not row:
            return default
        return row[0]
