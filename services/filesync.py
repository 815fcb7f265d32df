import os
import atexit
import json
import logging
import datetime as dt
from typing import Optional

from services.storage import load_config, save_config
from services.validation import validate_config, schedule_errors


APP_DIR_NAME = "Study Planner Coach"
ENV_JSON_PATH = "SPC_JSON_PATH"
ENV_ICS_PATH = "SPC_ICS_PATH"
ICS_UID_DOMAIN = "coachestudio.app"

logger = logging.getLogger(__name__)


def _documents_dir() -> str:
    home = os.path.expanduser("~")
    # Prefer Documents if it exists
    docs = os.path.join(home, "Documents")
    if os.path.isdir(docs):
        return docs
    return home


def _app_file(env_var: str, filename: str) -> str:
    override = os.getenv(env_var)
    if override:
        return os.path.abspath(override)
    folder = os.path.join(_documents_dir(), APP_DIR_NAME)
    os.makedirs(folder, exist_ok=True)
    return os.path.join(folder, filename)


def get_json_path() -> str:
    return _app_file(ENV_JSON_PATH, "coach-config.json")


def get_ics_path() -> str:
    return _app_file(ENV_ICS_PATH, "study-schedule.ics")


def config_to_json_dict(config: dict) -> dict:
    return {
        "exams": config.get("exams", []),
        "habits": config.get("habits", []),
        "scheduleByDate": config.get("schedule", {}),
    }


def export_config_json(path: Optional[str] = None) -> str:
    path = path or get_json_path()
    os.makedirs(os.path.dirname(path), exist_ok=True)
    with open(path, "w", encoding="utf-8") as f:
        json.dump(config_to_json_dict(load_config()), f, ensure_ascii=False, indent=2)
    logger.info("Configuration exported to %s", path)
    return path


def import_config_json(path: Optional[str] = None, *, dry_run: bool = False) -> tuple[bool, list[str]]:
    """Replace the stored configuration with the one in a JSON file.
    Returns (imported, messages). Nothing is written when the file is
    missing, unreadable, not an object, or has an invalid schedule entry.
    """
    path = path or get_json_path()
    if not os.path.exists(path):
        return False, [f"No configuration file at {path}"]
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = json.load(f)
    except (OSError, ValueError) as ex:
        return False, [f"Failed to read JSON at {path}: {ex}"]
    config, messages = validate_config(data)
    if not isinstance(data, dict):
        return False, messages
    if schedule_errors(messages):
        logger.warning("Import from %s rejected: invalid schedule entries", path)
        return False, messages
    if not dry_run:
        save_config(config)
        logger.info("Configuration imported from %s", path)
    return True, messages


def _ics_stamp(value: dt.datetime) -> str:
    return value.strftime("%Y%m%dT%H%M%SZ")


def build_ics(schedule: dict, now: Optional[dt.datetime] = None) -> str:
    """One VEVENT per task. Task times are written as-is with a Z suffix."""
    now = now or dt.datetime.now(dt.timezone.utc)
    stamp = _ics_stamp(now)
    lines = ["BEGIN:VCALENDAR", "VERSION:2.0", "PRODID:-//CoachEstudio//App v1.0//EN"]
    for date_key, tasks in schedule.items():
        year, month, day = (int(p) for p in date_key.split("-"))
        for index, task in enumerate(tasks or []):
            sh, sm = (int(p) for p in task["start"].split(":"))
            eh, em = (int(p) for p in task["end"].split(":"))
            lines += [
                "BEGIN:VEVENT",
                f"UID:{date_key}-{index}@{ICS_UID_DOMAIN}",
                f"DTSTAMP:{stamp}",
                f"DTSTART:{_ics_stamp(dt.datetime(year, month, day, sh, sm))}",
                f"DTEND:{_ics_stamp(dt.datetime(year, month, day, eh, em))}",
                f"SUMMARY:{task['subject']}",
                f"DESCRIPTION:{task.get('task', '')}",
                "END:VEVENT",
            ]
    lines.append("END:VCALENDAR")
    return "\n".join(lines)


def export_schedule_ics(path: Optional[str] = None, now: Optional[dt.datetime] = None) -> str:
    path = path or get_ics_path()
    os.makedirs(os.path.dirname(path), exist_ok=True)
    with open(path, "w", encoding="utf-8") as f:
        f.write(build_ics(load_config()["schedule"], now))
    logger.info("Calendar exported to %s", path)
    return path


def create_or_sync_on_launch() -> tuple[str, list[str]]:
    """Load the user-visible JSON config if present, then rewrite it from the DB.
    Returns (path_used, messages) where messages are any import notes. A file
    whose import was rejected is left as it is so the user can fix it.
    """
    msgs: list[str] = []
    json_path = get_json_path()
    if os.path.exists(json_path):
        ok, m = import_config_json(json_path)
        msgs.extend(m)
        if not ok:
            logger.warning("Keeping %s unchanged; its import was rejected", json_path)
            return json_path, msgs
    used_path = export_config_json(json_path)
    return used_path, msgs


_registered = False


def register_atexit_export():
    global _registered
    if _registered:
        return

    def _export():
        try:
            export_config_json()
        except OSError as ex:
            logger.warning("Export at exit failed: %s", ex)

    atexit.register(_export)
    _registered = True
