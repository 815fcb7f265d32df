import datetime as dt
import json
import os

from services.filesync import (
    build_ics,
    create_or_sync_on_launch,
    export_config_json,
    export_schedule_ics,
    get_json_path,
    import_config_json,
)
from services.storage import init_db, load_config, save_config


def test_export_and_import_json_roundtrip():
    init_db()
    path = export_config_json()
    assert path == get_json_path()
    with open(path, "r", encoding="utf-8") as f:
        data = json.load(f)
    assert set(data) == {"exams", "habits", "scheduleByDate"}

    before = load_config()
    save_config({"exams": [], "habits": [], "schedule": {}})
    ok, msgs = import_config_json()
    assert ok and not msgs
    assert load_config() == before


def test_sync_on_launch_prefers_user_file():
    init_db()
    data = {"exams": [], "habits": [{"id": "gym", "name": "Gym", "icon": "💪", "critical": True}], "scheduleByDate": {}}
    with open(get_json_path(), "w", encoding="utf-8") as f:
        json.dump(data, f)
    path, msgs = create_or_sync_on_launch()
    assert path == get_json_path()
    assert not msgs
    assert load_config()["habits"] == data["habits"]


def test_sync_on_launch_keeps_rejected_user_file():
    init_db()
    before = load_config()
    data = {"scheduleByDate": {"2025-01-01": [{"start": "8am", "end": "10:00", "subject": "Termo", "task": "x", "hours": 2}]}}
    with open(get_json_path(), "w", encoding="utf-8") as f:
        json.dump(data, f)
    path, msgs = create_or_sync_on_launch()
    assert any("Task 2025-01-01-0" in m for m in msgs)
    assert load_config() == before
    with open(path, "r", encoding="utf-8") as f:
        assert json.load(f) == data


def test_build_ics_events():
    schedule = {
        "2025-01-01": [
            {"start": "08:00", "end": "10:30", "subject": "Termodinámica", "task": "Ciclos", "hours": 2.5},
            {"start": "20:00", "end": "20:30", "subject": "Cena", "task": "Cenar", "hours": 0.5},
        ]
    }
    text = build_ics(schedule, dt.datetime(2025, 1, 1, 7, 0, 5))
    lines = text.split("\n")
    assert lines[0] == "BEGIN:VCALENDAR"
    assert lines[-1] == "END:VCALENDAR"
    assert lines.count("BEGIN:VEVENT") == 2
    assert "UID:2025-01-01-1@coachestudio.app" in lines
    assert "DTSTAMP:20250101T070005Z" in lines
    assert "DTSTART:20250101T080000Z" in lines
    assert "DTEND:20250101T103000Z" in lines
    assert "SUMMARY:Termodinámica" in lines


def test_export_schedule_ics_writes_file():
    init_db()
    path = export_schedule_ics()
    assert os.path.exists(path)
    with open(path, "r", encoding="utf-8") as f:
        assert "BEGIN:VEVENT" in f.read()
