from services.validation import (
    MAX_SUBJECT_LEN,
    schedule_errors,
    validate_config,
    validate_exam_fields,
    validate_habit_fields,
    validate_task_fields,
)


def test_task_requires_times_and_subject():
    _, msgs = validate_task_fields(start="8", end="10:00", subject="", task="x")
    assert any("Start time is required" in m for m in msgs)
    assert any("Subject is required" in m for m in msgs)


def test_task_hours_derived_only_when_missing():
    sanitized, msgs = validate_task_fields(start="09:00", end="10:30", subject="Termo", task="x")
    assert not msgs
    assert sanitized["hours"] == 1.5
    # Stored hours win even when inconsistent with the times
    sanitized, msgs = validate_task_fields(start="09:00", end="10:00", subject="Termo", task="x", hours=5)
    assert sanitized["hours"] == 5
    _, msgs = validate_task_fields(start="09:00", end="10:00", subject="Termo", task="x", hours=-1)
    assert any("must be" in m for m in msgs)


def test_task_subject_truncated_with_warning():
    sanitized, msgs = validate_task_fields(start="09:00", end="10:00", subject="S" * (MAX_SUBJECT_LEN + 5), task="x", hours=1)
    assert len(sanitized["subject"]) == MAX_SUBJECT_LEN
    assert any("truncated" in m for m in msgs)


def test_habit_defaults_icon():
    sanitized, msgs = validate_habit_fields(habit_id=" gym ", name="Gym", icon="")
    assert not msgs
    assert sanitized == {"id": "gym", "name": "Gym", "icon": "✅", "critical": False}
    _, msgs = validate_habit_fields(habit_id="", name="")
    assert len([m for m in msgs if "required" in m]) == 2


def test_exam_priority_and_date():
    sanitized, msgs = validate_exam_fields(name="Termo", date="2025-12-01T12:00:00", subject="Termo", priority=5)
    assert sanitized["priority"] == 3
    assert any("Priority must be" in m for m in msgs)
    _, msgs = validate_exam_fields(name="Termo", date="next monday", subject="Termo")
    assert any("Exam date is required" in m for m in msgs)


def test_validate_config_accepts_both_schedule_keys():
    task = {"start": "08:00", "end": "10:00", "subject": "Termo", "task": "x", "hours": 2}
    config, msgs = validate_config({"scheduleByDate": {"2025-01-01": [task]}})
    assert not msgs
    assert config["schedule"] == {"2025-01-01": [task]}
    config, _ = validate_config({"schedule": {"2025-01-01": [task]}})
    assert "2025-01-01" in config["schedule"]


def test_validate_config_drops_invalid_items():
    data = {
        "scheduleByDate": {
            "2025-1-1": [],
            "2025-01-02": [{"start": "bad", "end": "10:00", "subject": "Termo", "task": "x", "hours": 1}, "nope"],
        },
        "habits": [{"id": "a", "name": "A"}, {"id": "a", "name": "Dup"}, {"name": "No id"}],
        "exams": [{"name": "", "date": "2025-12-01T12:00:00"}],
    }
    config, msgs = validate_config(data)
    assert config["schedule"] == {"2025-01-02": []}
    assert [h["id"] for h in config["habits"]] == ["a"]
    assert config["exams"] == []
    assert any("2025-1-1" in m for m in msgs)
    assert any("must be unique" in m for m in msgs)


def test_validate_config_rejects_non_objects():
    config, msgs = validate_config(["not", "a", "dict"])
    assert config == {"exams": [], "habits": [], "schedule": {}}
    assert msgs == ["Configuration must be a JSON object."]


def test_task_hours_must_be_finite():
    for bad in (float("nan"), float("inf"), float("-inf")):
        sanitized, msgs = validate_task_fields(start="08:00", end="10:00", subject="Termo", task="x", hours=bad)
        assert "Hours must be a finite number." in msgs
        assert sanitized["hours"] == 0


def test_exam_priority_overflow_falls_back_to_default():
    sanitized, msgs = validate_exam_fields(name="Termo", date="2025-12-01T12:00:00", subject="Termo", priority=float("inf"))
    assert sanitized["priority"] == 1
    assert not msgs


def test_schedule_errors_flag_bad_days_and_tasks_only():
    data = {
        "scheduleByDate": {"2025-01-01": 5, "2025-01-02": None},
        "habits": [{"id": "", "name": "No id"}],
    }
    config, msgs = validate_config(data)
    assert config["schedule"] == {"2025-01-02": []}
    assert schedule_errors(msgs) == ["Day '2025-01-01': tasks must be a list"]
    long_subject = {"start": "08:00", "end": "10:00", "subject": "x" * (MAX_SUBJECT_LEN + 5), "task": "", "hours": 2}
    _, msgs = validate_config({"scheduleByDate": {"2025-01-01": [long_subject]}})
    assert msgs and schedule_errors(msgs) == []
