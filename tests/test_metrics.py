import datetime as dt

from services.metrics import (
    compute_week_index,
    current_week_stats,
    percentage,
    productivity_heatmap,
    schedule_frame,
    schedule_relative_week,
    schedule_week_count,
    subject_stats,
    subjects_from_schedule,
    week_subset,
    weekly_progress_data,
    weekly_stats,
)


def _task(subject="Termodinámica", hours=2, start="08:00", end="10:00"):
    return {"start": start, "end": end, "subject": subject, "task": "Study", "hours": hours}


def test_subject_stats_exact_match_only():
    schedule = {"2025-01-01": [_task("Termo", 2), _task("Termo (Cursada)", 3)]}
    completed = {"2025-01-01-0": True}
    assert subject_stats("Termo", schedule, completed) == {"total_hours": 2, "completed_hours": 2, "percentage": 100}
    cursada = subject_stats("Termo (Cursada)", schedule, completed)
    assert cursada["total_hours"] == 3
    assert cursada["completed_hours"] == 0
    assert cursada["percentage"] == 0


def test_subject_stats_zero_hours_and_false_entries():
    schedule = {"2025-01-01": [_task("Descanso", 0)]}
    assert subject_stats("Descanso", schedule, {"2025-01-01-0": True})["percentage"] == 0
    schedule = {"2025-01-01": [_task("Termo", 2)]}
    assert subject_stats("Termo", schedule, {"2025-01-01-0": False})["completed_hours"] == 0
    assert subject_stats("Missing", schedule, {}) == {"total_hours": 0, "completed_hours": 0, "percentage": 0}


def test_percentage_rounds_half_up_and_stays_in_bounds():
    assert percentage(1, 8) == 13
    assert percentage(1, 3) == 33
    assert percentage(2, 3) == 67
    assert percentage(5, 5) == 100
    assert percentage(0, 0) == 0


def test_schedule_week_count():
    assert schedule_week_count({}) == 0
    assert schedule_week_count({"2025-01-01": []}) == 1
    assert schedule_week_count({"2025-01-01": [], "2025-01-07": []}) == 1
    assert schedule_week_count({"2025-01-08": [], "2025-01-01": []}) == 2
    assert schedule_week_count({"2024-12-30": [], "2025-01-20": []}) == 4


def test_weekly_stats_empty_schedule():
    assert weekly_stats(0, {}, {}) == {"total_hours": 0, "completed_hours": 0, "percentage": 0}
    assert schedule_relative_week(0, {}) == []


def test_schedule_relative_week_anchored_at_earliest_day():
    schedule = {"2025-01-10": [], "2025-01-01": []}  # 2025-01-01 is a Wednesday
    week1 = schedule_relative_week(1, schedule)
    assert week1[0] == "2025-01-08"
    assert week1[-1] == "2025-01-14"
    week3 = schedule_relative_week(3, schedule)
    assert week3[0] == (dt.date(2025, 1, 1) + dt.timedelta(days=21)).isoformat()


def test_weekly_stats_and_progress_series():
    schedule = {
        "2025-01-01": [_task(hours=2)],
        "2025-01-07": [_task(hours=3)],
        "2025-01-08": [_task(hours=4)],
    }
    completed = {"2025-01-01-0": True, "2025-01-08-0": True}
    week0 = weekly_stats(0, schedule, completed)
    assert week0 == {"total_hours": 5, "completed_hours": 2, "percentage": 40}
    week1 = weekly_stats(1, schedule, completed)
    assert week1 == {"total_hours": 4, "completed_hours": 4, "percentage": 100}
    # Beyond the horizon the window is simply empty
    assert weekly_stats(5, schedule, completed)["total_hours"] == 0

    total = schedule_week_count(schedule)
    assert weekly_progress_data(schedule, completed, total) == [2, 4]
    # Recomputed from inputs on every call
    assert weekly_progress_data(schedule, completed, total) == [2, 4]
    assert weekly_progress_data(schedule, completed, 0) == []


def test_current_week_stats_uses_monday_start_week():
    schedule = {
        "2024-12-29": [_task(hours=7)],
        "2024-12-30": [_task(hours=1.5)],
        "2025-01-05": [_task(hours=1)],
        "2025-01-06": [_task(hours=5)],
    }
    completed = {"2024-12-30-0": True, "2025-01-06-0": True, "2024-12-29-0": True}
    stats = current_week_stats(schedule, completed, dt.datetime(2025, 1, 5, 18, 0))
    assert stats == {"total_hours": "2.5", "completed_hours": "1.5", "percentage": 60}


def test_current_week_stats_without_tasks():
    stats = current_week_stats({}, {}, dt.datetime(2025, 1, 1, 9, 0))
    assert stats == {"total_hours": "0.0", "completed_hours": "0.0", "percentage": 0}


def test_subjects_exclude_events_and_exam_markers():
    schedule = {
        "2025-01-01": [_task("Termodinámica"), _task("Gym"), _task("ESTRUCTURAS PARCIAL")],
        "2025-01-02": [_task("Básquet (opcional)"), _task("Básquet"), _task("Termo (Cursada)")],
        "2025-01-03": [_task("Termodinámica"), _task("Repaso Semanal"), _task("Descanso")],
    }
    assert subjects_from_schedule(schedule) == ["Termodinámica", "Básquet (opcional)", "Termo (Cursada)"]
    assert subjects_from_schedule(schedule, denylist={"Termodinámica"}, markers=()) == [
        "Gym",
        "ESTRUCTURAS PARCIAL",
        "Básquet (opcional)",
        "Básquet",
        "Termo (Cursada)",
        "Repaso Semanal",
        "Descanso",
    ]


def test_schedule_frame_columns():
    df = schedule_frame({})
    assert df.empty
    assert "task_id" in df.columns
    df = schedule_frame({"2025-01-01": [_task(), _task()]}, {"2025-01-01-1": True})
    assert list(df["task_id"]) == ["2025-01-01-0", "2025-01-01-1"]
    assert list(df["completed"]) == [False, True]


def test_productivity_heatmap_spreads_completed_hours():
    schedule = {"2025-01-01": [_task(start="08:30", end="10:15"), _task(start="12:00", end="13:00")]}
    completed = {
        "2025-01-01-0": True,
        "2025-01-01-1": False,
        "2025-01-01-7": True,
        "garbage": True,
        "2025-02-01-0": True,
    }
    # 2025-01-01 is a Wednesday -> 3 with Sunday=0
    assert productivity_heatmap(schedule, completed) == {"3-8": 0.5, "3-9": 1, "3-10": 0.25}


def test_week_subset_filters_calendar_week():
    schedule = {"2025-01-01": [_task(), _task()], "2025-01-08": [_task()]}
    completed = {"2025-01-01-1": True, "2025-01-08-0": True}
    week_schedule, week_completed = week_subset(schedule, completed, dt.date(2025, 1, 2))
    assert list(week_schedule) == ["2025-01-01"]
    assert week_completed == {"2025-01-01-1": True}
    week_schedule, week_completed = week_subset(schedule, completed, dt.date(2025, 1, 2), offset=1)
    assert list(week_schedule) == ["2025-01-08"]


def test_compute_week_index_same_and_next_week():
    start = dt.date(2024, 12, 30)
    assert compute_week_index(dt.date(2025, 1, 1), start) == 0
    assert compute_week_index(dt.date(2025, 1, 5), start) == 0
    assert compute_week_index(dt.date(2025, 1, 7), start) == 1
    assert compute_week_index(dt.date(2024, 12, 1), start) == 0
