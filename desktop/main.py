import sys
import os
ROOT = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
if ROOT not in sys.path:
    sys.path.insert(0, ROOT)
import datetime as dt
import logging

from PySide6 import QtWidgets, QtCore, QtGui

from services.storage import (
    init_db,
    load_state,
    toggle_task,
    toggle_habit,
    add_schedule_date,
    delete_schedule_date,
    add_task,
    update_task,
    delete_task,
    upsert_habit,
    delete_habit,
    add_exam,
    update_exam,
    delete_exam,
    reset_config,
    clear_progress,
    get_setting,
    set_setting,
    get_schedule_df,
    export_csv_bytes,
    export_excel_bytes,
)
from services.datekeys import format_date_key, parse_date_key, task_id, days_of_current_week, day_name, js_weekday
from services.metrics import (
    compute_week_index,
    current_week_stats,
    productivity_heatmap,
    schedule_week_count,
    subject_stats,
    subjects_from_schedule,
    weekly_progress_data,
    weekly_stats,
    week_subset,
)
from services.habits import habit_streaks, today_habit_completion, weekly_habit_stats, weekly_habit_consistency, is_done
from services.nextup import next_task, exam_countdown, PomodoroClock, POMODORO_MODES
from services.filesync import (
    create_or_sync_on_launch,
    register_atexit_export,
    export_config_json,
    import_config_json,
    export_schedule_ics,
)
import matplotlib
matplotlib.use("QtAgg")
from matplotlib.backends.backend_qtagg import FigureCanvasQTAgg as FigureCanvas
from matplotlib.figure import Figure

WEEKS_PER_PAGE = 4


class PomodoroWidget(QtWidgets.QWidget):
    MODE_LABELS = (("work", "Pomodoro"), ("short", "Short break"), ("long", "Long break"))

    def __init__(self, parent=None):
        super().__init__(parent)
        self.clock = PomodoroClock()
        self.timer = QtCore.QTimer(self)
        self.timer.timeout.connect(self._tick)
        v = QtWidgets.QVBoxLayout(self)
        modes = QtWidgets.QHBoxLayout()
        for mode, label in self.MODE_LABELS:
            btn = QtWidgets.QPushButton(f"{label} ({POMODORO_MODES[mode] // 60} min)", self)
            btn.clicked.connect(lambda _=False, m=mode: self._set_mode(m))
            modes.addWidget(btn)
        v.addLayout(modes)
        self.time_label = QtWidgets.QLabel(self.clock.display, self)
        font = self.time_label.font()
        font.setPointSize(28)
        self.time_label.setFont(font)
        self.time_label.setAlignment(QtCore.Qt.AlignCenter)
        v.addWidget(self.time_label)
        controls = QtWidgets.QHBoxLayout()
        self.start_btn = QtWidgets.QPushButton("Start", self)
        reset_btn = QtWidgets.QPushButton("Reset", self)
        self.start_btn.clicked.connect(self._toggle)
        reset_btn.clicked.connect(self._reset)
        controls.addWidget(self.start_btn)
        controls.addWidget(reset_btn)
        v.addLayout(controls)

    def _sync(self):
        self.time_label.setText(self.clock.display)
        self.start_btn.setText("Pause" if self.clock.running else "Start")
        if self.clock.running:
            self.timer.start(1000)
        else:
            self.timer.stop()

    def _set_mode(self, mode):
        self.clock.set_mode(mode)
        self._sync()

    def _toggle(self):
        self.clock.toggle()
        self._sync()

    def _reset(self):
        self.clock.reset()
        self._sync()

    def _tick(self):
        finished = self.clock.tick()
        self._sync()
        if finished:
            QtWidgets.QApplication.beep()


class DashboardTab(QtWidgets.QWidget):
    def __init__(self, on_change):
        super().__init__()
        self.on_change = on_change
        self._build_ui()

    def _build_ui(self):
        v = QtWidgets.QVBoxLayout(self)
        self.clock_label = QtWidgets.QLabel("", self)
        self.next_label = QtWidgets.QLabel("", self)
        self.exam_combo = QtWidgets.QComboBox(self)
        self.exam_combo.currentIndexChanged.connect(self._exam_changed)
        self.countdown_label = QtWidgets.QLabel("", self)
        self.week_label = QtWidgets.QLabel("", self)
        self.habits_label = QtWidgets.QLabel("", self)

        self.day_edit = QtWidgets.QDateEdit(self)
        self.day_edit.setCalendarPopup(True)
        self.day_edit.setDate(QtCore.QDate.currentDate())
        self.day_edit.dateChanged.connect(self.refresh)

        self.day_list = QtWidgets.QListWidget(self)
        self.day_list.itemChanged.connect(self._task_toggled)

        form = QtWidgets.QFormLayout()
        form.addRow("Now", self.clock_label)
        form.addRow("Next task", self.next_label)
        form.addRow("Exam", self.exam_combo)
        form.addRow("Countdown", self.countdown_label)
        form.addRow("This week", self.week_label)
        form.addRow("Habits today", self.habits_label)
        v.addLayout(form)
        v.addWidget(PomodoroWidget(self))
        v.addWidget(self.day_edit)
        v.addWidget(self.day_list)

    def _exam_changed(self, index):
        if index >= 0:
            set_setting("selected_exam", str(index))
            self.refresh()

    def _selected_day(self) -> dt.date:
        q = self.day_edit.date()
        return dt.date(q.year(), q.month(), q.day())

    def refresh(self):
        config, completed_tasks, completed_habits = load_state()
        now = dt.datetime.now()
        schedule = config["schedule"]
        self.clock_label.setText(now.strftime("%A %d/%m %H:%M"))

        nxt = next_task(schedule, now)
        if nxt:
            t = nxt["task"]
            self.next_label.setText(f"{nxt['date']} {t['start']}-{t['end']} · {t['subject']} · {t['task']}")
        else:
            self.next_label.setText("Nothing scheduled in the next 7 days")

        self.exam_combo.blockSignals(True)
        self.exam_combo.clear()
        for exam in config["exams"]:
            self.exam_combo.addItem(exam["name"])
        try:
            selected = int(get_setting("selected_exam", "0") or 0)
        except ValueError:
            selected = 0
        if config["exams"]:
            selected = min(max(0, selected), len(config["exams"]) - 1)
            self.exam_combo.setCurrentIndex(selected)
            days, hours, minutes = exam_countdown(config["exams"][selected], now)
            self.countdown_label.setText(f"{days} d · {hours} h · {minutes} min")
        else:
            self.countdown_label.setText("No exams configured")
        self.exam_combo.blockSignals(False)

        week = current_week_stats(schedule, completed_tasks, now)
        self.week_label.setText(f"{week['completed_hours']}/{week['total_hours']} h ({week['percentage']}%)")
        today = today_habit_completion(config["habits"], completed_habits, now)
        self.habits_label.setText(f"{today['completed']}/{today['total']} ({today['percentage']}%)")

        date_key = format_date_key(self._selected_day())
        self.day_list.blockSignals(True)
        self.day_list.clear()
        for idx, t in enumerate(schedule.get(date_key, [])):
            item = QtWidgets.QListWidgetItem(f"{t['start']}-{t['end']}  {t['subject']} · {t['task']} ({t['hours']}h)")
            item.setFlags(item.flags() | QtCore.Qt.ItemIsUserCheckable)
            done = completed_tasks.get(task_id(date_key, idx), False)
            item.setCheckState(QtCore.Qt.Checked if done else QtCore.Qt.Unchecked)
            item.setData(QtCore.Qt.UserRole, task_id(date_key, idx))
            self.day_list.addItem(item)
        self.day_list.blockSignals(False)

    def _task_toggled(self, item):
        toggle_task(item.data(QtCore.Qt.UserRole))
        QtCore.QTimer.singleShot(0, self.on_change)


class PlannerTab(QtWidgets.QWidget):
    def __init__(self, on_change):
        super().__init__()
        self.on_change = on_change
        self._build_ui()

    def _build_ui(self):
        v = QtWidgets.QVBoxLayout(self)
        self.table = QtWidgets.QTableWidget(self)
        self.table.setColumnCount(7)
        self.table.setHorizontalHeaderLabels(["Date", "#", "Start", "End", "Subject", "Task", "Hours"])
        header = self.table.horizontalHeader()
        header.setStretchLastSection(True)
        header.setSectionResizeMode(QtWidgets.QHeaderView.ResizeToContents)
        self.table.setSelectionBehavior(QtWidgets.QAbstractItemView.SelectRows)
        v.addWidget(self.table)

        hb = QtWidgets.QHBoxLayout()
        add_day_btn = QtWidgets.QPushButton("Add Day", self)
        del_day_btn = QtWidgets.QPushButton("Delete Day", self)
        add_task_btn = QtWidgets.QPushButton("Add Task", self)
        edit_task_btn = QtWidgets.QPushButton("Edit Task", self)
        del_task_btn = QtWidgets.QPushButton("Delete Task", self)
        add_day_btn.clicked.connect(self.add_day)
        del_day_btn.clicked.connect(self.delete_day)
        add_task_btn.clicked.connect(self.add_task)
        edit_task_btn.clicked.connect(self.edit_task)
        del_task_btn.clicked.connect(self.delete_task)
        for b in (add_day_btn, del_day_btn, add_task_btn, edit_task_btn, del_task_btn):
            hb.addWidget(b)
        v.addLayout(hb)

    def refresh(self):
        config, _, _ = load_state()
        rows = [(d, i, t) for d, tasks in config["schedule"].items() for i, t in enumerate(tasks)]
        self.table.setRowCount(len(rows))
        for r, (date_key, idx, t) in enumerate(rows):
            values = [date_key, str(idx), t["start"], t["end"], t["subject"], t["task"], str(t["hours"])]
            for c, val in enumerate(values):
                self.table.setItem(r, c, QtWidgets.QTableWidgetItem(val))

    def _selected(self):
        r = self.table.currentRow()
        if r < 0:
            return None
        return self.table.item(r, 0).text(), int(self.table.item(r, 1).text())

    def add_day(self):
        date_key, ok = QtWidgets.QInputDialog.getText(self, "Add Day", "New date (YYYY-MM-DD):")
        if not ok or not date_key:
            return
        try:
            add_schedule_date(date_key.strip())
        except ValueError as ex:
            QtWidgets.QMessageBox.critical(self, "Add Day", str(ex))
            return
        self.on_change()

    def delete_day(self):
        sel = self._selected()
        if not sel:
            QtWidgets.QMessageBox.information(self, "Delete Day", "Select a task of the day to delete.")
            return
        resp = QtWidgets.QMessageBox.question(self, "Confirm Delete", f"Delete the whole day {sel[0]}?")
        if resp == QtWidgets.QMessageBox.Yes:
            delete_schedule_date(sel[0])
            self.on_change()

    def add_task(self):
        default_day = self._selected()[0] if self._selected() else format_date_key(dt.date.today())
        fields = {}
        for key, label, default in (
            ("date", "Date (YYYY-MM-DD)", default_day),
            ("start", "Start (HH:MM)", ""),
            ("end", "End (HH:MM)", ""),
            ("subject", "Subject / activity", ""),
            ("task", "Description", ""),
        ):
            text, ok = QtWidgets.QInputDialog.getText(self, "Add Task", label, text=default)
            if not ok or not text:
                return
            fields[key] = text
        date_key = fields.pop("date")
        try:
            add_task(date_key, **fields)
        except ValueError as ex:
            QtWidgets.QMessageBox.critical(self, "Validation Error", str(ex))
            return
        self.on_change()

    def edit_task(self):
        sel = self._selected()
        if not sel:
            QtWidgets.QMessageBox.information(self, "Edit Task", "Select a task to edit.")
            return
        r = self.table.currentRow()
        fields = {}
        for key, col, label in (
            ("start", 2, "Start (HH:MM)"),
            ("end", 3, "End (HH:MM)"),
            ("subject", 4, "Subject / activity"),
            ("task", 5, "Description"),
            ("hours", 6, "Hours"),
        ):
            text, ok = QtWidgets.QInputDialog.getText(self, "Edit Task", label, text=self.table.item(r, col).text())
            if not ok:
                return
            fields[key] = text
        try:
            update_task(*sel, **fields)
        except (ValueError, IndexError) as ex:
            QtWidgets.QMessageBox.critical(self, "Validation Error", str(ex))
            return
        self.on_change()

    def delete_task(self):
        sel = self._selected()
        if not sel:
            QtWidgets.QMessageBox.information(self, "Delete Task", "Select a task to delete.")
            return
        resp = QtWidgets.QMessageBox.question(self, "Confirm Delete", f"Delete task {sel[1]} on {sel[0]}?")
        if resp == QtWidgets.QMessageBox.Yes:
            delete_task(*sel)
            self.on_change()


class AnalyticsTab(QtWidgets.QWidget):
    def __init__(self):
        super().__init__()
        self.week_page = 0
        self._build_ui()

    def _build_ui(self):
        v = QtWidgets.QVBoxLayout(self)
        self.chart_combo = QtWidgets.QComboBox(self)
        self.chart_combo.addItem("Weekly progress (hours)", "weekly_progress")
        self.chart_combo.addItem("Completed hours by subject", "completed_hours")
        self.chart_combo.addItem("Total hours by subject", "total_hours")
        self.chart_combo.addItem("Habit performance (this week)", "habit_weekly")
        self.chart_combo.addItem("Productivity heatmap (this week)", "heatmap")
        self.chart_combo.currentIndexChanged.connect(self.refresh)
        v.addWidget(self.chart_combo)

        self.fig = Figure(figsize=(6, 3), tight_layout=True)
        self.canvas = FigureCanvas(self.fig)
        v.addWidget(self.canvas)

        self.weeks_label = QtWidgets.QLabel("", self)
        v.addWidget(QtWidgets.QLabel("Weekly comparison"))
        v.addWidget(self.weeks_label)
        hb = QtWidgets.QHBoxLayout()
        prev_btn = QtWidgets.QPushButton("◀", self)
        next_btn = QtWidgets.QPushButton("▶", self)
        prev_btn.clicked.connect(lambda: self._page(-1))
        next_btn.clicked.connect(lambda: self._page(1))
        hb.addWidget(prev_btn)
        hb.addWidget(next_btn)
        v.addLayout(hb)

        self.subject_table = QtWidgets.QTableWidget(self)
        self.subject_table.setColumnCount(4)
        self.subject_table.setHorizontalHeaderLabels(["Subject", "Completed h", "Total h", "%"])
        self.subject_table.horizontalHeader().setStretchLastSection(True)
        v.addWidget(QtWidgets.QLabel("Stats by subject"))
        v.addWidget(self.subject_table)
        self.consistency_label = QtWidgets.QLabel("", self)
        v.addWidget(self.consistency_label)

    def _page(self, step):
        self.week_page = max(0, self.week_page + step)
        self.refresh()

    def refresh(self):
        config, completed_tasks, completed_habits = load_state()
        schedule = config["schedule"]
        subjects = subjects_from_schedule(schedule)
        total_weeks = schedule_week_count(schedule)
        pages = max(1, -(-total_weeks // WEEKS_PER_PAGE))
        self.week_page = min(self.week_page, pages - 1)

        self.fig.clear()
        ax = self.fig.add_subplot(111)
        kind = self.chart_combo.currentData()
        if kind == "weekly_progress":
            values = weekly_progress_data(schedule, completed_tasks, total_weeks)
            ax.plot([f"S{i + 1}" for i in range(total_weeks)], values, marker="o", color="#54A24B")
            ax.set_ylabel("Hours")
        elif kind == "heatmap":
            week_schedule, week_completed = week_subset(schedule, completed_tasks)
            data = productivity_heatmap(week_schedule, week_completed)
            grid = [[data.get(f"{d}-{h}", 0) for h in range(24)] for d in range(7)]
            ax.imshow(grid, aspect="auto", cmap="Greens")
            ax.set_yticks(range(7))
            ax.set_yticklabels([day_name(d) for d in range(7)])
            ax.set_xlabel("Hour")
        elif kind in ("completed_hours", "total_hours"):
            values = [subject_stats(s, schedule, completed_tasks)[kind] for s in subjects]
            ax.bar(subjects, values, color="#54A24B" if kind == "completed_hours" else "#E45756")
            ax.tick_params(axis="x", rotation=45)
        else:
            stats = weekly_habit_stats(config["habits"], completed_habits)
            ax.bar([h["name"] for h in stats], [h["completed_this_week"] for h in stats], color="#4C78A8")
            ax.set_ylim(0, 7)
            ax.tick_params(axis="x", rotation=45)
        self.canvas.draw()

        lines = []
        first = self.week_page * WEEKS_PER_PAGE
        for week in range(first, min(first + WEEKS_PER_PAGE, total_weeks)):
            s = weekly_stats(week, schedule, completed_tasks)
            lines.append(f"Week {week + 1}: {s['completed_hours']:.1f}/{s['total_hours']:.1f} h ({s['percentage']}%)")
        if schedule:
            start = min(schedule.keys())
            current = compute_week_index(dt.date.today(), parse_date_key(start))
            lines.append(f"Today falls in week {current + 1} of {total_weeks}")
        self.weeks_label.setText("\n".join(lines) or "No schedule yet")

        self.subject_table.setRowCount(len(subjects))
        for r, subject in enumerate(subjects):
            s = subject_stats(subject, schedule, completed_tasks)
            for c, val in enumerate([subject, f"{s['completed_hours']:.1f}", f"{s['total_hours']:.1f}", str(s["percentage"])]):
                self.subject_table.setItem(r, c, QtWidgets.QTableWidgetItem(val))

        cons = weekly_habit_consistency(config["habits"], completed_habits)
        self.consistency_label.setText(f"Habit consistency this week: {cons['completed']}/{cons['total']} ({cons['percentage']}%)")


class HabitsTab(QtWidgets.QWidget):
    def __init__(self, on_change):
        super().__init__()
        self.on_change = on_change
        self._build_ui()

    def _build_ui(self):
        v = QtWidgets.QVBoxLayout(self)
        self.summary_label = QtWidgets.QLabel("", self)
        v.addWidget(self.summary_label)
        self.table = QtWidgets.QTableWidget(self)
        self.table.setColumnCount(5)
        self.table.setHorizontalHeaderLabels(["Today", "Habit", "Current streak", "Best streak", "This week"])
        self.table.horizontalHeader().setStretchLastSection(True)
        self.table.itemChanged.connect(self._toggled)
        v.addWidget(self.table)

    def refresh(self):
        config, _, completed_habits = load_state()
        now = dt.datetime.now()
        today_key = format_date_key(now)
        today = today_habit_completion(config["habits"], completed_habits, now)
        self.summary_label.setText(f"Today: {today['completed']}/{today['total']} ({today['percentage']}%)")
        week_days = days_of_current_week(now)
        self.table.blockSignals(True)
        self.table.setRowCount(len(config["habits"]))
        for r, habit in enumerate(config["habits"]):
            check = QtWidgets.QTableWidgetItem("")
            check.setFlags(QtCore.Qt.ItemIsUserCheckable | QtCore.Qt.ItemIsEnabled)
            check.setCheckState(QtCore.Qt.Checked if is_done(completed_habits, today_key, habit["id"]) else QtCore.Qt.Unchecked)
            check.setData(QtCore.Qt.UserRole, habit["id"])
            self.table.setItem(r, 0, check)
            label = f"{habit['icon']} {habit['name']}" + (" (critical)" if habit["critical"] else "")
            self.table.setItem(r, 1, QtWidgets.QTableWidgetItem(label))
            current, best = habit_streaks(habit["id"], completed_habits, config["schedule"], now.date())
            self.table.setItem(r, 2, QtWidgets.QTableWidgetItem(str(current)))
            self.table.setItem(r, 3, QtWidgets.QTableWidgetItem(str(best)))
            marks = "".join(
                d["day_initial"] if is_done(completed_habits, d["date_key"], habit["id"]) else "·"
                for d in week_days
            )
            self.table.setItem(r, 4, QtWidgets.QTableWidgetItem(marks))
        self.table.blockSignals(False)

    def _toggled(self, item):
        if item.column() != 0:
            return
        toggle_habit(item.data(QtCore.Qt.UserRole), format_date_key(dt.date.today()))
        QtCore.QTimer.singleShot(0, self.on_change)


class ConfigTab(QtWidgets.QWidget):
    def __init__(self, on_change):
        super().__init__()
        self.on_change = on_change
        self._build_ui()

    def _build_ui(self):
        v = QtWidgets.QVBoxLayout(self)
        self.lists_label = QtWidgets.QLabel("", self)
        v.addWidget(self.lists_label)
        for label, handler in (
            ("Export JSON", self.export_json),
            ("Import JSON", self.import_json),
            ("Export calendar (.ics)", self.export_ics),
            ("Export tasks (CSV)", self.export_tasks_csv),
            ("Export tasks (Excel)", self.export_tasks_excel),
            ("Add Habit", self.add_habit),
            ("Delete Habit", self.remove_habit),
            ("Add Exam", self.add_exam),
            ("Edit Exam", self.edit_exam),
            ("Delete Exam", self.remove_exam),
            ("Reset to defaults", self.reset),
            ("Clear progress", self.clear),
        ):
            btn = QtWidgets.QPushButton(label, self)
            btn.clicked.connect(handler)
            v.addWidget(btn)
        v.addStretch(1)

    def refresh(self):
        config, _, _ = load_state()
        habits = ", ".join(h["id"] for h in config["habits"]) or "none"
        exams = "\n".join(f"{i}. {e['name']} ({e['date']}, P{e['priority']})" for i, e in enumerate(config["exams"]))
        first = min(config["schedule"]) if config["schedule"] else None
        start = f"{day_name(js_weekday(parse_date_key(first)))} {first}" if first else "empty"
        self.lists_label.setText(f"Schedule starts: {start}\nHabits: {habits}\nExams:\n{exams or 'none'}")

    def export_json(self):
        try:
            path = export_config_json()
            QtWidgets.QMessageBox.information(self, "Export", f"Configuration exported to {path}.")
        except OSError as ex:
            QtWidgets.QMessageBox.critical(self, "Export Failed", str(ex))

    def import_json(self):
        dlg = QtWidgets.QFileDialog(self)
        dlg.setFileMode(QtWidgets.QFileDialog.ExistingFile)
        dlg.setNameFilter("JSON Files (*.json)")
        if not dlg.exec():
            return
        path = dlg.selectedFiles()[0]
        ok, msgs = import_config_json(path, dry_run=True)
        if not ok:
            QtWidgets.QMessageBox.critical(self, "Import Failed", "\n".join(msgs[:20]))
            return
        if msgs:
            resp = QtWidgets.QMessageBox.question(self, "Import", "Some entries will be skipped:\n" + "\n".join(msgs[:20]) + "\n\nContinue?")
            if resp != QtWidgets.QMessageBox.Yes:
                return
        import_config_json(path)
        self.on_change()
        QtWidgets.QMessageBox.information(self, "Import", "Configuration imported.")

    def export_ics(self):
        try:
            path = export_schedule_ics()
            QtWidgets.QMessageBox.information(self, "Export", f"Calendar exported to {path}.")
        except OSError as ex:
            QtWidgets.QMessageBox.critical(self, "Export Failed", str(ex))

    def _save_tasks(self, title, default_name, name_filter, to_bytes):
        path, _ = QtWidgets.QFileDialog.getSaveFileName(self, title, default_name, name_filter)
        if not path:
            return
        try:
            with open(path, "wb") as f:
                f.write(to_bytes(get_schedule_df()))
            QtWidgets.QMessageBox.information(self, "Export", f"Tasks exported to {path}.")
        except OSError as ex:
            QtWidgets.QMessageBox.critical(self, "Export Failed", str(ex))

    def export_tasks_csv(self):
        self._save_tasks("Export tasks (CSV)", "study-tasks.csv", "CSV Files (*.csv)", export_csv_bytes)

    def export_tasks_excel(self):
        self._save_tasks("Export tasks (Excel)", "study-tasks.xlsx", "Excel Files (*.xlsx)", export_excel_bytes)

    def add_habit(self):
        habit_id, ok = QtWidgets.QInputDialog.getText(self, "Add Habit", "Unique id (e.g. gym):", text=f"habit{int(dt.datetime.now().timestamp())}")
        if not ok or not habit_id:
            return
        name, ok = QtWidgets.QInputDialog.getText(self, "Add Habit", "Name:")
        if not ok or not name:
            return
        icon, _ = QtWidgets.QInputDialog.getText(self, "Add Habit", "Emoji:", text="✅")
        critical = QtWidgets.QMessageBox.question(self, "Add Habit", "Is this a CRITICAL habit?") == QtWidgets.QMessageBox.Yes
        try:
            upsert_habit(habit_id=habit_id, name=name, icon=icon, critical=critical)
        except ValueError as ex:
            QtWidgets.QMessageBox.critical(self, "Validation Error", str(ex))
            return
        self.on_change()

    def remove_habit(self):
        habit_id, ok = QtWidgets.QInputDialog.getText(self, "Delete Habit", "Habit id:")
        if ok and habit_id:
            delete_habit(habit_id.strip())
            self.on_change()

    def add_exam(self):
        fields = {}
        for key, label in (("name", "Exam name"), ("subject", "Subject"), ("date", "Date and time (YYYY-MM-DDTHH:MM:SS)")):
            text, ok = QtWidgets.QInputDialog.getText(self, "Add Exam", label)
            if not ok or not text:
                return
            fields[key] = text
        priority, ok = QtWidgets.QInputDialog.getInt(self, "Add Exam", "Priority (1-3)", 1, 1, 3)
        if not ok:
            return
        try:
            add_exam(priority=priority, **fields)
        except ValueError as ex:
            QtWidgets.QMessageBox.critical(self, "Validation Error", str(ex))
            return
        self.on_change()

    def edit_exam(self):
        exams = load_state()[0]["exams"]
        if not exams:
            QtWidgets.QMessageBox.information(self, "Edit Exam", "No exams configured.")
            return
        index, ok = QtWidgets.QInputDialog.getInt(self, "Edit Exam", "Exam number:", 0, 0, len(exams) - 1)
        if not ok:
            return
        exam = exams[index]
        fields = {}
        for key, label in (("name", "Exam name"), ("subject", "Subject"), ("date", "Date and time (YYYY-MM-DDTHH:MM:SS)")):
            text, ok = QtWidgets.QInputDialog.getText(self, "Edit Exam", label, text=exam[key])
            if not ok:
                return
            fields[key] = text
        priority, ok = QtWidgets.QInputDialog.getInt(self, "Edit Exam", "Priority (1-3)", exam["priority"], 1, 3)
        if not ok:
            return
        try:
            update_exam(index, priority=priority, **fields)
        except (ValueError, IndexError) as ex:
            QtWidgets.QMessageBox.critical(self, "Validation Error", str(ex))
            return
        self.on_change()

    def remove_exam(self):
        index, ok = QtWidgets.QInputDialog.getInt(self, "Delete Exam", "Exam number:", 0, 0)
        if not ok:
            return
        try:
            delete_exam(index)
        except IndexError as ex:
            QtWidgets.QMessageBox.warning(self, "Delete Exam", str(ex))
            return
        self.on_change()

    def reset(self):
        resp = QtWidgets.QMessageBox.question(self, "Reset", "Reset the configuration to defaults? Progress is kept.")
        if resp == QtWidgets.QMessageBox.Yes:
            reset_config()
            self.on_change()

    def clear(self):
        resp = QtWidgets.QMessageBox.question(self, "Clear", "Delete all task and habit check-offs?")
        if resp == QtWidgets.QMessageBox.Yes:
            clear_progress()
            self.on_change()


class MainWindow(QtWidgets.QMainWindow):
    def __init__(self):
        super().__init__()
        self.setWindowTitle("Study Planner Coach")
        tabs = QtWidgets.QTabWidget(self)
        self.setCentralWidget(tabs)
        self.dashboard_tab = DashboardTab(self.refresh_all)
        self.planner_tab = PlannerTab(self.refresh_all)
        self.analytics_tab = AnalyticsTab()
        self.habits_tab = HabitsTab(self.refresh_all)
        self.config_tab = ConfigTab(self.refresh_all)
        tabs.addTab(self.dashboard_tab, "Dashboard")
        tabs.addTab(self.planner_tab, "Planner")
        tabs.addTab(self.analytics_tab, "Analytics")
        tabs.addTab(self.habits_tab, "Habits")
        tabs.addTab(self.config_tab, "Config")
        self.refresh_all()
        # Keep clock, next task and countdown current
        self.timer = QtCore.QTimer(self)
        self.timer.timeout.connect(self.dashboard_tab.refresh)
        self.timer.start(60_000)

    def refresh_all(self):
        for tab in (self.dashboard_tab, self.planner_tab, self.analytics_tab, self.habits_tab, self.config_tab):
            tab.refresh()


def apply_theme(app: QtWidgets.QApplication):
    app.setStyle("Fusion")
    dark = QtGui.QPalette()
    dark.setColor(QtGui.QPalette.Window, QtGui.QColor(40, 38, 36))
    dark.setColor(QtGui.QPalette.WindowText, QtCore.Qt.white)
    dark.setColor(QtGui.QPalette.Base, QtGui.QColor(28, 27, 26))
    dark.setColor(QtGui.QPalette.AlternateBase, QtGui.QColor(40, 38, 36))
    dark.setColor(QtGui.QPalette.Text, QtCore.Qt.white)
    dark.setColor(QtGui.QPalette.Button, QtGui.QColor(40, 38, 36))
    dark.setColor(QtGui.QPalette.ButtonText, QtCore.Qt.white)
    dark.setColor(QtGui.QPalette.Highlight, QtGui.QColor(196, 104, 74))
    dark.setColor(QtGui.QPalette.HighlightedText, QtCore.Qt.black)
    app.setPalette(dark)


def main():
    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(name)s: %(message)s")
    init_db()
    _, msgs = create_or_sync_on_launch()
    for m in msgs:
        logging.getLogger(__name__).warning("Config sync: %s", m)
    register_atexit_export()
    app = QtWidgets.QApplication(sys.argv)
    apply_theme(app)
    win = MainWindow()
    win.resize(1100, 750)
    win.show()
    sys.exit(app.exec())


if __name__ == "__main__":
    main()
