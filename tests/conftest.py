import os
import shutil
import tempfile
import importlib
import pytest
import sys


@pytest.fixture(autouse=True)
def temp_db(monkeypatch):
    # Ensure project root is importable
    root = os.path.dirname(os.path.abspath(__file__))
    root = os.path.dirname(root)
    if root not in sys.path:
        sys.path.insert(0, root)

    tmpdir = tempfile.mkdtemp()
    data_dir = os.path.join(tmpdir, "data")
    os.makedirs(data_dir, exist_ok=True)

    # Point storage at a throwaway database
    storage = importlib.import_module("services.storage")
    monkeypatch.setattr(storage, "DB_PATH", os.path.join(data_dir, "planner.db"), raising=False)
    monkeypatch.setenv("SPC_JSON_PATH", os.path.join(tmpdir, "coach-config.json"))
    monkeypatch.setenv("SPC_ICS_PATH", os.path.join(tmpdir, "study-schedule.ics"))

    yield tmpdir
    shutil.rmtree(tmpdir, ignore_errors=True)
