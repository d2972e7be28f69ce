"""
Shared test fixtures for the PlantManager reminders test suite.

Provides:
- A reminder store rooted in a per-test temporary directory
- A record factory with deterministic watering times
- A recording notification scheduler
- The Flask app and test client wired to the temporary store

Usage:
    def test_example(store, make_record):
        store.save(make_record("p1", "Fern", hours=2))
        assert [r.id for r in store.load_all()] == ["p1"]
"""

from __future__ import annotations

import logging
import subprocess
import sys
from datetime import datetime, timedelta, timezone

import pytest

from plantmanager.domain.plant_record import PlantRecord
from plantmanager.services.application.reminder_service import ReminderService
from plantmanager.services.reminder_store import ReminderStore

# ---------------------------------------------------------------------------
# Logging: keep test output clean
# ---------------------------------------------------------------------------
logging.getLogger("plantmanager").setLevel(logging.WARNING)

BASE_TIME = datetime(2026, 10, 19, 12, 0, tzinfo=timezone.utc)


# ========================== Store Fixtures =================================


@pytest.fixture()
def base_time():
    """Fixed "now" for tests that compute due times."""
    return BASE_TIME


@pytest.fixture()
def store_path(tmp_path):
    return str(tmp_path / "plants.json")


@pytest.fixture()
def store(store_path):
    """ReminderStore backed by a fresh temporary file."""
    return ReminderStore(store_path, lock_timeout=0.5)


@pytest.fixture(scope="session")
def dead_pid():
    """PID of a process that has already exited."""
    finished = subprocess.run(
        [sys.executable, "-c", "import os; print(os.getpid())"],
        capture_output=True,
        text=True,
        check=True,
    )
    return int(finished.stdout.strip())


@pytest.fixture()
def make_record():
    """Factory for PlantRecord due ``hours`` after BASE_TIME."""

    def _make(plant_id: str, name: str = "Plant", hours: float = 1, **fields) -> PlantRecord:
        return PlantRecord(
            id=plant_id,
            name=name,
            next_watering_at=BASE_TIME + timedelta(hours=hours),
            **fields,
        )

    return _make


# ========================== Service Fixtures ===============================


class RecordingNotifier:
    """Notification scheduler double that remembers every call."""

    def __init__(self) -> None:
        self.scheduled: list[PlantRecord] = []
        self.cancelled: list[str] = []
        self.fail = False

    def schedule(self, record: PlantRecord) -> None:
        if self.fail:
            raise RuntimeError("notification service offline")
        self.scheduled.append(record)

    def cancel(self, plant_id: str) -> None:
        if self.fail:
            raise RuntimeError("notification service offline")
        self.cancelled.append(plant_id)


@pytest.fixture()
def notifier():
    return RecordingNotifier()


@pytest.fixture()
def service(store, notifier):
    """ReminderService over the temporary store."""
    return ReminderService(store, notifier)


# ========================== Flask Fixtures =================================


@pytest.fixture()
def app(tmp_path, notifier):
    from plantmanager import create_app

    flask_app = create_app({"store_dir": str(tmp_path), "log_file": ""}, notifier=notifier)
    flask_app.config["TESTING"] = True
    return flask_app


@pytest.fixture()
def client(app):
    return app.test_client()
