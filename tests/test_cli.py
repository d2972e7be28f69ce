"""Tests for the plantmanager-reminders command line tool."""

from __future__ import annotations

import json
from datetime import timedelta

import pytest

from plantmanager.cli import main
from plantmanager.domain.plant_record import PlantRecord
from plantmanager.services.reminder_store import ReminderStore
from plantmanager.utils.time import utc_now


@pytest.fixture()
def run(tmp_path, capsys):
    """Invoke the CLI against a temporary store and return (exit code, stdout)."""

    def _run(*argv):
        code = main(["--store-dir", str(tmp_path), *argv])
        return code, capsys.readouterr().out

    return _run


def _future(hours: float) -> str:
    return (utc_now() + timedelta(hours=hours)).isoformat()


def test_empty_store(run):
    assert run("next") == (0, "No reminders added yet.\n")
    code, out = run("list")
    assert code == 0
    assert json.loads(out) == []


def test_save_list_and_remove(run):
    code, out = run("save", "--id", "p1", "--name", "Fern", "--at", _future(2))
    assert code == 0
    assert out.startswith("Saved p1")

    run("save", "--id", "p2", "--name", "Cactus", "--at", _future(1), "--times", "2", "--every", "week")
    code, out = run("list")
    plants = json.loads(out)
    assert [p["id"] for p in plants] == ["p2", "p1"]
    assert plants[0]["frequency"] == {"times": 2, "repeat_every": "week"}

    code, out = run("next")
    assert json.loads(out)[0]["id"] == "p2"

    assert run("remove", "p2")[0] == 0
    assert run("remove", "p2")[0] == 0
    code, out = run("list")
    assert [p["id"] for p in json.loads(out)] == ["p1"]


def test_past_time_is_user_error(run):
    code, out = run("save", "--id", "p1", "--name", "Fern", "--at", _future(-1))
    assert code == 2
    assert "future" in out


def test_watered(run):
    run("save", "--id", "p1", "--name", "Fern", "--at", _future(1))
    code, out = run("watered", "p1")
    assert code == 0
    assert out.startswith("Watered p1")

    code, out = run("watered", "ghost")
    assert code == 2
    assert "ghost" in out


def test_corrupt_store_and_reset(run, tmp_path):
    (tmp_path / "plants.json").write_text("{not json", encoding="utf-8")
    code, out = run("list")
    assert code == 1
    assert "reset" in out

    assert run("reset") == (0, "Reminder store reset\n")
    assert json.loads(run("list")[1]) == []


def test_times_must_be_positive(run):
    with pytest.raises(SystemExit) as excinfo:
        run("save", "--id", "p1", "--name", "Fern", "--at", _future(1), "--times", "0")
    assert excinfo.value.code == 2


def test_bad_environment_config(run, monkeypatch):
    monkeypatch.setenv("PLANTMANAGER_LOCK_TIMEOUT", "soon")
    code, out = run("list")
    assert code == 2
    assert "PLANTMANAGER_LOCK_TIMEOUT" in out


def test_next_flags_overdue_plant(run, tmp_path, base_time):
    store = ReminderStore(str(tmp_path / "plants.json"))
    store.save(PlantRecord(id="p1", name="Fern", next_watering_at=base_time - timedelta(days=400)))

    code, out = run("next")
    assert code == 0
    assert "Fern is overdue for watering" in out
