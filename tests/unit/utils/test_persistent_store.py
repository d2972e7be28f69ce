import asyncio
import json
import os
import threading
import time

import pytest

from plantmanager.utils import persistent_store as ps
from plantmanager.utils.concurrency import run_serialized, synchronized


def test_atomic_write_then_read(tmp_path):
    path = str(tmp_path / "nested" / "doc.json")
    ps.atomic_write_json(path, {"plants": [1, 2]})
    assert ps.read_json(path) == {"plants": [1, 2]}
    assert os.listdir(tmp_path / "nested") == ["doc.json"]


def test_read_json_missing_file(tmp_path):
    path = str(tmp_path / "absent.json")
    assert ps.read_json(path, default=None) is None
    with pytest.raises(FileNotFoundError):
        ps.read_json(path)


def test_read_json_raises_on_garbage(tmp_path):
    path = tmp_path / "doc.json"
    path.write_text("{not json", encoding="utf-8")
    with pytest.raises(ValueError):
        ps.read_json(str(path), default=None)


def test_failed_replace_keeps_previous_file(tmp_path, monkeypatch):
    path = str(tmp_path / "doc.json")
    ps.atomic_write_json(path, {"version": 1})

    def boom(src, dst):
        raise OSError("disk full")

    monkeypatch.setattr(ps.os, "replace", boom)
    with pytest.raises(OSError, match="disk full"):
        ps.atomic_write_json(path, {"version": 2})

    assert ps.read_json(path) == {"version": 1}
    assert sorted(os.listdir(tmp_path)) == ["doc.json"]


def test_unserialisable_payload_leaves_no_trace(tmp_path):
    path = str(tmp_path / "doc.json")
    with pytest.raises(ValueError):
        ps.atomic_write_json(path, {"value": float("nan")})
    assert os.listdir(tmp_path) == []


class TestFileLock:
    def test_lock_is_exclusive(self, tmp_path):
        lock_path = str(tmp_path / "store.lock")
        first = ps.FileLock(lock_path, timeout=0.1)
        second = ps.FileLock(lock_path, timeout=0.1, retry=0.01)

        assert first.acquire()
        assert not second.acquire()
        first.release()
        assert second.acquire()
        second.release()
        assert not os.path.exists(lock_path)

    def test_context_manager_times_out(self, tmp_path):
        lock_path = str(tmp_path / "store.lock")
        with ps.FileLock(lock_path):
            with pytest.raises(TimeoutError):
                with ps.FileLock(lock_path, timeout=0.05, retry=0.01):
                    pass
        assert not os.path.exists(lock_path)

    def test_lock_of_dead_process_is_broken(self, tmp_path, dead_pid):
        lock_path = tmp_path / "store.lock"
        lock_path.write_text(str(dead_pid), encoding="ascii")

        lock = ps.FileLock(str(lock_path), timeout=0.1, retry=0.01)
        assert lock.acquire()
        assert lock_path.read_text(encoding="ascii") == str(os.getpid())
        lock.release()

    def test_old_lock_is_broken_even_if_owner_alive(self, tmp_path):
        lock_path = tmp_path / "store.lock"
        lock_path.write_text(str(os.getpid()), encoding="ascii")
        an_hour_ago = time.time() - 3600
        os.utime(lock_path, (an_hour_ago, an_hour_ago))

        with ps.FileLock(str(lock_path), timeout=0.1, retry=0.01, stale_after=60):
            assert lock_path.read_text(encoding="ascii") == str(os.getpid())

    def test_fresh_lock_without_pid_is_respected(self, tmp_path):
        lock_path = tmp_path / "store.lock"
        lock_path.write_text("", encoding="ascii")
        assert not ps.FileLock(str(lock_path), timeout=0.05, retry=0.01).acquire()
        assert lock_path.exists()

    def test_lock_of_live_process_is_respected(self, tmp_path):
        lock_path = str(tmp_path / "store.lock")
        with ps.FileLock(lock_path):
            assert not ps.FileLock(lock_path, timeout=0.05, retry=0.01, stale_after=None).acquire()

    def test_lock_file_records_owner_pid(self, tmp_path):
        lock_path = str(tmp_path / "store.lock")
        with ps.FileLock(lock_path) as lock:
            assert lock.acquired
            with open(lock_path, encoding="ascii") as fh:
                assert fh.read() == str(os.getpid())


class _Counter:
    def __init__(self):
        self._lock = threading.RLock()
        self.value = 0

    @synchronized
    def bump(self):
        current = self.value
        self.value = current + 1


def test_synchronized_serialises_threads():
    counter = _Counter()
    threads = [threading.Thread(target=lambda: [counter.bump() for _ in range(200)]) for _ in range(8)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()
    assert counter.value == 1600


def test_run_serialized_runs_in_order():
    calls = []

    async def scenario():
        lock = asyncio.Lock()
        await asyncio.gather(*(run_serialized(lock, calls.append, n) for n in range(5)))

    asyncio.run(scenario())
    assert calls == [0, 1, 2, 3, 4]


def test_run_serialized_returns_result_without_lock():
    assert asyncio.run(run_serialized(None, json.dumps, {"a": 1})) == '{"a": 1}'
