"""Small persistent JSON file helpers.

`read_json` / `atomic_write_json` back the reminder store. Writes go to a
temporary sibling file that is fsynced and then swapped into place with
``os.replace``, so readers only ever see the old or the new document.
Unlike a cache, failures are raised to the caller instead of being ignored.
"""
from __future__ import annotations

import json
import logging
import os
import time
from typing import Any

logger = logging.getLogger(__name__)

_MISSING = object()


def _process_alive(pid: int) -> bool:
    try:
        os.kill(pid, 0)
    except ProcessLookupError:
        return False
    except OSError:
        # EPERM: the process exists but belongs to someone else
        return True
    return True


class FileLock:
    """Advisory lock using an exclusively-created ``.lock`` file.

    Suitable for the single-writer case: it serialises writers from several
    processes sharing the same store directory. Retries until ``timeout``.

    The lock file holds the owner's PID. A lock left behind by a process that
    no longer exists, or one older than ``stale_after`` seconds, is broken so
    a writer killed mid-save cannot wedge the store.
    """

    def __init__(
        self,
        lock_path: str,
        timeout: float = 5.0,
        retry: float = 0.05,
        stale_after: float | None = 30.0,
    ) -> None:
        self.lock_path = lock_path
        self.timeout = float(timeout)
        self.retry = float(retry)
        self.stale_after = stale_after
        self._acquired = False

    def acquire(self) -> bool:
        start = time.monotonic()
        while True:
            try:
                fd = os.open(self.lock_path, os.O_CREAT | os.O_EXCL | os.O_WRONLY)
                os.write(fd, str(os.getpid()).encode("ascii"))
                os.close(fd)
                self._acquired = True
                return True
            except FileExistsError:
                if self._break_if_stale():
                    continue
                if (time.monotonic() - start) >= self.timeout:
                    return False
                time.sleep(self.retry)

    def _owner_pid(self) -> int | None:
        try:
            with open(self.lock_path, "r", encoding="ascii", errors="replace") as fh:
                raw = fh.read().strip()
        except FileNotFoundError:
            return None
        return int(raw) if raw.isdigit() else None

    def _is_stale(self) -> bool:
        try:
            age = time.time() - os.stat(self.lock_path).st_mtime
        except FileNotFoundError:
            return False
        if self.stale_after is not None and age >= self.stale_after:
            return True
        pid = self._owner_pid()
        # An empty file may be a lock whose owner is still writing its PID.
        return pid is not None and not _process_alive(pid)

    def _break_if_stale(self) -> bool:
        """Remove an abandoned lock file. Returns True when one was removed."""
        if not self._is_stale():
            return False
        owner = self._owner_pid()
        try:
            os.unlink(self.lock_path)
        except FileNotFoundError:
            pass
        logger.warning("Broke stale lock %s (owner pid %s)", self.lock_path, owner)
        return True

    def release(self) -> None:
        try:
            if self._acquired:
                os.unlink(self.lock_path)
        except FileNotFoundError:
            pass
        finally:
            self._acquired = False

    @property
    def acquired(self) -> bool:
        return self._acquired

    def __enter__(self):
        if not self.acquire():
            raise TimeoutError(f"Failed to acquire file lock: {self.lock_path}")
        return self

    def __exit__(self, exc_type, exc, tb):
        self.release()


def read_json(path: str, default: Any = _MISSING) -> Any:
    """Load the JSON document at ``path``.

    Returns ``default`` when the file does not exist (raises
    ``FileNotFoundError`` if no default is given). Decoding problems propagate
    as ``ValueError`` so callers can tell "absent" from "unreadable".
    """
    try:
        with open(path, "r", encoding="utf-8") as fh:
            raw = fh.read()
    except FileNotFoundError:
        if default is _MISSING:
            raise
        return default
    return json.loads(raw)


def atomic_write_json(path: str, data: Any, *, indent: int | None = None) -> None:
    """Replace ``path`` with ``data`` serialised as JSON, all or nothing."""
    directory = os.path.dirname(os.path.abspath(path))
    os.makedirs(directory, exist_ok=True)
    tmp = f"{path}.{os.getpid()}.tmp"
    try:
        payload = json.dumps(data, indent=indent, ensure_ascii=False, allow_nan=False)
        with open(tmp, "w", encoding="utf-8") as fh:
            fh.write(payload)
            fh.flush()
            os.fsync(fh.fileno())
        os.replace(tmp, path)
    except BaseException:
        try:
            os.unlink(tmp)
        except FileNotFoundError:
            pass
        raise
    logger.debug("Wrote JSON store %s (%d bytes)", path, len(payload))
