"""
Reminder Store
==============

Durable, ordered, deduplicated collection of :class:`PlantRecord`.

Layout on disk is a single JSON document keyed by the store name::

    {"@plantmanager:plants": [{"id": "p2", ...}, {"id": "p1", ...}]}

The list is kept ascending by ``next_watering_at``; equal instants keep
insertion order, so a stable sort over the persisted sequence reproduces the
same order on every load. A re-saved record counts as a fresh insertion.

Every mutation is a locked read-modify-write followed by one atomic file
swap. Reads take no lock: the swap guarantees they observe either the old or
the new document.
"""

from __future__ import annotations

import asyncio
import contextlib
import logging
import os
import threading
from typing import Iterator, Sequence

from plantmanager.domain.exceptions import CorruptStoreError, PersistenceError
from plantmanager.domain.plant_record import PlantRecord
from plantmanager.utils.concurrency import run_serialized, synchronized
from plantmanager.utils.persistent_store import FileLock, atomic_write_json, read_json

logger = logging.getLogger(__name__)

DEFAULT_STORE_KEY = "@plantmanager:plants"

_ABSENT = object()


def sort_records(records: Sequence[PlantRecord]) -> list[PlantRecord]:
    """Ascending by next watering time; ties keep their current relative order."""
    return sorted(records, key=lambda record: record.next_watering_at)


def next_due(records: Sequence[PlantRecord]) -> PlantRecord | None:
    """Return the plant to water next from an already-ordered sequence."""
    return records[0] if records else None


class ReminderStore:
    """JSON-file backed implementation of ``ReminderRepository``."""

    def __init__(
        self,
        path: str,
        *,
        store_key: str = DEFAULT_STORE_KEY,
        lock_timeout: float = 5.0,
        lock_stale_after: float | None = 30.0,
    ) -> None:
        self.path = os.fspath(path)
        self.store_key = store_key
        self.lock_timeout = lock_timeout
        self.lock_stale_after = lock_stale_after
        self._lock = threading.RLock()

    @classmethod
    def from_config(cls, config) -> "ReminderStore":
        return cls(
            config.store_path,
            store_key=config.store_key,
            lock_timeout=config.lock_timeout_seconds,
            lock_stale_after=config.lock_stale_seconds,
        )

    # ------------------------------------------------------------------ reads

    def load_all(self) -> list[PlantRecord]:
        """Return every stored record in watering order (``[]`` before the first save)."""
        return sort_records(self._read())

    def get(self, plant_id: str) -> PlantRecord | None:
        for record in self._read():
            if record.id == plant_id:
                return record
        return None

    # ----------------------------------------------------------------- writes

    @synchronized
    def save(self, record: PlantRecord) -> None:
        """Insert ``record`` or replace the one sharing its id."""
        record.validate()
        with self._exclusive():
            stored = self._read()
            records = [existing for existing in stored if existing.id != record.id]
            replaced = len(records) < len(stored)
            records.append(record)
            self._write(sort_records(records))
        logger.debug("%s plant %s due %s", "Replaced" if replaced else "Added", record.id, record.next_watering_at)

    @synchronized
    def remove(self, plant_id: str) -> None:
        """Delete ``plant_id``. Removing an unknown id is a no-op."""
        if all(record.id != plant_id for record in self._read()):
            logger.debug("Plant %s not stored; nothing to remove", plant_id)
            return
        with self._exclusive():
            records = self._read()
            remaining = [record for record in records if record.id != plant_id]
            if len(remaining) == len(records):
                logger.debug("Plant %s not stored; nothing to remove", plant_id)
                return
            self._write(remaining)
        logger.debug("Removed plant %s", plant_id)

    @synchronized
    def reset(self) -> None:
        """Replace whatever is on disk, readable or not, with an empty collection."""
        with self._exclusive():
            self._write([])
        logger.debug("Reset reminder store %s", self.path)

    # --------------------------------------------------------------- internals

    @contextlib.contextmanager
    def _exclusive(self) -> Iterator[None]:
        lock = FileLock(self.path + ".lock", timeout=self.lock_timeout, stale_after=self.lock_stale_after)
        try:
            os.makedirs(os.path.dirname(os.path.abspath(self.path)), exist_ok=True)
            acquired = lock.acquire()
        except OSError as exc:
            raise PersistenceError(f"Reminder store lock unavailable: {exc}", detail={"path": self.path}) from exc
        if not acquired:
            raise PersistenceError(
                "Reminder store is locked by another writer",
                detail={"path": self.path, "timeout": self.lock_timeout},
            )
        try:
            yield
        finally:
            lock.release()

    def _read(self) -> list[PlantRecord]:
        try:
            document = read_json(self.path, default=_ABSENT)
        except (ValueError, UnicodeDecodeError) as exc:
            raise CorruptStoreError(f"Reminder store is not valid JSON: {exc}", detail={"path": self.path}) from exc
        except OSError as exc:
            raise PersistenceError(f"Reminder store could not be read: {exc}", detail={"path": self.path}) from exc

        if document is _ABSENT:
            return []
        if not isinstance(document, dict):
            raise CorruptStoreError("Reminder store root must be an object", detail={"path": self.path})

        if self.store_key not in document:
            return []
        raw = document[self.store_key]
        if not isinstance(raw, list):
            raise CorruptStoreError(
                f"Reminder collection {self.store_key!r} must be a list",
                detail={"path": self.path},
            )

        records: list[PlantRecord] = []
        seen: set[str] = set()
        for index, item in enumerate(raw):
            try:
                record = PlantRecord.from_dict(item)
            except ValueError as exc:
                raise CorruptStoreError(
                    f"Reminder #{index} cannot be decoded: {exc}",
                    detail={"path": self.path, "index": index},
                ) from exc
            if record.id in seen:
                raise CorruptStoreError(
                    f"Reminder store holds plant {record.id!r} twice",
                    detail={"path": self.path, "index": index},
                )
            seen.add(record.id)
            records.append(record)
        return records

    def _write(self, records: Sequence[PlantRecord]) -> None:
        try:
            document = {self.store_key: [record.to_dict() for record in records]}
            atomic_write_json(self.path, document)
        except (OSError, TypeError, ValueError) as exc:
            raise PersistenceError(f"Reminder store could not be written: {exc}", detail={"path": self.path}) from exc


class AsyncReminderStore:
    """Awaitable facade over :class:`ReminderStore`.

    Each call runs to completion in a worker thread so the event loop is never
    blocked on disk I/O. Writes are queued in arrival order; reads run
    concurrently with each other.
    """

    def __init__(self, store: ReminderStore) -> None:
        self.store = store
        self._write_lock = asyncio.Lock()

    async def save(self, record: PlantRecord) -> None:
        await run_serialized(self._write_lock, self.store.save, record)

    async def remove(self, plant_id: str) -> None:
        await run_serialized(self._write_lock, self.store.remove, plant_id)

    async def load_all(self) -> list[PlantRecord]:
        return await run_serialized(None, self.store.load_all)

    async def get(self, plant_id: str) -> PlantRecord | None:
        return await run_serialized(None, self.store.get, plant_id)
