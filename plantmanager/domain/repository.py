"""
Reminder Repository Protocol
============================

Defines the interface the reminder screens depend on. The JSON file store in
``plantmanager.services.reminder_store`` is the production implementation;
tests may substitute an in-memory one.
"""

from __future__ import annotations

from abc import abstractmethod
from typing import Protocol

from plantmanager.domain.plant_record import PlantRecord


class ReminderRepository(Protocol):
    """Protocol for plant reminder persistence."""

    @abstractmethod
    def save(self, record: PlantRecord) -> None:
        """
        Insert or replace the record with ``record.id``.

        Raises:
            InvalidRecordError: record is malformed (nothing is written)
            PersistenceError: durable write failed (previous state kept)
        """
        ...

    @abstractmethod
    def load_all(self) -> list[PlantRecord]:
        """
        Return every record, ascending by next watering time.

        Raises:
            CorruptStoreError: persisted content cannot be parsed
        """
        ...

    @abstractmethod
    def remove(self, plant_id: str) -> None:
        """Delete the record for ``plant_id``; unknown ids are ignored."""
        ...
