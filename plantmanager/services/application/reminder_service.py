"""
Reminder Service
================

The "save plant" and "my plants" flows on top of the reminder store.

The store owns ordering and uniqueness; this service adds the rules of the
screens around it:
- a reminder must be set for a time in the future
- the notification collaborator is armed right after a successful save and
  cancelled right after a removal (the store itself never calls it)
- marking a plant as watered moves its reminder to the next slot on its cadence
"""
from __future__ import annotations

import dataclasses
import logging
from dataclasses import dataclass
from datetime import datetime, timedelta, tzinfo
from typing import Any, Protocol

from plantmanager.domain.exceptions import NotFoundError, NotificationError, ValidationError
from plantmanager.domain.plant_record import PlantRecord, RepeatEvery, WateringFrequency
from plantmanager.domain.repository import ReminderRepository
from plantmanager.services.reminder_store import next_due
from plantmanager.utils.time import coerce_datetime, ensure_utc, format_hour, to_epoch_ms, utc_now
from plantmanager.utils.watering import next_watering_time

logger = logging.getLogger(__name__)


class NotificationScheduler(Protocol):
    """Arms and cancels the device notification for a plant."""

    def schedule(self, record: PlantRecord) -> None: ...

    def cancel(self, plant_id: str) -> None: ...


class LoggingNotificationScheduler:
    """Stand-in scheduler for hosts without a notification service."""

    def schedule(self, record: PlantRecord) -> None:
        logger.info("Watering reminder for %s (%s) set for %s", record.name, record.id, record.next_watering_at)

    def cancel(self, plant_id: str) -> None:
        logger.info("Watering reminder for %s cancelled", plant_id)


@dataclass
class Spotlight:
    """What the "my plants" screen shows: the next plant up and the full list."""

    next_plant: PlantRecord | None
    due_in: timedelta | None
    plants: list[PlantRecord]
    overdue: bool = False

    @property
    def is_empty(self) -> bool:
        return self.next_plant is None

    def to_dict(self) -> dict[str, Any]:
        return {
            "next_plant": self.next_plant.to_dict() if self.next_plant else None,
            "due_in_seconds": int(self.due_in.total_seconds()) if self.due_in is not None else None,
            "overdue": self.overdue,
            "plants": [plant.to_dict() for plant in self.plants],
            "count": len(self.plants),
        }


class ReminderService:
    """Application service behind the plant reminder screens."""

    def __init__(
        self,
        store: ReminderRepository,
        notifier: NotificationScheduler | None = None,
        *,
        default_frequency: WateringFrequency | None = None,
        display_tz: tzinfo | None = None,
    ) -> None:
        """
        Args:
            store: Reminder persistence (normally a ``ReminderStore``).
            notifier: Notification collaborator; logs only when omitted.
            default_frequency: Cadence for plants saved without one.
            display_tz: Zone used for the ``HH:MM`` watering window label.
        """
        self._store = store
        self._notifier = notifier or LoggingNotificationScheduler()
        self._default_frequency = default_frequency or WateringFrequency(1, RepeatEvery.DAY)
        self._display_tz = display_tz

    # ------------------------------------------------------------------ queries

    def list_plants(self) -> list[PlantRecord]:
        return self._store.load_all()

    def get_plant(self, plant_id: str) -> PlantRecord:
        for record in self._store.load_all():
            if record.id == plant_id:
                return record
        raise NotFoundError(f"Plant {plant_id} has no reminder", detail={"plant_id": plant_id})

    def next_plant(self) -> PlantRecord | None:
        return next_due(self._store.load_all())

    def spotlight(self, now: datetime | None = None) -> Spotlight:
        now = ensure_utc(now) if now else utc_now()
        plants = self._store.load_all()
        first = next_due(plants)
        if first is None:
            return Spotlight(next_plant=None, due_in=None, plants=plants)
        return Spotlight(
            next_plant=first,
            due_in=first.next_watering_at - now,
            plants=plants,
            overdue=first.is_due(now),
        )

    # ------------------------------------------------------------------ commands

    def schedule_plant(self, plant: PlantRecord, when: Any, *, now: datetime | None = None) -> PlantRecord:
        """Save ``plant`` with a reminder at ``when`` and arm its notification.

        Raises:
            ValidationError: ``when`` is unparseable or not in the future
            InvalidRecordError / PersistenceError: from the store
            NotificationError: the reminder was saved but the alarm was not armed
        """
        now = ensure_utc(now) if now else utc_now()
        due = coerce_datetime(when)
        if due is None:
            raise ValidationError(f"Invalid watering time: {when!r}", detail={"plant_id": plant.id})
        if due <= now:
            raise ValidationError(
                "Choose a watering time in the future",
                detail={"plant_id": plant.id, "requested": to_epoch_ms(due)},
            )

        record = dataclasses.replace(
            plant,
            next_watering_at=due,
            watering_window=format_hour(due, self._display_tz),
        )
        self._store.save(record)
        logger.info("Saved reminder for plant %s at %s", record.id, record.watering_window)
        self._notify_scheduled(record)
        return record

    def complete_watering(self, plant_id: str, *, now: datetime | None = None) -> PlantRecord:
        """Mark a plant watered and move its reminder to the next slot."""
        now = ensure_utc(now) if now else utc_now()
        current = self.get_plant(plant_id)
        upcoming = next_watering_time(
            current.next_watering_at,
            current.frequency or self._default_frequency,
            now,
        )
        record = dataclasses.replace(current, next_watering_at=upcoming)
        self._store.save(record)
        logger.info("Plant %s watered; next reminder at %s", plant_id, upcoming)
        self._notify_scheduled(record)
        return record

    def remove_plant(self, plant_id: str) -> None:
        """Forget ``plant_id`` and cancel its notification (idempotent)."""
        self._store.remove(plant_id)
        try:
            self._notifier.cancel(plant_id)
        except Exception as exc:
            raise NotificationError(
                f"Plant {plant_id} removed but its notification could not be cancelled",
                detail={"plant_id": plant_id},
            ) from exc
        logger.info("Removed reminder for plant %s", plant_id)

    def _notify_scheduled(self, record: PlantRecord) -> None:
        try:
            self._notifier.schedule(record)
        except Exception as exc:
            raise NotificationError(
                f"Reminder for plant {record.id} saved but its notification could not be armed",
                detail={"plant_id": record.id, "next_watering_at": to_epoch_ms(record.next_watering_at)},
            ) from exc
