from __future__ import annotations

import logging
from dataclasses import dataclass

from plantmanager.config import AppConfig
from plantmanager.domain.plant_record import RepeatEvery, WateringFrequency
from plantmanager.services.application.reminder_service import NotificationScheduler, ReminderService
from plantmanager.services.reminder_store import ReminderStore

logger = logging.getLogger(__name__)


@dataclass
class ServiceContainer:
    """Aggregate the reminder store and the services built on it."""

    config: AppConfig
    reminder_store: ReminderStore
    reminder_service: ReminderService

    @classmethod
    def build(cls, config: AppConfig, *, notifier: NotificationScheduler | None = None) -> "ServiceContainer":
        """Construct the service container.

        Args:
            config: Application configuration
            notifier: Notification collaborator; a logging stand-in when omitted
        """
        store = ReminderStore.from_config(config)
        service = ReminderService(
            store,
            notifier,
            default_frequency=WateringFrequency(config.default_waterings_per_day, RepeatEvery.DAY),
            display_tz=config.display_tz,
        )
        logger.info("Reminder store at %s (key %s)", store.path, store.store_key)
        return cls(config=config, reminder_store=store, reminder_service=service)
