from plantmanager.services.application.reminder_service import (
    LoggingNotificationScheduler,
    NotificationScheduler,
    ReminderService,
    Spotlight,
)

__all__ = ["LoggingNotificationScheduler", "NotificationScheduler", "ReminderService", "Spotlight"]
