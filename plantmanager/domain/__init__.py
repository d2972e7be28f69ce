"""
Domain Package
==============
Plant reminder entities, the repository protocol and the error hierarchy.
"""

from .exceptions import (
    ConfigurationError,
    CorruptStoreError,
    InvalidRecordError,
    NotFoundError,
    NotificationError,
    PersistenceError,
    PlantManagerError,
    ServiceError,
    ValidationError,
)
from .plant_record import PlantRecord, RepeatEvery, WateringFrequency
from .repository import ReminderRepository

__all__ = [
    "PlantRecord",
    "RepeatEvery",
    "WateringFrequency",
    "ReminderRepository",
    # Errors
    "PlantManagerError",
    "ValidationError",
    "InvalidRecordError",
    "NotFoundError",
    "ServiceError",
    "PersistenceError",
    "NotificationError",
    "CorruptStoreError",
    "ConfigurationError",
]
