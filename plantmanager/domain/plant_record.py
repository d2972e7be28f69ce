"""
Plant Record Domain Entity
==========================

One plant's persisted reminder configuration, including the authoritative
instant it is next due for watering.

The ``to_dict`` / ``from_dict`` pair is the persistence codec. Watering
instants are stored as epoch milliseconds; keys follow the layout the mobile
client has always written (``photo``, ``water_tips``, ``hour``).
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any

from plantmanager.domain.exceptions import InvalidRecordError
from plantmanager.utils.time import coerce_datetime, from_epoch_ms, to_epoch_ms, truncate_to_ms


class RepeatEvery(str, Enum):
    """Period a watering frequency is expressed in."""

    DAY = "day"
    WEEK = "week"

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True)
class WateringFrequency:
    """How often a plant wants water, e.g. ``2`` times per ``week``."""

    times: int = 1
    repeat_every: RepeatEvery = RepeatEvery.DAY

    def __post_init__(self) -> None:
        object.__setattr__(self, "repeat_every", RepeatEvery(self.repeat_every))
        if isinstance(self.times, bool) or not isinstance(self.times, int) or self.times < 1:
            raise ValueError(f"times must be a positive integer, got {self.times!r}")

    def to_dict(self) -> dict[str, Any]:
        return {"times": self.times, "repeat_every": self.repeat_every.value}

    @staticmethod
    def from_dict(data: dict[str, Any] | None) -> "WateringFrequency" | None:
        if not data:
            return None
        return WateringFrequency(
            times=data.get("times", 1),
            repeat_every=RepeatEvery(data.get("repeat_every", "day")),
        )


_REQUIRED_KEYS = ("id", "name", "next_watering_at")
_TEXT_KEYS = ("photo", "about", "water_tips", "hour")


@dataclass
class PlantRecord:
    """
    A plant registered for watering reminders.

    Attributes:
        id: Stable opaque identifier, never reused for another plant
        name: Display name (non-empty)
        next_watering_at: Aware UTC instant the plant is next due; the sort key
        photo_ref: Reference/URI to the plant artwork
        about: Free-text description
        water_tips: Free-text watering advice
        watering_window: Hour-of-day label for display (``"08:30"``), not used
            for scheduling
        frequency: Optional watering cadence used when a watering is completed
    """

    id: str
    name: str
    next_watering_at: datetime | None
    photo_ref: str = ""
    about: str = ""
    water_tips: str = ""
    watering_window: str = ""
    frequency: WateringFrequency | None = field(default=None)

    def __post_init__(self) -> None:
        # Millisecond precision keeps a record equal to its persisted copy.
        if self.next_watering_at is not None:
            parsed = coerce_datetime(self.next_watering_at)
            if parsed is not None:
                self.next_watering_at = truncate_to_ms(parsed)

    def validate(self) -> None:
        """Raise :class:`InvalidRecordError` unless the record can be persisted."""
        if not isinstance(self.id, str) or not self.id.strip():
            raise InvalidRecordError("Plant record id must be a non-empty string", detail={"field": "id"})
        if not isinstance(self.name, str) or not self.name.strip():
            raise InvalidRecordError(
                "Plant record name must be a non-empty string",
                detail={"field": "name", "id": self.id},
            )
        if not isinstance(self.next_watering_at, datetime):
            raise InvalidRecordError(
                "Plant record must have a next watering time",
                detail={"field": "next_watering_at", "id": self.id},
            )
        for attr in ("photo_ref", "about", "water_tips", "watering_window"):
            if not isinstance(getattr(self, attr), str):
                raise InvalidRecordError(f"{attr} must be a string", detail={"field": attr, "id": self.id})
        if self.frequency is not None and not isinstance(self.frequency, WateringFrequency):
            raise InvalidRecordError("frequency must be a WateringFrequency", detail={"field": "frequency"})

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "photo": self.photo_ref,
            "about": self.about,
            "water_tips": self.water_tips,
            "hour": self.watering_window,
            "next_watering_at": to_epoch_ms(self.next_watering_at),
            "frequency": self.frequency.to_dict() if self.frequency else None,
        }

    @staticmethod
    def from_dict(data: dict[str, Any]) -> "PlantRecord":
        """Decode a persisted record.

        Raises:
            ValueError: if ``data`` is not a complete, valid record
        """
        if not isinstance(data, dict):
            raise ValueError(f"record must be an object, got {type(data).__name__}")
        missing = [key for key in _REQUIRED_KEYS if key not in data]
        if missing:
            raise ValueError(f"record is missing {', '.join(missing)}")
        for key in _TEXT_KEYS:
            if not isinstance(data.get(key, ""), str):
                raise ValueError(f"record field {key!r} must be a string")

        when = data["next_watering_at"]
        try:
            next_watering_at = from_epoch_ms(when)
        except (TypeError, OverflowError) as exc:
            raise ValueError(f"invalid next_watering_at {when!r}") from exc

        try:
            frequency = WateringFrequency.from_dict(data.get("frequency"))
        except (AttributeError, TypeError, ValueError) as exc:
            raise ValueError(f"invalid frequency {data.get('frequency')!r}") from exc

        record = PlantRecord(
            id=data["id"],
            name=data["name"],
            next_watering_at=next_watering_at,
            photo_ref=data.get("photo", ""),
            about=data.get("about", ""),
            water_tips=data.get("water_tips", ""),
            watering_window=data.get("hour", ""),
            frequency=frequency,
        )
        try:
            record.validate()
        except InvalidRecordError as exc:
            raise ValueError(str(exc)) from exc
        return record

    def is_due(self, now: datetime) -> bool:
        """True once the watering instant has been reached."""
        return self.next_watering_at is not None and self.next_watering_at <= now
