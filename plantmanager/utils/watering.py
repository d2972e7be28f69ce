"""Watering cadence helpers."""

from __future__ import annotations

from datetime import datetime, timedelta

from plantmanager.domain.plant_record import RepeatEvery, WateringFrequency
from plantmanager.utils.time import ensure_utc

DAILY = WateringFrequency(times=1, repeat_every=RepeatEvery.DAY)


def watering_interval(frequency: WateringFrequency | None) -> timedelta:
    """Spacing between waterings for ``frequency`` (daily when unset).

    Weekly cadences are rounded down to whole days, never below one day.
    """
    frequency = frequency or DAILY
    if frequency.repeat_every is RepeatEvery.WEEK:
        return timedelta(days=max(1, 7 // frequency.times))
    return timedelta(days=1) / frequency.times


def next_watering_time(
    previous: datetime,
    frequency: WateringFrequency | None,
    now: datetime,
) -> datetime:
    """First instant after ``now`` that is a whole number of intervals past ``previous``.

    At least one interval is always added, so watering early still moves the
    reminder forward.
    """
    previous = ensure_utc(previous)
    now = ensure_utc(now)
    interval = watering_interval(frequency)
    steps = 1 if now < previous else (now - previous) // interval + 1
    return previous + interval * steps
