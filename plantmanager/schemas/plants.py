"""
Plant Reminder Schemas
======================

Request schemas for the reminder endpoints.
"""

from datetime import datetime

from pydantic import BaseModel, Field, field_validator

from plantmanager.domain.plant_record import PlantRecord, RepeatEvery, WateringFrequency


class FrequencySchema(BaseModel):
    """How often the plant wants water."""

    times: int = Field(default=1, ge=1, le=24, description="Waterings per period")
    repeat_every: RepeatEvery = Field(default=RepeatEvery.DAY, description="day or week")

    @field_validator("repeat_every", mode="before")
    @classmethod
    def normalize_repeat_every(cls, v):
        """Accept any casing of the period name."""
        if isinstance(v, str):
            return v.strip().lower()
        return v

    def to_domain(self) -> WateringFrequency:
        return WateringFrequency(times=self.times, repeat_every=self.repeat_every)


class SavePlantRequest(BaseModel):
    """Request schema for creating or replacing a plant reminder."""

    name: str = Field(..., min_length=1, description="Plant display name")
    notify_at: datetime = Field(..., description="When to water next (ISO-8601 or epoch milliseconds)")
    photo: str = Field(default="", description="Artwork URI")
    about: str = Field(default="", description="Plant description")
    water_tips: str = Field(default="", description="Watering advice")
    frequency: FrequencySchema | None = Field(default=None, description="Watering cadence")

    @field_validator("name")
    @classmethod
    def strip_name(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("name must not be blank")
        return v

    def to_record(self, plant_id: str) -> PlantRecord:
        return PlantRecord(
            id=plant_id,
            name=self.name,
            next_watering_at=self.notify_at,
            photo_ref=self.photo,
            about=self.about,
            water_tips=self.water_tips,
            frequency=self.frequency.to_domain() if self.frequency else None,
        )
