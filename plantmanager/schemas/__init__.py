"""
Schemas Module
==============

Pydantic models for request validation.
"""

from plantmanager.schemas.plants import FrequencySchema, SavePlantRequest

__all__ = ["FrequencySchema", "SavePlantRequest"]
